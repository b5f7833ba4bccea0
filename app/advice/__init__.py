from .formatting import format_response
from .intents import Intent
from .prompt import NOT_SPECIFIED, UnknownIntentError, build_messages, build_prompt

__all__ = [
    "Intent",
    "NOT_SPECIFIED",
    "UnknownIntentError",
    "build_messages",
    "build_prompt",
    "format_response",
]
