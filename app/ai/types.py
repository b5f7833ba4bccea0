from dataclasses import dataclass
from typing import Literal, Protocol, Sequence


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class CompletionError(RuntimeError):
    """The completion API answered with a non-success status."""

    def __init__(self, status_text: str, *, status_code: int | None = None):
        super().__init__(f"API request failed: {status_text}")
        self.status_text = status_text
        self.status_code = status_code


class AIClient(Protocol):
    async def complete(self, messages: Sequence[ChatMessage]) -> str: ...
