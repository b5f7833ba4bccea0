from __future__ import annotations

from typing import Callable, Mapping

from app.advice.intents import Intent
from app.ai.types import ChatMessage

NOT_SPECIFIED = "Not specified"

FORMAT_INSTRUCTIONS = (
    "Format your response with proper spacing and explicit line breaks. "
    "Use bold text for headers."
)


class UnknownIntentError(ValueError):
    def __init__(self, intent: object):
        super().__init__(f"Unknown intent: {intent!r}")
        self.intent = intent


def _field(data: Mapping[str, str], key: str) -> str:
    return str(data.get(key) or "")


def _optional(data: Mapping[str, str], key: str) -> str:
    value = _field(data, key).strip()
    return value or NOT_SPECIFIED


def _greeting(display_name: str) -> str:
    return f'Start with: "Hello {display_name}! "'


def _exploration_prompt(data: Mapping[str, str], display_name: str) -> str:
    return (
        f"{_greeting(display_name)} followed by a kind compliment. "
        "You are a career advisor. Based on the answers below, suggest 3 career paths.\n"
        "\n"
        f"Subjects enjoyed at school: {_field(data, 'enjoyedSubjects')}\n"
        f"Subjects disliked at school: {_field(data, 'dislikedSubjects')}\n"
        f"Hobbies and interests: {_field(data, 'hobbies')}\n"
        f"Preferred work environment: {_field(data, 'workEnvironment')}\n"
        f"Lifestyle: {_optional(data, 'lifestyle')}\n"
        "\n"
        "For each career, include:\n"
        "- Title and short description\n"
        "- Estimated U.S. starting salary\n"
        "- Required education\n"
        "- Recommended study field\n"
        "- Where to start learning (platforms/certifications)\n"
        "\n"
        f"{FORMAT_INSTRUCTIONS}\n"
        "If the input is vague, off-topic or silly, respond with a friendly joke related to careers."
    )


def _pathway_prompt(data: Mapping[str, str], display_name: str) -> str:
    return (
        f"{_greeting(display_name)} followed by a professional compliment. "
        "You are a career path planner. Based on the user's goal and background, "
        "provide practical steps to reach their target career.\n"
        "\n"
        f"Dream Career: {_field(data, 'dreamCareer')}\n"
        f"Current Education/Experience: {_field(data, 'educationLevel')}\n"
        f"Preferred Learning Format: {_field(data, 'learningFormat')}\n"
        f"Self Description: {_optional(data, 'selfDescription')}\n"
        "\n"
        "Include: certifications, education, skills, timeline, and job posting examples.\n"
        "\n"
        f"{FORMAT_INSTRUCTIONS}\n"
        "If the input is unclear, respond with a career joke. "
        "If the input is very vague, incorrect or the user is trying to be funny, "
        "make your response even funnier."
    )


def _resume_prompt(data: Mapping[str, str], display_name: str) -> str:
    return (
        f"{_greeting(display_name)} followed by a compliment about the experience. "
        "You are a resume analysis expert. Compare the resume to the job description.\n"
        "\n"
        "Resume Content:\n"
        f"{_field(data, 'resumeText')}\n"
        "\n"
        "Job Description:\n"
        f"{_field(data, 'jobDescription')}\n"
        "\n"
        "Please analyze and structure your response as:\n"
        "\n"
        "1. What parts match the job\n"
        "2. What is missing or weak\n"
        "3. Rewrite the full resume to better match the job\n"
        "\n"
        f"{FORMAT_INSTRUCTIONS}\n"
        "If the input is empty, off-topic or silly, respond with a professional career joke."
    )


_BUILDERS: dict[Intent, Callable[[Mapping[str, str], str], str]] = {
    Intent.EXPLORATION: _exploration_prompt,
    Intent.PATHWAY: _pathway_prompt,
    Intent.RESUME: _resume_prompt,
}


def build_prompt(intent: Intent, data: Mapping[str, str], display_name: str) -> str:
    """Render the instruction text sent to the remote model for one intent.

    Deterministic in its inputs. Optional fields that are missing or blank are
    rendered as ``NOT_SPECIFIED``. An intent without a template is a defect and
    raises ``UnknownIntentError``.
    """
    builder = _BUILDERS.get(intent) if isinstance(intent, Intent) else None
    if builder is None:
        raise UnknownIntentError(intent)
    return builder(data, display_name)


def build_messages(intent: Intent, data: Mapping[str, str], display_name: str) -> list[ChatMessage]:
    return [ChatMessage(role="system", content=build_prompt(intent, data, display_name))]
