from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.advice.intents import Intent


def _strip(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


class IntentForm(BaseModel):
    model_config = ConfigDict(str_max_length=50000)

    intent: ClassVar[Intent]

    def to_form_data(self) -> dict[str, str]:
        return {
            key: (value or "")
            for key, value in self.model_dump().items()
        }


class ExplorationForm(IntentForm):
    intent: ClassVar[Intent] = Intent.EXPLORATION
    enjoyedSubjects: str = Field(min_length=1)
    dislikedSubjects: str = Field(min_length=1)
    hobbies: str = Field(min_length=1)
    workEnvironment: str = Field(min_length=1)
    lifestyle: str | None = None

    @field_validator("enjoyedSubjects", "dislikedSubjects", "hobbies", "workEnvironment", mode="before")
    @classmethod
    def _strip_required(cls, value: str | None) -> str:
        return _strip(value)


class PathwayForm(IntentForm):
    intent: ClassVar[Intent] = Intent.PATHWAY
    dreamCareer: str = Field(min_length=1)
    educationLevel: str = Field(min_length=1)
    learningFormat: str = Field(min_length=1)
    selfDescription: str | None = None

    @field_validator("dreamCareer", "educationLevel", "learningFormat", mode="before")
    @classmethod
    def _strip_required(cls, value: str | None) -> str:
        return _strip(value)


class ResumeForm(IntentForm):
    """Resume analysis input.

    ``resumeText`` may be omitted when the session already holds an extracted
    document; the endpoint fills it in before the required-field check.
    """

    intent: ClassVar[Intent] = Intent.RESUME
    resumeText: str | None = None
    jobDescription: str = Field(min_length=1)

    @field_validator("jobDescription", mode="before")
    @classmethod
    def _strip_required(cls, value: str | None) -> str:
        return _strip(value)

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not _strip(self.resumeText):
            missing.append("resumeText")
        if not _strip(self.jobDescription):
            missing.append("jobDescription")
        return missing


class SubmissionResponse(BaseModel):
    intent: Intent
    result: str
    scroll_target: str
    scroll_behavior: Literal["smooth"] = "smooth"


class RegisterUserRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=100)

    @field_validator("display_name", mode="before")
    @classmethod
    def _strip_name(cls, value: str | None) -> str:
        return _strip(value)


class PreferencesRequest(BaseModel):
    dark_mode: bool


class SessionResponse(BaseModel):
    user_id: str | None = None
    display_name: str = ""
    name_confirmed: bool = False
    dark_mode: bool = False


class ActivateIntentResponse(BaseModel):
    intent: Intent
    title: str
    scroll_target: str
    scroll_behavior: Literal["smooth"] = "smooth"
    result: str | None = None
