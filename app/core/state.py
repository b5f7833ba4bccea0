from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.advice.intents import Intent
from app.parsing.models import ExtractedDocument


class SubmissionInFlightError(RuntimeError):
    def __init__(self, intent: Intent):
        super().__init__(f"A {intent.value} request is already being processed.")
        self.intent = intent
        self.code = "submission_in_flight"


@dataclass
class SessionState:
    display_name: str = ""
    name_confirmed: bool = False


@dataclass
class AppState:
    """Per-user application state.

    Every mutation goes through one of the named transitions below. All of
    them run on the event loop thread, so no locking is involved.
    """

    user_id: str
    session: SessionState = field(default_factory=SessionState)
    dark_mode: bool = False
    active_intent: Intent | None = None
    results: dict[Intent, str | None] = field(
        default_factory=lambda: {intent: None for intent in Intent}
    )
    error: str | None = None
    in_flight: set[Intent] = field(default_factory=set)
    processing: bool = False
    document: ExtractedDocument | None = None
    extraction_error: str | None = None

    # session

    def confirm_name(self, display_name: str) -> None:
        self.session = SessionState(display_name=display_name, name_confirmed=True)

    def reset_session(self) -> None:
        self.session = SessionState()

    def set_dark_mode(self, enabled: bool) -> None:
        self.dark_mode = bool(enabled)

    # navigation

    def activate(self, intent: Intent) -> None:
        if self.active_intent == Intent.RESUME and intent != Intent.RESUME:
            self.discard_document()
        self.active_intent = intent

    # extraction

    def begin_extraction(self) -> None:
        self.processing = True
        self.extraction_error = None

    def store_document(self, document: ExtractedDocument) -> None:
        self.document = document

    def record_extraction_failure(self, message: str) -> None:
        self.extraction_error = message

    def end_extraction(self) -> None:
        self.processing = False

    def discard_document(self) -> None:
        self.document = None
        self.extraction_error = None

    # submission

    def begin_submission(self, intent: Intent) -> None:
        if intent in self.in_flight:
            raise SubmissionInFlightError(intent)
        self.in_flight.add(intent)
        self.error = None

    def record_success(self, intent: Intent, markup: str) -> None:
        self.results[intent] = markup

    def record_failure(self, message: str) -> None:
        self.error = message

    def end_submission(self, intent: Intent) -> None:
        self.in_flight.discard(intent)

    def snapshot(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "display_name": self.session.display_name,
            "name_confirmed": self.session.name_confirmed,
            "dark_mode": self.dark_mode,
            "active_intent": self.active_intent.value if self.active_intent else None,
            "results": {intent.value: markup for intent, markup in self.results.items()},
            "error": self.error,
            "in_flight": sorted(intent.value for intent in self.in_flight),
            "processing": self.processing,
            "document": self.document.model_dump() if self.document else None,
            "extraction_error": self.extraction_error,
        }


_states: dict[str, AppState] = {}


def get_app_state(user_id: str) -> AppState:
    state = _states.get(user_id)
    if state is None:
        state = AppState(user_id=user_id)
        _states[user_id] = state
    return state


def peek_app_state(user_id: str) -> AppState | None:
    return _states.get(user_id)


def clear_app_states() -> None:
    _states.clear()
