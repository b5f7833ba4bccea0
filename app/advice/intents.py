from __future__ import annotations

from enum import Enum


class Intent(str, Enum):
    EXPLORATION = "exploration"
    PATHWAY = "pathway"
    RESUME = "resume"

    @property
    def label(self) -> str:
        return INTENT_TITLES[self]

    @property
    def result_anchor(self) -> str:
        return f"result-{self.value}"


INTENT_TITLES: dict[Intent, str] = {
    Intent.EXPLORATION: "Explore Where You Belong",
    Intent.PATHWAY: "Explore My Career Path",
    Intent.RESUME: "Resume Tailor",
}
