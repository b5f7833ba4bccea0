from __future__ import annotations

import os
from http import HTTPStatus
from typing import Optional, Sequence

from openai import APIStatusError, AsyncOpenAI

from app.ai.types import ChatMessage, CompletionError


def _status_text(exc: APIStatusError) -> str:
    reason = ""
    response = getattr(exc, "response", None)
    if response is not None:
        reason = (getattr(response, "reason_phrase", "") or "").strip()
    if reason:
        return reason
    try:
        return HTTPStatus(exc.status_code).phrase
    except ValueError:
        return str(exc.status_code)


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        max_retries: int = 0,
        temperature: float = 0.7,
    ):
        self._model = model
        self._temperature = temperature
        key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            timeout=float(os.getenv("OPENAI_TIMEOUT_S", str(timeout_s))),
            max_retries=int(os.getenv("OPENAI_MAX_RETRIES", str(max_retries))),
        )

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=payload,
                temperature=self._temperature,
            )
        except APIStatusError as exc:
            raise CompletionError(_status_text(exc), status_code=exc.status_code) from exc

        if not response.choices:
            raise RuntimeError("The completion API returned no choices.")
        return response.choices[0].message.content or ""
