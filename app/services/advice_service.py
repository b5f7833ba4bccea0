from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from typing import Mapping

from app.advice.formatting import format_response
from app.advice.intents import Intent
from app.advice.prompt import build_messages
from app.ai.factory import get_ai_client
from app.ai.types import AIClient, CompletionError
from app.core.state import AppState
from app.parsing.extract import extract_document
from app.parsing.models import ExtractedDocument, ExtractionError

logger = logging.getLogger("app.advice")

GENERIC_SUBMISSION_ERROR = "An error occurred while processing your request"
GENERIC_EXTRACTION_ERROR = "Error processing file: Unknown error"


def _short_hash(value: str | None) -> str:
    normalized = (value or "").strip()
    if not normalized:
        return ""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12]


async def submit_advice(
    state: AppState,
    intent: Intent,
    data: Mapping[str, str],
    *,
    client: AIClient | None = None,
) -> str:
    """Run one submission for ``intent`` and store the formatted reply.

    Raises ``SubmissionInFlightError`` when the same intent is already being
    processed. Remote and unexpected failures are recorded in the state's
    error slot and re-raised; the intent's previous result is left as is.
    """
    form_data = dict(data)
    messages = build_messages(intent, form_data, state.session.display_name)
    state.begin_submission(intent)
    started_at = time.perf_counter()
    try:
        logger.info(
            json.dumps(
                {
                    "event": "advice_request",
                    "intent": intent.value,
                    "user_hash": _short_hash(state.user_id),
                    "fields": sorted(form_data),
                    "prompt_len": len(messages[0].content),
                }
            )
        )
        ai = client or get_ai_client()
        raw = await ai.complete(messages)
        markup = format_response(raw)
        state.record_success(intent, markup)
    except CompletionError as exc:
        logger.warning(
            json.dumps(
                {
                    "event": "advice_remote_error",
                    "intent": intent.value,
                    "status_code": exc.status_code,
                    "status_text": exc.status_text,
                }
            )
        )
        state.record_failure(str(exc))
        raise
    except Exception as exc:
        logger.exception(
            json.dumps(
                {
                    "event": "advice_error",
                    "intent": intent.value,
                    "error": str(exc),
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        state.record_failure(str(exc) or GENERIC_SUBMISSION_ERROR)
        raise
    else:
        logger.info(
            json.dumps(
                {
                    "event": "advice_complete",
                    "intent": intent.value,
                    "response_len": len(raw),
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        return markup
    finally:
        state.end_submission(intent)


async def extract_resume(
    state: AppState,
    *,
    file_name: str,
    media_type: str | None,
    content: bytes,
) -> ExtractedDocument:
    """Extract an uploaded resume in a worker thread and keep it on the session.

    The processing flag is cleared on every exit path. Overlapping uploads are
    not serialized: whichever extraction finishes last replaces the document.
    """
    state.begin_extraction()
    try:
        document = await asyncio.to_thread(
            extract_document,
            file_name,
            media_type,
            content,
        )
    except ExtractionError as exc:
        logger.warning("resume_extraction_failed stage=%s file=%s: %s", exc.stage, file_name, exc.reason)
        state.record_extraction_failure(str(exc))
        raise
    except Exception as exc:
        logger.exception("resume_extraction_crashed file=%s", file_name)
        state.record_extraction_failure(f"Error processing file: {exc}" if str(exc) else GENERIC_EXTRACTION_ERROR)
        raise
    else:
        state.store_document(document)
        logger.info(
            "resume_extracted file=%s format=%s characters=%s",
            document.file_name,
            document.format,
            document.characters,
        )
        return document
    finally:
        state.end_extraction()
