from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.advice.intents import Intent
from app.advice.prompt import UnknownIntentError
from app.ai.types import CompletionError
from app.api.v1.deps import require_confirmed_state
from app.core.rate_limit import submission_rate_limit
from app.core.security import require_api_key
from app.core.state import AppState, SubmissionInFlightError
from app.schemas.forms import (
    ExplorationForm,
    IntentForm,
    PathwayForm,
    ResumeForm,
    SubmissionResponse,
)
from app.services.advice_service import GENERIC_SUBMISSION_ERROR, submit_advice

router = APIRouter(dependencies=[Depends(require_api_key)])


async def _submit(state: AppState, form: IntentForm, data: dict[str, str]) -> SubmissionResponse:
    intent: Intent = form.intent
    try:
        markup = await submit_advice(state, intent, data)
    except SubmissionInFlightError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except CompletionError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except UnknownIntentError:
        raise
    except Exception as exc:  # noqa: BLE001 - surfaced as the error banner
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=state.error or GENERIC_SUBMISSION_ERROR,
        ) from exc
    return SubmissionResponse(intent=intent, result=markup, scroll_target=intent.result_anchor)


@router.post("/users/{user_id}/advice/exploration", response_model=SubmissionResponse)
@submission_rate_limit()
async def submit_exploration(
    request: Request,
    payload: ExplorationForm,
    state: AppState = Depends(require_confirmed_state),
):
    _ = request
    return await _submit(state, payload, payload.to_form_data())


@router.post("/users/{user_id}/advice/pathway", response_model=SubmissionResponse)
@submission_rate_limit()
async def submit_pathway(
    request: Request,
    payload: PathwayForm,
    state: AppState = Depends(require_confirmed_state),
):
    _ = request
    return await _submit(state, payload, payload.to_form_data())


@router.post("/users/{user_id}/advice/resume", response_model=SubmissionResponse)
@submission_rate_limit()
async def submit_resume(
    request: Request,
    payload: ResumeForm,
    state: AppState = Depends(require_confirmed_state),
):
    _ = request
    if not (payload.resumeText or "").strip() and state.document is not None:
        payload = payload.model_copy(update={"resumeText": state.document.text})
    missing = payload.missing_fields()
    if missing:
        raise HTTPException(
            status_code=422,
            detail=f"Required fields are empty: {', '.join(missing)}.",
        )
    return await _submit(state, payload, payload.to_form_data())
