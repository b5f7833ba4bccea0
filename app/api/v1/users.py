from fastapi import APIRouter, Depends

from app.advice.intents import Intent
from app.api.v1.deps import require_app_state
from app.core.state import AppState
from app.schemas.forms import (
    ActivateIntentResponse,
    PreferencesRequest,
    RegisterUserRequest,
    SessionResponse,
)
from app.services.session_service import register_display_name, restore_session, update_dark_mode

router = APIRouter()


def _session_response(state: AppState) -> SessionResponse:
    return SessionResponse(
        user_id=state.user_id,
        display_name=state.session.display_name,
        name_confirmed=state.session.name_confirmed,
        dark_mode=state.dark_mode,
    )


@router.post("/users", response_model=SessionResponse, status_code=201)
async def register_user(payload: RegisterUserRequest):
    state = register_display_name(payload.display_name)
    return _session_response(state)


@router.get("/users/{user_id}/session", response_model=SessionResponse)
async def get_session(user_id: str):
    state = restore_session(user_id)
    return _session_response(state)


@router.put("/users/{user_id}/preferences", response_model=SessionResponse)
async def put_preferences(payload: PreferencesRequest, state: AppState = Depends(require_app_state)):
    update_dark_mode(state, payload.dark_mode)
    return _session_response(state)


@router.get("/users/{user_id}/state")
async def get_state(state: AppState = Depends(require_app_state)):
    return state.snapshot()


@router.post("/users/{user_id}/intents/{intent}", response_model=ActivateIntentResponse)
async def activate_intent(intent: Intent, state: AppState = Depends(require_app_state)):
    state.activate(intent)
    return ActivateIntentResponse(
        intent=intent,
        title=intent.label,
        scroll_target=intent.result_anchor,
        result=state.results.get(intent),
    )
