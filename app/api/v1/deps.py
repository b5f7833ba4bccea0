from __future__ import annotations

from fastapi import HTTPException, status

from app.core.state import AppState, peek_app_state


def require_app_state(user_id: str) -> AppState:
    state = peek_app_state(user_id)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Unknown user. Restore the session or register a name first.",
        )
    return state


def require_confirmed_state(user_id: str) -> AppState:
    state = require_app_state(user_id)
    if not state.session.name_confirmed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Enter your name before requesting advice.",
        )
    return state
