from __future__ import annotations

import logging
import uuid

from app.core import identity_store
from app.core.state import AppState, get_app_state, peek_app_state

logger = logging.getLogger(__name__)


def restore_session(user_id: str) -> AppState:
    """Rebuild a user's session from the identity store.

    Any store failure, or a user without a nickname, degrades to a fresh
    unconfirmed session instead of blocking the app. Only a confirmed user is
    added to the state registry.
    """
    state = peek_app_state(user_id) or AppState(user_id=user_id)
    try:
        user = identity_store.get_current_user(user_id)
        if user is None:
            state.reset_session()
            return state
        dark_mode = identity_store.get_dark_mode(user_id)
        nickname = identity_store.lookup_nickname(user_id)
    except Exception as exc:  # noqa: BLE001 - session restore must not block the app
        logger.warning("session_restore_failed user=%s: %s", user_id, exc)
        state.reset_session()
        return state

    if nickname:
        state = get_app_state(user_id)
        state.confirm_name(nickname)
    else:
        logger.warning("session_restore_no_nickname user=%s", user_id)
        state.reset_session()
    state.set_dark_mode(dark_mode)
    return state


def register_display_name(display_name: str) -> AppState:
    """Register a new user under ``display_name`` and confirm the name.

    Registration errors are logged and the user continues with a local-only
    session so the interface is never blocked on the identity store.
    """
    try:
        user = identity_store.register_user(display_name)
        user_id = user["id"]
        identity_store.record_nickname(user_id, display_name)
    except Exception as exc:  # noqa: BLE001 - do not block first-run name entry
        logger.exception("register_user_failed: %s", exc)
        user_id = f"local-{uuid.uuid4().hex}"

    state = get_app_state(user_id)
    state.confirm_name(display_name)
    return state


def update_dark_mode(state: AppState, enabled: bool) -> AppState:
    state.set_dark_mode(enabled)
    try:
        identity_store.set_dark_mode(state.user_id, enabled)
    except Exception as exc:  # noqa: BLE001 - preference is cosmetic
        logger.warning("dark_mode_persist_failed user=%s: %s", state.user_id, exc)
    return state
