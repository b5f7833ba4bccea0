from contextlib import asynccontextmanager
import logging

from app.core.identity_store import close_identity_store, init_identity_store
from app.core.state import clear_app_states

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    try:
        init_identity_store()
    except Exception as exc:  # noqa: BLE001 - sessions degrade to new users
        logger.warning("identity_store_init_failed: %s", exc)
    yield
    clear_app_states()
    close_identity_store()
