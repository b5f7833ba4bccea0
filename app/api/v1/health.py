from fastapi import APIRouter

from app.ai.config import load_ai_config

router = APIRouter()


@router.get("/health", summary="Health Check", description="Report service status and the configured completion model.")
async def health_check():
    cfg = load_ai_config()
    return {"status": "healthy", "ai_provider": cfg.provider, "ai_model": cfg.model}
