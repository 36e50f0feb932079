"""
api/health.py
=============
GET /health and GET /api/health — liveness probes for the PharmaGuard backend.
"""

from fastapi import APIRouter, Depends

from backend.config import API_VERSION, Settings, get_settings
from backend.schemas.response import utc_timestamp

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "timestamp": utc_timestamp()}


@router.get("/api/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Return service status and whether the explanation LLM is configured."""
    return {
        "status":       "ok",
        "timestamp":    utc_timestamp(),
        "api_version":  API_VERSION,
        "llm_enabled":  settings.llm_enabled,
        "llm_model":    settings.openai_model,
    }
