from fastapi import APIRouter, Request
import os
from datetime import datetime, timezone

from clausecraft.config import app_version

router = APIRouter(tags=["meta"])

@router.get("/version")
def version(request: Request):
    """
    Returns build/version info and the active inference backend.
    """
    settings = request.app.state.settings
    return {
        "name": "clausecraft-ai",
        "version": app_version(),
        "build_sha": os.getenv("GIT_SHA", ""),
        "environment": settings.environment,
        "llm_backend": settings.llm_backend,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
