from fastapi import APIRouter, Request
import datetime as dt

router = APIRouter(tags=["health"])

@router.get("/health")
def health(request: Request):
    return {
        "ok": True,
        "status": "healthy",
        "service": request.app.state.settings.app_name,
        "timestamp": dt.datetime.now(dt.timezone.utc).isoformat()
    }
