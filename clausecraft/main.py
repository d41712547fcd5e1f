from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from clausecraft.config import Settings, app_version, get_settings
from clausecraft.llm_gateway import LLMGateway, build_gateway
from clausecraft.routes.auth import router as auth_router
from clausecraft.routes.chat import router as chat_router
from clausecraft.routes.contracts import router as contracts_router
from clausecraft.routes.health import router as health_router
from clausecraft.routes.version import router as version_router
from clausecraft.service import ContractService
from clausecraft.store import MemStore

# ------------------------------------------------------------------------------
# App metadata
# ------------------------------------------------------------------------------

APP_DESCRIPTION = "Analyze contracts for risk, generate contracts and chat with an AI legal assistant."

logger = logging.getLogger("clausecraft")
logging.basicConfig(level=logging.INFO)


# ------------------------------------------------------------------------------
# Error bodies: always {"error": "<message>"}
# ------------------------------------------------------------------------------

async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def _validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message},
    )


# ------------------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[LLMGateway] = None,
    store: Optional[MemStore] = None,
) -> FastAPI:
    """
    Build the application. Without an injected gateway the configured
    backend is constructed here, so a missing credential stops startup.

    Run with: uvicorn clausecraft.main:create_app --factory
    """
    settings = settings or get_settings()
    gateway = gateway or build_gateway(settings)
    store = store or MemStore()

    app = FastAPI(
        title=settings.app_name,
        version=app_version(),
        description=APP_DESCRIPTION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, same_site="lax")

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.state.settings = settings
    app.state.store = store
    app.state.service = ContractService(gateway=gateway, store=store, settings=settings)

    @app.get("/")
    def root():
        """
        Simple root endpoint that reports basic info and available top-level routes.
        """
        return {
            "name": settings.app_name,
            "version": app_version(),
            "routes": [
                "/health",
                "/version",
                "/api/contracts/analyze",
                "/api/contracts/analyze/report",
                "/api/contracts/generate",
                "/api/chat/history",
                "/api/chat/message",
                "/api/register",
                "/api/login",
                "/api/logout",
                "/api/user",
            ],
        }

    @app.get("/favicon.ico")
    def favicon():
        return Response(status_code=204)

    app.include_router(health_router)
    app.include_router(version_router)
    app.include_router(auth_router)
    app.include_router(contracts_router)
    app.include_router(chat_router)

    logger.info("ClauseCraft ready: env=%s backend=%s", settings.environment, settings.llm_backend)
    return app
