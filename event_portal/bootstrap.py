# event_portal/bootstrap.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from event_portal.api.router import api_router
from event_portal.core.config import settings
from event_portal.core.errors import InternalError, WorkflowError
from event_portal.core.logging import setup_logging
from event_portal.core.middleware import RequestLoggingMiddleware
from event_portal.repositories.base import PersistenceError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        # cause stays server-side
        logger.error(
            "Persistence failure",
            exc_info=exc,
            extra={"props": {"path": request.url.path, "method": request.method}},
        )
        error = InternalError("Internal server error")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error",
            exc_info=exc,
            extra={"props": {"path": request.url.path, "method": request.method}},
        )
        error = InternalError("Internal server error")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_json)

    app = FastAPI(title=settings.app_name)

    # -------------------------
    # Middleware
    # -------------------------
    app.add_middleware(RequestLoggingMiddleware)

    origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins if origins else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # -------------------------
    # Routers
    # -------------------------
    app.include_router(api_router, prefix=settings.api_prefix)

    # -------------------------
    # Health
    # -------------------------
    @app.get("/health/live", tags=["health"])
    def live():
        return {"status": "alive"}

    @app.get("/health/ready", tags=["health"])
    def ready():
        ready = getattr(app.state, "repos", None) is not None
        return {"status": "ready" if ready else "degraded"}

    # -------------------------
    # Root
    # -------------------------
    @app.get("/", tags=["root"])
    def root():
        return {
            "status": "ok",
            "service": settings.app_name,
            "api_prefix": settings.api_prefix,
            "storage": settings.storage_backend,
        }

    return app
