"""
Main entrypoint for the Quiz Intake API.

This module assembles the FastAPI application: logging, CORS, the
JSON error envelope, the routers and the startup/shutdown hooks that
own the storage backend and the notifier.  ``create_app`` builds a
configured app; an instance is created at import time as ``app`` so
it can be served directly, e.g.::

    uvicorn quiz_intake_api.app.main:app --port 3000

Every error leaves the service as ``{"success": false, "error": "..."}``
with the status code of the matching
:class:`~quiz_intake_api.app.core.exceptions.IntakeError`.
"""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import probe_router, router as v1_router
from .core.config import Settings, settings as default_settings
from .core.exceptions import IntakeError, ValidationError
from .core.logging_config import setup_logging
from .services.notification_service import NotificationService, build_notifier
from .storage import Storage, build_storage


logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    fields = []
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if isinstance(part, str) and part != "body"]
        if loc and loc[-1] not in fields:
            fields.append(loc[-1])
    if not fields:
        return ValidationError.default_message
    return f"{ValidationError.default_message}: {', '.join(fields)}"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IntakeError)
    async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
        return _error(exc.status_code, exc.message, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return _error(ValidationError.status_code, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            message = "Маршрут не найден"
        else:
            message = exc.detail if isinstance(exc.detail, str) else "Ошибка запроса"
        return _error(exc.status_code, message, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Внутренняя ошибка сервера")


def create_app(
    settings: Optional[Settings] = None,
    *,
    storage: Optional[Storage] = None,
    notifier=None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration; defaults to the environment-derived ``settings``.
    storage : Optional[Storage]
        Pre-built storage backend.  When omitted, one is chosen at
        startup according to ``settings.storage_backend``.
    notifier : optional
        Object with ``send(text)`` and ``close()``.  When omitted, a
        Telegram notifier is built from the settings (or a no-op one if
        credentials are missing).

    Returns
    -------
    FastAPI
        A configured application.  Storage is attached during startup,
        so tests should use ``TestClient`` as a context manager.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.settings = settings
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )
    register_exception_handlers(app)

    app.include_router(probe_router)
    app.include_router(v1_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.storage = storage or build_storage(settings)
        app.state.notifications = NotificationService(notifier or build_notifier(settings))
        if not settings.archive_token:
            logger.warning("ARCHIVE_TOKEN is not set; /api/archive will reject every request")
        logger.info("%s %s started (storage=%s)", settings.project_name, settings.api_version, app.state.storage.name)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        app.state.notifications.close()
        app.state.storage.close()
        logger.info("Storage and notifier closed")

    return app


# Create the application instance at import time so that ASGI servers
# can reference ``quiz_intake_api.app.main:app``.
app = create_app()
