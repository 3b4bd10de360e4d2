"""
Farm Care Tracker: FastAPI application.

Domain errors are translated to JSON bodies here:

    {"error": ..., "message": ..., "hint": ..., "stack": ...}

``stack`` is only included outside production.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routes import router
from src.config import settings
from src.core.context import CareContext, build_google_context
from src.core.errors import ConfigurationError, NotFoundError, SheetLayoutError
from src.ports.tabular_port import StoreError

logger = logging.getLogger(__name__)


def _error_body(error: str, exc: Exception | None = None, **extra) -> dict:
    body: dict = {"error": error}
    if exc is not None:
        body["message"] = str(exc)
        if not settings.is_production:
            body["stack"] = "".join(traceback.format_exception(exc))
    body.update({k: v for k, v in extra.items() if v})
    return body


def _register_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigurationError)
    async def _configuration(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Configuration error", exc, hint=exc.hint),
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        logger.warning("Not found on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "error": str(exc), **exc.context},
        )

    @app.exception_handler(SheetLayoutError)
    async def _layout(request: Request, exc: SheetLayoutError) -> JSONResponse:
        logger.error("Sheet layout error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Unexpected sheet layout", exc),
        )

    @app.exception_handler(StoreError)
    async def _store(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Spreadsheet request failed", exc),
        )

    @app.exception_handler(ValueError)
    async def _bad_value(request: Request, exc: ValueError) -> JSONResponse:
        logger.info("Bad request on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def _invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    # Runs in Starlette's outermost middleware, so the error body is still
    # JSON but carries no CORS headers.
    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal error", exc),
        )


def create_app(context: CareContext | None = None) -> FastAPI:
    """Build the application around a context (Google-backed by default)."""
    app = FastAPI(title="Farm Care Tracker")
    app.state.context = context or build_google_context(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    _register_handlers(app)
    app.include_router(router, prefix=settings.API_PREFIX)
    return app


app = create_app()
