"""
Rental Finder API - FastAPI application entry point.

A thin proxy that turns rental search criteria into a prompt for Claude and
returns the listings it finds, keeping the API key on the server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rental_finder.api import router
from rental_finder.config import Settings, get_settings
from rental_finder.errors import (
    RentalFinderError,
    ServerConfigurationError,
    UpstreamError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

GENERIC_CONFIGURATION_MESSAGE = "Server configuration error. Please contact the site operator."


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the leading "body" and the union branch name from the location
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "SearchCriteria", "PromptRequest")]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    detail = "; ".join(dict.fromkeys(parts)) or "invalid request body"
    return f"Bad Request: {detail}"


async def rental_finder_error_handler(request: Request, exc: RentalFinderError) -> JSONResponse:
    """Render application errors as ``{"message": ...}`` bodies."""
    if isinstance(exc, ValidationError):
        return _message(status.HTTP_400_BAD_REQUEST, exc.message)
    if isinstance(exc, ServerConfigurationError):
        logger.error("Server configuration error: %s", exc.message)
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_CONFIGURATION_MESSAGE)
    if isinstance(exc, UpstreamError):
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    logger.error("Unhandled application error: %s", exc.message)
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404, 405, ...) with a ``message`` field."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        logger.warning("Method Not Allowed: %s %s", request.method, request.url.path)
        message = "Method Not Allowed. This endpoint only supports POST requests."
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render body validation failures as 400 Bad Request."""
    message = _describe_validation_errors(exc)
    logger.warning("Rejected request to %s: %s", request.url.path, message)
    return _message(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort so that no request is left without a structured answer."""
    logger.exception("Unhandled error while serving %s", request.url.path)
    return _message(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        f"The server encountered a critical error: {type(exc).__name__}",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs startup and shutdown. A missing API key is only warned about here;
    requests are rejected with a configuration error until it is set.
    """
    settings = app.state.settings
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)

    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is not set; searches will fail until it is configured")

    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to serve with. Defaults to the cached
            environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "A rental search proxy that asks Claude for listings matching the "
            "given criteria without exposing the API key to the browser."
        ),
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Configure CORS for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RentalFinderError, rental_finder_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include API routes
    app.include_router(router)

    # Serve with the settings this app was built from
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """
        Health check endpoint.

        Returns basic application status for monitoring and load balancers.
        """
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "configured": bool(settings.anthropic_api_key),
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# Create the application instance
app = create_app()
