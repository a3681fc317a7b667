import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from voting_system.cache import close_redis
from voting_system.db.connection import dispose_engine, get_database_type, get_database_url
from voting_system.errors import VotingError
from voting_system.settings import get_settings

from .api import cache_admin, votes
from .schemas.error import ErrorType, ValidationErrorDetail
from .utils.error_responses import (
    PERSISTENCE_RETRY_AFTER_SECONDS,
    build_error_response,
    build_validation_error_response,
    build_voting_error_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_environment() -> None:
    """Log warnings for optional configuration that was left unset."""

    warnings = get_settings().optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Sanitize database URL to hide password in logs."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" in rest:
        auth, host_db = rest.split("@", 1)
        if ":" in auth:
            user, _ = auth.split(":", 1)
            return f"{scheme}://{user}:***@{host_db}"
        return f"{scheme}://{auth}@{host_db}"

    return url


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    validate_environment()

    logger.info("=" * 60)
    logger.info("Voting System API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info(f"Database Type: {get_database_type().upper()}")
    logger.info(f"Database URL: {_sanitize_database_url(get_database_url())}")
    logger.info(f"Cache namespace: {settings.cache_prefix}")

    from voting_system.warmup import warmup_all

    await warmup_all()

    yield

    logger.info("Shutting down Voting System API")
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="Voting System API",
    version="1.0.0",
    description="Per-item upvote/downvote counters with a Redis cache-aside layer.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in (3000, 5173, 8080)])
        origins.append(f"http://{host}")
    return origins


allow_origins = list(dict.fromkeys(_default_origins() + settings.cors_allow_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(VotingError)
async def voting_exception_handler(request: Request, exc: VotingError):
    """Map domain failures (invalid target, not found, persistence) to responses."""
    log = logger.error if exc.kind == "persistence_error" else logger.info
    log(
        "Voting error %s for request %s to %s: %s",
        exc.kind,
        get_request_id(),
        request.url.path,
        exc.message,
    )

    error_response = build_voting_error_response(exc, path=str(request.url.path))
    headers = None
    if error_response.retry_after is not None:
        headers = {"Retry-After": str(error_response.retry_after)}

    return JSONResponse(
        status_code=error_response.status_code,
        content=error_response.model_dump(mode="json"),
        headers=headers,
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors raised outside the vote store (e.g. session commit)."""
    logger.error(
        "Database error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.PERSISTENCE_ERROR,
        message="Vote storage unavailable",
        detail="The database could not complete the request. Please try again.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        path=str(request.url.path),
        retry_after=PERSISTENCE_RETRY_AFTER_SECONDS,
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    error_response = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail="An unexpected error occurred.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(votes.router, prefix="/votes", tags=["votes"])
app.include_router(cache_admin.router, prefix="/cache", tags=["cache"])
