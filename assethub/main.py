import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import (
    DatabaseError,
    DBAPIError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import (
    TimeoutError as SQLAlchemyTimeoutError,
)
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .api import assets, favourites, users
from .db.connection import Database, sanitize_database_url
from .db.seed import seed_dev_once
from .errors import AssetHubError
from .logging_config import configure_logging
from .schemas.error import ErrorType, ValidationErrorDetail
from .settings import AppSettings, get_settings
from .utils.error_responses import (
    build_domain_error_response,
    build_error_response,
    build_validation_error_response,
)
from .utils.request_context import clear_request_id, get_request_id, set_request_id
from .warmup import warmup_all

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

CallNext = Callable[[Request], Awaitable[Response]]


def validate_environment(settings: AppSettings) -> None:
    """Log warnings for optional configuration that has been left unset."""
    warnings = settings.optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    settings: AppSettings = app.state.settings
    configure_logging(settings)
    validate_environment(settings)

    database: Database | None = getattr(app.state, "database", None)
    owns_database = database is None
    if database is None:
        database = Database.from_settings(settings)
        app.state.database = database

    # Preflight logging
    logger.info("=" * 60)
    logger.info("AssetHub API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info("Database Type: %s", settings.database_type.upper())
    logger.info("Database URL: %s", sanitize_database_url(str(database.engine.url)))
    logger.info("Environment: %s", settings.app_env)
    logger.info("=" * 60)

    await database.create_schema()

    if settings.should_seed:
        async with database.session() as session:
            await seed_dev_once(session)

    await warmup_all(database)

    try:
        yield
    finally:
        logger.info("Shutting down AssetHub API")
        if owns_database:
            await database.dispose()
            app.state.database = None


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    origins.append("http://localhost")
    origins.append("http://127.0.0.1")
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


class RequestTimeoutMiddleware:
    """Answer 504 once ``timeout_seconds`` elapse before the response starts.

    The deadline runs in the same task as the route handler, so the
    cancellation reaches the request's database session and its uncommitted
    writes are rolled back.  Once the response has started the deadline is
    lifted and the request completes normally.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            async with asyncio.timeout(self.timeout_seconds) as deadline:

                async def send_wrapper(message: Message) -> None:
                    if message["type"] == "http.response.start":
                        deadline.reschedule(None)
                    await send(message)

                await self.app(scope, receive, send_wrapper)
        except TimeoutError:
            path = scope.get("path", "")
            logger.error(
                "Request %s to %s exceeded %.1fs deadline",
                get_request_id(),
                path,
                self.timeout_seconds,
            )
            error_response = build_error_response(
                error_type=ErrorType.TIMEOUT_ERROR,
                message="Request timed out",
                detail=(
                    f"The request did not complete within {self.timeout_seconds:g} seconds."
                ),
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                path=path,
            )
            response = JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content=error_response.model_dump(mode="json"),
            )
            await response(scope, receive, send)


async def add_request_id(request: Request, call_next: CallNext) -> Response:
    """Add unique request ID to each request for tracking."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    token = set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        clear_request_id(token)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# Exception handlers
async def domain_exception_handler(request: Request, exc: AssetHubError):
    """Translate domain errors by kind: not found 404, conflict 409, invalid input 400."""
    logger.info(
        "Domain error for request %s to %s: %s (%s)",
        get_request_id(),
        request.url.path,
        exc.message,
        exc.kind.value,
    )

    error_response = build_domain_error_response(exc, path=str(request.url.path))
    return JSONResponse(
        status_code=error_response.status_code,
        content=error_response.model_dump(mode="json"),
    )


def _validation_details(
    exc: RequestValidationError | ValidationError,
) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = _validation_details(exc)

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


async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors."""
    errors = _validation_details(exc)

    logger.warning(
        "Pydantic validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Data validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


async def database_connection_exception_handler(request: Request, exc: Exception):
    """Handle database connection errors."""
    logger.error(
        "Database connection error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Database connection failed",
        detail="Unable to connect to the database. Please try again later.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        path=str(request.url.path),
        retry_after=5,
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_response.model_dump(mode="json"),
    )


async def database_timeout_exception_handler(
    request: Request, exc: SQLAlchemyTimeoutError
):
    """Handle connection pool timeouts."""
    logger.error(
        "Database timeout error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.TIMEOUT_ERROR,
        message="Database query timeout",
        detail="The database query took too long to complete. Please try again.",
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        path=str(request.url.path),
        retry_after=3,
    )

    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content=error_response.model_dump(mode="json"),
    )


async def database_integrity_exception_handler(request: Request, exc: IntegrityError):
    """Handle integrity errors other than a duplicate favourite as internal errors."""
    logger.error(
        "Database integrity error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Data integrity constraint violation",
        detail="The operation would violate a database constraint.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


async def database_generic_exception_handler(request: Request, exc: DatabaseError):
    """Handle generic database errors."""
    logger.error(
        "Database error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    error_response = build_error_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Database operation failed",
        detail="An error occurred while accessing the database. Please try again.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
        retry_after=3,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


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
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
        retry_after=5,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


async def healthcheck() -> dict[str, bool]:
    """Liveness probe."""
    return {"ok": True}


def create_app(
    settings: AppSettings | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Build the API application.

    ``database`` lets callers supply an already constructed :class:`Database`;
    the lifespan then uses it as-is and leaves disposal to the caller.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="AssetHub API",
        version="0.1.0",
        description="Favourite charts, insights, and audiences per user.",
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.database = database

    allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
    logger.debug("Configured CORS allow_origins: %s", ", ".join(allow_origins))

    # Registration order matters: the request id wraps the deadline so timed
    # out responses still carry the header.
    app.add_middleware(
        RequestTimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds
    )
    app.middleware("http")(add_request_id)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    app.add_exception_handler(AssetHubError, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
    app.add_exception_handler(OperationalError, database_connection_exception_handler)
    app.add_exception_handler(DBAPIError, database_connection_exception_handler)
    app.add_exception_handler(SQLAlchemyTimeoutError, database_timeout_exception_handler)
    app.add_exception_handler(IntegrityError, database_integrity_exception_handler)
    app.add_exception_handler(DatabaseError, database_generic_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_api_route("/api/healthz", healthcheck, methods=["GET"], tags=["system"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(favourites.router, prefix="/api/users", tags=["favourites"])
    app.include_router(assets.router, prefix="/api/assets", tags=["assets"])

    return app


app = create_app()
