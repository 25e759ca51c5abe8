"""FastAPI application factory."""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentaly.domain.errors import DomainError
from rentaly.observability.correlation import (
    CORRELATION_ID_HEADER,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from rentaly.observability.logging import get_logger

from .routers import public
from .routes import (
    admin,
    auth,
    availability,
    bookings,
    dashboard,
    listings,
    reservations,
    transactions,
)

logger = get_logger(__name__)


def _error(request: Request, status_code: int, message: str, headers=None) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content={"error": message}, headers=headers)
    cid = getattr(request.state, "correlation_id", None)
    if cid:
        response.headers[CORRELATION_ID_HEADER] = cid
    return response


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}``."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return _error(request, exc.status_code, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(request, exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(request, 400, _describe_validation_error(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled exception",
            exc_info=exc,
            extra={"extra_fields": {"path": request.url.path, "method": request.method}},
        )
        return _error(request, 500, "Internal server error")


def create_app() -> FastAPI:
    """Create the FastAPI app with every route mounted.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Rentaly",
        docs_url=None,
        redoc_url=None,
    )

    # Correlation ID middleware
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        # Kept on the request too: the 500 handler runs after the context is reset
        request.state.correlation_id = cid
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    register_exception_handlers(app)

    app.include_router(public.router)
    app.include_router(auth.router)
    app.include_router(availability.router)
    app.include_router(bookings.router)
    app.include_router(listings.router)
    app.include_router(reservations.router)
    app.include_router(admin.router)
    app.include_router(transactions.router)
    app.include_router(dashboard.router)

    return app
