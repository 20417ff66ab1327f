import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from sentrydash.api.deps import reset_stores
from sentrydash.api.router import api_router
from sentrydash.api.v1 import health
from sentrydash.core.config import settings
from sentrydash.core.errors import SentryDashError
from sentrydash.core.limiter import limiter
from sentrydash.core.log_config import configure_logging
from sentrydash.db import init_db

logger = logging.getLogger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_application() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response

    @app.exception_handler(SentryDashError)
    async def domain_exception_handler(request: Request, exc: SentryDashError):
        if exc.status_code >= 500:
            logger.error(f"[{exc.status_code}] {exc.kind}: {exc.message}")
        else:
            logger.info(f"[{exc.status_code}] {exc.kind}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _format_validation_errors(exc), "kind": "validation_error"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            content = {"error": f"Not Found: {request.url.path}", "kind": "not_found"}
        else:
            content = {"error": str(exc.detail), "kind": "http_error"}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": f"Rate limit exceeded: {exc.detail}", "kind": "rate_limited"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "kind": "internal_error"},
        )

    @app.get("/", include_in_schema=False)
    def read_root() -> dict[str, str]:
        return {"message": f"{settings.PROJECT_NAME} is running"}

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.on_event("startup")
    def _startup() -> None:
        if settings.STORE_BACKEND == "sql":
            init_db()

    @app.on_event("shutdown")
    def _shutdown() -> None:
        reset_stores()

    return app


app = create_application()
