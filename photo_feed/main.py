"""
FastAPI Photo Feed application.

Main application entry point that configures:
- CORS middleware
- API routers and static upload serving
- Database lifecycle
- Logging system
- Exception handlers
- Prometheus metrics
- Graceful shutdown
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from photo_feed.config import get_settings
from photo_feed.database import close_db, init_db
from photo_feed.exceptions import PhotoFeedError
from photo_feed.middlewares.logging_middleware import LoggingMiddleware
from photo_feed.middlewares.rate_limit_middleware import setup_rate_limiting
from photo_feed.middlewares.request_tracking_middleware import (
    RequestTrackingMiddleware,
    wait_for_in_flight_requests,
)
from photo_feed.routers import auth_router, photos_router, users_router
from photo_feed.routers.health import router as health_router
from photo_feed.services.file_store import URL_PREFIX, get_file_store
from photo_feed.utils.logger import get_request_id, log_error, log_info, setup_logging
from photo_feed.utils.prometheus_metrics import exceptions_total, ready, setup_prometheus

settings = get_settings()

setup_logging()

# 종료 시 진행 중인 요청 대기 시간 (초)
SHUTDOWN_GRACE_SECONDS = 30.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan.

    Startup: create tables and upload directories, then report ready.
    Shutdown: fail health checks, wait for in-flight requests, dispose the engine.
    """
    await init_db()
    get_file_store().ensure_directories()
    ready.set(1)
    log_info(
        "Application startup completed",
        event="lifecycle",
        version=settings.app_version,
        environment=settings.environment.value,
    )

    yield

    ready.set(0)
    log_info("Application shutdown initiated", event="lifecycle")
    await wait_for_in_flight_requests(timeout=SHUTDOWN_GRACE_SECONDS)
    await close_db()
    log_info("Graceful shutdown completed", event="lifecycle")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
## Photo Feed API

A small photo-sharing backend:

- **Accounts**: signup, login, recovery by security question, username changes
- **Photos**: upload with title/tags/description, edit, delete, shared feed
- **Likes**: toggle a like on any photo
- **Profiles**: profile pictures served from `/uploads`
    """,
    openapi_tags=[
        {"name": "Authentication", "description": "Signup, login and recovery"},
        {"name": "Photos", "description": "Photo feed, uploads and likes"},
        {"name": "Users", "description": "Profiles and username changes"},
        {"name": "Health", "description": "Liveness and readiness"},
    ],
    lifespan=lifespan,
)

setup_prometheus(app)
setup_rate_limiting(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestTrackingMiddleware)


@app.exception_handler(PhotoFeedError)
async def photo_feed_error_handler(request: Request, exc: PhotoFeedError):
    """Client-side failures: status from the exception, body `{"message": ..., **extra}`."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Unhandled exception handler.

    - ERROR 로그 (traceback 포함)
    - 500 응답 (내부 정보 미노출)
    - Request ID 포함 (장애 추적용)
    """
    exceptions_total.inc()
    rid = get_request_id()
    log_error(
        "Unhandled exception occurred",
        exc_info=True,
        error_type=type(exc).__name__,
        error_code="INTERNAL_SERVER_ERROR",
        http_method=request.method,
        http_path=request.url.path,
        request_id=rid,
        event="exception",
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "requestId": rid},
    )


app.include_router(health_router)
app.include_router(auth_router)
app.include_router(photos_router)
app.include_router(users_router)

# /uploads/<fieldname>/<generated-name>
app.mount(
    URL_PREFIX,
    StaticFiles(directory=str(get_file_store().root), check_dir=False),
    name="uploads",
)


@app.get(
    "/",
    tags=["Root"],
    summary="API information",
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
