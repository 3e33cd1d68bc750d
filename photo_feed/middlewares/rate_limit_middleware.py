"""
Rate limiting using slowapi.
Every route gets the default per-client limit; the recovery-by-answer
endpoint carries a much tighter one against brute force.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from photo_feed.config import get_settings
from photo_feed.utils.client_ip import get_client_ip
from photo_feed.utils.prometheus_metrics import rate_limit_hits_total

logger = logging.getLogger("photo_feed.rate_limit")
settings = get_settings()


def get_client_identifier(request: Request) -> str:
    """Rate limit 키: 프록시 헤더를 고려한 클라이언트 IP."""
    return get_client_ip(request) or "unknown"


# 메모리 기반 (멀티 인스턴스 환경에서는 storage_uri를 Redis로 변경)
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.rate_limit_enabled,
    storage_uri="memory://",
)


def setup_rate_limiting(app: FastAPI) -> None:
    """
    Attach the limiter to the app and register the 429 handler.
    slowapi looks the limiter up on app.state.
    """
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        endpoint = request.url.path
        rate_limit_hits_total.labels(endpoint=endpoint).inc()
        logger.warning(
            "Rate limit exceeded",
            extra={
                "event": "rate_limit",
                "client_ip": get_client_identifier(request),
                "endpoint": endpoint,
                "limit": str(exc.detail),
            },
        )
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"message": "Too many attempts. Please try again later."},
        )
