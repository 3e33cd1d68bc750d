"""
진행 중인 요청 추적 미들웨어.

Graceful shutdown 시 진행 중인 요청을 추적하여 안전하게 종료할 수 있게 합니다.
카운터는 프로세스 단위로 공유되며 lifespan 종료 단계에서 wait_for_in_flight_requests()로 대기합니다.
"""
import asyncio
import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from photo_feed.utils.prometheus_metrics import in_flight_requests

logger = logging.getLogger("photo_feed.request_tracking")

# Health check 경로는 제외 (shutdown 시에도 체크 가능해야 함)
EXCLUDED_PATHS = {"/health", "/health/", "/health/liveness", "/health/readiness", "/metrics"}

_lock = asyncio.Lock()
_request_count = 0


def get_in_flight_requests() -> int:
    """현재 진행 중인 요청 수 반환."""
    return _request_count


async def _change_count(delta: int) -> None:
    global _request_count
    async with _lock:
        _request_count = max(0, _request_count + delta)
        in_flight_requests.set(_request_count)


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """진행 중인 요청을 추적하는 미들웨어."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        await _change_count(1)
        try:
            return await call_next(request)
        finally:
            await _change_count(-1)


async def wait_for_in_flight_requests(timeout: float = 30.0) -> bool:
    """
    진행 중인 요청이 완료될 때까지 대기.

    Args:
        timeout: 최대 대기 시간 (초)

    Returns:
        True: 모든 요청 완료, False: 타임아웃
    """
    start_time = time.monotonic()
    while True:
        count = get_in_flight_requests()
        if count == 0:
            logger.info("All in-flight requests completed", extra={"event": "lifecycle"})
            return True

        if time.monotonic() - start_time >= timeout:
            logger.warning(
                "Timeout waiting for requests (remaining: %d)",
                count,
                extra={"event": "lifecycle", "remaining_requests": count, "timeout": timeout},
            )
            return False

        await asyncio.sleep(0.5)
