"""
Health Check 라우터.

애플리케이션의 상태를 확인하는 엔드포인트를 제공합니다.
"""
import asyncio
import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text

from photo_feed.config import get_settings
from photo_feed.database import engine
from photo_feed.utils.prometheus_metrics import ready

logger = logging.getLogger("photo_feed.health")
router = APIRouter(prefix="/health", tags=["Health"])

settings = get_settings()

DB_CHECK_TIMEOUT = 1.0


def _is_ready() -> bool:
    return ready._value.get() == 1


async def _check_db() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _require_db() -> None:
    """DB 연결 확인 (타임아웃 1초). 실패 시 503."""
    try:
        await asyncio.wait_for(_check_db(), timeout=DB_CHECK_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("DB health check timeout", extra={"event": "health"})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection timeout",
        )
    except Exception as e:
        logger.warning("DB health check failed", extra={"event": "health", "error": str(e)[:200]})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection failed",
        )


@router.get(
    "",
    summary="Health check (fast)",
)
async def health_check() -> Dict[str, Any]:
    """
    빠른 Health Check (로드밸런서용).

    - 애플리케이션 종료 중이면 503
    - DB 연결 간단 확인
    """
    start_time = time.perf_counter()
    if not _is_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application is shutting down",
        )
    await _require_db()
    return {
        "status": "healthy",
        "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
        "instance": settings.instance_ip or "unknown",
    }


@router.get(
    "/liveness",
    summary="Liveness probe",
)
async def liveness_probe() -> Dict[str, str]:
    """애플리케이션이 살아있는지만 확인합니다."""
    return {"status": "alive"}


@router.get(
    "/readiness",
    summary="Readiness probe",
)
async def readiness_probe() -> Dict[str, str]:
    """애플리케이션이 요청을 처리할 준비가 되었는지 확인합니다."""
    if not _is_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application is not ready",
        )
    await _require_db()
    return {"status": "ready"}
