"""
Authentication router: signup, login and recovery-by-answer.
"""
import time

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from photo_feed.config import get_settings
from photo_feed.database import get_db
from photo_feed.exceptions import AuthenticationError, ConflictError
from photo_feed.middlewares.rate_limit_middleware import limiter
from photo_feed.schemas.common import MessageResponse
from photo_feed.schemas.user import (
    LoginRequest,
    LoginResponse,
    RecoverRequest,
    SignupRequest,
    UserResponse,
)
from photo_feed.services.identity import IdentityService
from photo_feed.utils.prometheus_metrics import (
    login_duration_seconds,
    user_login_total,
    user_recovery_total,
    user_registration_total,
)

settings = get_settings()
router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def signup(
    data: SignupRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Register a new account.

    - **username**: must be unique (case-sensitive)
    - **password**: stored as a bcrypt hash
    - **question** / **answer**: recovery question and its answer (answer is hashed)
    """
    try:
        await IdentityService(db).signup(data)
        await db.commit()
    except ConflictError:
        user_registration_total.labels(result="conflict").inc()
        raise

    user_registration_total.labels(result="success").inc()
    return MessageResponse(message="Signup successful")


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in with username and password",
)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Log in. On a wrong password the 401 body carries `needsRecovery: true`
    and the account's recovery `question`.
    """
    start = time.perf_counter()
    result = "error"
    try:
        user = await IdentityService(db).login(data.username, data.password)
        result = "success"
    except AuthenticationError as e:
        result = "wrong_password" if e.extra.get("needsRecovery") else "not_found"
        raise
    finally:
        login_duration_seconds.labels(result=result).observe(time.perf_counter() - start)
        user_login_total.labels(result=result).inc()

    return LoginResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post(
    "/login/recover",
    response_model=LoginResponse,
    summary="Log in with the recovery answer",
)
@limiter.limit(settings.recover_rate_limit)
async def recover(
    request: Request,
    data: RecoverRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Log in by answering the recovery question. Rate limited per client.
    """
    try:
        user = await IdentityService(db).recover(data.username, data.answer)
    except AuthenticationError:
        user_recovery_total.labels(result="failure").inc()
        raise

    user_recovery_total.labels(result="success").inc()
    return LoginResponse(message="Login successful", user=UserResponse.model_validate(user))
