"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.pricing import FareEstimator
from src.infrastructure.code_store import CodeStore, get_code_store
from src.infrastructure.database import async_session_factory
from src.infrastructure.models import DriverModel, UserModel
from src.infrastructure.notifier import Notifier, get_notifier
from src.infrastructure.repositories import DriverRepository, RiderRepository
from src.infrastructure.tokens import (
    EnvelopeSigner,
    InvalidSessionToken,
    SessionTokens,
    get_envelope_signer,
    get_session_tokens,
)
from src.services.verification import VerificationFlow

bearer = HTTPBearer(auto_error=False)

LOGIN_REQUIRED = "Please log in to access this content"


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_fare_estimator() -> FareEstimator:
    return FareEstimator(settings.base_fare, settings.rate_per_km)


def get_verification_flow(
    codes: CodeStore = Depends(get_code_store),
    notifier: Notifier = Depends(get_notifier),
    signer: EnvelopeSigner = Depends(get_envelope_signer),
) -> VerificationFlow:
    return VerificationFlow(codes, notifier, signer)


def _subject_id(
    credentials: Optional[HTTPAuthorizationCredentials],
    tokens: SessionTokens,
    role: str,
) -> int:
    if credentials is None:
        raise HTTPException(status_code=401, detail=LOGIN_REQUIRED)
    try:
        payload = tokens.decode(credentials.credentials)
    except InvalidSessionToken:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    if payload["role"] != role:
        raise HTTPException(status_code=401, detail=LOGIN_REQUIRED)
    return int(payload["id"])


async def get_current_rider(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    tokens: SessionTokens = Depends(get_session_tokens),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    user = await RiderRepository(db).get_by_id(_subject_id(credentials, tokens, "rider"))
    if not user:
        raise HTTPException(status_code=401, detail=LOGIN_REQUIRED)
    return user


async def get_current_driver(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    tokens: SessionTokens = Depends(get_session_tokens),
    db: AsyncSession = Depends(get_db),
) -> DriverModel:
    driver = await DriverRepository(db).get_by_id(_subject_id(credentials, tokens, "driver"))
    if not driver:
        raise HTTPException(status_code=401, detail=LOGIN_REQUIRED)
    return driver
