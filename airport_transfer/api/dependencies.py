"""FastAPI dependency injection helpers."""

from datetime import timedelta
from typing import Optional

import redis.asyncio as aioredis
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from airport_transfer.config import settings
from airport_transfer.domain.entities import Caller
from airport_transfer.domain.lifecycle import BookingLifecycle
from airport_transfer.domain.pricing import FareEstimator
from airport_transfer.domain.session import resolve_role
from airport_transfer.infrastructure.auth import LocalAuthProvider
from airport_transfer.infrastructure.database import async_session_factory
from airport_transfer.infrastructure.redis_client import get_redis
from airport_transfer.infrastructure.repositories import (
    BookingRepository,
    ProfileRepository,
)
from airport_transfer.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

_estimator = FareEstimator()


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_estimator() -> FareEstimator:
    return _estimator


def get_booking_store(db: AsyncSession = Depends(get_db)) -> BookingRepository:
    return BookingRepository(db)


def get_profile_store(db: AsyncSession = Depends(get_db)) -> ProfileRepository:
    return ProfileRepository(db)


def get_lifecycle(
    store: BookingRepository = Depends(get_booking_store),
    estimator: FareEstimator = Depends(get_estimator),
) -> BookingLifecycle:
    return BookingLifecycle(
        store,
        estimator,
        local_utc_offset=timedelta(minutes=settings.service_utc_offset_minutes),
    )


def get_auth_provider(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    profiles: ProfileRepository = Depends(get_profile_store),
) -> LocalAuthProvider:
    return LocalAuthProvider(db, redis, profiles)


async def get_current_caller(
    token: Optional[str] = Depends(oauth2_scheme),
    profiles: ProfileRepository = Depends(get_profile_store),
) -> Optional[Caller]:
    """
    Resolve the caller from the bearer token, or ``None`` when anonymous.

    The role is read from the profile on every request, so admin-only
    operations are re-verified server-side rather than trusted from the
    client.
    """
    if not token:
        return None
    identity_id = decode_access_token(token)
    return Caller(id=identity_id, role=await resolve_role(profiles, identity_id))
