"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and speaks in
domain entities, never ORM rows.  Driver-level failures are reported as
``CollaboratorUnavailable`` so callers can tell "system down" from
"request invalid".  Inserts run in a savepoint; a unique-constraint
violation rolls back only that insert and surfaces as ``ConflictError``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AccountModel, BookingModel, ProfileModel
from airport_transfer.domain.entities import Account, Booking
from airport_transfer.domain.enums import BookingStatus, Role
from airport_transfer.domain.errors import (
    CollaboratorUnavailable,
    ConflictError,
    InvalidInput,
    NotFound,
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("role", "email", "display_name", "contact_phone")


@contextmanager
def unavailable_on_driver_error(what: str):
    try:
        yield
    except (OperationalError, InterfaceError, OSError) as exc:
        logger.warning("%s unavailable: %s", what, exc)
        raise CollaboratorUnavailable(f"{what} is unavailable") from exc


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone=True columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return value.astimezone(timezone.utc) if value is not None else None


def _to_booking(row: BookingModel) -> Booking:
    return Booking(
        id=row.id,
        owner_id=row.owner_id,
        pickup=row.pickup,
        drop=row.drop,
        scheduled_at=_aware(row.scheduled_at),
        vehicle_class=row.vehicle_class,
        fare=row.fare,
        status=BookingStatus(row.status),
        created_at=_aware(row.created_at),
        idempotency_key=row.idempotency_key,
    )


def _to_account(row: ProfileModel) -> Account:
    return Account(
        id=row.id,
        role=Role(row.role),
        email=row.email,
        display_name=row.display_name,
        contact_phone=row.contact_phone,
        created_at=_aware(row.created_at),
    )


class BookingRepository:
    """SQL-backed ``BookingStore``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, booking: Booking) -> str:
        row = BookingModel(
            id=booking.id,
            owner_id=booking.owner_id,
            pickup=booking.pickup,
            drop=booking.drop,
            scheduled_at=_utc(booking.scheduled_at),
            vehicle_class=booking.vehicle_class,
            fare=booking.fare,
            status=booking.status,
            idempotency_key=booking.idempotency_key,
            created_at=_utc(booking.created_at),
        )
        with unavailable_on_driver_error("Booking store"):
            try:
                async with self.session.begin_nested():
                    self.session.add(row)
                    await self.session.flush()
            except IntegrityError as exc:
                raise ConflictError(
                    f"Booking {booking.id} conflicts with an existing booking"
                ) from exc
        return booking.id

    async def _row(self, booking_id: str) -> Optional[BookingModel]:
        with unavailable_on_driver_error("Booking store"):
            result = await self.session.execute(
                select(BookingModel).where(BookingModel.id == booking_id)
            )
            return result.scalar_one_or_none()

    async def get_by_id(self, booking_id: str) -> Optional[Booking]:
        row = await self._row(booking_id)
        return _to_booking(row) if row else None

    async def get_by_idempotency_key(
        self, owner_id: str, key: str
    ) -> Optional[Booking]:
        with unavailable_on_driver_error("Booking store"):
            result = await self.session.execute(
                select(BookingModel).where(
                    BookingModel.owner_id == owner_id,
                    BookingModel.idempotency_key == key,
                )
            )
            row = result.scalar_one_or_none()
        return _to_booking(row) if row else None

    async def list_by_owner(self, owner_id: str) -> list[Booking]:
        with unavailable_on_driver_error("Booking store"):
            result = await self.session.execute(
                select(BookingModel)
                .where(BookingModel.owner_id == owner_id)
                .order_by(BookingModel.seq)
            )
            return [_to_booking(r) for r in result.scalars().all()]

    async def list_all(self) -> list[Booking]:
        with unavailable_on_driver_error("Booking store"):
            result = await self.session.execute(
                select(BookingModel).order_by(BookingModel.seq)
            )
            return [_to_booking(r) for r in result.scalars().all()]

    async def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
    ) -> None:
        """Single-row compare-and-set on ``status``."""
        stmt = update(BookingModel).where(BookingModel.id == booking_id)
        if expected_status is not None:
            stmt = stmt.where(BookingModel.status == expected_status)
        with unavailable_on_driver_error("Booking store"):
            result = await self.session.execute(stmt.values(status=status))
        if result.rowcount == 0:
            if await self._row(booking_id) is None:
                raise NotFound(f"Booking {booking_id} not found")
            raise ConflictError(
                f"Booking {booking_id} was modified concurrently; reload and retry"
            )

    async def delete(self, booking_id: str) -> None:
        with unavailable_on_driver_error("Booking store"):
            await self.session.execute(
                delete(BookingModel).where(BookingModel.id == booking_id)
            )


class ProfileRepository:
    """SQL-backed ``ProfileStore``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_profile(
        self, identity_id: str, fields: Mapping[str, Any]
    ) -> None:
        values = {k: fields[k] for k in PROFILE_FIELDS if fields.get(k) is not None}
        ignored = set(fields) - set(PROFILE_FIELDS)
        if ignored:
            logger.debug("Ignoring unknown profile fields %s", sorted(ignored))
        values["role"] = Role(values.get("role", Role.USER))
        with unavailable_on_driver_error("Profile store"):
            try:
                async with self.session.begin_nested():
                    self.session.add(ProfileModel(id=identity_id, **values))
                    await self.session.flush()
            except IntegrityError as exc:
                raise ConflictError(f"Profile {identity_id} already exists") from exc

    async def get_profile(self, identity_id: str) -> Optional[Account]:
        with unavailable_on_driver_error("Profile store"):
            row = await self.session.get(ProfileModel, identity_id)
        return _to_account(row) if row else None


class AccountRepository:
    """Credentials behind the local authentication provider."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        account_id: str,
        *,
        email: str | None = None,
        phone_number: str | None = None,
        hashed_password: str | None = None,
    ) -> AccountModel:
        account = AccountModel(
            id=account_id,
            email=email,
            phone_number=phone_number,
            hashed_password=hashed_password,
        )
        with unavailable_on_driver_error("Account store"):
            try:
                async with self.session.begin_nested():
                    self.session.add(account)
                    await self.session.flush()
            except IntegrityError as exc:
                # Lost a race with a concurrent sign-up for the same address.
                if email:
                    raise InvalidInput("Email already registered") from exc
                raise ConflictError("Phone number already registered") from exc
        return account

    async def get_by_email(self, email: str) -> Optional[AccountModel]:
        with unavailable_on_driver_error("Account store"):
            result = await self.session.execute(
                select(AccountModel).where(AccountModel.email == email)
            )
            return result.scalar_one_or_none()

    async def get_by_phone(self, phone_number: str) -> Optional[AccountModel]:
        with unavailable_on_driver_error("Account store"):
            result = await self.session.execute(
                select(AccountModel).where(AccountModel.phone_number == phone_number)
            )
            return result.scalar_one_or_none()
