"""
Collaborator interfaces consumed by the core.

The lifecycle engine and the session resolver only ever talk to these
protocols; SQL, in-memory and HTTP-backed implementations live in
``airport_transfer.infrastructure``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from .entities import Account, Booking, Identity
from .enums import BookingStatus

IdentityListener = Callable[[Optional[Identity]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class BookingStore(Protocol):
    async def insert(self, booking: Booking) -> str: ...

    async def get_by_id(self, booking_id: str) -> Optional[Booking]: ...

    async def get_by_idempotency_key(
        self, owner_id: str, key: str
    ) -> Optional[Booking]: ...

    async def list_by_owner(self, owner_id: str) -> list[Booking]: ...

    async def list_all(self) -> list[Booking]: ...

    async def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
    ) -> None:
        """Persist *status*; raise ``ConflictError`` if *expected_status* no longer holds."""
        ...

    async def delete(self, booking_id: str) -> None: ...


class ProfileStore(Protocol):
    async def create_profile(
        self, identity_id: str, fields: Mapping[str, Any]
    ) -> None: ...

    async def get_profile(self, identity_id: str) -> Optional[Account]: ...


class AuthProvider(Protocol):
    async def sign_up(
        self, email: str, password: str, profile_fields: Mapping[str, Any]
    ) -> Identity: ...

    async def log_in(self, email: str, password: str) -> Identity: ...

    async def log_out(self) -> None: ...

    def on_identity_change(self, callback: IdentityListener) -> Unsubscribe: ...

    async def request_code(self, phone_number: str) -> None: ...

    async def confirm_code(
        self, code: str, phone_number: Optional[str] = None
    ) -> Identity: ...
