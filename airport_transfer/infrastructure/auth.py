"""
Local authentication provider.

Implements the ``AuthProvider`` port on top of the ``accounts`` table:

* e-mail + password sign-up / log-in (passwords hashed with passlib)
* phone sign-in with a one-time code kept in Redis (``otp:<phone>``,
  SET ... EX) and consumed on first successful confirmation

Every successful sign-in or sign-out is pushed to the listeners registered
with ``on_identity_change``.  Codes are handed to a pluggable sender; by
default they are only logged, actual SMS delivery is out of scope.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
import uuid
from typing import Any, Awaitable, Callable, Mapping, Optional

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from .repositories import AccountRepository
from .security import hash_password, verify_password
from airport_transfer.config import settings
from airport_transfer.domain.entities import Identity
from airport_transfer.domain.enums import Role
from airport_transfer.domain.errors import (
    AuthenticationRequired,
    CollaboratorUnavailable,
    InvalidInput,
)
from airport_transfer.domain.ports import IdentityListener, ProfileStore, Unsubscribe

logger = logging.getLogger(__name__)

CodeSender = Callable[[str, str], Awaitable[None]]

MIN_PASSWORD_LENGTH = 6
_PHONE_RE = re.compile(r"^\+[1-9]\d{7,14}$")  # E.164, e.g. +919876543210


async def log_code_sender(phone_number: str, code: str) -> None:
    logger.info("Verification code issued for %s", phone_number)
    logger.debug("Verification code for %s: %s", phone_number, code)


def normalize_phone(phone_number: str) -> str:
    cleaned = re.sub(r"[\s\-()]", "", phone_number or "")
    if not _PHONE_RE.match(cleaned):
        raise InvalidInput("Phone number must be in international format, e.g. +919876543210")
    return cleaned


class LocalAuthProvider:
    def __init__(
        self,
        session: AsyncSession,
        redis: aioredis.Redis,
        profiles: ProfileStore,
        code_sender: CodeSender = log_code_sender,
    ):
        self.accounts = AccountRepository(session)
        self.redis = redis
        self.profiles = profiles
        self.code_sender = code_sender
        self.identity: Optional[Identity] = None
        self._pending_phone: Optional[str] = None
        self._listeners: list[IdentityListener] = []

    # ── Subscriptions ─────────────────────────────────────────────

    def on_identity_change(self, callback: IdentityListener) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _set_identity(self, identity: Optional[Identity]) -> None:
        self.identity = identity
        for listener in list(self._listeners):
            await listener(identity)

    # ── E-mail & password ─────────────────────────────────────────

    async def sign_up(
        self, email: str, password: str, profile_fields: Mapping[str, Any]
    ) -> Identity:
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise InvalidInput("A valid email address is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if await self.accounts.get_by_email(email):
            raise InvalidInput("Email already registered")

        account = await self.accounts.create(
            uuid.uuid4().hex, email=email, hashed_password=hash_password(password)
        )
        # Callers never pick their own role.
        fields = {k: v for k, v in profile_fields.items() if k != "role"}
        fields.update(email=email, role=Role.USER)
        await self.profiles.create_profile(account.id, fields)

        identity = Identity(id=account.id, email=email)
        logger.info("Account %s signed up", account.id)
        await self._set_identity(identity)
        return identity

    async def log_in(self, email: str, password: str) -> Identity:
        account = await self.accounts.get_by_email((email or "").strip().lower())
        if account is None or not verify_password(password or "", account.hashed_password):
            raise AuthenticationRequired("Invalid email or password")
        identity = Identity(
            id=account.id, email=account.email, phone_number=account.phone_number
        )
        await self._set_identity(identity)
        return identity

    async def log_out(self) -> None:
        self._pending_phone = None
        await self._set_identity(None)

    # ── Phone number (one-time code) ──────────────────────────────

    @staticmethod
    def _otp_key(phone_number: str) -> str:
        return f"otp:{phone_number}"

    async def request_code(self, phone_number: str) -> None:
        phone = normalize_phone(phone_number)
        code = "".join(secrets.choice(string.digits) for _ in range(settings.otp_length))
        try:
            await self.redis.set(self._otp_key(phone), code, ex=settings.otp_ttl_seconds)
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise CollaboratorUnavailable("Verification service is unavailable") from exc
        self._pending_phone = phone
        await self.code_sender(phone, code)

    async def confirm_code(
        self, code: str, phone_number: Optional[str] = None
    ) -> Identity:
        if phone_number:
            phone = normalize_phone(phone_number)
        elif self._pending_phone:
            phone = self._pending_phone
        else:
            raise InvalidInput("Request a verification code first")

        key = self._otp_key(phone)
        try:
            expected = await self.redis.get(key)
            if expected is None or not secrets.compare_digest(
                str(expected).encode(), (code or "").strip().encode()
            ):
                raise InvalidInput("Invalid or expired verification code")
            await self.redis.delete(key)
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise CollaboratorUnavailable("Verification service is unavailable") from exc

        account = await self.accounts.get_by_phone(phone)
        if account is None:
            account = await self.accounts.create(uuid.uuid4().hex, phone_number=phone)
            await self.profiles.create_profile(
                account.id, {"contact_phone": phone, "role": Role.USER}
            )
            logger.info("Account %s created from phone sign-in", account.id)

        self._pending_phone = None
        identity = Identity(id=account.id, email=account.email, phone_number=phone)
        await self._set_identity(identity)
        return identity
