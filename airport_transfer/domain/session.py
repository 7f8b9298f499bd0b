"""
Session / role resolver.

Owns the only process-wide notion of "who is signed in".  Components pull
the caller with ``current_caller()`` and pass it explicitly into the
lifecycle engine; nothing else reads ambient session state.

The resolver serves stateful in-process clients such as a CLI or a
long-lived SDK session.  The HTTP API keeps no session: it runs
``resolve_role`` per request from the bearer token's subject
(``airport_transfer.api.dependencies.get_current_caller``).

Role resolution is an explicit awaited step:

* profile found          -> its role
* profile not created yet -> ``Role.USER`` (sign-up may still be writing it)
* profile fetch failed   -> ``CollaboratorUnavailable`` propagates and the
  cached caller is cleared, never silently downgraded to a plain user.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from .entities import Caller, Identity
from .enums import Role
from .errors import CollaboratorUnavailable
from .ports import AuthProvider, ProfileStore, Unsubscribe

logger = logging.getLogger(__name__)

CallerListener = Callable[[Optional[Caller]], Awaitable[None]]


async def resolve_role(profiles: ProfileStore, identity_id: str) -> Role:
    profile = await profiles.get_profile(identity_id)
    if profile is None:
        logger.debug("No profile yet for %s, defaulting to user role", identity_id)
        return Role.USER
    return Role(profile.role)


async def resolve_caller(profiles: ProfileStore, identity: Identity) -> Caller:
    return Caller(id=identity.id, role=await resolve_role(profiles, identity.id))


class SessionResolver:
    def __init__(self, profiles: ProfileStore):
        self.profiles = profiles
        self._identity: Optional[Identity] = None
        self._caller: Optional[Caller] = None
        self._listeners: list[CallerListener] = []
        self._detach: Optional[Unsubscribe] = None

    def attach(self, auth: AuthProvider) -> None:
        """Follow *auth*'s identity changes from now on."""
        self.detach()
        self._detach = auth.on_identity_change(self.handle_identity_change)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    def current_caller(self) -> Optional[Caller]:
        return self._caller

    def subscribe(self, listener: CallerListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def handle_identity_change(self, identity: Optional[Identity]) -> None:
        self._identity = identity
        await self.refresh()

    async def refresh(self) -> Optional[Caller]:
        """Re-resolve the role for the current identity."""
        identity = self._identity
        if identity is None:
            caller = None
        else:
            try:
                caller = await resolve_caller(self.profiles, identity)
            except CollaboratorUnavailable:
                self._caller = None
                raise
        if caller != self._caller:
            logger.info(
                "Session caller changed: %s",
                f"{caller.id} ({caller.role.value})" if caller else "signed out",
            )
        self._caller = caller
        for listener in list(self._listeners):
            await listener(caller)
        return caller
