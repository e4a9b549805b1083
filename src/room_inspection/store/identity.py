"""Identity gates. A write is only attempted once one of these succeeds."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

import google.auth
from google.auth.exceptions import DefaultCredentialsError

from room_inspection.errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    uid: str
    anonymous: bool


class IdentityGate(Protocol):
    async def establish_session(self) -> Identity: ...


class LocalIdentityGate:
    """Local session for the in-memory backend.

    Performs no authentication: every call hands out a fresh anonymous uid.
    Only use it where the store itself is local.
    """

    async def establish_session(self) -> Identity:
        return Identity(uid=uuid.uuid4().hex, anonymous=True)


class GoogleCredentialsGate:
    """Resolves application-default credentials for the Firestore backend."""

    def __init__(self, project: str | None = None) -> None:
        self._project = project

    async def establish_session(self) -> Identity:
        try:
            credentials, project = await asyncio.to_thread(google.auth.default)
        except DefaultCredentialsError as exc:
            raise AuthError(f"No Google credentials available: {exc}") from exc
        uid = getattr(credentials, "service_account_email", None) or self._project or project or "default"
        logger.info("Established store identity %s", uid)
        return Identity(uid=uid, anonymous=False)
