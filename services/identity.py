"""
services/identity.py
────────────────────────────────────────────────────────────────────────
Identity provider: the system of record for login identities.

It lives beside the `users` profile table on purpose. An identity owns the
stable UUID handed out in tokens; the profile row only points at it through
`users.uuid`. The two are never merged.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import anyio
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import IdentityProviderError
from services.auth import hash_password
from services.db import AuthIdentity
from services.store import store_message

_LOG = logging.getLogger(__name__)

DUPLICATE_EMAIL = "A user with this email address has already been registered"


class IdentityProvider:
    def __init__(self, db: AsyncSession, bcrypt_rounds: int = 10) -> None:
        self._db = db
        self._rounds = bcrypt_rounds

    async def find_by_email(self, email: str) -> AuthIdentity | None:
        try:
            res = await self._db.execute(
                select(AuthIdentity).where(AuthIdentity.email == email)
            )
        except SQLAlchemyError as exc:
            _LOG.error("identity lookup failed for %s: %s", email, exc)
            raise IdentityProviderError(store_message(exc)) from exc
        return res.scalars().first()

    async def create_user(
        self, email: str, password: str, email_confirm: bool = True
    ) -> AuthIdentity:
        """Create and commit a new identity, refusing an email already taken."""
        if await self.find_by_email(email) is not None:
            raise IdentityProviderError(DUPLICATE_EMAIL)

        digest = await anyio.to_thread.run_sync(hash_password, password, self._rounds)
        identity = AuthIdentity(
            email=email,
            encrypted_password=digest,
            email_confirmed_at=datetime.now(timezone.utc) if email_confirm else None,
        )
        self._db.add(identity)
        try:
            await self._db.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent registration
            await self._db.rollback()
            raise IdentityProviderError(DUPLICATE_EMAIL) from exc
        except SQLAlchemyError as exc:
            await self._db.rollback()
            _LOG.error("identity insert failed for %s: %s", email, exc)
            raise IdentityProviderError(store_message(exc)) from exc

        _LOG.info("created identity %s for %s", identity.id, email)
        return identity
