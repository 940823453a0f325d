"""Request-scoped dependencies shared by every router."""
from __future__ import annotations

import logging
from typing import AsyncGenerator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Unauthenticated
from core.models.user import SessionUser
from services.context import AppContext
from services.db import open_session
from services.identity import IdentityProvider
from services.store import RecordStore

_LOG = logging.getLogger(__name__)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_session(
    ctx: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    async for session in open_session(ctx.sessions):
        yield session


def get_store(db: AsyncSession = Depends(get_session)) -> RecordStore:
    return RecordStore(db)


def get_identity_provider(
    db: AsyncSession = Depends(get_session),
    ctx: AppContext = Depends(get_context),
) -> IdentityProvider:
    return IdentityProvider(db, bcrypt_rounds=ctx.settings.bcrypt_rounds)


def current_user(
    authorization: str | None = Header(None),
    ctx: AppContext = Depends(get_context),
) -> SessionUser:
    """Bearer-token guard: 401 for a missing header or an unusable token."""
    if not authorization:
        _LOG.info("missing credential: no Authorization header")
        raise Unauthenticated("Token não fornecido.")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        _LOG.info("invalid credential: malformed Authorization header")
        raise Unauthenticated("Token inválido.")

    user = ctx.tokens.verify(parts[1])
    _LOG.debug("authenticated %s <%s>", user.id, user.email)
    return user
