"""
services/store.py
────────────────────────────────────────────────────────────────────────
Record store gateway: the typed queries the routers need against the
`users` and `planos` tables.

Every SQLAlchemy failure leaves here as `UpstreamError` carrying the
driver's message. The one special case is a missing plan on a single-row
fetch, which is `NotFoundError`.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError, UpstreamError
from services.db import Plano, User

_LOG = logging.getLogger(__name__)


def store_message(exc: SQLAlchemyError) -> str:
    """Driver-level message when there is one, SQLAlchemy's otherwise."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class RecordStore:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # ───────────────────────── health ───────────────────────────
    async def ping(self) -> None:
        try:
            await self._db.execute(select(User.id).limit(1))
        except SQLAlchemyError as exc:
            raise UpstreamError(store_message(exc)) from exc

    # ───────────────────────── users ────────────────────────────
    async def insert_profile(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        cpf_cnpj: str,
        profession: str,
        crn: str | None,
        identity_id: str,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password=password_hash,
            cpf_cnpj=cpf_cnpj,
            profession=profession,
            crn=crn or None,
            uuid=identity_id,
        )
        self._db.add(user)
        await self._commit("profile insert")
        return user

    async def find_profile_by_email(self, email: str) -> User | None:
        res = await self._run(
            select(User).where(User.email == email), "profile lookup"
        )
        return res.scalars().first()

    # ───────────────────────── plans ────────────────────────────
    async def insert_plan(
        self,
        *,
        user_id: str,
        paciente: str,
        objetivo: str,
        data: date,
        anamnese: dict[str, Any],
        plano: dict[str, Any],
    ) -> Plano:
        row = Plano(
            user_id=user_id,
            paciente=paciente,
            objetivo=objetivo,
            data=data,
            anamnese=anamnese,
            plano=plano,
        )
        self._db.add(row)
        await self._commit("plan insert")
        await self._db.refresh(row)
        return row

    async def list_plans(self, user_id: str) -> Sequence[Plano]:
        """All plans of `user_id`, newest date first."""
        res = await self._run(self._owned(user_id).order_by(*_NEWEST_FIRST), "plan list")
        return res.scalars().all()

    async def list_all_plans(self, user_id: str) -> Sequence[Plano]:
        """All plans of `user_id` in store order (dashboard input)."""
        res = await self._run(self._owned(user_id).order_by(Plano.id), "plan scan")
        return res.scalars().all()

    async def get_plan(self, plan_id: int, user_id: str) -> Plano:
        res = await self._run(
            self._owned(user_id).where(Plano.id == plan_id), "plan fetch"
        )
        row = res.scalars().first()
        if row is None:
            raise NotFoundError("Plano não encontrado.")
        return row

    async def list_recent_plans(
        self, user_id: str, limit: int, offset: int
    ) -> tuple[Sequence[Plano], int]:
        page = await self._run(
            self._owned(user_id).order_by(*_NEWEST_FIRST).offset(offset).limit(limit),
            "recent plans",
        )
        total = await self._run(
            select(func.count()).select_from(Plano).where(Plano.user_id == user_id),
            "plan count",
        )
        return page.scalars().all(), int(total.scalar_one())

    # ───────────────────────── helpers ──────────────────────────
    @staticmethod
    def _owned(user_id: str):
        return select(Plano).where(Plano.user_id == user_id)

    async def _run(self, stmt, what: str):
        try:
            return await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            _LOG.error("%s failed: %s", what, exc)
            raise UpstreamError(store_message(exc)) from exc

    async def _commit(self, what: str) -> None:
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            _LOG.error("%s failed: %s", what, exc)
            raise UpstreamError(store_message(exc)) from exc


# date desc; id desc keeps equal-date rows in a stable order across pages
_NEWEST_FIRST = (Plano.data.desc(), Plano.id.desc())
