"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for the identity table, the profile table and the plan table
* Session helper used by the request dependencies
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, AsyncGenerator

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.pool import StaticPool


# ───────── connection helper ────────────────────────────────────────
def create_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        # in-memory sqlite must share one connection across sessions
        return create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, pool_pre_ping=True)


async def create_schema(eng: AsyncEngine) -> None:
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ───────── models ────────────────────────────────────────────────────


class AuthIdentity(Base):
    """Identity-provider record; its UUID is the user id everywhere else."""

    __tablename__ = "auth_identities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    encrypted_password: Mapped[str] = mapped_column(String)
    email_confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    password: Mapped[str] = mapped_column(String)  # bcrypt digest
    cpf_cnpj: Mapped[str] = mapped_column(String)
    profession: Mapped[str] = mapped_column(String)
    crn: Mapped[str | None] = mapped_column(String)
    uuid: Mapped[str] = mapped_column(String(36), ForeignKey("auth_identities.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Plano(Base):
    __tablename__ = "planos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("auth_identities.id"), index=True)
    paciente: Mapped[str] = mapped_column(String)
    objetivo: Mapped[str] = mapped_column(String)
    data: Mapped[date] = mapped_column(Date, index=True)
    anamnese: Mapped[dict[str, Any]] = mapped_column(JSON)
    plano: Mapped[dict[str, Any]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ───────── session helper ────────────────────────────────────────────

async def open_session(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with factory() as session:
        yield session
