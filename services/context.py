"""
services/context.py
────────────────────────────────────────────────────────────────────────
Process-wide collaborators, built once at startup and handed to the
routers through FastAPI dependencies. Nothing in here mutates after
construction.
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from config import Settings
from services.auth import TokenCodec
from services.db import create_engine
from services.gemini import GeminiTextGenerator, TextGenerator


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    engine: AsyncEngine
    sessions: async_sessionmaker[AsyncSession]
    tokens: TokenCodec
    generator: TextGenerator


def build_context(settings: Settings, generator: TextGenerator | None = None) -> AppContext:
    eng = create_engine(settings.database_url)
    return AppContext(
        settings=settings,
        engine=eng,
        sessions=async_sessionmaker(eng, expire_on_commit=False),
        tokens=TokenCodec(settings.jwt_secret, ttl_days=settings.token_ttl_days),
        generator=generator
        or GeminiTextGenerator(settings.gemini_api_key, model=settings.gemini_model),
    )
