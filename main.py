from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware

from config import Settings, settings
from api.v1.errors import register_error_handlers
from api.v1.router import api_router
from services.context import AppContext, build_context
from services.db import User, create_schema
from services.gemini import TextGenerator

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format=settings.log_format,
)
_LOG = logging.getLogger("genutra.main")


async def _check_store(ctx: AppContext) -> None:
    try:
        async with ctx.sessions() as session:
            await session.execute(select(User.id).limit(1))
    except (SQLAlchemyError, OSError) as exc:
        _LOG.error("store connection failed: %s", exc)
    else:
        _LOG.info("store connection established")


def create_app(
    app_settings: Settings | None = None,
    generator: TextGenerator | None = None,
) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = build_context(app_settings, generator)
        if app_settings.create_tables:
            await create_schema(ctx.engine)
        await _check_store(ctx)
        app.state.context = ctx
        try:
            yield
        finally:
            await ctx.engine.dispose()

    app = FastAPI(title="Genutra API", version="1.0.0", lifespan=lifespan)

    # CORS (public demo only – lock down in prod)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/health", tags=["meta"])
    def health() -> dict[str, str]:
        return {"status": "ok", "env": app_settings.env_name}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port)
