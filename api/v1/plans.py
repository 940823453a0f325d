# api/v1/plans.py
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from core.errors import (
    ApiError,
    GenerationError,
    InternalError,
    ServiceValidationError,
    UpstreamError,
)
from core.models.user import SessionUser
from core.plan_generator import generate_plan
from services.context import AppContext
from services.store import RecordStore
from api.v1.deps import current_user, get_context, get_store
from api.v1.schemas import PlanoEnvelope, PlanoList, PlanoOut, PlanoPage

router = APIRouter()
_LOG = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
DEFAULT_OFFSET = 0

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _int_or_default(raw: str | None, default: int) -> int:
    """Leading digits like ``parseInt``; missing, zero or negative means `default`."""
    match = _LEADING_INT.match(raw or "")
    value = int(match.group(1)) if match else 0
    return value if value > 0 else default


# ───────────────────────── generate ────────────────────────
@router.post("/gerar-plano", response_model=PlanoEnvelope)
async def create_plan(
    anamnese: Any = Body(None),
    user: SessionUser = Depends(current_user),
    store: RecordStore = Depends(get_store),
    ctx: AppContext = Depends(get_context),
) -> PlanoEnvelope:
    if not isinstance(anamnese, dict) or not anamnese.get("nome") or not anamnese.get("objetivo"):
        raise ServiceValidationError("Dados de anamnese incompletos.")
    try:
        plano = await generate_plan(ctx.generator, anamnese)
    except GenerationError as exc:
        _LOG.error("plan generation failed for %s: %s", user.id, exc)
        raise UpstreamError("Erro ao gerar plano com IA.") from exc
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("plan generation crashed for %s", user.id)
        raise InternalError("Erro ao gerar plano com IA.") from exc

    try:
        row = await store.insert_plan(
            user_id=user.id,
            paciente=str(anamnese["nome"]),
            objetivo=str(anamnese["objetivo"]),
            data=datetime.now(timezone.utc).date(),
            anamnese=anamnese,
            plano=plano,
        )
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("saving plan failed for %s", user.id)
        raise InternalError("Erro ao gerar plano com IA.") from exc

    _LOG.info("plan %s saved for %s", row.id, user.id)
    return PlanoEnvelope(plano=PlanoOut.model_validate(row))


# ───────────────────────── list ────────────────────────────
@router.get("/planos", response_model=PlanoList)
async def list_plans(
    user: SessionUser = Depends(current_user),
    store: RecordStore = Depends(get_store),
) -> PlanoList:
    _LOG.debug("listing plans for %s", user.id)
    try:
        rows = await store.list_plans(user.id)
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("listing plans failed for %s", user.id)
        raise InternalError("Erro ao buscar planos.") from exc
    return PlanoList(planos=[PlanoOut.model_validate(r) for r in rows])


@router.get("/planos/recentes", response_model=PlanoPage)
async def list_recent_plans(
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    user: SessionUser = Depends(current_user),
    store: RecordStore = Depends(get_store),
) -> PlanoPage:
    lim = _int_or_default(limit, DEFAULT_LIMIT)
    off = _int_or_default(offset, DEFAULT_OFFSET)
    try:
        rows, total = await store.list_recent_plans(user.id, lim, off)
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("recent plans failed for %s", user.id)
        raise InternalError("Erro ao buscar planos recentes.") from exc
    return PlanoPage(planos=[PlanoOut.model_validate(r) for r in rows], total=total)


# ───────────────────────── fetch one ───────────────────────
@router.get("/plano/{plan_id}", response_model=PlanoEnvelope)
async def fetch_plan(
    plan_id: int,
    user: SessionUser = Depends(current_user),
    store: RecordStore = Depends(get_store),
) -> PlanoEnvelope:
    _LOG.debug("fetching plan %s for %s", plan_id, user.id)
    try:
        row = await store.get_plan(plan_id, user.id)
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("fetching plan %s failed", plan_id)
        raise InternalError("Erro ao buscar plano.") from exc
    return PlanoEnvelope(plano=PlanoOut.model_validate(row))
