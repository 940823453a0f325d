from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from core.errors import InternalError, UpstreamError
from services.store import RecordStore
from api.v1.deps import get_store

router = APIRouter()
_LOG = logging.getLogger(__name__)


@router.get("/ping")
async def ping(store: RecordStore = Depends(get_store)) -> dict[str, object]:
    """Round-trip to the store; 500 when it cannot be reached."""
    try:
        await store.ping()
    except UpstreamError as exc:
        _LOG.error("store ping failed: %s", exc)
        raise InternalError("Falha ao conectar no banco de dados.") from exc
    except Exception as exc:
        _LOG.exception("store ping crashed")
        raise InternalError("Erro interno do servidor.") from exc
    return {"status": "ok", "supabase": True}
