from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from core.dashboard import compute_dashboard
from core.errors import ApiError, InternalError
from core.models.user import SessionUser
from services.store import RecordStore
from api.v1.deps import current_user, get_store
from api.v1.schemas import DashboardOut

router = APIRouter()
_LOG = logging.getLogger(__name__)


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(
    user: SessionUser = Depends(current_user),
    store: RecordStore = Depends(get_store),
) -> DashboardOut:
    """Usage metrics over every plan the caller owns (no pagination)."""
    try:
        rows = await store.list_all_plans(user.id)
        metrics = compute_dashboard(
            {
                "data": r.data.isoformat(),
                "paciente": r.paciente,
                "objetivo": r.objetivo,
            }
            for r in rows
        )
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("dashboard failed for %s", user.id)
        raise InternalError("Erro ao buscar métricas.") from exc
    return DashboardOut.model_validate(metrics)
