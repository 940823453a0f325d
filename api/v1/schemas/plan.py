from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class PlanoOut(BaseModel):
    id: int
    user_id: str
    paciente: str
    objetivo: str
    data: date
    anamnese: dict[str, Any]
    plano: dict[str, Any]
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PlanoEnvelope(BaseModel):
    plano: PlanoOut


class PlanoList(BaseModel):
    planos: list[PlanoOut]


class PlanoPage(BaseModel):
    planos: list[PlanoOut]
    total: int
