from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class UltimoPlano(BaseModel):
    data: str
    paciente: str
    objetivo: str


class ObjetivoCount(BaseModel):
    objetivo: str
    count: int


class DashboardOut(BaseModel):
    """Metrics over every plan of the caller; keys keep the public camelCase names."""

    total_planos: int = Field(..., alias="totalPlanos")
    planos_por_mes: Dict[str, int] = Field(..., alias="planosPorMes")
    total_pacientes: int = Field(..., alias="totalPacientes")
    planos_por_objetivo: Dict[str, int] = Field(..., alias="planosPorObjetivo")
    ultimo_plano: UltimoPlano | None = Field(None, alias="ultimoPlano")
    planos_ultimos_7_dias: int = Field(..., alias="planosUltimos7Dias")
    top_objetivos: List[ObjetivoCount] = Field(..., alias="topObjetivos")

    model_config = ConfigDict(populate_by_name=True)
