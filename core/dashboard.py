"""
core/dashboard.py
────────────────────────────────────────────────────────────────────────
Usage metrics over one user's plans, computed entirely in memory.

Input is the full list of plan records (dicts with at least `data`,
`paciente` and `objetivo`, where `data` is a ``YYYY-MM-DD`` string).
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List

import pandas as pd

_LOG = logging.getLogger(__name__)

TOP_GOALS = 3
RECENT_WINDOW = timedelta(days=7)


def empty_dashboard() -> Dict[str, Any]:
    return {
        "totalPlanos": 0,
        "planosPorMes": {},
        "totalPacientes": 0,
        "planosPorObjetivo": {},
        "ultimoPlano": None,
        "planosUltimos7Dias": 0,
        "topObjetivos": [],
    }


def _counts(series: pd.Series) -> Dict[Any, int]:
    # sort=False keeps first-occurrence order, which topObjetivos relies on
    grouped = series.groupby(series, sort=False, dropna=False).size()
    return {key: int(n) for key, n in grouped.items()}


def _latest(df: pd.DataFrame) -> Dict[str, Any]:
    # max date string; on ties the last row seen wins
    latest = df[df["data"] == df["data"].max()].iloc[-1]
    return {
        "data": latest["data"],
        "paciente": latest["paciente"],
        "objetivo": latest["objetivo"],
    }


def compute_dashboard(
    planos: Iterable[Dict[str, Any]], now: datetime | None = None
) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = list(planos)
    if not rows:
        return empty_dashboard()

    df = pd.DataFrame(rows, columns=["data", "paciente", "objetivo"]).astype(object)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    by_goal = _counts(df["objetivo"])
    top = sorted(by_goal.items(), key=lambda kv: kv[1], reverse=True)[:TOP_GOALS]

    # bare dates are read as UTC midnight; unparseable ones never count
    parsed = pd.to_datetime(df["data"], errors="coerce", utc=True, format="ISO8601")
    recent = int((parsed >= pd.Timestamp(now - RECENT_WINDOW)).sum())

    _LOG.debug("dashboard over %d plans, %d recent", len(df), recent)
    return {
        "totalPlanos": len(df),
        "planosPorMes": _counts(df["data"].str.slice(0, 7)),
        "totalPacientes": int(df["paciente"].nunique(dropna=False)),
        "planosPorObjetivo": by_goal,
        "ultimoPlano": _latest(df),
        "planosUltimos7Dias": recent,
        "topObjetivos": [{"objetivo": goal, "count": n} for goal, n in top],
    }
