"""
Shared helpers for API routes.
Contains: dependency providers, error responses, exercise joins,
derived progress metrics and weekday handling.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from constants import WEEKDAYS
from interpreter import TranscriptInterpreter
from store import PersistenceGateway

log = logging.getLogger("api")

limiter = Limiter(key_func=get_remote_address)


# ─── Dependencies ──────────────────────────────────────────

@lru_cache(maxsize=1)
def get_store() -> PersistenceGateway:
    return PersistenceGateway()


@lru_cache(maxsize=1)
def get_interpreter() -> TranscriptInterpreter:
    return TranscriptInterpreter()


# ─── Responses ─────────────────────────────────────────────

def _error_response(status_code: int, message: str, exc: Optional[BaseException] = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": message}
    if exc is not None:
        content["details"] = str(exc)
    return JSONResponse(status_code=status_code, content=content)


# ─── Joins ─────────────────────────────────────────────────

def _attach_exercises(store: PersistenceGateway, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Embed {id, name, muscle_group} of each row's exercise under "exercises"."""
    ids = sorted({r["exercise_id"] for r in rows if r.get("exercise_id") is not None})
    by_id: Dict[Any, Dict[str, Any]] = {}
    if ids:
        for ex in store.select(
            "exercises",
            columns=["id", "name", "muscle_group"],
            filters={"id": ids},
        ):
            by_id[ex["id"]] = ex
    for row in rows:
        row["exercises"] = by_id.get(row.get("exercise_id"))
    return rows


def build_user_context(store: PersistenceGateway, user_id: str,
                       today: Optional[date] = None) -> Dict[str, Any]:
    """Today's planned split and the last five logged exercises."""
    today = today or date.today()
    split = store.select_one(
        "workout_splits",
        columns=["day_of_week", "muscle_groups"],
        filters={"user_id": user_id, "day_of_week": today.strftime("%A")},
    )
    recent = store.select(
        "workouts",
        columns=["exercise_id", "date", "weight_kg", "sets"],
        filters={"user_id": user_id},
        order_by="created_at",
        descending=True,
        limit=5,
    )
    _attach_exercises(store, recent)
    return {
        "workoutSplit": split or {},
        "recentExercises": [
            {
                "exercise": (r.get("exercises") or {}).get("name"),
                "date": r.get("date"),
                "weight_kg": r.get("weight_kg"),
                "sets": r.get("sets") or [],
            }
            for r in recent
        ],
    }


# ─── Derived metrics ───────────────────────────────────────

def _total_reps(sets: Optional[List[Dict[str, Any]]]) -> int:
    return sum(int(s.get("reps") or 0) for s in (sets or []))


def _progress_point(row: Dict[str, Any]) -> Dict[str, Any]:
    total = _total_reps(row.get("sets"))
    weight = row.get("weight_kg")
    return {
        "date": row.get("date"),
        "weight": weight,
        "totalReps": total,
        "volume": (weight or 0) * total,
    }


# ─── Weekdays ──────────────────────────────────────────────

def _normalize_day(value: str) -> str:
    """'monday', 'MON' or 'Monday' → 'Monday'."""
    key = (value or "").strip().lower()
    for day in WEEKDAYS:
        if key == day.lower() or (len(key) >= 3 and day.lower().startswith(key)):
            return day
    raise ValueError(f"Unknown day of week: {value!r}")


def _weekday_index(row: Dict[str, Any]) -> int:
    day = row.get("day_of_week")
    return WEEKDAYS.index(day) if day in WEEKDAYS else len(WEEKDAYS)
