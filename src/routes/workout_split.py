"""Weekly workout split: full replace on save, Monday-first on read."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from models import WorkoutSplitSave
from routes.helpers import _error_response, _normalize_day, _weekday_index, get_store
from store import PersistenceGateway

log = logging.getLogger("api")

router = APIRouter(prefix="/api/workout-split", tags=["workout-split"])


def _split_rows(body: WorkoutSplitSave) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    seen = set()
    for split in body.splits:
        day = _normalize_day(split.day)
        if day in seen:
            raise ValueError(f"Duplicate day in split: {day}")
        seen.add(day)
        rows.append({
            "user_id": body.userId,
            "day_of_week": day,
            "muscle_groups": [g.strip() for g in split.muscleGroups if g and g.strip()],
        })
    return rows


@router.post("")
def save_workout_split(body: WorkoutSplitSave, store: PersistenceGateway = Depends(get_store)):
    """Replace the user's split; delete and insert share one transaction."""
    try:
        rows = _split_rows(body)
    except ValueError as e:
        return _error_response(400, "Invalid workout split", e)

    try:
        with store.transaction() as tx:
            removed = tx.delete("workout_splits", {"user_id": body.userId})
            data = tx.insert("workout_splits", rows) if rows else []
        log.info("Replaced split for %s: %d rows removed, %d inserted",
                 body.userId, removed, len(data))
        return {"success": True, "data": sorted(data, key=_weekday_index)}
    except Exception as e:
        log.exception("Error in POST /api/workout-split")
        return _error_response(500, "Failed to save workout split", e)


@router.get("")
def get_workout_split(
    userId: Optional[str] = Query(default=None),
    store: PersistenceGateway = Depends(get_store),
):
    if not userId:
        return _error_response(400, "userId is required")
    try:
        splits = store.select("workout_splits", filters={"user_id": userId})
        return {"success": True, "data": sorted(splits, key=_weekday_index)}
    except Exception as e:
        log.exception("Error in GET /api/workout-split")
        return _error_response(500, "Failed to fetch workout split", e)
