"""Workout logging, history and per-exercise progress."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from constants import DEFAULT_MUSCLE_GROUP
from models import WorkoutCreate, number_sets
from routes.helpers import _attach_exercises, _error_response, _progress_point, get_store
from store import PersistenceGateway

log = logging.getLogger("api")

router = APIRouter(prefix="/api/workouts", tags=["workouts"])


def _find_or_create_exercise(store: PersistenceGateway, name: str,
                             muscle_group: Optional[str]) -> Dict[str, Any]:
    exercise = store.select_one("exercises", columns=["id", "name"], filters={"name": name})
    if exercise:
        return exercise
    created = store.insert("exercises", {
        "name": name,
        "muscle_group": muscle_group or DEFAULT_MUSCLE_GROUP,
        "aliases": [name.lower()],
    }, on_conflict=["name"])
    if created:
        log.info("Created exercise %r", name)
        return created[0]
    # a concurrent request created it first
    return store.select_one("exercises", columns=["id", "name"], filters={"name": name})


@router.post("")
def save_workout(body: WorkoutCreate, store: PersistenceGateway = Depends(get_store)):
    """Save a new workout, creating the exercise on first mention.

    Exercise creation and the workout insert commit together.
    """
    try:
        with store.transaction() as tx:
            exercise = _find_or_create_exercise(tx, body.exerciseName, body.muscleGroup)
            rows = tx.insert("workouts", {
                "user_id": body.userId,
                "exercise_id": exercise["id"],
                "date": body.date or date.today(),
                "weight_kg": body.weightKg,
                "sets": number_sets(body.sets),
                "notes": body.notes or "",
            })
        return {"success": True, "data": rows[0]}
    except Exception as e:
        log.exception("Error in POST /api/workouts")
        return _error_response(500, "Failed to save workout", e)


@router.get("")
def list_workouts(
    userId: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: PersistenceGateway = Depends(get_store),
):
    """Newest-first workout history joined with exercise info."""
    if not userId:
        return _error_response(400, "userId is required")
    try:
        workouts = store.select(
            "workouts",
            filters={"user_id": userId},
            order_by="created_at",
            descending=True,
            limit=limit,
            offset=offset,
        )
        return {"success": True, "data": _attach_exercises(store, workouts)}
    except Exception as e:
        log.exception("Error in GET /api/workouts")
        return _error_response(500, "Failed to fetch workouts", e)


@router.get("/progress/{exercise_id}")
def workout_progress(
    exercise_id: int,
    userId: Optional[str] = Query(default=None),
    store: PersistenceGateway = Depends(get_store),
):
    """Oldest-first weight, total reps and volume for one exercise."""
    if not userId:
        return _error_response(400, "userId is required")
    try:
        rows = store.select(
            "workouts",
            columns=["date", "weight_kg", "sets"],
            filters={"user_id": userId, "exercise_id": exercise_id},
            order_by="date",
        )
        return {"success": True, "data": [_progress_point(r) for r in rows]}
    except Exception as e:
        log.exception("Error in GET /api/workouts/progress")
        return _error_response(500, "Failed to fetch progress data", e)
