"""Exercise library listing."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from routes.helpers import _error_response, get_store
from store import PersistenceGateway

log = logging.getLogger("api")

router = APIRouter(prefix="/api/exercises", tags=["exercises"])


@router.get("")
def list_exercises(store: PersistenceGateway = Depends(get_store)):
    try:
        exercises = store.select("exercises", order_by="name")
        return {"success": True, "data": exercises}
    except Exception as e:
        log.exception("Error in GET /api/exercises")
        return _error_response(500, "Failed to fetch exercises", e)
