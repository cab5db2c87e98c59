"""Transcript → structured workout via the completion model."""


import logging

from fastapi import APIRouter, Depends, Request

import config
from interpreter import TranscriptInterpreter
from models import ParseRequest
from routes.helpers import _error_response, build_user_context, get_interpreter, get_store, limiter
from store import PersistenceGateway

log = logging.getLogger("api")

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/parse")
@limiter.limit(config.AI_PARSE_RATE_LIMIT)
def parse_transcript(
    request: Request,
    body: ParseRequest,
    store: PersistenceGateway = Depends(get_store),
    interpreter: TranscriptInterpreter = Depends(get_interpreter),
):
    """Parse a voice transcript, using the user's split and history as context."""
    try:
        context = build_user_context(store, body.userId) if body.userId else {}
        parsed = interpreter.interpret(body.transcript, context)
        return {"success": True, "data": parsed}
    except Exception as e:
        log.exception("Error in /api/ai/parse")
        return _error_response(500, "Failed to parse transcript", e)
