"""
Voice logging session
=====================
Review/save flow for one spoken workout:

    idle → listening → transcript-ready → parsing → parsed → saving → saved
                                             ↘ error ↙          ↘ error

``parsed`` is editable (weight and per-set reps).  Dismissing an error goes
back to where the user can retry: transcript-ready after a failed parse,
parsed after a failed save.
"""

from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import Any, Dict, Optional

from client import ApiError, SessionContext

log = logging.getLogger("voice_flow")

PARSE_FAILED = "Failed to parse workout. Please try again."
SAVE_FAILED = "Failed to save workout. Please try again."


class FlowState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    TRANSCRIPT_READY = "transcript-ready"
    PARSING = "parsing"
    PARSED = "parsed"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class InvalidTransition(ValueError):
    pass


class VoiceLogSession:
    def __init__(self):
        self.state = FlowState.IDLE
        self.transcript = ""
        self.parsed: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.success_message = ""
        self._resume_state: Optional[FlowState] = None

    @property
    def is_busy(self) -> bool:
        return self.state in (FlowState.PARSING, FlowState.SAVING)

    def _require(self, action: str, *allowed: FlowState) -> None:
        if self.state not in allowed:
            raise InvalidTransition(f"Cannot {action} while {self.state.value}")

    # ── capture ───────────────────────────────────────────────

    def start_listening(self) -> None:
        self._require("start listening", FlowState.IDLE, FlowState.TRANSCRIPT_READY,
                      FlowState.PARSED, FlowState.SAVED, FlowState.ERROR)
        if self.state == FlowState.SAVED:
            self.transcript = ""
        self.parsed = None
        self.error = None
        self.success_message = ""
        self.state = FlowState.LISTENING

    def set_transcript(self, text: str) -> None:
        self._require("update the transcript", FlowState.IDLE, FlowState.LISTENING,
                      FlowState.TRANSCRIPT_READY)
        self.transcript = (text or "").strip()
        if self.state != FlowState.LISTENING:
            self.state = FlowState.TRANSCRIPT_READY if self.transcript else FlowState.IDLE

    def stop_listening(self) -> None:
        self._require("stop listening", FlowState.LISTENING)
        self.state = FlowState.TRANSCRIPT_READY if self.transcript else FlowState.IDLE

    # ── parse ─────────────────────────────────────────────────

    def begin_parse(self) -> str:
        self._require("parse", FlowState.TRANSCRIPT_READY)
        if not self.transcript.strip():
            raise InvalidTransition("No transcript to parse")
        self.error = None
        self.state = FlowState.PARSING
        return self.transcript

    def parse_succeeded(self, data: Dict[str, Any]) -> None:
        self._require("accept a parse result", FlowState.PARSING)
        if not isinstance(data, dict):
            raise TypeError("Parsed workout must be a JSON object")
        self.parsed = copy.deepcopy(data)
        self.parsed.setdefault("sets", [])
        self.state = FlowState.PARSED

    def fail(self, message: str) -> None:
        self._require("fail", FlowState.PARSING, FlowState.SAVING)
        self._resume_state = (
            FlowState.TRANSCRIPT_READY if self.state == FlowState.PARSING else FlowState.PARSED
        )
        self.error = message
        self.state = FlowState.ERROR

    def dismiss_error(self) -> None:
        self._require("dismiss an error", FlowState.ERROR)
        self.error = None
        self.state = self._resume_state or FlowState.IDLE
        self._resume_state = None

    # ── edit ──────────────────────────────────────────────────

    def edit_weight(self, weight: Any) -> None:
        self._require("edit the weight", FlowState.PARSED)
        try:
            self.parsed["weight_kg"] = float(weight)
        except (TypeError, ValueError):
            self.parsed["weight_kg"] = None

    def edit_reps(self, index: int, reps: Any) -> None:
        self._require("edit reps", FlowState.PARSED)
        sets = self.parsed["sets"]
        if not 0 <= index < len(sets):
            raise IndexError(f"No set at position {index}")
        try:
            value = max(int(reps), 0)
        except (TypeError, ValueError):
            value = 0
        sets[index] = {**sets[index], "reps": value}

    # ── save ──────────────────────────────────────────────────

    def save_payload(self, user_id: str) -> Dict[str, Any]:
        data = self.parsed or {}
        return {
            "userId": user_id,
            "exerciseName": data.get("exercise"),
            "weightKg": data.get("weight_kg"),
            "sets": data.get("sets") or [],
            "muscleGroup": data.get("muscle_group"),
            "notes": data.get("notes") or "",
        }

    def begin_save(self, user_id: str) -> Dict[str, Any]:
        self._require("save", FlowState.PARSED)
        self.error = None
        self.state = FlowState.SAVING
        return self.save_payload(user_id)

    def save_succeeded(self) -> None:
        self._require("finish saving", FlowState.SAVING)
        self.success_message = f"Workout saved: {(self.parsed or {}).get('exercise')}"
        self.state = FlowState.SAVED

    def reset(self) -> None:
        self.__init__()

    # ── drivers ───────────────────────────────────────────────

    def parse_with(self, ctx: SessionContext) -> bool:
        transcript = self.begin_parse()
        try:
            result = ctx.client.parse_workout_transcript(transcript, ctx.user_id)
            self.parse_succeeded(result["data"])
            return True
        except (ApiError, KeyError, TypeError) as e:
            log.error("Error parsing transcript: %s", e)
            self.fail(PARSE_FAILED)
            return False

    def save_with(self, ctx: SessionContext) -> bool:
        payload = self.begin_save(ctx.user_id)
        try:
            ctx.client.save_workout(payload)
        except ApiError as e:
            log.error("Error saving workout: %s", e)
            self.fail(SAVE_FAILED)
            return False
        self.save_succeeded()
        return True
