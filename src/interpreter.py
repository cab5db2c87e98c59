"""
Transcript Interpreter
======================
Turns a spoken workout description into a structured record by asking the
completion model.  There is no local parser: the prompt below is the whole
contract, e.g.

    "Bench, 40kg, 8, 6, 6"
      → {"exercise": "Bench Press", "weight_kg": 40,
         "sets": [{"set_number": 1, "reps": 8},
                  {"set_number": 2, "reps": 6},
                  {"set_number": 3, "reps": 6}],
         "muscle_group": "Chest", "notes": ""}
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from completion import CompletionGateway
from constants import EXERCISE_LIBRARY
from models import ParsedWorkout

log = logging.getLogger("interpreter")

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

OUTPUT_EXAMPLE = {
    "exercise": "Bench Press",
    "weight_kg": 40,
    "sets": [
        {"set_number": 1, "reps": 8},
        {"set_number": 2, "reps": 6},
    ],
    "muscle_group": "Chest",
    "notes": "",
}


class TranscriptParseError(RuntimeError):
    """The transcript could not be turned into a workout record."""


def alias_table() -> List[str]:
    lines = []
    for name, (_group, aliases) in EXERCISE_LIBRARY.items():
        spoken = " or ".join(f'"{a}"' for a in aliases)
        lines.append(f'  - {spoken} → "{name}"')
    return lines


def build_system_prompt(context: Optional[Dict[str, Any]] = None, today: Optional[date] = None) -> str:
    context = context or {}
    today = today or date.today()
    workout_split = context.get("workoutSplit") or {}
    recent = context.get("recentExercises") or []

    return "\n".join([
        "You are a gym workout assistant. Parse voice input into structured workout data.",
        "",
        "Context:",
        f"- Today is {today.isoformat()}, {today.strftime('%A')}",
        f"- User's workout split for today: {json.dumps(workout_split, default=str)}",
        f"- User's recent exercises: {json.dumps(recent, default=str)}",
        "",
        "Task: Extract workout data from the transcript.",
        "",
        "Expected Output (JSON):",
        json.dumps(OUTPUT_EXAMPLE, indent=2),
        "",
        "Rules:",
        "- Respond with a single JSON object and nothing else",
        '- Recognize exercise aliases (e.g., "bench" → "Bench Press", "pull ups" → "Pull-ups")',
        "- Infer muscle group from exercise",
        "- If weight unit not specified, assume kg",
        "- Number sets sequentially starting from 1",
        '- If user says "same weight" or doesn\'t mention weight, use the weight from '
        "their most recent workout for this exercise",
        '- Parse natural language like "first set 8 reps, second set 6 reps, third set 6 reps" correctly',
        '- Parse shorthand like "8, 6, 6" as 3 sets with those rep counts',
        "- Common exercise mappings:",
        *alias_table(),
    ])


def build_messages(transcript: str, context: Optional[Dict[str, Any]] = None,
                   today: Optional[date] = None) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": build_system_prompt(context, today)},
        {"role": "user", "content": f'Transcript: "{transcript}"'},
    ]


def parse_reply(reply: str) -> Dict[str, Any]:
    """Decode the model's JSON reply into a workout payload."""
    text = (reply or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise TranscriptParseError(f"Model reply is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise TranscriptParseError("Model reply is not a JSON object")

    try:
        return ParsedWorkout.model_validate(raw).to_payload()
    except ValidationError as e:
        raise TranscriptParseError(f"Model reply has the wrong shape: {e}") from e


class TranscriptInterpreter:
    def __init__(self, gateway: Optional[CompletionGateway] = None):
        self.gateway = gateway or CompletionGateway()

    def interpret(self, transcript: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        messages = build_messages(transcript, context)
        try:
            reply = self.gateway.complete(messages)
        except Exception as e:
            log.error("Error parsing workout transcript: %s", e)
            raise TranscriptParseError(f"Failed to parse workout transcript: {e}") from e

        parsed = parse_reply(reply)
        log.info("Parsed transcript as %s (%d sets)", parsed["exercise"], len(parsed["sets"]))
        return parsed
