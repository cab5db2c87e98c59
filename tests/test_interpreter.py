"""
Tests for src/interpreter.py: prompt construction and reply decoding.
The completion gateway is always mocked.
"""

import json
import os
import sys
from datetime import date
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from completion import CompletionError
from interpreter import (
    TranscriptInterpreter,
    TranscriptParseError,
    build_messages,
    build_system_prompt,
    parse_reply,
)


# ─── prompt ──────────────────────────────────────────────────


class TestPrompt:

    def test_includes_date_and_weekday(self):
        prompt = build_system_prompt(today=date(2026, 10, 19))
        assert "Today is 2026-10-19, Monday" in prompt

    def test_includes_alias_table(self):
        prompt = build_system_prompt(today=date(2026, 10, 19))
        assert '"bench" → "Bench Press"' in prompt
        assert '"pull ups" or "pullups" → "Pull-ups"' in prompt
        assert "Number sets sequentially starting from 1" in prompt

    def test_includes_user_context(self):
        context = {
            "workoutSplit": {"day_of_week": "Monday", "muscle_groups": ["Chest"]},
            "recentExercises": [{"exercise": "Bench Press", "weight_kg": 40}],
        }
        prompt = build_system_prompt(context, today=date(2026, 10, 19))
        assert json.dumps(context["workoutSplit"]) in prompt
        assert '"exercise": "Bench Press", "weight_kg": 40' in prompt

    def test_empty_context(self):
        prompt = build_system_prompt(None, today=date(2026, 10, 19))
        assert "workout split for today: {}" in prompt
        assert "recent exercises: []" in prompt

    def test_messages(self):
        messages = build_messages("Bench, 40kg, 8, 6, 6", today=date(2026, 10, 19))
        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[1]["content"] == 'Transcript: "Bench, 40kg, 8, 6, 6"'


# ─── reply decoding ──────────────────────────────────────────


class TestParseReply:

    def test_plain_json(self):
        out = parse_reply(json.dumps({
            "exercise": "Bench Press",
            "weight_kg": 40,
            "sets": [{"set_number": 1, "reps": 8}, {"set_number": 2, "reps": 6}],
            "muscle_group": "Chest",
            "notes": "",
        }))
        assert out == {
            "exercise": "Bench Press",
            "weight_kg": 40.0,
            "sets": [{"set_number": 1, "reps": 8}, {"set_number": 2, "reps": 6}],
            "muscle_group": "Chest",
            "notes": "",
        }

    def test_fenced_json(self):
        reply = '```json\n{"exercise": "Deadlift", "weight_kg": 100, "sets": [{"reps": 5}]}\n```'
        out = parse_reply(reply)
        assert out["exercise"] == "Deadlift"
        assert out["sets"] == [{"set_number": 1, "reps": 5}]
        assert out["muscle_group"] == ""

    def test_sets_renumbered_in_order(self):
        out = parse_reply(json.dumps({
            "exercise": "Squat",
            "sets": [{"set_number": 4, "reps": 5}, {"set_number": 9, "reps": 3}],
        }))
        assert [s["set_number"] for s in out["sets"]] == [1, 2]
        assert [s["reps"] for s in out["sets"]] == [5, 3]

    def test_missing_weight_is_null(self):
        out = parse_reply('{"exercise": "Pull-ups", "sets": [{"reps": 10}]}')
        assert out["weight_kg"] is None

    @pytest.mark.parametrize("reply", [
        "Sure! Here is your workout.",
        "[1, 2, 3]",
        '{"weight_kg": 40, "sets": []}',
        '{"exercise": "Bench Press", "sets": [{"reps": -1}]}',
        "",
    ])
    def test_bad_replies_raise(self, reply):
        with pytest.raises(TranscriptParseError):
            parse_reply(reply)


# ─── interpreter ─────────────────────────────────────────────


class TestTranscriptInterpreter:

    def test_interpret_returns_payload(self):
        gateway = MagicMock()
        gateway.complete.return_value = '{"exercise": "Bench Press", "weight_kg": 40, "sets": [{"reps": 8}]}'

        out = TranscriptInterpreter(gateway).interpret("bench 40 kilos 8 reps", {"recentExercises": []})

        assert out["exercise"] == "Bench Press"
        messages = gateway.complete.call_args[0][0]
        assert messages[1]["content"] == 'Transcript: "bench 40 kilos 8 reps"'

    def test_gateway_failure_becomes_parse_error(self):
        gateway = MagicMock()
        gateway.complete.side_effect = CompletionError("quota exceeded")

        with pytest.raises(TranscriptParseError, match="quota exceeded"):
            TranscriptInterpreter(gateway).interpret("bench")
