"""State machine tests for the voice logging review/save flow."""

import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from client import ApiError, SessionContext
from voice_flow import PARSE_FAILED, SAVE_FAILED, FlowState, InvalidTransition, VoiceLogSession

PARSED = {
    "exercise": "Bench Press",
    "weight_kg": 40,
    "sets": [{"set_number": 1, "reps": 8}, {"set_number": 2, "reps": 6}],
    "muscle_group": "Chest",
    "notes": "",
}


def _ctx(client=None):
    return SessionContext(user_id="u1", client=client or MagicMock())


def _parsed_session():
    flow = VoiceLogSession()
    flow.start_listening()
    flow.set_transcript("Bench, 40kg, 8, 6")
    flow.stop_listening()
    flow.begin_parse()
    flow.parse_succeeded(PARSED)
    return flow


# ─── capture ─────────────────────────────────────────────────


class TestCapture:

    def test_listen_then_stop_with_transcript(self):
        flow = VoiceLogSession()
        flow.start_listening()
        assert flow.state == FlowState.LISTENING

        flow.set_transcript("  bench 40 kilos  ")
        assert flow.state == FlowState.LISTENING
        flow.stop_listening()

        assert flow.state == FlowState.TRANSCRIPT_READY
        assert flow.transcript == "bench 40 kilos"

    def test_stop_without_speech_returns_to_idle(self):
        flow = VoiceLogSession()
        flow.start_listening()
        flow.stop_listening()
        assert flow.state == FlowState.IDLE

    def test_typed_transcript(self):
        flow = VoiceLogSession()
        flow.set_transcript("squat 100 5 5 5")
        assert flow.state == FlowState.TRANSCRIPT_READY
        flow.set_transcript("")
        assert flow.state == FlowState.IDLE

    def test_cannot_stop_when_not_listening(self):
        with pytest.raises(InvalidTransition):
            VoiceLogSession().stop_listening()

    def test_cannot_parse_without_transcript(self):
        with pytest.raises(InvalidTransition):
            VoiceLogSession().begin_parse()


# ─── parse / edit / save ─────────────────────────────────────


class TestReviewAndSave:

    def test_parse_result_is_copied(self):
        flow = _parsed_session()
        assert flow.state == FlowState.PARSED
        flow.edit_reps(0, 10)
        assert PARSED["sets"][0]["reps"] == 8

    def test_parse_result_must_be_object(self):
        flow = VoiceLogSession()
        flow.set_transcript("bench")
        flow.begin_parse()
        with pytest.raises(TypeError):
            flow.parse_succeeded(["not", "a", "dict"])

    def test_edits(self):
        flow = _parsed_session()
        flow.edit_weight("42.5")
        flow.edit_reps(1, "7")
        flow.edit_reps(0, -3)
        assert flow.parsed["weight_kg"] == 42.5
        assert flow.parsed["sets"] == [{"set_number": 1, "reps": 0}, {"set_number": 2, "reps": 7}]

        flow.edit_weight("heavy")
        flow.edit_reps(0, "lots")
        assert flow.parsed["weight_kg"] is None
        assert flow.parsed["sets"][0]["reps"] == 0

    def test_edit_out_of_range(self):
        with pytest.raises(IndexError):
            _parsed_session().edit_reps(5, 10)

    def test_save_payload(self):
        flow = _parsed_session()
        payload = flow.begin_save("u1")
        assert flow.state == FlowState.SAVING
        assert flow.is_busy
        assert payload == {
            "userId": "u1",
            "exerciseName": "Bench Press",
            "weightKg": 40,
            "sets": PARSED["sets"],
            "muscleGroup": "Chest",
            "notes": "",
        }

    def test_save_success_then_record_again(self):
        flow = _parsed_session()
        flow.begin_save("u1")
        flow.save_succeeded()
        assert flow.state == FlowState.SAVED
        assert flow.success_message == "Workout saved: Bench Press"

        flow.start_listening()
        assert flow.transcript == ""
        assert flow.parsed is None
        assert flow.success_message == ""

    def test_cannot_edit_while_saving(self):
        flow = _parsed_session()
        flow.begin_save("u1")
        with pytest.raises(InvalidTransition):
            flow.edit_weight(50)


# ─── errors ──────────────────────────────────────────────────


class TestErrors:

    def test_failed_parse_resumes_at_transcript(self):
        flow = VoiceLogSession()
        flow.set_transcript("bench")
        flow.begin_parse()
        flow.fail(PARSE_FAILED)
        assert flow.state == FlowState.ERROR

        flow.dismiss_error()
        assert flow.state == FlowState.TRANSCRIPT_READY
        assert flow.transcript == "bench"
        assert flow.error is None

    def test_failed_save_keeps_parsed_data(self):
        flow = _parsed_session()
        flow.begin_save("u1")
        flow.fail(SAVE_FAILED)
        flow.dismiss_error()
        assert flow.state == FlowState.PARSED
        assert flow.parsed["exercise"] == "Bench Press"

    def test_fail_only_while_busy(self):
        with pytest.raises(InvalidTransition):
            VoiceLogSession().fail("boom")

    def test_reset(self):
        flow = _parsed_session()
        flow.reset()
        assert flow.state == FlowState.IDLE
        assert flow.transcript == ""
        assert flow.parsed is None


# ─── client drivers ──────────────────────────────────────────


class TestDrivers:

    def test_parse_with_client(self):
        client = MagicMock()
        client.parse_workout_transcript.return_value = {"success": True, "data": PARSED}
        flow = VoiceLogSession()
        flow.set_transcript("Bench, 40kg, 8, 6")

        assert flow.parse_with(_ctx(client)) is True
        client.parse_workout_transcript.assert_called_once_with("Bench, 40kg, 8, 6", "u1")
        assert flow.state == FlowState.PARSED

    def test_parse_api_error(self):
        client = MagicMock()
        client.parse_workout_transcript.side_effect = ApiError(500, "Failed to parse transcript")
        flow = VoiceLogSession()
        flow.set_transcript("bench")

        assert flow.parse_with(_ctx(client)) is False
        assert flow.state == FlowState.ERROR
        assert flow.error == PARSE_FAILED

    def test_parse_malformed_body(self):
        client = MagicMock()
        client.parse_workout_transcript.return_value = {"success": True}
        flow = VoiceLogSession()
        flow.set_transcript("bench")

        assert flow.parse_with(_ctx(client)) is False
        assert flow.error == PARSE_FAILED

    def test_save_with_client(self):
        client = MagicMock()
        flow = _parsed_session()

        assert flow.save_with(_ctx(client)) is True
        sent = client.save_workout.call_args[0][0]
        assert sent["userId"] == "u1"
        assert flow.state == FlowState.SAVED

    def test_save_api_error(self):
        client = MagicMock()
        client.save_workout.side_effect = ApiError(0, "Could not reach the Gym Tracker API")
        flow = _parsed_session()

        assert flow.save_with(_ctx(client)) is False
        assert flow.error == SAVE_FAILED
        flow.dismiss_error()
        assert flow.state == FlowState.PARSED
