"""
Browser speech capture for the dashboard.

Wraps the streamlit-mic-recorder speech-to-text widget as a start/stop
toggle.  Each finished utterance is appended to a running transcript kept in
session state and handed to ``on_transcript``; nothing polls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, MutableMapping, Optional

import streamlit as st
from streamlit_mic_recorder import speech_to_text

log = logging.getLogger("speech")

# Browsers with MediaRecorder microphone capture
SUPPORTED_BROWSER_TOKENS = ("Chrome/", "Edg/", "Firefox/", "Safari/")


class SpeechCapture:
    def __init__(
        self,
        key: str = "voice",
        language: str = "en-US",
        on_transcript: Optional[Callable[[str], Any]] = None,
        state: Optional[MutableMapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.key = key
        self.language = language
        self.on_transcript = on_transcript
        self._state = state if state is not None else st.session_state
        self._headers = headers
        if self._transcript_key not in self._state:
            self._state[self._transcript_key] = ""

    @property
    def _transcript_key(self) -> str:
        return f"{self.key}_transcript"

    @property
    def _output_key(self) -> str:
        return f"{self.key}_output"

    @property
    def is_supported(self) -> bool:
        headers = self._headers if self._headers is not None else st.context.headers
        agent = headers.get("User-Agent") or ""
        return any(token in agent for token in SUPPORTED_BROWSER_TOKENS)

    @property
    def transcript(self) -> str:
        return self._state.get(self._transcript_key, "")

    def _handle_result(self) -> None:
        text = (self._state.get(self._output_key) or "").strip()
        if not text:
            log.info("Speech capture returned no recognisable speech")
            return
        combined = f"{self.transcript} {text}".strip()
        self._state[self._transcript_key] = combined
        if self.on_transcript:
            self.on_transcript(combined)

    def render(self) -> None:
        """Draw the start/stop toggle; results arrive through the callback."""
        speech_to_text(
            language=self.language,
            start_prompt="🎤 Start recording",
            stop_prompt="⏹ Stop recording",
            just_once=True,
            use_container_width=True,
            callback=self._handle_result,
            key=self.key,
        )

    def reset(self) -> None:
        self._state[self._transcript_key] = ""
