"""
Completion Gateway
==================
Thin client around the hosted chat-completion API (CrewAI ``LLM``, which
routes through LiteLLM model strings such as ``gemini/gemini-2.5-flash``).

Every call goes through two guards:
  • bounded retry with exponential backoff (tenacity)
  • a circuit breaker: after N consecutive failed calls the gateway
    fails fast with CircuitOpenError until the cooldown elapses, then
    lets one trial call through (half-open)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from crewai import LLM
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

import config

log = logging.getLogger("completion")

Message = Dict[str, str]


class CompletionError(RuntimeError):
    """The completion API call failed after all retries."""


class CircuitOpenError(CompletionError):
    """Raised without calling the API while the breaker is open."""


class CircuitBreaker:
    """Consecutive-failure circuit breaker (closed → open → half-open)."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._failures = 0
        self._opened_at: Optional[float] = None
        self._trial_in_flight = False

    @property
    def state(self) -> str:
        with self._lock:
            return self._state()

    def _state(self) -> str:
        if self._opened_at is None:
            return self.CLOSED
        if self._clock() - self._opened_at >= self.reset_timeout:
            return self.HALF_OPEN
        return self.OPEN

    def before_call(self) -> None:
        with self._lock:
            state = self._state()
            if state == self.OPEN:
                remaining = self.reset_timeout - (self._clock() - self._opened_at)
                raise CircuitOpenError(
                    f"Completion API circuit is open; retry in {max(remaining, 0):.0f}s"
                )
            # half-open admits a single trial until its outcome is recorded
            if state == self.HALF_OPEN:
                if self._trial_in_flight:
                    raise CircuitOpenError("Completion API circuit is half-open; trial call in progress")
                self._trial_in_flight = True

    def record_success(self) -> None:
        with self._lock:
            if self._opened_at is not None:
                log.info("Completion circuit closed")
            self._failures = 0
            self._opened_at = None
            self._trial_in_flight = False

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            half_open = self._state() == self.HALF_OPEN
            self._trial_in_flight = False
            if half_open or self._failures >= self.failure_threshold:
                self._opened_at = self._clock()
                log.warning(
                    "Completion circuit opened after %d consecutive failures",
                    self._failures,
                )


JSON_RESPONSE_FORMAT = {"type": "json_object"}

_default_llm: Optional[LLM] = None


def _get_llm() -> LLM:
    global _default_llm
    if _default_llm is None:
        kwargs: Dict[str, Any] = {
            "model": config.LLM_MODEL,
            "api_key": config.LLM_API_KEY,
            "temperature": config.LLM_TEMPERATURE,
        }
        if config.LLM_JSON_MODE:
            kwargs["response_format"] = JSON_RESPONSE_FORMAT
        _default_llm = LLM(**kwargs)
    return _default_llm


class CompletionGateway:
    """Sends a message list to the completion API and returns the reply text."""

    def __init__(
        self,
        llm: Any = None,
        max_attempts: int = config.LLM_MAX_ATTEMPTS,
        backoff_multiplier: float = 1.0,
        backoff_max: float = 30.0,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self._llm = llm
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self.backoff_max = backoff_max
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=config.LLM_BREAKER_THRESHOLD,
            reset_timeout=config.LLM_BREAKER_RESET_SEC,
        )

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = _get_llm()
        return self._llm

    def _call_once(self, messages: List[Message]) -> str:
        reply = self.llm.call(messages)
        if reply is None:
            raise CompletionError("Completion API returned no content")
        return reply if isinstance(reply, str) else str(reply)

    def complete(self, messages: List[Message]) -> str:
        """Return the model's reply to ``messages``.

        Raises CircuitOpenError when the breaker is open and CompletionError
        once every retry attempt has failed.
        """
        self.breaker.before_call()

        retryer = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, min=0, max=self.backoff_max),
            retry=retry_if_exception_type(Exception),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        )
        try:
            reply = retryer(self._call_once, messages)
        except Exception as e:
            self.breaker.record_failure()
            log.error("Completion call failed after %d attempts: %s", self.max_attempts, e)
            raise CompletionError(str(e)) from e

        self.breaker.record_success()
        return reply
