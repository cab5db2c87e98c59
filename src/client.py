"""
HTTP client for the Gym Tracker API, used by the Streamlit dashboard.

Every method returns the decoded JSON body.  Non-2xx answers raise ApiError
carrying the server's {error, details} message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

import config

log = logging.getLogger("client")


class ApiError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        super().__init__(f"{message} ({details})" if details else message)
        self.status_code = status_code
        self.message = message
        self.details = details


class GymTrackerClient:
    def __init__(self, base_url: Optional[str] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = config.API_TIMEOUT_SEC):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.error("%s %s failed: %s", method, path, e)
            raise ApiError(0, "Could not reach the Gym Tracker API", str(e)) from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not resp.ok:
            body = body if isinstance(body, dict) else {}
            raise ApiError(
                resp.status_code,
                body.get("error") or f"HTTP {resp.status_code}",
                body.get("details"),
            )
        return body

    # AI parsing
    def parse_workout_transcript(self, transcript: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/api/ai/parse", json={"transcript": transcript, "userId": user_id})

    # Workouts
    def save_workout(self, workout: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/workouts", json=workout)

    def get_workouts(self, user_id: str, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        return self._request("GET", "/api/workouts",
                             params={"userId": user_id, "limit": limit, "offset": offset})

    def get_progress_data(self, exercise_id: int, user_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/workouts/progress/{exercise_id}", params={"userId": user_id})

    # Exercises
    def get_exercises(self) -> Dict[str, Any]:
        return self._request("GET", "/api/exercises")

    # Workout split
    def save_workout_split(self, user_id: str, splits: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("POST", "/api/workout-split", json={"userId": user_id, "splits": splits})

    def get_workout_split(self, user_id: str) -> Dict[str, Any]:
        return self._request("GET", "/api/workout-split", params={"userId": user_id})

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")


@dataclass(frozen=True)
class SessionContext:
    """Who is logging, and through which client; handed to every view."""

    user_id: str
    client: GymTrackerClient
