from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from exceptions import ReplaceRequestError, SaveRequestError, WorkoutFetchError


class ScheduleClient:
    """Async REST client for the schedule and session endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, headers=self._headers(), transport=self.transport
        )

    async def fetch_schedule(self) -> list[dict]:
        try:
            async with self._client() as client:
                resp = await client.get("/schedule/v2")
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Fetching schedule failed: {e}")
            raise WorkoutFetchError("Could not load the latest workout.") from e
        schedule = payload.get("schedule") if isinstance(payload, dict) else None
        return schedule if isinstance(schedule, list) else []

    async def fetch_workout(self, schedule_id: int) -> dict:
        try:
            async with self._client() as client:
                resp = await client.get(f"/workouts/{schedule_id}")
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Fetching workout {schedule_id} failed: {e}")
            raise WorkoutFetchError("Could not load the latest workout.") from e

    async def save_session(self, payload: dict) -> Any:
        body = {"workoutSessions": [payload]}
        async with self._client() as client:
            try:
                resp = await client.post("/sessions/save", json=body)
            except httpx.HTTPError as e:
                raise SaveRequestError(f"Save failed: {e}") from e
            if resp.is_error:
                raise SaveRequestError(
                    f"Save failed: {resp.status_code} {resp.text}",
                    status_code=resp.status_code,
                    body=resp.text,
                )
            try:
                return resp.json()
            except ValueError:
                return None

    async def replace_exercise(self, schedule_id: int, workout_id: int) -> dict:
        """Swap the exercise behind a scheduled entry; returns the updated workout."""
        async with self._client() as client:
            try:
                resp = await client.patch(
                    f"/schedule/workout/replace/{schedule_id}",
                    json={"workout_id": workout_id},
                )
            except httpx.HTTPError as e:
                raise ReplaceRequestError(f"Replace failed: {e}") from e
            try:
                payload = resp.json()
            except ValueError:
                payload = None
        if resp.is_error:
            message = _error_message(payload) or resp.text or "Could not replace the exercise."
            raise ReplaceRequestError(message, status_code=resp.status_code, body=resp.text)
        if not isinstance(payload, dict):
            return {}
        data = payload.get("data")
        if isinstance(data, dict):
            workout = data.get("workout")
            return workout if isinstance(workout, dict) else data
        workout = payload.get("workout")
        return workout if isinstance(workout, dict) else {}


def _error_message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            if isinstance(payload.get(key), str):
                return payload[key]
    if isinstance(payload, str):
        return payload
    return None
