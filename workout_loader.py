"""Builds a ``WorkoutView`` from whatever data source opened the screen.

Three input shapes are understood: navigation state carrying the day
payload under ``originalApiData`` (directly or inside ``workoutData``), a day
payload with a ``workouts`` list, and a single workout (or list of workouts)
as returned by a fetch-by-id. When none of them yields a usable exercise a
fixed stub workout is shown instead of failing the screen.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import ValidationError

from exceptions import WorkoutDataError, WorkoutFetchError
from merge_service import SetMergeEngine
from models import WorkoutView
from schemas import Prescription, SessionRecord

STUB_WORKOUT = {
    "scheduleId": 234,
    "workout_id": 45,
    "name": "Bench Press",
    "category": "Chest",
    "type": "Compound",
    "sets": 4,
    "reps": 8,
    "weight": {"value": 185, "unit": "lbs"},
}


def _parse_records(raw: Any) -> list[SessionRecord]:
    records = []
    for item in raw if isinstance(raw, list) else []:
        try:
            records.append(SessionRecord.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping unreadable session record: {e.error_count()} errors")
    return records


def _day_payload(source: Any) -> dict | None:
    if not isinstance(source, dict):
        return None
    workout_data = source.get("workoutData")
    nested = workout_data.get("originalApiData") if isinstance(workout_data, dict) else None
    for candidate in (source.get("originalApiData"), nested):
        if isinstance(candidate, dict):
            return candidate
    if isinstance(source.get("workouts"), list):
        return source
    return None


class WorkoutInitializer:
    """Normalizes inbound data through the merge engine."""

    def __init__(self, engine: SetMergeEngine | None = None) -> None:
        self.engine = engine or SetMergeEngine()

    def _entries(self, workouts: list) -> list[tuple[Prescription, list[SessionRecord]]]:
        entries = []
        for raw in workouts:
            if not isinstance(raw, dict):
                continue
            try:
                prescription = Prescription.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping unusable workout {raw.get('name')!r}: {e.error_count()} errors")
                continue
            entries.append((prescription, _parse_records(raw.get("sessions"))))
        return entries

    def from_day(self, day: dict) -> WorkoutView:
        """Build from a day payload; raises ``WorkoutDataError`` when unusable."""
        workouts = day.get("workouts")
        if not isinstance(workouts, list):
            raise WorkoutDataError("Invalid workout data: missing workouts array.")
        entries = self._entries(workouts)
        workout = self.engine.build_workout(
            entries,
            day=day.get("day_name") or day.get("day"),
            category=day.get("category"),
            day_number=day.get("day_number"),
        )
        self.engine.validate_workout(workout)
        return workout

    def from_source(self, source: Any) -> WorkoutView:
        """Build from any supported shape, falling back to the stub workout."""
        day = _day_payload(source)
        if day is None:
            if isinstance(source, list):
                day = {"workouts": source}
            elif isinstance(source, dict) and ("scheduleId" in source or "schedule_id" in source):
                day = {"workouts": [source], "category": source.get("category")}
        if day is not None:
            try:
                return self.from_day(day)
            except WorkoutDataError as e:
                logger.warning(f"Falling back to stub workout: {e}")
        else:
            logger.warning("No recognizable workout data; using stub workout")
        return self.stub()

    def stub(self) -> WorkoutView:
        workout = self.engine.build_workout(
            [(Prescription.model_validate(STUB_WORKOUT), [])],
            day="Workout",
            category=STUB_WORKOUT["category"],
        )
        workout.is_stub = True
        return workout

    @staticmethod
    def resolve_day(
        schedule: list[dict],
        target_day: int | None = None,
        fallback: dict | None = None,
    ) -> dict:
        """Pick the day to show from a fetched schedule."""
        days = [d for d in schedule if isinstance(d, dict)]
        resolved = None
        if target_day is not None:
            resolved = next((d for d in days if _as_int(d.get("day_number")) == target_day), None)
        if resolved is None and fallback:
            resolved = next(
                (
                    d
                    for d in days
                    if (
                        fallback.get("day_number") is not None
                        and _as_int(d.get("day_number")) == _as_int(fallback.get("day_number"))
                    )
                    or (fallback.get("day_name") and d.get("day_name") == fallback.get("day_name"))
                ),
                None,
            )
        if resolved is None:
            resolved = next(
                (d for d in days if isinstance(d.get("workouts"), list) and d["workouts"]),
                None,
            )
        if resolved is None:
            raise WorkoutFetchError("The requested workout was not found.")
        if not isinstance(resolved.get("workouts"), list):
            raise WorkoutFetchError("Invalid workout data: missing workouts array.")
        return resolved

    async def load_latest(
        self,
        client,
        target_day: int | None = None,
        fallback: dict | None = None,
    ) -> WorkoutView:
        """Fetch the schedule and build the requested day.

        Errors surface as ``WorkoutFetchError`` so the caller can show a
        blocking error with a retry action.
        """
        schedule = await client.fetch_schedule()
        day = self.resolve_day(schedule, target_day, fallback)
        try:
            return self.from_day(day)
        except WorkoutDataError as e:
            raise WorkoutFetchError(str(e)) from e

    async def load_by_id(self, client, schedule_id: int) -> WorkoutView:
        payload = await client.fetch_workout(schedule_id)
        return self.from_source(payload)


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
