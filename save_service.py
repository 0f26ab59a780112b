from __future__ import annotations

import asyncio
import datetime
import math
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger

from dirty_tracker import DirtyEditTracker
from exceptions import SetValidationError
from models import ExerciseView, Provenance, SetStatus, SetView, WeightUnit, WorkoutView
from notifier import LoggingNotifier, Notifier
from schemas import COMPLETED

SAVE_FAILED = "Failed to save set. Please check your connection and try again."
INVALID_VALUES = "Please enter valid numbers for weight and reps before saving."
SAVED = "Workout saved."


class SessionStore(Protocol):
    """Remote store accepting one exercise's performed sets per call."""

    async def save_session(self, payload: dict) -> Any: ...


@dataclass
class ExerciseSaveOutcome:
    schedule_id: int
    set_numbers: list[int]
    error: Exception | None = None
    promoted: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SaveResult:
    outcomes: list[ExerciseSaveOutcome] = field(default_factory=list)
    skipped: bool = False

    @property
    def success(self) -> bool:
        return not self.skipped and all(o.ok for o in self.outcomes)

    @property
    def failed(self) -> list[ExerciseSaveOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> list[ExerciseSaveOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def promoted_count(self) -> int:
        return sum(len(o.promoted) for o in self.outcomes)


def build_payload(exercise: ExerciseView, sets: list[SetView]) -> dict:
    """Build the ``/sessions/save`` body for one exercise."""
    performed = []
    for s in sets:
        if not _finite(s.reps) or not _finite(s.weight_kg):
            raise SetValidationError(
                f"set {s.set_number} of {exercise.name} needs numeric reps and weight"
            )
        entry = {
            "setNumber": s.set_number,
            "reps": int(s.reps),
            "weight": float(s.weight_kg),
            "weightUnit": WeightUnit.KG.value,
            "status": _record_status(s),
        }
        if s.status is SetStatus.DONE and _finite(s.duration_seconds):
            entry["elapsedTime"] = float(s.duration_seconds)
        performed.append(entry)
    return {
        "scheduleId": exercise.schedule_id,
        "status": (
            COMPLETED
            if all(s.status is SetStatus.DONE for s in sets)
            else SetStatus.IN_PROGRESS.value
        ),
        "performedSets": performed,
    }


def _record_status(set_view: SetView) -> str:
    """Only done sets are recorded as completed; edits to open sets keep their status."""
    if set_view.status is SetStatus.DONE:
        return COMPLETED
    return set_view.status.value


def _finite(value) -> bool:
    return value is not None and math.isfinite(value)


class BatchedSaveCoordinator:
    """Persist save-eligible sets with one concurrent request per exercise.

    Results are tracked per exercise: an exercise whose request succeeds has
    its sets promoted even when another exercise fails. With ``atomic=True``
    any failure leaves every set untouched.
    """

    def __init__(
        self,
        store: SessionStore,
        notifier: Notifier | None = None,
        atomic: bool = False,
    ) -> None:
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.atomic = atomic

    async def _save_exercise(
        self, exercise: ExerciseView, snapshot: list[tuple[SetView, int]]
    ) -> ExerciseSaveOutcome:
        outcome = ExerciseSaveOutcome(
            schedule_id=exercise.schedule_id,
            set_numbers=[s.set_number for s, _rev in snapshot],
        )
        try:
            payload = build_payload(exercise, [s for s, _rev in snapshot])
        except SetValidationError as e:
            logger.warning(f"Not saving exercise {exercise.schedule_id}: {e}")
            outcome.error = e
            return outcome
        try:
            await self.store.save_session(payload)
        except Exception as e:
            logger.error(f"Saving exercise {exercise.schedule_id} failed: {e}")
            outcome.error = e
        return outcome

    @staticmethod
    def _promote(
        snapshot: list[tuple[SetView, int]], now: datetime.datetime
    ) -> list[int]:
        promoted = []
        for s, revision in snapshot:
            # edited again while the request was in flight
            if s.revision != revision:
                continue
            s.is_modified = False
            s.provenance = Provenance.FROM_SESSION
            s.last_saved_at = now
            s.save_error = False
            promoted.append(s.set_number)
        return promoted

    async def save(self, workout: WorkoutView) -> SaveResult:
        if workout.saving:
            logger.warning("Save already in progress; ignoring request")
            return SaveResult(skipped=True)
        batches = [
            (ex, [(s, s.revision) for s in DirtyEditTracker.eligible_sets(ex)])
            for ex in DirtyEditTracker.dirty_exercises(workout)
        ]
        if not batches:
            logger.debug("Nothing to save")
            return SaveResult()

        workout.saving = True
        try:
            outcomes = await asyncio.gather(
                *(self._save_exercise(ex, snapshot) for ex, snapshot in batches)
            )
        finally:
            workout.saving = False

        result = SaveResult(outcomes=list(outcomes))
        now = datetime.datetime.now(datetime.timezone.utc)
        if not (self.atomic and result.failed):
            for outcome, (_ex, snapshot) in zip(result.outcomes, batches):
                if outcome.ok:
                    outcome.promoted = self._promote(snapshot, now)
                elif not self.atomic:
                    for s, _rev in snapshot:
                        s.save_error = True

        if result.failed:
            invalid = any(isinstance(o.error, SetValidationError) for o in result.failed)
            self.notifier.show("danger", INVALID_VALUES if invalid else SAVE_FAILED)
        else:
            self.notifier.show("success", SAVED)
        logger.info(
            f"Saved {len(result.succeeded)}/{len(result.outcomes)} exercises, "
            f"promoted {result.promoted_count} sets"
        )
        return result
