from __future__ import annotations

import datetime
from typing import Any, Iterable

from loguru import logger

from algorithms import WeightConverter
from dirty_tracker import DirtyEditTracker, LeaveGuard
from exceptions import WorkoutError
from localization import translator
from merge_service import SetMergeEngine
from models import SetView, WorkoutView
from rest_timer import RestTimer
from save_service import BatchedSaveCoordinator, SaveResult
from schemas import SessionRecord
from stats_service import ProgressSummary, StatisticsService
from workout_loader import WorkoutInitializer
import set_state

REPLACE_UNKNOWN_EXERCISE = "Could not identify the exercise to replace."
REPLACE_UNKNOWN_ALTERNATIVE = "Could not identify the selected alternative."
REPLACE_FAILED = "Could not replace the exercise."
REPLACED = "Exercise replaced."
REPLACED_WITH = 'Exercise replaced with "{name}".'


class WorkoutSession:
    """The active view session a UI collaborator drives.

    Owns one ``WorkoutView``; discarding the session discards unsaved edits.
    """

    def __init__(
        self,
        workout: WorkoutView,
        coordinator: BatchedSaveCoordinator,
        use_metric: bool = True,
        rest_timer: RestTimer | None = None,
        engine: SetMergeEngine | None = None,
    ) -> None:
        self.workout = workout
        self.coordinator = coordinator
        self.use_metric = use_metric
        self.rest_timer = rest_timer or RestTimer()
        self.engine = engine or SetMergeEngine()
        self.leave_guard = LeaveGuard(workout)

    @classmethod
    def from_source(
        cls,
        source: Any,
        coordinator: BatchedSaveCoordinator,
        initializer: WorkoutInitializer | None = None,
        **kwargs,
    ) -> "WorkoutSession":
        initializer = initializer or WorkoutInitializer()
        return cls(
            initializer.from_source(source),
            coordinator,
            engine=initializer.engine,
            **kwargs,
        )

    def find_set(self, schedule_id: int, set_number: int) -> SetView | None:
        exercise = self.workout.find_exercise(schedule_id)
        if exercise is None:
            return None
        return exercise.find_set(set_number)

    def start_set(
        self, schedule_id: int, set_number: int, now: datetime.datetime | None = None
    ) -> bool:
        set_view = self.find_set(schedule_id, set_number)
        if set_view is None:
            return False
        return set_state.start(set_view, now)

    def complete_set(
        self, schedule_id: int, set_number: int, now: datetime.datetime | None = None
    ) -> bool:
        set_view = self.find_set(schedule_id, set_number)
        if set_view is None or not set_state.complete(set_view, now):
            return False
        self.rest_timer.start(schedule_id, set_number)
        return True

    def edit_set(self, schedule_id: int, set_number: int, field: str, raw: Any) -> bool:
        set_view = self.find_set(schedule_id, set_number)
        if set_view is None:
            return False
        return set_state.edit_cell(set_view, field, raw, self.use_metric)

    def input_default(self, set_view: SetView, field: str) -> float:
        """Value an edit cell starts from, in the display unit."""
        if field == "weight":
            weight = set_view.weight_kg or 0
            return weight if self.use_metric else WeightConverter.kg_to_lbs_display(weight)
        value = getattr(set_view, field, None)
        return value or 0

    def rows(self, schedule_id: int) -> list[dict]:
        exercise = self.workout.find_exercise(schedule_id)
        if exercise is None:
            return []
        return [
            {
                "setNumber": s.set_number,
                "reps": s.reps if s.reps is not None else "-",
                "weight": WeightConverter.display(s.weight_kg, self.use_metric),
                "status": s.status.value,
                "editable": set_state.is_editable(s.status),
                "unsaved": DirtyEditTracker.is_save_eligible(s),
                "saveError": s.save_error,
            }
            for s in exercise.sets
        ]

    def refresh(self, records_by_schedule: dict[int, Iterable[SessionRecord]]) -> int:
        updated = 0
        for schedule_id, records in records_by_schedule.items():
            exercise = self.workout.find_exercise(schedule_id)
            if exercise is not None:
                updated += self.engine.apply_sessions(exercise, records)
        logger.debug(f"Refreshed {updated} sets from session history")
        return updated

    @property
    def progress(self) -> ProgressSummary:
        return StatisticsService.progress(self.workout)

    @property
    def dirty(self) -> bool:
        return self.workout.dirty

    @property
    def saving(self) -> bool:
        return self.workout.saving

    @property
    def can_save(self) -> bool:
        return DirtyEditTracker.can_save(self.workout)

    async def save(self) -> SaveResult:
        return await self.coordinator.save(self.workout)

    async def replace_exercise(self, schedule_id: int, alternative: dict, client) -> bool:
        """Swap an exercise for ``alternative`` on the server, then in place.

        The exercise keeps its sets; only its identity fields change.
        """
        notifier = self.coordinator.notifier
        exercise = self.workout.find_exercise(schedule_id)
        if exercise is None:
            notifier.show("danger", REPLACE_UNKNOWN_EXERCISE)
            return False
        replacement_id = _first_present(alternative, "workout_id", "workoutId", "id")
        if replacement_id is None:
            notifier.show("danger", REPLACE_UNKNOWN_ALTERNATIVE)
            return False
        try:
            updated = await client.replace_exercise(schedule_id, replacement_id)
        except WorkoutError as e:
            logger.error(f"Replacing exercise {schedule_id} failed: {e}")
            notifier.show("danger", str(e) or REPLACE_FAILED)
            return False

        exercise.exercise_id = _first_present(updated, "workout_id", "workoutId", "id")
        if exercise.exercise_id is None:
            exercise.exercise_id = replacement_id
        exercise.name = updated.get("name") or alternative.get("name") or exercise.name
        exercise.category = updated.get("category") or alternative.get("category") or exercise.category
        exercise.type = updated.get("type") or alternative.get("type") or exercise.type
        if alternative.get("name"):
            message = translator.gettext(REPLACED_WITH).format(name=alternative["name"])
        else:
            message = REPLACED
        notifier.show("success", message)
        return True


def _first_present(data: dict, *keys: str):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None
