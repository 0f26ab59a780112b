from __future__ import annotations

from typing import TYPE_CHECKING

from models import Provenance, SetStatus, SetView

if TYPE_CHECKING:
    from models import ExerciseView, WorkoutView

LEAVE_WARNING = (
    "Your latest workout updates are still syncing. Leaving now may discard them."
)


class DirtyEditTracker:
    """Tracks which sets hold local work the server has not confirmed."""

    @staticmethod
    def is_save_eligible(set_view: SetView) -> bool:
        newly_done = (
            set_view.status is SetStatus.DONE
            and set_view.provenance is not Provenance.FROM_SESSION
        )
        return newly_done or set_view.is_modified

    @classmethod
    def eligible_sets(cls, exercise: "ExerciseView") -> list[SetView]:
        return [s for s in exercise.sets if cls.is_save_eligible(s)]

    @classmethod
    def dirty_exercises(cls, workout: "WorkoutView") -> list["ExerciseView"]:
        return [ex for ex in workout.exercises if cls.eligible_sets(ex)]

    @classmethod
    def is_dirty(cls, workout: "WorkoutView") -> bool:
        return any(
            cls.is_save_eligible(s) for ex in workout.exercises for s in ex.sets
        )

    @classmethod
    def can_save(cls, workout: "WorkoutView") -> bool:
        return cls.is_dirty(workout) and not workout.saving


class LeaveGuard:
    """Both leave prompts fire exactly when the workout is dirty."""

    def __init__(self, workout: "WorkoutView", message: str = LEAVE_WARNING) -> None:
        self.workout = workout
        self.message = message

    def should_confirm_navigation(self) -> bool:
        return DirtyEditTracker.is_dirty(self.workout)

    def before_unload(self) -> str | None:
        """Return the native warning text, or ``None`` to let the tab close."""
        if not DirtyEditTracker.is_dirty(self.workout):
            return None
        return self.message
