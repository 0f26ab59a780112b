from __future__ import annotations

from dataclasses import asdict, dataclass

from algorithms import MathTools
from models import ExerciseView, SetStatus, WorkoutView


@dataclass(frozen=True)
class ProgressSummary:
    total_sets: int
    completed_sets: int
    in_progress_sets: int
    percentage: int
    overall_status: str

    def to_dict(self) -> dict:
        return asdict(self)


class StatisticsService:
    """Compute workout progress; recomputed from the sets on every call."""

    @staticmethod
    def _summarize(sets: list) -> ProgressSummary:
        total = len(sets)
        completed = sum(1 for s in sets if s.status is SetStatus.DONE)
        in_progress = sum(1 for s in sets if s.status is SetStatus.IN_PROGRESS)
        if total > 0 and completed == total:
            overall = "completed"
        elif completed > 0 or in_progress > 0:
            overall = "in_progress"
        else:
            overall = "not_started"
        return ProgressSummary(
            total_sets=total,
            completed_sets=completed,
            in_progress_sets=in_progress,
            percentage=MathTools.percentage(completed, total),
            overall_status=overall,
        )

    @classmethod
    def progress(cls, workout: WorkoutView) -> ProgressSummary:
        return cls._summarize([s for ex in workout.exercises for s in ex.sets])

    @classmethod
    def exercise_progress(cls, exercise: ExerciseView) -> ProgressSummary:
        return cls._summarize(list(exercise.sets))

    @staticmethod
    def completed_volume(workout: WorkoutView) -> float:
        """Sum of reps times kg over done sets, ignoring missing values."""
        volume = 0.0
        for ex in workout.exercises:
            for s in ex.sets:
                if s.status is SetStatus.DONE and s.reps and s.weight_kg:
                    volume += s.reps * s.weight_kg
        return MathTools.round_half_up(volume, 2)
