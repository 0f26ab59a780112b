from __future__ import annotations

import datetime
from enum import Enum
from typing import Iterable

from loguru import logger

from algorithms import WeightConverter
from dirty_tracker import DirtyEditTracker
from exceptions import WorkoutDataError
from models import ExerciseView, Provenance, SetStatus, SetView, WeightUnit, WorkoutView
from schemas import Prescription, SessionRecord

DEFAULT_SETS_COUNT = 3


class DuplicatePolicy(str, Enum):
    """How to pick between several completed records for the same set."""

    LAST_SEEN = "last_seen"
    MOST_RECENT = "most_recent"


def parse_timestamp(value: str | None) -> datetime.datetime | None:
    """Parse an ISO-ish timestamp; ``None`` when missing or malformed."""
    if not value:
        return None
    text = value.strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        return None


def _sort_key(record: SessionRecord) -> tuple[float, int]:
    created = parse_timestamp(record.created_at)
    stamp = 0.0
    if created is not None:
        if created.tzinfo is None:
            created = created.replace(tzinfo=datetime.timezone.utc)
        stamp = created.timestamp()
    return stamp, record.session_id or 0


class SetMergeEngine:
    """Merges a prescription with historical session records into set views."""

    def __init__(
        self,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_SEEN,
        default_sets_count: int = DEFAULT_SETS_COUNT,
    ) -> None:
        self.duplicate_policy = DuplicatePolicy(duplicate_policy)
        self.default_sets_count = default_sets_count

    def _sets_count(self, prescription: Prescription) -> int:
        count = prescription.sets_count
        if count is None or count <= 0:
            return self.default_sets_count
        return count

    def _lookup(self, records: Iterable[SessionRecord]) -> dict[int, SessionRecord]:
        by_set: dict[int, SessionRecord] = {}
        for record in records:
            if not record.is_completed:
                continue
            existing = by_set.get(record.set_number)
            if (
                existing is not None
                and self.duplicate_policy is DuplicatePolicy.MOST_RECENT
                and _sort_key(record) < _sort_key(existing)
            ):
                continue
            by_set[record.set_number] = record
        return by_set

    @staticmethod
    def _from_session(set_number: int, record: SessionRecord) -> SetView:
        weight = record.weight
        return SetView(
            set_number=set_number,
            reps=record.reps,
            weight_kg=WeightConverter.normalize(
                weight.value if weight else None, weight.unit if weight else "kg"
            ),
            weight_display_unit=WeightUnit.parse(weight.unit if weight else None),
            duration_seconds=record.elapsed_seconds,
            status=SetStatus.DONE,
            provenance=Provenance.FROM_SESSION,
            completed_at=parse_timestamp(record.created_at),
        )

    @staticmethod
    def _from_prescription(set_number: int, prescription: Prescription) -> SetView:
        weight = prescription.default_weight
        weight_kg = None
        if weight is not None:
            weight_kg = WeightConverter.normalize(weight.value, weight.unit)
        return SetView(
            set_number=set_number,
            reps=prescription.default_reps or 0,
            weight_kg=weight_kg or 0.0,
            weight_display_unit=WeightUnit.parse(weight.unit if weight else None),
            duration_seconds=prescription.default_duration_seconds,
            status=SetStatus.PENDING,
            provenance=Provenance.FROM_PRESCRIPTION,
        )

    def merge_sets(
        self, prescription: Prescription, records: Iterable[SessionRecord]
    ) -> list[SetView]:
        """Return ``setsCount`` set views numbered from 1."""
        by_set = self._lookup(records)
        sets: list[SetView] = []
        for set_number in range(1, self._sets_count(prescription) + 1):
            record = by_set.get(set_number)
            if record is not None:
                sets.append(self._from_session(set_number, record))
            else:
                sets.append(self._from_prescription(set_number, prescription))
        return sets

    def build_exercise(
        self, prescription: Prescription, records: Iterable[SessionRecord] = ()
    ) -> ExerciseView:
        sets = self.merge_sets(prescription, records)
        exercise = ExerciseView(
            schedule_id=prescription.schedule_id,
            exercise_id=prescription.exercise_id,
            name=prescription.name,
            category=prescription.category,
            type=prescription.type,
            sets=sets,
        )
        logger.debug(
            f"Merged {len(sets)} sets for {exercise.name} ({exercise.status.value})"
        )
        return exercise

    def build_workout(
        self,
        entries: Iterable[tuple[Prescription, Iterable[SessionRecord]]],
        day: str | None = None,
        category: str | None = None,
        day_number: int | None = None,
    ) -> WorkoutView:
        exercises = [self.build_exercise(p, records) for p, records in entries]
        if category is None and exercises:
            category = exercises[0].category
        return WorkoutView(
            day=day, category=category, exercises=exercises, day_number=day_number
        )

    def apply_sessions(
        self, exercise: ExerciseView, records: Iterable[SessionRecord]
    ) -> int:
        """Overlay freshly fetched records onto ``exercise``.

        Sets holding unsaved local work are left alone. Returns the number of
        sets that changed.
        """
        by_set = self._lookup(records)
        updated = 0
        for index, current in enumerate(exercise.sets):
            record = by_set.get(current.set_number)
            if record is None or DirtyEditTracker.is_save_eligible(current):
                continue
            exercise.sets[index] = self._from_session(current.set_number, record)
            updated += 1
        return updated

    @staticmethod
    def performed_sets(workout: WorkoutView) -> list[dict]:
        """Flatten every done set of ``workout`` into export rows."""
        rows: list[dict] = []
        for exercise in workout.exercises:
            for s in exercise.sets:
                if s.status is not SetStatus.DONE:
                    continue
                completed = s.completed_at or datetime.datetime.now(datetime.timezone.utc)
                rows.append(
                    {
                        "exerciseId": exercise.schedule_id,
                        "setNumber": s.set_number,
                        "reps": s.reps,
                        "weight": s.weight_kg,
                        "weightUnit": WeightUnit.KG.value,
                        "duration": s.duration_seconds,
                        "completedAt": completed.isoformat(),
                    }
                )
        return rows

    @staticmethod
    def validate_workout(workout: WorkoutView | None) -> None:
        if workout is None:
            raise WorkoutDataError("Workout data is required")
        if not workout.exercises:
            raise WorkoutDataError("Workout must have at least one exercise")
        for index, exercise in enumerate(workout.exercises):
            if exercise.schedule_id is None:
                raise WorkoutDataError(f"Exercise {index} missing scheduleId")
            if not exercise.sets:
                raise WorkoutDataError(f"Exercise {index} must have at least one set")
