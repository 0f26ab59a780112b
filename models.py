from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum


class SetStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class Provenance(str, Enum):
    """Origin of a set's current values."""

    FROM_PRESCRIPTION = "fromPrescription"
    FROM_SESSION = "fromSession"
    LOCALLY_EDITED = "locallyEdited"


class WeightUnit(str, Enum):
    KG = "kg"
    LB = "lb"

    @classmethod
    def parse(cls, unit: str | None) -> "WeightUnit":
        if unit and unit.strip().lower() in {"lb", "lbs", "pound", "pounds"}:
            return cls.LB
        return cls.KG


@dataclass
class SetView:
    """Per-set state merged from the prescription and session history."""

    set_number: int
    reps: int | None
    weight_kg: float | None
    weight_display_unit: WeightUnit = WeightUnit.KG
    duration_seconds: float | None = None
    status: SetStatus = SetStatus.PENDING
    provenance: Provenance = Provenance.FROM_PRESCRIPTION
    is_modified: bool = False
    started_at: datetime.datetime | None = None
    completed_at: datetime.datetime | None = None
    last_saved_at: datetime.datetime | None = None
    save_error: bool = False
    revision: int = 0

    def touch(self) -> None:
        self.revision += 1

    def to_dict(self) -> dict:
        return {
            "setNumber": self.set_number,
            "reps": self.reps,
            "weightKg": self.weight_kg,
            "weightDisplayUnit": self.weight_display_unit.value,
            "durationSeconds": self.duration_seconds,
            "status": self.status.value,
            "provenance": self.provenance.value,
            "isModified": self.is_modified,
            "startedAt": _iso(self.started_at),
            "completedAt": _iso(self.completed_at),
            "lastSavedAt": _iso(self.last_saved_at),
            "saveError": self.save_error,
        }


@dataclass
class ExerciseView:
    schedule_id: int
    exercise_id: int | None
    name: str
    category: str | None = None
    type: str | None = None
    sets: list[SetView] = field(default_factory=list)

    @property
    def status(self) -> SetStatus:
        """Derived from the sets; never stored."""
        done = sum(1 for s in self.sets if s.status is SetStatus.DONE)
        if self.sets and done == len(self.sets):
            return SetStatus.DONE
        if done > 0 or any(s.status is SetStatus.IN_PROGRESS for s in self.sets):
            return SetStatus.IN_PROGRESS
        return SetStatus.PENDING

    def find_set(self, set_number: int) -> SetView | None:
        for s in self.sets:
            if s.set_number == set_number:
                return s
        return None

    def to_dict(self) -> dict:
        return {
            "scheduleId": self.schedule_id,
            "exerciseId": self.exercise_id,
            "name": self.name,
            "category": self.category,
            "type": self.type,
            "status": self.status.value,
            "sets": [s.to_dict() for s in self.sets],
        }


@dataclass
class WorkoutView:
    day: str | None
    category: str | None
    exercises: list[ExerciseView] = field(default_factory=list)
    saving: bool = False
    day_number: int | None = None
    is_stub: bool = False

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises)

    @property
    def completed_sets(self) -> int:
        return sum(
            1 for ex in self.exercises for s in ex.sets if s.status is SetStatus.DONE
        )

    @property
    def dirty(self) -> bool:
        from dirty_tracker import DirtyEditTracker

        return DirtyEditTracker.is_dirty(self)

    def find_exercise(self, schedule_id: int) -> ExerciseView | None:
        for ex in self.exercises:
            if ex.schedule_id == schedule_id:
                return ex
        return None

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "dayNumber": self.day_number,
            "category": self.category,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "totalSets": self.total_sets,
            "completedSets": self.completed_sets,
            "dirty": self.dirty,
            "saving": self.saving,
        }


def _iso(value: datetime.datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
