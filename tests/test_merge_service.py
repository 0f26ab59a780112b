import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from exceptions import WorkoutDataError
from merge_service import DuplicatePolicy, SetMergeEngine, parse_timestamp
from models import Provenance, SetStatus, WeightUnit, WorkoutView
from schemas import Prescription, SessionRecord


def prescription(**overrides) -> Prescription:
    data = {
        "scheduleId": 10,
        "workout_id": 45,
        "name": "Squat",
        "category": "Legs",
        "sets": 3,
        "reps": 10,
        "weight": {"value": 60, "unit": "kg"},
    }
    data.update(overrides)
    return Prescription.model_validate(data)


def record(**fields) -> SessionRecord:
    data = dict(fields)
    if not {"set_status", "status", "state"} & data.keys():
        data["set_status"] = "completed"
    return SessionRecord.model_validate(data)


class MergeSetsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = SetMergeEngine()

    def test_no_records_gives_pending_prescription_sets(self) -> None:
        for count in (1, 3, 7):
            sets = self.engine.merge_sets(prescription(sets=count), [])
            self.assertEqual([s.set_number for s in sets], list(range(1, count + 1)))
            for s in sets:
                self.assertIs(s.status, SetStatus.PENDING)
                self.assertIs(s.provenance, Provenance.FROM_PRESCRIPTION)
                self.assertEqual(s.reps, 10)
                self.assertEqual(s.weight_kg, 60)
                self.assertFalse(s.is_modified)
                self.assertIsNone(s.completed_at)

    def test_end_to_end_example(self) -> None:
        rec = record(set_number=1, reps=8, weight={"value": 62.5, "unit": "kg"})
        sets = self.engine.merge_sets(prescription(), [rec])
        self.assertEqual(
            [(s.set_number, s.status, s.reps, s.weight_kg) for s in sets],
            [
                (1, SetStatus.DONE, 8, 62.5),
                (2, SetStatus.PENDING, 10, 60),
                (3, SetStatus.PENDING, 10, 60),
            ],
        )
        self.assertIs(sets[0].provenance, Provenance.FROM_SESSION)
        self.assertFalse(sets[0].is_modified)

    def test_ignored_records(self) -> None:
        records = [
            record(set_number=1, reps=99, set_status="started"),
            record(set_number=None, reps=99),
            record(set_number=0, reps=99),
            record(set_number="abc", reps=99),
            record(set_number=2, reps=99, set_status="skipped"),
        ]
        merged = self.engine.merge_sets(prescription(), records)
        baseline = self.engine.merge_sets(prescription(), [])
        self.assertEqual(merged, baseline)

    def test_status_synonyms_count_as_completed(self) -> None:
        records = [
            record(set_number=1, set_status="DONE", reps=5),
            record(set_number=2, status=1, reps=5),
            record(set_number=3, state="Complete", reps=5),
        ]
        sets = self.engine.merge_sets(prescription(), records)
        self.assertTrue(all(s.status is SetStatus.DONE for s in sets))

    def test_merge_is_idempotent(self) -> None:
        records = [record(set_number=2, reps=8, weight={"value": 135, "unit": "lbs"})]
        first = self.engine.merge_sets(prescription(), records)
        second = self.engine.merge_sets(prescription(), records)
        self.assertEqual(first, second)
        self.assertIsNot(first[1], second[1])

    def test_duplicates_last_seen_by_order(self) -> None:
        records = [
            record(set_number=1, reps=5, created_at="2025-07-31T10:40:00Z"),
            record(set_number=1, reps=6, created_at="2025-07-31T10:30:00Z"),
        ]
        sets = self.engine.merge_sets(prescription(), records)
        self.assertEqual(sets[0].reps, 6)

    def test_duplicates_not_overridden_by_non_completed(self) -> None:
        records = [
            record(set_number=1, reps=5),
            record(set_number=1, reps=6, set_status="started"),
        ]
        sets = self.engine.merge_sets(prescription(), records)
        self.assertEqual(sets[0].reps, 5)

    def test_duplicates_most_recent_policy(self) -> None:
        engine = SetMergeEngine(DuplicatePolicy.MOST_RECENT)
        records = [
            record(set_number=1, reps=5, created_at="2025-07-31 10:40:00"),
            record(set_number=1, reps=6, created_at="2025-07-31 10:30:00"),
            record(set_number=2, reps=7, created_at="2025-07-31T10:30:00Z", session_id=1),
            record(set_number=2, reps=9, created_at="2025-07-31T10:30:00Z", session_id=3),
            record(set_number=2, reps=8, created_at="2025-07-31T10:30:00Z", session_id=2),
        ]
        sets = engine.merge_sets(prescription(), records)
        self.assertEqual(sets[0].reps, 5)
        self.assertEqual(sets[1].reps, 9)

    def test_sets_count_fallback(self) -> None:
        for bad in (None, 0, -2):
            sets = self.engine.merge_sets(prescription(sets=bad), [])
            self.assertEqual(len(sets), 3)
        self.assertEqual(len(SetMergeEngine(default_sets_count=5).merge_sets(prescription(sets=None), [])), 5)

    def test_records_beyond_sets_count_ignored(self) -> None:
        sets = self.engine.merge_sets(prescription(sets=2), [record(set_number=3, reps=1)])
        self.assertEqual(len(sets), 2)
        self.assertTrue(all(s.status is SetStatus.PENDING for s in sets))

    def test_null_values_surface_as_none(self) -> None:
        rec = record(set_number=1, reps=None, weight=None)
        sets = self.engine.merge_sets(prescription(), [rec])
        self.assertIsNone(sets[0].reps)
        self.assertIsNone(sets[0].weight_kg)
        self.assertIs(sets[0].status, SetStatus.DONE)

    def test_missing_defaults_become_zero(self) -> None:
        p = Prescription.model_validate({"scheduleId": 1, "name": "Plank", "time": {"value": 45}})
        sets = self.engine.merge_sets(p, [])
        self.assertEqual(sets[0].reps, 0)
        self.assertEqual(sets[0].weight_kg, 0.0)
        self.assertEqual(sets[0].duration_seconds, 45)

    def test_weight_normalized_to_kg(self) -> None:
        rec = record(set_number=1, reps=8, weight={"value": 185, "unit": "lbs"}, time={"value": 55})
        sets = self.engine.merge_sets(prescription(weight={"value": 185, "unit": "lbs"}), [rec])
        self.assertEqual(sets[0].weight_kg, 83.91)
        self.assertIs(sets[0].weight_display_unit, WeightUnit.LB)
        self.assertEqual(sets[0].duration_seconds, 55)
        self.assertEqual(sets[1].weight_kg, 83.91)

    def test_flat_weight_columns(self) -> None:
        rec = record(setNumber=1, reps=8, weight_value=100, weight_unit="kg", createdAt="2025-01-01T00:00:00")
        sets = self.engine.merge_sets(prescription(), [rec])
        self.assertEqual(sets[0].weight_kg, 100)
        self.assertEqual(sets[0].completed_at, parse_timestamp("2025-01-01T00:00:00"))


class ExerciseStatusTest(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = SetMergeEngine()

    def test_status_derivation(self) -> None:
        ex = self.engine.build_exercise(prescription(), [])
        self.assertIs(ex.status, SetStatus.PENDING)
        ex = self.engine.build_exercise(prescription(), [record(set_number=1)])
        self.assertIs(ex.status, SetStatus.IN_PROGRESS)
        ex = self.engine.build_exercise(
            prescription(), [record(set_number=n) for n in (1, 2, 3)]
        )
        self.assertIs(ex.status, SetStatus.DONE)

    def test_in_progress_set_marks_exercise(self) -> None:
        ex = self.engine.build_exercise(prescription(), [])
        ex.sets[1].status = SetStatus.IN_PROGRESS
        self.assertIs(ex.status, SetStatus.IN_PROGRESS)

    def test_build_workout(self) -> None:
        workout = self.engine.build_workout(
            [(prescription(), []), (prescription(scheduleId=11, sets=2), [])],
            day="Monday",
        )
        self.assertEqual(workout.category, "Legs")
        self.assertEqual(workout.total_sets, 5)
        self.assertEqual(workout.completed_sets, 0)
        self.assertFalse(workout.dirty)


class ApplySessionsTest(unittest.TestCase):
    def test_refresh_keeps_unsaved_sets(self) -> None:
        engine = SetMergeEngine()
        ex = engine.build_exercise(prescription(), [])
        ex.sets[0].is_modified = True
        ex.sets[0].reps = 12
        updated = engine.apply_sessions(
            ex, [record(set_number=1, reps=4), record(set_number=2, reps=5)]
        )
        self.assertEqual(updated, 1)
        self.assertEqual(ex.sets[0].reps, 12)
        self.assertEqual(ex.sets[1].reps, 5)
        self.assertIs(ex.sets[1].provenance, Provenance.FROM_SESSION)


class ValidationAndExportTest(unittest.TestCase):
    def test_validate_workout(self) -> None:
        engine = SetMergeEngine()
        with self.assertRaises(WorkoutDataError):
            engine.validate_workout(None)
        with self.assertRaises(WorkoutDataError):
            engine.validate_workout(WorkoutView(day="Mon", category=None))
        ex = engine.build_exercise(prescription(), [])
        ex.sets = []
        with self.assertRaises(WorkoutDataError):
            engine.validate_workout(WorkoutView(day="Mon", category=None, exercises=[ex]))

    def test_performed_sets(self) -> None:
        engine = SetMergeEngine()
        workout = engine.build_workout(
            [(prescription(), [record(set_number=2, reps=8, created_at="2025-07-31T10:30:00+00:00")])]
        )
        rows = engine.performed_sets(workout)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["setNumber"], 2)
        self.assertEqual(rows[0]["exerciseId"], 10)
        self.assertEqual(rows[0]["completedAt"], "2025-07-31T10:30:00+00:00")


if __name__ == "__main__":
    unittest.main()
