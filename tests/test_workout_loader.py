import os
import sys
import unittest
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from exceptions import WorkoutDataError, WorkoutFetchError
from merge_service import DuplicatePolicy, SetMergeEngine
from models import Provenance, SetStatus
from workout_loader import WorkoutInitializer


def day_payload():
    return {
        "day_number": 1,
        "day_name": "Monday",
        "category": "Push",
        "workouts": [
            {
                "scheduleId": 10,
                "workout_id": 3,
                "name": "Bench Press",
                "category": "Chest",
                "sets": 3,
                "reps": 8,
                "weight": {"value": 100, "unit": "lbs"},
                "sessions": [
                    {"session_id": 1, "set_number": 1, "reps": 7, "weight": 95, "weight_unit": "lbs", "set_status": "completed"},
                    {"session_id": 2, "set_number": 2, "reps": 6, "weight": {"value": 40, "unit": "kg"}, "set_status": "pending"},
                    "garbage",
                ],
            },
            {"name": "No id"},
        ],
    }


class InputShapesTest(unittest.TestCase):
    def setUp(self) -> None:
        self.loader = WorkoutInitializer()

    def assert_bench(self, workout) -> None:
        self.assertFalse(workout.is_stub)
        self.assertEqual(len(workout.exercises), 1)
        bench = workout.exercises[0]
        self.assertEqual(bench.schedule_id, 10)
        self.assertEqual(bench.status, SetStatus.IN_PROGRESS)
        first, second, third = bench.sets
        self.assertEqual(first.provenance, Provenance.FROM_SESSION)
        self.assertEqual(first.reps, 7)
        self.assertAlmostEqual(first.weight_kg, 43.09)
        self.assertEqual(second.status, SetStatus.PENDING)
        self.assertAlmostEqual(second.weight_kg, 45.36)
        self.assertEqual(third.reps, 8)

    def test_navigation_state(self) -> None:
        workout = self.loader.from_source({"originalApiData": day_payload()})
        self.assert_bench(workout)
        self.assertEqual(workout.day, "Monday")
        self.assertEqual(workout.category, "Push")
        self.assertEqual(workout.day_number, 1)

    def test_nested_workout_data(self) -> None:
        workout = self.loader.from_source({"workoutData": {"originalApiData": day_payload()}})
        self.assert_bench(workout)

    def test_day_payload(self) -> None:
        self.assert_bench(self.loader.from_source(day_payload()))

    def test_single_workout(self) -> None:
        workout = self.loader.from_source(day_payload()["workouts"][0])
        self.assert_bench(workout)
        self.assertEqual(workout.category, "Chest")

    def test_list_of_workouts(self) -> None:
        self.assert_bench(self.loader.from_source(day_payload()["workouts"]))

    def test_stub_fallback(self) -> None:
        for source in (None, {}, {"workouts": []}, {"workouts": [{"name": "x"}]}, "text"):
            workout = self.loader.from_source(source)
            self.assertTrue(workout.is_stub, source)
            bench = workout.exercises[0]
            self.assertEqual(bench.schedule_id, 234)
            self.assertEqual(bench.name, "Bench Press")
            self.assertEqual(len(bench.sets), 4)
            self.assertEqual(bench.sets[0].reps, 8)
            self.assertAlmostEqual(bench.sets[0].weight_kg, 83.91)

    def test_from_day_requires_workouts(self) -> None:
        with self.assertRaises(WorkoutDataError):
            self.loader.from_day({"day_name": "Monday"})

    def test_engine_policy_is_used(self) -> None:
        loader = WorkoutInitializer(SetMergeEngine(DuplicatePolicy.MOST_RECENT))
        workout = loader.from_source(
            {
                "scheduleId": 1,
                "sets": 1,
                "sessions": [
                    {"session_id": 2, "set_number": 1, "reps": 12, "set_status": "done", "created_at": "2024-05-02T10:00:00Z"},
                    {"session_id": 1, "set_number": 1, "reps": 5, "set_status": "done", "created_at": "2024-05-01T10:00:00Z"},
                ],
            }
        )
        self.assertEqual(workout.exercises[0].sets[0].reps, 12)


class ResolveDayTest(unittest.TestCase):
    schedule = [
        {"day_number": 1, "day_name": "Monday", "workouts": []},
        {"day_number": 2, "day_name": "Wednesday", "workouts": [{"scheduleId": 1}]},
        {"day_number": 3, "day_name": "Friday", "workouts": [{"scheduleId": 2}]},
    ]

    def test_target_day(self) -> None:
        self.assertEqual(WorkoutInitializer.resolve_day(self.schedule, 3)["day_name"], "Friday")

    def test_fallback_by_name(self) -> None:
        day = WorkoutInitializer.resolve_day(self.schedule, 9, {"day_name": "Monday"})
        self.assertEqual(day["day_number"], 1)

    def test_first_day_with_workouts(self) -> None:
        self.assertEqual(WorkoutInitializer.resolve_day(self.schedule)["day_number"], 2)

    def test_not_found(self) -> None:
        with self.assertRaises(WorkoutFetchError):
            WorkoutInitializer.resolve_day([{"day_number": 1, "workouts": []}])

    def test_missing_workouts_array(self) -> None:
        with self.assertRaises(WorkoutFetchError):
            WorkoutInitializer.resolve_day([{"day_number": 1}], 1)


class FakeClient:
    def __init__(self, schedule=None, error=None):
        self.schedule = schedule or []
        self.error = error

    async def fetch_schedule(self):
        if self.error:
            raise self.error
        return self.schedule

    async def fetch_workout(self, schedule_id):
        for day in self.schedule:
            for w in day["workouts"]:
                if w["scheduleId"] == schedule_id:
                    return w
        raise WorkoutFetchError("The requested workout was not found.")


@pytest.mark.asyncio
async def test_load_latest_builds_requested_day():
    client = FakeClient([{"day_number": 1, "day_name": "Monday", "category": "Push", "workouts": day_payload()["workouts"]}])
    workout = await WorkoutInitializer().load_latest(client, target_day=1)
    assert workout.day == "Monday"
    assert workout.exercises[0].sets[0].status is SetStatus.DONE


@pytest.mark.asyncio
async def test_load_latest_propagates_fetch_errors():
    client = FakeClient(error=WorkoutFetchError("Could not load the latest workout."))
    with pytest.raises(WorkoutFetchError):
        await WorkoutInitializer().load_latest(client)


@pytest.mark.asyncio
async def test_load_latest_rejects_day_without_usable_exercises():
    client = FakeClient([{"day_number": 1, "workouts": [{"name": "no id"}]}])
    with pytest.raises(WorkoutFetchError):
        await WorkoutInitializer().load_latest(client, target_day=1)


@pytest.mark.asyncio
async def test_load_by_id():
    client = FakeClient([{"day_number": 1, "workouts": [{"scheduleId": 7, "name": "Dip", "sets": 2}]}])
    workout = await WorkoutInitializer().load_by_id(client, 7)
    assert workout.exercises[0].name == "Dip"
    assert len(workout.exercises[0].sets) == 2
