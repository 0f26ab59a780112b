import asyncio
import datetime

from db import AsyncScheduleRepository, AsyncSessionRepository


async def seed(db_path: str = "workout.db") -> None:
    schedule = AsyncScheduleRepository(db_path)
    sessions = AsyncSessionRepository(db_path)
    if await schedule.fetch_days():
        print("Database already contains a schedule")
        return

    for exercise_id, name, category, kind in (
        (45, "Bench Press", "Chest", "Compound"),
        (46, "Overhead Press", "Shoulders", "Compound"),
        (47, "Back Squat", "Legs", "Compound"),
        (48, "Dumbbell Bench Press", "Chest", "Compound"),
        (49, "Cable Fly", "Chest", "Isolation"),
    ):
        await schedule.add_exercise(name, category, kind, exercise_id=exercise_id)

    day_id = await schedule.add_day(1, "Monday", "Push")
    bench = await schedule.add_workout(
        day_id, "Bench Press", sets=4, reps=8, weight_value=185, weight_unit="lbs",
        workout_id=45, category="Chest", type="Compound",
    )
    await schedule.add_workout(
        day_id, "Overhead Press", sets=3, reps=10, weight_value=40.0,
        workout_id=46, category="Shoulders", type="Compound",
    )
    yesterday = (datetime.date.today() - datetime.timedelta(days=1)).isoformat()
    await sessions.add(bench, 1, 8, 185, "lbs", 55, created_at=f"{yesterday}T10:30:00Z")
    await sessions.add(bench, 2, 8, 185, "lbs", 58, created_at=f"{yesterday}T10:32:00Z")

    day_id = await schedule.add_day(2, "Wednesday", "Legs")
    await schedule.add_workout(
        day_id, "Back Squat", sets=5, reps=5, weight_value=100.0,
        workout_id=47, category="Legs", type="Compound",
    )
    print("Seed data inserted")


if __name__ == "__main__":
    asyncio.run(seed())
