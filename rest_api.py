from fastapi import FastAPI, HTTPException, Body
from loguru import logger

from db import AsyncScheduleRepository, AsyncSessionRepository


class ScheduleAPI:
    """Reference remote store serving the weekly plan and accepting saves."""

    def __init__(self, db_path: str = "workout.db") -> None:
        self.db_path = db_path
        self.schedule = AsyncScheduleRepository(db_path)
        self.sessions = AsyncSessionRepository(db_path)
        self.app = FastAPI(
            title="Workout Session API",
            description="Weekly plan and performed-set history",
        )
        self._setup_routes()

    async def _workout_with_sessions(self, workout: dict) -> dict:
        workout["sessions"] = await self.sessions.fetch_for_schedule(workout["scheduleId"])
        return workout

    async def build_schedule(self) -> list[dict]:
        days = []
        for day_id, day_number, day_name, category in await self.schedule.fetch_days():
            workouts = [
                await self._workout_with_sessions(w)
                for w in await self.schedule.fetch_workouts_for_day(day_id)
            ]
            days.append(
                {
                    "day_number": day_number,
                    "day_name": day_name,
                    "category": category,
                    "workouts": workouts,
                }
            )
        return days

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        async def health():
            return {"status": "ok"}

        @self.app.get("/schedule/v2")
        async def get_schedule():
            return {"schedule": await self.build_schedule()}

        @self.app.get("/workouts/{schedule_id}")
        async def get_workout(schedule_id: int):
            try:
                workout = await self.schedule.fetch_workout(schedule_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return await self._workout_with_sessions(workout)

        @self.app.patch("/schedule/workout/replace/{schedule_id}")
        async def replace_workout(schedule_id: int, payload: dict = Body(...)):
            workout_id = payload.get("workout_id")
            if workout_id is None:
                raise HTTPException(status_code=400, detail="workout_id required")
            try:
                workout = await self.schedule.replace_workout(schedule_id, int(workout_id))
            except ValueError as e:
                status = 404 if "not found" in str(e) else 400
                raise HTTPException(status_code=status, detail=str(e))
            logger.info(f"Schedule {schedule_id} now uses exercise {workout_id}")
            return {"data": {"workout": workout}}

        @self.app.post("/sessions/save")
        async def save_sessions(payload: dict = Body(...)):
            entries = payload.get("workoutSessions")
            if not isinstance(entries, list) or not entries:
                raise HTTPException(status_code=400, detail="workoutSessions required")
            saved = []
            for entry in entries:
                schedule_id = entry.get("scheduleId")
                performed = entry.get("performedSets") or []
                if schedule_id is None:
                    raise HTTPException(status_code=400, detail="scheduleId required")
                try:
                    ids = await self.sessions.save_performed(int(schedule_id), performed)
                except ValueError as e:
                    status = 404 if "not found" in str(e) else 400
                    raise HTTPException(status_code=status, detail=str(e))
                logger.info(f"Stored {len(ids)} sets for schedule {schedule_id}")
                saved.append({"scheduleId": int(schedule_id), "sessionIds": ids})
            return {"saved": saved}


def create_app(db_path: str = "workout.db") -> FastAPI:
    return ScheduleAPI(db_path).app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app())
