import sqlite3
import aiosqlite
import datetime
from contextlib import contextmanager, asynccontextmanager
from typing import List, Tuple, Optional


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    category TEXT,
                    type TEXT
                );""",
            ["id", "name", "category", "type"],
        ),
        "schedule_days": (
            """CREATE TABLE schedule_days (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    day_number INTEGER NOT NULL UNIQUE,
                    day_name TEXT NOT NULL,
                    category TEXT
                );""",
            ["id", "day_number", "day_name", "category"],
        ),
        "scheduled_workouts": (
            """CREATE TABLE scheduled_workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    day_id INTEGER NOT NULL,
                    workout_id INTEGER,
                    name TEXT NOT NULL,
                    category TEXT,
                    type TEXT,
                    sets INTEGER NOT NULL DEFAULT 3,
                    reps INTEGER,
                    weight_value REAL,
                    weight_unit TEXT NOT NULL DEFAULT 'kg',
                    time_seconds REAL,
                    FOREIGN KEY(day_id) REFERENCES schedule_days(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "day_id",
                "workout_id",
                "name",
                "category",
                "type",
                "sets",
                "reps",
                "weight_value",
                "weight_unit",
                "time_seconds",
            ],
        ),
        "sessions": (
            """CREATE TABLE sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    schedule_id INTEGER NOT NULL,
                    set_number INTEGER,
                    reps INTEGER,
                    weight_value REAL,
                    weight_unit TEXT NOT NULL DEFAULT 'kg',
                    elapsed_time REAL,
                    set_status TEXT NOT NULL DEFAULT 'completed',
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(schedule_id) REFERENCES scheduled_workouts(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "schedule_id",
                "set_number",
                "reps",
                "weight_value",
                "weight_unit",
                "elapsed_time",
                "set_status",
                "created_at",
            ],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return
        existing = [row[1] for row in conn.execute(f"PRAGMA table_info({table});")]
        if existing != columns:
            raise RuntimeError(f"table {table} has unexpected columns: {existing}")


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            await conn.execute("PRAGMA foreign_keys=on;")
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous repository helpers using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return rows


class AsyncScheduleRepository(AsyncBaseRepository):
    """Async repository for the weekly plan: days and their prescriptions."""

    async def add_day(
        self, day_number: int, day_name: str, category: Optional[str] = None
    ) -> int:
        return await self.execute(
            "INSERT INTO schedule_days (day_number, day_name, category) VALUES (?, ?, ?);",
            (day_number, day_name, category),
        )

    async def add_workout(
        self,
        day_id: int,
        name: str,
        sets: int = 3,
        reps: Optional[int] = None,
        weight_value: Optional[float] = None,
        weight_unit: str = "kg",
        workout_id: Optional[int] = None,
        category: Optional[str] = None,
        type: Optional[str] = None,
        time_seconds: Optional[float] = None,
    ) -> int:
        if sets <= 0:
            raise ValueError("sets must be positive")
        if weight_value is not None and weight_value < 0:
            raise ValueError("weight must be non-negative")
        rows = await self.fetch_all("SELECT id FROM schedule_days WHERE id = ?;", (day_id,))
        if not rows:
            raise ValueError("day not found")
        return await self.execute(
            "INSERT INTO scheduled_workouts (day_id, workout_id, name, category, type, sets, reps, weight_value, weight_unit, time_seconds) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                day_id,
                workout_id,
                name,
                category,
                type,
                sets,
                reps,
                weight_value,
                weight_unit,
                time_seconds,
            ),
        )

    async def fetch_days(self) -> List[Tuple[int, int, str, Optional[str]]]:
        return await self.fetch_all(
            "SELECT id, day_number, day_name, category FROM schedule_days ORDER BY day_number;"
        )

    async def fetch_workouts_for_day(self, day_id: int) -> list[dict]:
        rows = await self.fetch_all(
            "SELECT id, workout_id, name, category, type, sets, reps, weight_value, weight_unit, time_seconds "
            "FROM scheduled_workouts WHERE day_id = ? ORDER BY id;",
            (day_id,),
        )
        return [self._workout_row(r) for r in rows]

    async def fetch_workout(self, schedule_id: int) -> dict:
        rows = await self.fetch_all(
            "SELECT id, workout_id, name, category, type, sets, reps, weight_value, weight_unit, time_seconds "
            "FROM scheduled_workouts WHERE id = ?;",
            (schedule_id,),
        )
        if not rows:
            raise ValueError("workout not found")
        return self._workout_row(rows[0])

    async def add_exercise(
        self,
        name: str,
        category: Optional[str] = None,
        type: Optional[str] = None,
        exercise_id: Optional[int] = None,
    ) -> int:
        return await self.execute(
            "INSERT INTO exercises (id, name, category, type) VALUES (?, ?, ?, ?);",
            (exercise_id, name, category, type),
        )

    async def replace_workout(self, schedule_id: int, workout_id: int) -> dict:
        """Point a scheduled entry at another catalog exercise.

        Sets, reps and weight of the prescription are kept.
        """
        await self.fetch_workout(schedule_id)
        rows = await self.fetch_all(
            "SELECT name, category, type FROM exercises WHERE id = ?;", (workout_id,)
        )
        if not rows:
            raise ValueError("exercise not found")
        name, category, t_type = rows[0]
        await self.execute(
            "UPDATE scheduled_workouts SET workout_id = ?, name = ?, category = ?, type = ? WHERE id = ?;",
            (workout_id, name, category, t_type, schedule_id),
        )
        return await self.fetch_workout(schedule_id)

    @staticmethod
    def _workout_row(row: Tuple) -> dict:
        (
            sid,
            workout_id,
            name,
            category,
            t_type,
            sets,
            reps,
            weight_value,
            weight_unit,
            time_seconds,
        ) = row
        return {
            "scheduleId": sid,
            "workout_id": workout_id,
            "name": name,
            "category": category,
            "type": t_type,
            "sets": sets,
            "reps": reps,
            "weight": {"value": weight_value, "unit": weight_unit},
            "time": time_seconds,
        }


class AsyncSessionRepository(AsyncBaseRepository):
    """Async repository for performed-set history."""

    _INSERT = (
        "INSERT INTO sessions (schedule_id, set_number, reps, weight_value, weight_unit, elapsed_time, set_status, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?);"
    )

    @staticmethod
    def _session_row(
        schedule_id: int,
        set_number: int,
        reps: int,
        weight_value: float,
        weight_unit: str = "kg",
        elapsed_time: Optional[float] = None,
        set_status: str = "completed",
        created_at: Optional[str] = None,
    ) -> Tuple:
        if set_number <= 0:
            raise ValueError("set number must be positive")
        if reps < 0:
            raise ValueError("reps must be non-negative")
        if weight_value < 0:
            raise ValueError("weight must be non-negative")
        if created_at is None:
            created_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
        return (
            schedule_id,
            set_number,
            reps,
            weight_value,
            weight_unit,
            elapsed_time,
            set_status.strip().lower(),
            created_at,
        )

    async def add(
        self,
        schedule_id: int,
        set_number: int,
        reps: int,
        weight_value: float,
        weight_unit: str = "kg",
        elapsed_time: Optional[float] = None,
        set_status: str = "completed",
        created_at: Optional[str] = None,
    ) -> int:
        row = self._session_row(
            schedule_id,
            set_number,
            reps,
            weight_value,
            weight_unit,
            elapsed_time,
            set_status,
            created_at,
        )
        return await self.execute(self._INSERT, row)

    @classmethod
    def _performed_row(cls, schedule_id: int, item: dict) -> Tuple:
        try:
            return cls._session_row(
                schedule_id,
                int(item["setNumber"]),
                int(item["reps"]),
                float(item["weight"]),
                item.get("weightUnit") or "kg",
                item.get("elapsedTime"),
                item.get("status") or "completed",
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"invalid performed set: {e}") from e

    async def save_performed(self, schedule_id: int, performed_sets: list[dict]) -> list[int]:
        """Append one record per performed set, all or none.

        Every entry is validated before the first insert; the rows are
        written in a single transaction.
        """
        rows = await self.fetch_all(
            "SELECT id FROM scheduled_workouts WHERE id = ?;", (schedule_id,)
        )
        if not rows:
            raise ValueError("workout not found")
        values = [self._performed_row(schedule_id, item) for item in performed_sets]
        ids = []
        async with self._async_connection() as conn:
            for row in values:
                cursor = await conn.execute(self._INSERT, row)
                ids.append(cursor.lastrowid)
        return ids

    async def fetch_for_schedule(self, schedule_id: int) -> list[dict]:
        rows = await self.fetch_all(
            "SELECT id, set_number, reps, weight_value, weight_unit, elapsed_time, set_status, created_at "
            "FROM sessions WHERE schedule_id = ? ORDER BY id;",
            (schedule_id,),
        )
        return [
            {
                "session_id": sid,
                "set_number": set_number,
                "reps": reps,
                "weight": {"value": weight_value, "unit": weight_unit},
                "elapsed_time": elapsed_time,
                "set_status": status,
                "created_at": created_at,
            }
            for sid, set_number, reps, weight_value, weight_unit, elapsed_time, status, created_at in rows
        ]
