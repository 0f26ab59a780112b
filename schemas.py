"""Inbound payload schemas.

The schedule backend is not consistent about field names (``set_number`` vs
``setNumber``, nested ``weight`` objects vs flat ``weight_value`` columns),
so these models accept every variant seen in practice and expose a single
snake_case shape to the merge engine.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

COMPLETED = "completed"
_COMPLETED_SYNONYMS = {"completed", "complete", "done", "1"}


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def _flatten_weight(data: dict) -> dict:
    weight = data.get("weight")
    if isinstance(weight, (int, float)) and not isinstance(weight, bool):
        data["weight"] = {"value": weight, "unit": data.get("weight_unit") or "kg"}
    elif weight is None and data.get("weight_value") is not None:
        data["weight"] = {
            "value": data.get("weight_value"),
            "unit": data.get("weight_unit") or "kg",
        }
    return data


class Weight(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float | None = None
    unit: str = "kg"

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> float | None:
        return _to_float(value)

    @field_validator("unit", mode="before")
    @classmethod
    def _coerce_unit(cls, value: Any) -> str:
        return str(value).strip().lower() if value else "kg"


class Prescription(BaseModel):
    """Server-defined defaults for one exercise on a scheduled day."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    schedule_id: int = Field(validation_alias=AliasChoices("scheduleId", "schedule_id", "id"))
    exercise_id: int | None = Field(
        None, validation_alias=AliasChoices("workout_id", "exerciseId", "exercise_id")
    )
    name: str = "Exercise"
    category: str | None = None
    type: str | None = None
    sets_count: int | None = Field(None, validation_alias=AliasChoices("sets", "setsCount", "sets_count"))
    default_reps: int | None = Field(
        None, validation_alias=AliasChoices("reps", "defaultReps", "default_reps")
    )
    default_weight: Weight | None = Field(
        None, validation_alias=AliasChoices("weight", "defaultWeight", "default_weight")
    )
    default_duration_seconds: float | None = Field(
        None,
        validation_alias=AliasChoices("time", "defaultDurationSeconds", "default_duration_seconds"),
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = _flatten_weight(dict(data))
        time = data.get("time")
        if isinstance(time, dict):
            data["time"] = time.get("value")
        return data

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return str(value) if value else "Exercise"

    @field_validator("sets_count", "default_reps", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int | None:
        return _to_int(value)

    @field_validator("default_duration_seconds", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float | None:
        return _to_float(value)


class SessionRecord(BaseModel):
    """A previously submitted performance entry for one set."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    schedule_id: int | None = Field(None, validation_alias=AliasChoices("scheduleId", "schedule_id"))
    session_id: int | None = Field(None, validation_alias=AliasChoices("session_id", "sessionId"))
    set_number: int | None = Field(
        None, validation_alias=AliasChoices("set_number", "setNumber", "set_index", "setIndex")
    )
    reps: int | None = None
    weight: Weight | None = None
    elapsed_seconds: float | None = Field(
        None, validation_alias=AliasChoices("elapsed_time", "elapsedSeconds", "elapsed_seconds")
    )
    status: str | None = Field(None, validation_alias=AliasChoices("set_status", "status", "state"))
    created_at: str | None = Field(
        None, validation_alias=AliasChoices("created_at", "createdAt", "saved_at", "savedAt")
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = _flatten_weight(dict(data))
        time = data.get("time")
        if data.get("elapsed_time") is None and isinstance(time, dict):
            data["elapsed_time"] = time.get("value")
        return data

    @field_validator("set_number", mode="before")
    @classmethod
    def _coerce_set_number(cls, value: Any) -> int | None:
        number = _to_float(value)
        if number is None or not number.is_integer() or number < 1:
            return None
        return int(number)

    @field_validator("reps", "schedule_id", "session_id", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int | None:
        return _to_int(value)

    @field_validator("elapsed_seconds", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float | None:
        return _to_float(value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, bool):
            value = int(value)
        status = str(value).strip().lower()
        return COMPLETED if status in _COMPLETED_SYNONYMS else status

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> str | None:
        return str(value) if value is not None else None

    @property
    def is_completed(self) -> bool:
        return self.set_number is not None and self.status == COMPLETED
