"""Set state machine.

``pending -> in-progress -> done`` with ``done`` terminal. Transitions come
from a single table keyed by (status, action); anything not in the table is
refused without touching the set.
"""

from __future__ import annotations

import datetime
import math
import re
from enum import Enum

from loguru import logger

from algorithms import MathTools, WeightConverter
from models import Provenance, SetStatus, SetView

WEIGHT_TOLERANCE_KG = 0.005
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class SetAction(str, Enum):
    START = "start"
    COMPLETE = "complete"


TRANSITIONS: dict[tuple[SetStatus, SetAction], SetStatus] = {
    (SetStatus.PENDING, SetAction.START): SetStatus.IN_PROGRESS,
    (SetStatus.IN_PROGRESS, SetAction.COMPLETE): SetStatus.DONE,
}

EDITABLE: dict[SetStatus, bool] = {
    SetStatus.PENDING: True,
    SetStatus.IN_PROGRESS: True,
    SetStatus.DONE: False,
}


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def next_status(status: SetStatus, action: SetAction) -> SetStatus | None:
    return TRANSITIONS.get((status, action))


def is_editable(status: SetStatus) -> bool:
    return EDITABLE[status]


def start(set_view: SetView, now: datetime.datetime | None = None) -> bool:
    target = next_status(set_view.status, SetAction.START)
    if target is None:
        logger.debug(f"Refusing start on set {set_view.set_number} ({set_view.status.value})")
        return False
    set_view.status = target
    set_view.started_at = now or _now()
    set_view.touch()
    return True


def complete(set_view: SetView, now: datetime.datetime | None = None) -> bool:
    target = next_status(set_view.status, SetAction.COMPLETE)
    if target is None:
        logger.debug(f"Refusing complete on set {set_view.set_number} ({set_view.status.value})")
        return False
    now = now or _now()
    set_view.status = target
    set_view.duration_seconds = MathTools.elapsed_seconds(set_view.started_at, now)
    set_view.completed_at = now
    set_view.is_modified = True
    set_view.save_error = False
    set_view.touch()
    return True


def edit(
    set_view: SetView,
    reps: int | None = None,
    weight_kg: float | None = None,
) -> bool:
    """Apply value edits; returns ``False`` when nothing changed."""
    if not is_editable(set_view.status):
        return False
    changed = False
    if reps is not None and reps != set_view.reps:
        set_view.reps = reps
        changed = True
    if weight_kg is not None:
        current = set_view.weight_kg
        if current is None or abs(weight_kg - current) > WEIGHT_TOLERANCE_KG:
            set_view.weight_kg = weight_kg
            changed = True
    if changed:
        set_view.provenance = Provenance.LOCALLY_EDITED
        set_view.is_modified = True
        set_view.save_error = False
        set_view.touch()
    return changed


def _parse_number(raw, integer: bool = False) -> float:
    """Read the leading number of ``raw``, ignoring trailing text; 0 when none."""
    pattern = _INT_PREFIX if integer else _FLOAT_PREFIX
    match = pattern.match("" if raw is None else str(raw))
    if match is None:
        return 0.0
    value = float(match.group(1))
    if not math.isfinite(value):
        return 0.0
    return value


def parse_cell(field: str, raw, use_metric: bool = True) -> tuple[int | None, float | None]:
    """Translate a raw cell entry into ``(reps, weight_kg)``."""
    if field == "reps":
        return int(max(0.0, _parse_number(raw, integer=True))), None
    if field == "weight":
        if use_metric:
            return None, max(0.0, _parse_number(raw))
        return None, WeightConverter.lbs_to_kg(int(max(0.0, _parse_number(raw, integer=True))))
    raise ValueError(f"unknown field: {field}")


def edit_cell(set_view: SetView, field: str, raw, use_metric: bool = True) -> bool:
    reps, weight_kg = parse_cell(field, raw, use_metric)
    return edit(set_view, reps=reps, weight_kg=weight_kg)
