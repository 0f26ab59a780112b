from __future__ import annotations

import math
from dataclasses import dataclass

from localization import translator

DEFAULT_REST_SECONDS = 120


def format_time(seconds: float | None) -> str:
    safe = max(0, math.floor(seconds or 0))
    return f"{safe // 60:02d}:{safe % 60:02d}"


def compute_badge_view(
    remaining_seconds: float, elapsed_seconds: float, starting_seconds: float
) -> dict:
    over = max(0, (elapsed_seconds or 0) - (starting_seconds or 0))
    if remaining_seconds > 0:
        return {
            "label": translator.gettext("Rest"),
            "time": format_time(remaining_seconds),
            "isElapsed": False,
            "overSeconds": over,
        }
    return {
        "label": translator.gettext("Rest elapsed"),
        "time": format_time(over),
        "isElapsed": True,
        "overSeconds": over,
    }


@dataclass
class RestTimer:
    """Rest countdown started whenever a set is completed."""

    default_seconds: int = DEFAULT_REST_SECONDS
    is_visible: bool = False
    seconds_remaining: int = 0
    starting_seconds: int = 0
    elapsed_seconds: int = 0
    schedule_id: int | None = None
    set_number: int | None = None

    def start(self, schedule_id: int, set_number: int, seconds: int | None = None) -> None:
        total = self.default_seconds if seconds is None else max(0, seconds)
        self.is_visible = True
        self.seconds_remaining = total
        self.starting_seconds = total
        self.elapsed_seconds = 0
        self.schedule_id = schedule_id
        self.set_number = set_number

    def tick(self, seconds: int = 1) -> None:
        if not self.is_visible:
            return
        self.elapsed_seconds += seconds
        self.seconds_remaining = max(0, self.seconds_remaining - seconds)

    def close(self) -> None:
        self.is_visible = False
        self.seconds_remaining = 0
        self.starting_seconds = 0
        self.elapsed_seconds = 0
        self.schedule_id = None
        self.set_number = None

    def badge(self) -> dict | None:
        if not self.is_visible:
            return None
        return compute_badge_view(
            self.seconds_remaining, self.elapsed_seconds, self.starting_seconds
        )
