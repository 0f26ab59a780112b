import math
import datetime


class MathTools:
    """Provides the small numeric helpers the workout engine relies on."""

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def round_half_up(value: float, digits: int = 0) -> float:
        """Round ``value`` to ``digits`` decimals with halves rounded up."""
        factor = 10**digits
        return math.floor(value * factor + 0.5) / factor

    @classmethod
    def percentage(cls, part: int, whole: int) -> int:
        """Return ``part`` as a whole-number percentage of ``whole``."""
        if part <= 0 or whole <= 0:
            return 0
        return int(cls.round_half_up(100 * part / whole))

    @staticmethod
    def elapsed_seconds(
        start: datetime.datetime | None, end: datetime.datetime
    ) -> float:
        """Seconds between ``start`` and ``end``; 0 without a start."""
        if start is None:
            return 0.0
        return max(0.0, (end - start).total_seconds())

    @staticmethod
    def format_number(value: float) -> str:
        """Format ``value`` without a trailing ``.0`` for integral numbers."""
        if float(value).is_integer():
            return str(int(value))
        return str(value)
