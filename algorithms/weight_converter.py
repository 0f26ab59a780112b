from .math_tools import MathTools


class WeightConverter:
    """Utility for converting between kg and lb.

    Kilograms are the canonical unit. Pounds are only ever displayed as whole
    numbers, so a value entered in lb, stored in kg and shown in lb again may
    differ from the input by up to one pound.
    """

    LB_TO_KG = 0.453592
    KG_TO_LB = 2.20462
    POUND_UNITS = {"lb", "lbs", "pound", "pounds"}

    @staticmethod
    def lbs_to_kg(lbs: float) -> float:
        return MathTools.round_half_up(lbs * WeightConverter.LB_TO_KG, 2)

    @staticmethod
    def kg_to_lbs_display(kg: float) -> int:
        return int(MathTools.round_half_up(kg * WeightConverter.KG_TO_LB))

    @classmethod
    def is_pounds(cls, unit: str | None) -> bool:
        return (unit or "kg").strip().lower() in cls.POUND_UNITS

    @classmethod
    def normalize(cls, value: float | None, unit: str | None = "kg") -> float | None:
        """Return ``value`` expressed in kilograms, or ``None`` when missing."""
        if value is None:
            return None
        if cls.is_pounds(unit):
            return cls.lbs_to_kg(value)
        return float(value)

    @classmethod
    def display(cls, weight_kg: float | None, use_metric: bool = True) -> str:
        if weight_kg is None:
            return "0kg" if use_metric else "0lb"
        if use_metric:
            rounded = MathTools.round_half_up(weight_kg, 1)
            return f"{MathTools.format_number(rounded)}kg"
        return f"{cls.kg_to_lbs_display(weight_kg)}lb"
