import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import MathTools, WeightConverter


class WeightConverterTest(unittest.TestCase):
    def test_lbs_to_kg_two_decimals(self) -> None:
        self.assertEqual(WeightConverter.lbs_to_kg(22), 9.98)
        self.assertEqual(WeightConverter.lbs_to_kg(185), 83.91)
        self.assertEqual(WeightConverter.lbs_to_kg(0), 0)

    def test_kg_to_lbs_display_whole_numbers(self) -> None:
        self.assertEqual(WeightConverter.kg_to_lbs_display(100), 220)
        self.assertEqual(WeightConverter.kg_to_lbs_display(9.98), 22)

    def test_display_metric(self) -> None:
        self.assertEqual(WeightConverter.display(62.5, True), "62.5kg")
        self.assertEqual(WeightConverter.display(60, True), "60kg")
        self.assertEqual(WeightConverter.display(83.91, True), "83.9kg")
        self.assertEqual(WeightConverter.display(None, True), "0kg")

    def test_display_imperial(self) -> None:
        self.assertEqual(WeightConverter.display(None, False), "0lb")
        self.assertEqual(WeightConverter.display(WeightConverter.lbs_to_kg(22), False), "22lb")

    def test_fractional_pounds_follow_rounding_rule(self) -> None:
        kg = WeightConverter.lbs_to_kg(22.3)
        self.assertEqual(kg, 10.12)
        # 10.12 * 2.20462 = 22.31, shown as a whole pound
        self.assertEqual(WeightConverter.display(kg, False), "22lb")

    def test_normalize(self) -> None:
        self.assertEqual(WeightConverter.normalize(185, "lbs"), 83.91)
        self.assertEqual(WeightConverter.normalize(185, "LB"), 83.91)
        self.assertEqual(WeightConverter.normalize(62.5, "kg"), 62.5)
        self.assertEqual(WeightConverter.normalize(62.5, None), 62.5)
        self.assertIsNone(WeightConverter.normalize(None, "lbs"))


class MathToolsTest(unittest.TestCase):
    def test_round_half_up(self) -> None:
        self.assertEqual(MathTools.round_half_up(12.5), 13)
        self.assertEqual(MathTools.round_half_up(0.5), 1)
        self.assertEqual(MathTools.round_half_up(2.45, 1), 2.5)

    def test_percentage(self) -> None:
        self.assertEqual(MathTools.percentage(1, 3), 33)
        self.assertEqual(MathTools.percentage(1, 8), 13)
        self.assertEqual(MathTools.percentage(0, 5), 0)
        self.assertEqual(MathTools.percentage(3, 0), 0)

    def test_clamp(self) -> None:
        self.assertEqual(MathTools.clamp(-1, 0, 10), 0)
        with self.assertRaises(ValueError):
            MathTools.clamp(1, 2, 1)

    def test_format_number(self) -> None:
        self.assertEqual(MathTools.format_number(60.0), "60")
        self.assertEqual(MathTools.format_number(62.5), "62.5")


if __name__ == "__main__":
    unittest.main()
