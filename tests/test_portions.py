# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from nutriai.diet.models import FoodItem
from nutriai.diet.portions import (
    apply_portion_edits,
    meal_name,
    meal_totals,
    parse_grams,
    rescale_food,
    round_half_up,
)


def _rice() -> FoodItem:
    return FoodItem(name="Arroz", portion_grams=150, calories=195, protein=4.2, carbs=42.4, fat=0.5)


class TestPortions(unittest.TestCase):
    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.25, 1), 0.3)
        self.assertEqual(round_half_up(97.5), 98)

    def test_halving_portion(self) -> None:
        food = rescale_food(_rice(), 75)
        self.assertEqual(food.portion_grams, 75)
        self.assertEqual(food.calories, 98)
        self.assertEqual(food.protein, 2.1)
        self.assertEqual(food.carbs, 21.2)
        self.assertEqual(food.fat, 0.3)

    def test_missing_grams_defaults_to_100(self) -> None:
        stored = FoodItem(name="Maçã", portion_grams=0, calories=52, protein=0.3, carbs=14, fat=0.2)
        food = rescale_food(stored, 200)
        self.assertEqual(food.calories, 104)
        self.assertEqual(food.carbs, 28)

    def test_unparseable_grams_count_as_zero(self) -> None:
        self.assertEqual(parse_grams("abc"), 0.0)
        self.assertEqual(parse_grams(""), 0.0)
        self.assertEqual(parse_grams("120g"), 120.0)
        self.assertEqual(parse_grams("-5"), 0.0)
        food = rescale_food(_rice(), "??")
        self.assertEqual(food.calories, 0)
        self.assertEqual(food.portion_grams, 0)

    def test_edits_rescale_from_stored_values(self) -> None:
        stored = [_rice(), FoodItem(name="Feijão", portion_grams=100, calories=76, protein=4.8, carbs=13.6, fat=0.5)]
        once = apply_portion_edits(stored, {0: 300})
        # A second edit starts from the stored food again, not from the first edit.
        twice = apply_portion_edits(stored, {0: 75})
        self.assertEqual(once[0].calories, 390)
        self.assertEqual(twice[0].calories, 98)
        self.assertEqual(twice[1], stored[1])

    def test_edit_out_of_range(self) -> None:
        with self.assertRaises(IndexError):
            apply_portion_edits([_rice()], {3: 100})

    def test_totals(self) -> None:
        foods = [
            FoodItem(name="a", calories=100.4, protein=1.04, carbs=2.26, fat=0.1),
            FoodItem(name="b", calories=50.2, protein=2.0, carbs=1.0, fat=1.0),
        ]
        totals = meal_totals(foods)
        self.assertEqual(totals.calories, 151)
        self.assertEqual(totals.protein, 3.0)
        self.assertEqual(totals.carbs, 3.3)
        self.assertEqual(totals.fat, 1.1)

    def test_meal_name(self) -> None:
        foods = [FoodItem(name=n) for n in ("Arroz", "Feijão", "Frango")]
        self.assertEqual(meal_name(foods), "Refeição: Arroz, Feijão, Frango")
        foods.append(FoodItem(name="Salada"))
        self.assertEqual(meal_name(foods), "Refeição: Arroz, Feijão, Frango...")


if __name__ == "__main__":
    unittest.main()
