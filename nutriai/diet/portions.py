# -*- coding: utf-8 -*-
"""Diet — portion edits and meal totals.

Rounding is half-up (calories to whole kcal, macros to one decimal) so the
numbers match what the app shows while the user drags the gram field.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List

from .models import FoodItem, NutritionTotals

DEFAULT_PORTION_GRAMS = 100.0

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)")


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def parse_grams(raw: Any) -> float:
    """Read a gram value the way a numeric input does; garbage counts as 0."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _LEADING_NUMBER.match(str(raw).replace(",", "."))
        if not match:
            return 0.0
        value = float(match.group(0))
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def rescale_food(stored: FoodItem, grams: Any) -> FoodItem:
    """Scale a stored food's nutrients to a new portion size."""
    new_grams = parse_grams(grams)
    original_grams = stored.portion_grams or DEFAULT_PORTION_GRAMS
    ratio = new_grams / original_grams
    return stored.model_copy(
        update={
            "portion_grams": new_grams,
            "calories": round_half_up((stored.calories or 0) * ratio),
            "protein": round_half_up((stored.protein or 0) * ratio, 1),
            "carbs": round_half_up((stored.carbs or 0) * ratio, 1),
            "fat": round_half_up((stored.fat or 0) * ratio, 1),
        }
    )


def apply_portion_edits(stored_foods: List[FoodItem], edits: Dict[int, Any]) -> List[FoodItem]:
    for index in edits:
        if index < 0 or index >= len(stored_foods):
            raise IndexError(f"food index {index} out of range")
    return [
        rescale_food(food, edits[i]) if i in edits else food
        for i, food in enumerate(stored_foods)
    ]


def meal_totals(foods: Iterable[FoodItem]) -> NutritionTotals:
    calories = protein = carbs = fat = 0.0
    for food in foods:
        calories += food.calories or 0.0
        protein += food.protein or 0.0
        carbs += food.carbs or 0.0
        fat += food.fat or 0.0
    return NutritionTotals(
        calories=round_half_up(calories),
        protein=round_half_up(protein, 1),
        carbs=round_half_up(carbs, 1),
        fat=round_half_up(fat, 1),
    )


def meal_name(foods: List[FoodItem]) -> str:
    names = [f.name for f in foods]
    suffix = "..." if len(names) > 3 else ""
    return f"Refeição: {', '.join(names[:3])}{suffix}"
