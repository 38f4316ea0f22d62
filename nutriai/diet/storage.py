# -*- coding: utf-8 -*-
"""Diet — meals table (no image retention)."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings
from .models import DailySummary, FoodItem, Meal, NutritionGoals, NutritionTotals
from .portions import apply_portion_edits, meal_totals, round_half_up


def _row_to_meal(row: sqlite3.Row) -> Meal:
    try:
        raw_foods = json.loads(row["foods_details"] or "[]")
    except ValueError:
        raw_foods = []
    foods = [FoodItem.model_validate(f) for f in raw_foods if isinstance(f, dict)]
    return Meal(
        id=row["id"],
        name=row["name"],
        meal_date=row["meal_date"],
        meal_time=row["meal_time"],
        calories=row["calories"] or 0.0,
        protein=row["protein"] or 0.0,
        carbs=row["carbs"] or 0.0,
        fat=row["fat"] or 0.0,
        foods=foods,
        is_estimated=bool(row["is_estimated"]),
        notes=row["notes"],
        created_at=row["created_at"],
    )


def _dump_foods(foods: List[FoodItem]) -> str:
    return json.dumps([f.model_dump() for f in foods], ensure_ascii=False)


def create_meal(
    user_id: str,
    *,
    foods: List[FoodItem],
    name: Optional[str] = None,
    meal_date: Optional[str] = None,
    meal_time: Optional[str] = None,
    is_estimated: bool = False,
    notes: Optional[str] = None,
    totals: Optional[NutritionTotals] = None,
) -> Meal:
    now = utc_now()
    meal_id = str(uuid4())
    totals = totals or meal_totals(foods)
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO meals (
                id, user_id, name, meal_date, meal_time, calories, protein, carbs, fat,
                foods_details, is_estimated, notes, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                meal_id,
                user_id,
                name,
                meal_date or now,
                meal_time or datetime.now().strftime("%H:%M"),
                round_half_up(totals.calories),
                totals.protein,
                totals.carbs,
                totals.fat,
                _dump_foods(foods),
                1 if is_estimated else 0,
                notes,
                now,
            ),
        )
    return get_meal(user_id, meal_id)


def get_meal(user_id: str, meal_id: str) -> Meal:
    with db_conn(settings.db_path) as conn:
        row = conn.execute(
            "SELECT * FROM meals WHERE id = ? AND user_id = ?",
            (meal_id, user_id),
        ).fetchone()
    if not row:
        raise KeyError("Refeição não encontrada")
    return _row_to_meal(row)


def list_meals(user_id: str, *, day: Optional[str] = None, limit: int = 50) -> List[Meal]:
    query = "SELECT * FROM meals WHERE user_id = ?"
    params: List[Any] = [user_id]
    if day:
        query += " AND substr(meal_date, 1, 10) = ?"
        params.append(day)
    query += " ORDER BY meal_date DESC, created_at DESC LIMIT ?"
    params.append(limit)
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_meal(r) for r in rows]


def delete_meal(user_id: str, meal_id: str) -> None:
    with db_conn(settings.db_path) as conn:
        cur = conn.execute("DELETE FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id))
        if cur.rowcount == 0:
            raise KeyError("Refeição não encontrada")


def update_portions(user_id: str, meal_id: str, edits: Dict[int, Any]) -> Meal:
    """Rescale the edited foods from their stored values and recompute totals."""
    meal = get_meal(user_id, meal_id)
    foods = apply_portion_edits(meal.foods, edits)
    totals = meal_totals(foods)
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            UPDATE meals
            SET calories = ?, protein = ?, carbs = ?, fat = ?, foods_details = ?
            WHERE id = ? AND user_id = ?
            """,
            (totals.calories, totals.protein, totals.carbs, totals.fat, _dump_foods(foods), meal_id, user_id),
        )
    return get_meal(user_id, meal_id)


def goals_for(profile: Optional[Dict[str, Any]]) -> NutritionGoals:
    defaults = NutritionGoals()
    if not profile:
        return defaults
    return NutritionGoals(
        calories=profile.get("daily_calories_goal") or defaults.calories,
        protein=profile.get("daily_protein_goal") or defaults.protein,
        carbs=profile.get("daily_carbs_goal") or defaults.carbs,
        fat=profile.get("daily_fat_goal") or defaults.fat,
    )


def _progress(current: float, target: float) -> float:
    if not target:
        return 0.0
    return min(current / target * 100, 100.0)


def daily_summary(user_id: str, day: str, goals: NutritionGoals) -> DailySummary:
    meals = list_meals(user_id, day=day, limit=500)
    calories = sum(m.calories for m in meals)
    protein = sum(m.protein for m in meals)
    carbs = sum(m.carbs for m in meals)
    fat = sum(m.fat for m in meals)
    totals = NutritionTotals(
        calories=round_half_up(calories),
        protein=round_half_up(protein, 1),
        carbs=round_half_up(carbs, 1),
        fat=round_half_up(fat, 1),
    )
    return DailySummary(
        date=day,
        meal_count=len(meals),
        totals=totals,
        goals=goals,
        progress={
            "calories": _progress(totals.calories, goals.calories),
            "protein": _progress(totals.protein, goals.protein),
            "carbs": _progress(totals.carbs, goals.carbs),
            "fat": _progress(totals.fat, goals.fat),
        },
        remaining_calories=goals.calories - totals.calories,
    )
