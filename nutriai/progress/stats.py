# -*- coding: utf-8 -*-
"""Progress — 30-day activity statistics.

Inputs are plain row dicts so the same code serves the API and tests:
workouts carry ``calories_burned``, ``duration_seconds`` and ``completed_at``;
meals carry ``calories``, ``protein``, ``meal_date`` and ``is_estimated``.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from ..diet.portions import round_half_up
from .models import MonthlyStats

WINDOW_DAYS = 30
CALORIE_GOAL_RANGE = (1800, 2400)


def bmi(weight_kg: float, height_cm: Optional[float]) -> Optional[float]:
    if not height_cm or height_cm <= 0:
        return None
    meters = height_cm / 100.0
    return round_half_up(weight_kg / (meters * meters), 1)


def current_streak(active_days: Iterable[str], today: date, max_days: int = WINDOW_DAYS) -> int:
    """Consecutive days with activity counting back from ``today``."""
    days = set(active_days)
    streak = 0
    for offset in range(max_days):
        if (today - timedelta(days=offset)).isoformat() not in days:
            break
        streak += 1
    return streak


def monthly_stats(
    workouts: List[Dict[str, Any]],
    meals: List[Dict[str, Any]],
    today: date,
) -> MonthlyStats:
    calories_burned = sum(float(w.get("calories_burned") or 0) for w in workouts)
    total_seconds = sum(int(w.get("duration_seconds") or 0) for w in workouts)

    daily_calories: Dict[str, float] = defaultdict(float)
    daily_protein: Dict[str, float] = defaultdict(float)
    for meal in meals:
        day = str(meal.get("meal_date") or "")[:10]
        daily_calories[day] += float(meal.get("calories") or 0)
        daily_protein[day] += float(meal.get("protein") or 0)

    low, high = CALORIE_GOAL_RANGE
    calorie_goal_days = sum(1 for cal in daily_calories.values() if low <= cal <= high)
    avg_protein = (
        int(round_half_up(sum(daily_protein.values()) / len(daily_protein))) if daily_protein else 0
    )

    active_days = {str(w.get("completed_at") or "")[:10] for w in workouts}
    active_days.update(daily_calories.keys())

    return MonthlyStats(
        workouts_completed=len(workouts),
        calories_burned=calories_burned,
        total_hours=round_half_up(total_seconds / 3600, 1),
        current_streak=current_streak(active_days, today),
        meals_registered=len(meals),
        calorie_goal_days=calorie_goal_days,
        avg_protein=avg_protein,
        ai_analyses=sum(1 for m in meals if m.get("is_estimated")),
    )
