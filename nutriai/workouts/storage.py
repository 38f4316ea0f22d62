# -*- coding: utf-8 -*-
"""Workouts — templates, completion history and burned calories."""

from __future__ import annotations

import json
import sqlite3
from typing import Iterable, List, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings
from ..diet.portions import round_half_up
from .models import Exercise, Workout, WorkoutHistoryEntry


def planned_seconds(exercises: Iterable[Exercise]) -> int:
    return sum(e.duration + e.rest for e in exercises)


def _row_to_workout(row: sqlite3.Row) -> Workout:
    try:
        raw = json.loads(row["exercises_data"] or "[]")
    except ValueError:
        raw = []
    exercises = [Exercise.model_validate(e) for e in raw if isinstance(e, dict)]
    return Workout(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        category=row["category"],
        difficulty=row["difficulty"],
        duration_minutes=row["duration_minutes"],
        estimated_calories=row["estimated_calories"],
        exercises=exercises,
        planned_seconds=planned_seconds(exercises),
        created_at=row["created_at"],
    )


def _row_to_history(row: sqlite3.Row) -> WorkoutHistoryEntry:
    return WorkoutHistoryEntry(
        id=row["id"],
        workout_name=row["workout_name"],
        duration_seconds=row["duration_seconds"],
        calories_burned=row["calories_burned"] or 0.0,
        completed_at=row["completed_at"],
    )


def create_workout(
    user_id: str,
    *,
    name: str,
    exercises: List[Exercise],
    description: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    duration_minutes: Optional[int] = None,
    estimated_calories: Optional[int] = None,
) -> Workout:
    workout_id = str(uuid4())
    if duration_minutes is None and exercises:
        duration_minutes = round(planned_seconds(exercises) / 60)
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO workouts (
                id, user_id, name, description, category, difficulty,
                duration_minutes, estimated_calories, exercises_data, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                workout_id,
                user_id,
                name,
                description,
                category,
                difficulty,
                duration_minutes,
                estimated_calories,
                json.dumps([e.model_dump(exclude_none=True) for e in exercises], ensure_ascii=False),
                utc_now(),
            ),
        )
    return get_workout(user_id, workout_id)


def get_workout(user_id: str, workout_id: str) -> Workout:
    with db_conn(settings.db_path) as conn:
        row = conn.execute(
            "SELECT * FROM workouts WHERE id = ? AND user_id = ?",
            (workout_id, user_id),
        ).fetchone()
    if not row:
        raise KeyError("Treino não encontrado")
    return _row_to_workout(row)


def list_workouts(user_id: str, *, category: Optional[str] = None) -> List[Workout]:
    query = "SELECT * FROM workouts WHERE user_id = ?"
    params: list = [user_id]
    if category:
        query += " AND category = ?"
        params.append(category)
    query += " ORDER BY created_at DESC"
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_workout(r) for r in rows]


def delete_workout(user_id: str, workout_id: str) -> None:
    with db_conn(settings.db_path) as conn:
        cur = conn.execute("DELETE FROM workouts WHERE id = ? AND user_id = ?", (workout_id, user_id))
        if cur.rowcount == 0:
            raise KeyError("Treino não encontrado")


def complete_workout(user_id: str, workout_id: str, elapsed_seconds: int) -> WorkoutHistoryEntry:
    """Record a finished session and the calories it burned."""
    workout = get_workout(user_id, workout_id)
    calories = float(workout.estimated_calories or 0)
    now = utc_now()
    history_id = str(uuid4())
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO workout_history (
                id, user_id, workout_name, duration_seconds, calories_burned, completed_at, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (history_id, user_id, workout.name, int(elapsed_seconds), calories, now, now),
        )
        conn.execute(
            """
            INSERT INTO calories_burned (id, user_id, calories, activity_type, date, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (str(uuid4()), user_id, calories, workout.category or "workout", now[:10], now),
        )
        row = conn.execute("SELECT * FROM workout_history WHERE id = ?", (history_id,)).fetchone()
    return _row_to_history(row)


def list_history(user_id: str, *, since: Optional[str] = None, limit: int = 100) -> List[WorkoutHistoryEntry]:
    query = "SELECT * FROM workout_history WHERE user_id = ?"
    params: list = [user_id]
    if since:
        query += " AND completed_at >= ?"
        params.append(since)
    query += " ORDER BY completed_at DESC LIMIT ?"
    params.append(limit)
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_history(r) for r in rows]


def completion_message(calories: float) -> str:
    return f"Treino concluído! {int(round_half_up(calories))} kcal queimadas 🔥"
