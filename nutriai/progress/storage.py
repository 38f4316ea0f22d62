# -*- coding: utf-8 -*-
"""Progress — body metrics, goals and achievements."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings
from ..diet.portions import round_half_up
from .models import Achievement, BodyMetric, Goal

ACTIVE_GOALS_LIMIT = 3


# ---------- body metrics ----------


def add_body_metric(
    user_id: str,
    *,
    weight: float,
    bmi: Optional[float] = None,
    body_fat_percentage: Optional[float] = None,
    muscle_mass: Optional[float] = None,
) -> BodyMetric:
    metric_id = str(uuid4())
    now = utc_now()
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO body_metrics (id, user_id, weight, bmi, body_fat_percentage, muscle_mass, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (metric_id, user_id, weight, bmi, body_fat_percentage, muscle_mass, now),
        )
    return BodyMetric(
        id=metric_id,
        weight=weight,
        bmi=bmi,
        body_fat_percentage=body_fat_percentage,
        muscle_mass=muscle_mass,
        created_at=now,
    )


def list_body_metrics(user_id: str, *, limit: int = 50) -> List[BodyMetric]:
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM body_metrics WHERE user_id = ? ORDER BY created_at DESC LIMIT ?",
            (user_id, limit),
        ).fetchall()
    return [
        BodyMetric(
            id=r["id"],
            weight=r["weight"],
            bmi=r["bmi"],
            body_fat_percentage=r["body_fat_percentage"],
            muscle_mass=r["muscle_mass"],
            created_at=r["created_at"],
        )
        for r in rows
    ]


# ---------- goals ----------


def _row_to_goal(row: sqlite3.Row) -> Goal:
    current = row["current_value"]
    return Goal(
        id=row["id"],
        goal_name=row["goal_name"],
        goal_type=row["goal_type"],
        target_value=row["target_value"],
        current_value=current,
        unit=row["unit"],
        remaining=row["target_value"] - (current or 0),
        completed_at=row["completed_at"],
        created_at=row["created_at"],
    )


def _get_goal(conn: sqlite3.Connection, user_id: str, goal_id: str) -> sqlite3.Row:
    row = conn.execute(
        "SELECT * FROM user_goals WHERE id = ? AND user_id = ?",
        (goal_id, user_id),
    ).fetchone()
    if not row:
        raise KeyError("Meta não encontrada")
    return row


def create_goal(
    user_id: str,
    *,
    goal_name: str,
    goal_type: str,
    target_value: float,
    current_value: Optional[float] = None,
    unit: Optional[str] = None,
) -> Goal:
    goal_id = str(uuid4())
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO user_goals (id, user_id, goal_name, goal_type, target_value, current_value, unit, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (goal_id, user_id, goal_name, goal_type, target_value, current_value, unit, utc_now()),
        )
        return _row_to_goal(_get_goal(conn, user_id, goal_id))


def list_active_goals(user_id: str, *, limit: int = ACTIVE_GOALS_LIMIT) -> List[Goal]:
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM user_goals
            WHERE user_id = ? AND completed_at IS NULL
            ORDER BY created_at ASC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
    return [_row_to_goal(r) for r in rows]


def update_goal_progress(user_id: str, goal_id: str, current_value: float) -> Goal:
    with db_conn(settings.db_path) as conn:
        _get_goal(conn, user_id, goal_id)
        conn.execute(
            "UPDATE user_goals SET current_value = ? WHERE id = ? AND user_id = ?",
            (current_value, goal_id, user_id),
        )
        return _row_to_goal(_get_goal(conn, user_id, goal_id))


def complete_goal(user_id: str, goal_id: str) -> Goal:
    with db_conn(settings.db_path) as conn:
        _get_goal(conn, user_id, goal_id)
        conn.execute(
            "UPDATE user_goals SET completed_at = ? WHERE id = ? AND user_id = ?",
            (utc_now(), goal_id, user_id),
        )
        return _row_to_goal(_get_goal(conn, user_id, goal_id))


# ---------- achievements ----------


def achievement_progress(current: Optional[float], target: Optional[float]) -> Optional[int]:
    if not current or not target:
        return None
    return int(round_half_up(current / target * 100))


def _row_to_achievement(row: sqlite3.Row) -> Achievement:
    return Achievement(
        id=row["id"],
        achievement_name=row["achievement_name"],
        achievement_description=row["achievement_description"],
        points=row["points"],
        progress_current=row["progress_current"],
        progress_target=row["progress_target"],
        progress=achievement_progress(row["progress_current"], row["progress_target"]),
        completed=bool(row["completed"]),
        completed_at=row["completed_at"],
        created_at=row["created_at"],
    )


def _get_achievement(conn: sqlite3.Connection, user_id: str, achievement_id: str) -> sqlite3.Row:
    row = conn.execute(
        "SELECT * FROM user_achievements WHERE id = ? AND user_id = ?",
        (achievement_id, user_id),
    ).fetchone()
    if not row:
        raise KeyError("Conquista não encontrada")
    return row


def create_achievement(user_id: str, fields: Dict[str, Any]) -> Achievement:
    achievement_id = str(uuid4())
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO user_achievements (
                id, user_id, achievement_name, achievement_description, points,
                progress_current, progress_target, completed, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?)
            """,
            (
                achievement_id,
                user_id,
                fields["achievement_name"],
                fields.get("achievement_description"),
                fields.get("points"),
                fields.get("progress_current"),
                fields.get("progress_target"),
                utc_now(),
            ),
        )
        return _row_to_achievement(_get_achievement(conn, user_id, achievement_id))


def update_achievement_progress(
    user_id: str,
    achievement_id: str,
    progress_current: float,
    completed: Optional[bool] = None,
) -> Achievement:
    """Store progress; reaching the target marks the achievement completed."""
    with db_conn(settings.db_path) as conn:
        row = _get_achievement(conn, user_id, achievement_id)
        target = row["progress_target"]
        if completed is None:
            completed = bool(row["completed"]) or bool(target and progress_current >= target)
        completed_at = (row["completed_at"] or utc_now()) if completed else None
        conn.execute(
            """
            UPDATE user_achievements
            SET progress_current = ?, completed = ?, completed_at = ?
            WHERE id = ? AND user_id = ?
            """,
            (progress_current, 1 if completed else 0, completed_at, achievement_id, user_id),
        )
        return _row_to_achievement(_get_achievement(conn, user_id, achievement_id))


def list_achievements(user_id: str) -> List[Achievement]:
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM user_achievements WHERE user_id = ? ORDER BY created_at ASC",
            (user_id,),
        ).fetchall()
    return [_row_to_achievement(r) for r in rows]


# ---------- 30-day window ----------


def activity_since(user_id: str, since: str) -> Dict[str, List[Dict[str, Any]]]:
    with db_conn(settings.db_path) as conn:
        workouts = conn.execute(
            """
            SELECT calories_burned, duration_seconds, completed_at FROM workout_history
            WHERE user_id = ? AND completed_at >= ?
            """,
            (user_id, since),
        ).fetchall()
        meals = conn.execute(
            """
            SELECT calories, protein, meal_date, is_estimated FROM meals
            WHERE user_id = ? AND meal_date >= ?
            """,
            (user_id, since),
        ).fetchall()
    return {"workouts": [dict(r) for r in workouts], "meals": [dict(r) for r in meals]}
