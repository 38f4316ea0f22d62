# -*- coding: utf-8 -*-
"""App database — SQLite helpers.

Rows mirror the hosted tables used by the app (profiles, meals, workouts,
progress and assistant conversations). Every row is scoped by ``user_id``.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        name TEXT,
        age INTEGER,
        weight REAL,
        height REAL,
        fitness_goal TEXT,
        daily_calories_goal REAL,
        daily_protein_goal REAL,
        daily_carbs_goal REAL,
        daily_fat_goal REAL,
        daily_calories_burn_goal REAL,
        voice_provider TEXT,
        onboarding_completed INTEGER NOT NULL DEFAULT 0,
        avatar_url TEXT,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS meals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT,
        meal_date TEXT NOT NULL,
        meal_time TEXT NOT NULL,
        calories REAL NOT NULL DEFAULT 0,
        protein REAL NOT NULL DEFAULT 0,
        carbs REAL NOT NULL DEFAULT 0,
        fat REAL NOT NULL DEFAULT 0,
        foods_details TEXT NOT NULL DEFAULT '[]',
        is_estimated INTEGER NOT NULL DEFAULT 0,
        notes TEXT,
        created_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_meals_user_date ON meals(user_id, meal_date DESC);",
    """
    CREATE TABLE IF NOT EXISTS workouts (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        category TEXT,
        difficulty TEXT,
        duration_minutes INTEGER,
        estimated_calories INTEGER,
        exercises_data TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_history (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        workout_name TEXT NOT NULL,
        duration_seconds INTEGER NOT NULL,
        calories_burned REAL NOT NULL DEFAULT 0,
        completed_at TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_workout_history_user_completed ON workout_history(user_id, completed_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS calories_burned (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        calories REAL NOT NULL DEFAULT 0,
        activity_type TEXT,
        date TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS body_metrics (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        weight REAL NOT NULL,
        bmi REAL,
        body_fat_percentage REAL,
        muscle_mass REAL,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS user_goals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        goal_name TEXT NOT NULL,
        goal_type TEXT NOT NULL,
        target_value REAL NOT NULL,
        current_value REAL,
        unit TEXT,
        completed_at TEXT,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS user_achievements (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        achievement_name TEXT NOT NULL,
        achievement_description TEXT,
        points INTEGER,
        progress_current REAL,
        progress_target REAL,
        completed INTEGER NOT NULL DEFAULT 0,
        completed_at TEXT,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS nutri_ai_conversations (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_conversations_user_updated ON nutri_ai_conversations(user_id, updated_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS nutri_ai_messages (
        id TEXT PRIMARY KEY,
        conversation_id TEXT NOT NULL,
        role TEXT NOT NULL,
        content TEXT NOT NULL,
        intent TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY(conversation_id) REFERENCES nutri_ai_conversations(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation_created ON nutri_ai_messages(conversation_id, created_at ASC);",
)


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        for statement in _TABLES:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
