# -*- coding: utf-8 -*-
"""Profiles — one row per user."""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings

_UPDATABLE = (
    "name",
    "age",
    "weight",
    "height",
    "fitness_goal",
    "daily_calories_goal",
    "daily_protein_goal",
    "daily_carbs_goal",
    "daily_fat_goal",
    "daily_calories_burn_goal",
    "voice_provider",
    "onboarding_completed",
    "avatar_url",
)


def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
    if not row:
        return None
    profile = dict(row)
    profile["onboarding_completed"] = bool(profile.get("onboarding_completed"))
    return profile


def upsert_profile(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Insert or partially update the user's profile; unknown keys are ignored."""
    values = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if "onboarding_completed" in values:
        values["onboarding_completed"] = 1 if values["onboarding_completed"] else 0

    with db_conn(settings.db_path) as conn:
        existing = conn.execute("SELECT id FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        if existing is None:
            columns = ["id", "user_id", "created_at", *values.keys()]
            params = [str(uuid4()), user_id, utc_now(), *values.values()]
            placeholders = ", ".join("?" for _ in columns)
            conn.execute(
                f"INSERT INTO profiles ({', '.join(columns)}) VALUES ({placeholders})",
                params,
            )
        elif values:
            assignments = ", ".join(f"{k} = ?" for k in values)
            conn.execute(
                f"UPDATE profiles SET {assignments} WHERE user_id = ?",
                [*values.values(), user_id],
            )
    profile = get_profile(user_id)
    if profile is None:
        raise RuntimeError("Failed to upsert profile")
    return profile


def set_voice_provider(user_id: str, provider: str) -> Dict[str, Any]:
    return upsert_profile(user_id, {"voice_provider": provider})
