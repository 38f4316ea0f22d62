# -*- coding: utf-8 -*-
"""Chat — DB storage helpers for assistant conversations."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn, utc_now
from ..config import settings

DEFAULT_TITLE = "Nova conversa"


def create_conversation(*, user_id: str, title: str = DEFAULT_TITLE) -> Dict[str, Any]:
    conversation_id = str(uuid4())
    now = utc_now()
    with db_conn(settings.db_path) as conn:
        conn.execute(
            "INSERT INTO nutri_ai_conversations (id, user_id, title, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            (conversation_id, user_id, title, now, now),
        )
    return {"id": conversation_id, "user_id": user_id, "title": title, "created_at": now, "updated_at": now}


def list_conversations(*, user_id: str, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM nutri_ai_conversations WHERE user_id = ? ORDER BY updated_at DESC LIMIT ? OFFSET ?",
            (user_id, int(limit), int(offset)),
        ).fetchall()
        return [dict(r) for r in rows]


def get_conversation(*, user_id: str, conversation_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute(
            "SELECT * FROM nutri_ai_conversations WHERE id = ? AND user_id = ?",
            (conversation_id, user_id),
        ).fetchone()
        return dict(row) if row else None


def require_conversation(*, user_id: str, conversation_id: str) -> Dict[str, Any]:
    row = get_conversation(user_id=user_id, conversation_id=conversation_id)
    if not row:
        raise HTTPException(status_code=404, detail="Conversa não encontrada")
    return row


def delete_conversation(*, user_id: str, conversation_id: str) -> bool:
    with db_conn(settings.db_path) as conn:
        cur = conn.execute(
            "DELETE FROM nutri_ai_conversations WHERE id = ? AND user_id = ?",
            (conversation_id, user_id),
        )
        return cur.rowcount > 0


def append_message(*, conversation_id: str, role: str, content: str, intent: str | None = None) -> Dict[str, Any]:
    msg_id = str(uuid4())
    now = utc_now()
    with db_conn(settings.db_path) as conn:
        conn.execute(
            "INSERT INTO nutri_ai_messages (id, conversation_id, role, content, intent, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (msg_id, conversation_id, role, content, intent, now),
        )
        conn.execute(
            "UPDATE nutri_ai_conversations SET updated_at = ? WHERE id = ?",
            (now, conversation_id),
        )
    return {
        "id": msg_id,
        "conversation_id": conversation_id,
        "role": role,
        "content": content,
        "intent": intent,
        "created_at": now,
    }


def update_title_if_first_user_message(*, conversation_id: str, title: str) -> None:
    with db_conn(settings.db_path) as conn:
        # Only rename while the conversation has a single user message and
        # still carries the default title.
        row = conn.execute(
            "SELECT COUNT(1) AS n FROM nutri_ai_messages WHERE conversation_id = ? AND role = 'user'",
            (conversation_id,),
        ).fetchone()
        n = int(row["n"]) if row else 0
        if n <= 1:
            conn.execute(
                "UPDATE nutri_ai_conversations SET title = ? WHERE id = ? AND title = ?",
                (title[:40], conversation_id, DEFAULT_TITLE),
            )


def list_messages(*, conversation_id: str, limit: int = 500) -> List[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM nutri_ai_messages WHERE conversation_id = ? ORDER BY created_at ASC, rowid ASC LIMIT ?",
            (conversation_id, int(limit)),
        ).fetchall()
        return [dict(r) for r in rows]
