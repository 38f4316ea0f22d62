# -*- coding: utf-8 -*-
"""Chat — API endpoints (assistant conversation history)."""

from __future__ import annotations

import threading
from typing import Any, Dict, Set

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from ..profiles.storage import get_profile
from ..voice.greetings import first_name
from .conversation import ChatConversation
from .models import (
    ConversationCreateRequest,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationMessage,
    ConversationMessageRequest,
    ConversationMessageResponse,
    ConversationSummary,
)
from .storage import (
    create_conversation,
    delete_conversation,
    list_conversations,
    list_messages,
    require_conversation,
)

router = APIRouter(prefix="/api/chat", tags=["Chat"])

# Conversations with a turn in flight; a second send to the same one gets 409.
_in_flight: Set[str] = set()
_in_flight_lock = threading.Lock()


def _summary(row: Dict[str, Any]) -> ConversationSummary:
    return ConversationSummary(
        id=row["id"],
        title=row["title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


@router.post("/conversations", response_model=ConversationSummary, summary="Create a conversation")
def create_chat_conversation(request: ConversationCreateRequest, user: dict = Depends(get_current_user)):
    row = create_conversation(user_id=user["id"], title=request.title)
    if request.start:
        ChatConversation(conversation_id=row["id"]).start()
    return _summary(row)


@router.get("/conversations", response_model=ConversationListResponse, summary="List my conversations")
def list_chat_conversations(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: dict = Depends(get_current_user),
):
    rows = list_conversations(user_id=user["id"], limit=limit, offset=offset)
    items = [_summary(r) for r in rows]
    return ConversationListResponse(count=len(items), items=items)


@router.get(
    "/conversations/{conversation_id}",
    response_model=ConversationDetailResponse,
    summary="Get a conversation with its messages",
)
def get_chat_conversation(conversation_id: str, user: dict = Depends(get_current_user)):
    row = require_conversation(user_id=user["id"], conversation_id=conversation_id)
    messages = list_messages(conversation_id=conversation_id)
    return ConversationDetailResponse(
        id=row["id"],
        title=row["title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        messages=[
            ConversationMessage(
                id=m["id"],
                role=m["role"],  # type: ignore[arg-type]
                content=m["content"],
                intent=m.get("intent"),
                created_at=m["created_at"],
            )
            for m in messages
        ],
    )


@router.delete("/conversations/{conversation_id}", summary="Delete a conversation and its messages")
def delete_chat_conversation(conversation_id: str, user: dict = Depends(get_current_user)):
    if not delete_conversation(user_id=user["id"], conversation_id=conversation_id):
        raise HTTPException(status_code=404, detail="Conversa não encontrada")
    return {"status": "ok"}


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=ConversationMessageResponse,
    summary="Send a message to the assistant",
)
def send_chat_message(
    conversation_id: str,
    request: ConversationMessageRequest,
    user: dict = Depends(get_current_user),
):
    require_conversation(user_id=user["id"], conversation_id=conversation_id)
    content = request.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Mensagem vazia")

    user_name = request.user_name.strip()
    if not user_name:
        profile = get_profile(user["id"])
        if profile and profile.get("name"):
            user_name = first_name(profile["name"])

    with _in_flight_lock:
        if conversation_id in _in_flight:
            raise HTTPException(status_code=409, detail="Mensagem já em processamento")
        _in_flight.add(conversation_id)
    try:
        conversation = ChatConversation.from_history(
            list_messages(conversation_id=conversation_id),
            conversation_id=conversation_id,
            user_name=user_name,
        )
        reply = conversation.send(content)
    finally:
        with _in_flight_lock:
            _in_flight.discard(conversation_id)
    return ConversationMessageResponse(
        status="ok",
        answer=reply.content,
        intent=reply.intent or "general",
        user_name=conversation.user_name,
    )
