# -*- coding: utf-8 -*-
"""Chat — Pydantic models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConversationCreateRequest(BaseModel):
    title: str = Field(default="Nova conversa", max_length=64)
    start: bool = Field(True, description="Seed the conversation with the welcome message")


class ConversationSummary(BaseModel):
    id: str
    title: str
    created_at: str
    updated_at: str


class ConversationListResponse(BaseModel):
    count: int
    items: List[ConversationSummary]


class ConversationMessage(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    intent: Optional[str] = None
    created_at: str


class ConversationDetailResponse(ConversationSummary):
    messages: List[ConversationMessage]


class ConversationMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)
    user_name: str = Field("", max_length=64)


class ConversationMessageResponse(BaseModel):
    status: str
    answer: str
    intent: str
    user_name: str


class ChatHistoryItem(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class IntentPayload(BaseModel):
    type: str = "general"
    data: Optional[str] = None


class NutriChatRequest(BaseModel):
    """Body of the ``nutri-ai-chat`` function (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatHistoryItem] = Field(default_factory=list)
    user_name: str = Field("", alias="userName", max_length=64)
    intent: Optional[IntentPayload] = None
