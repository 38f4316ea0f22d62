# -*- coding: utf-8 -*-
"""Chat — one assistant conversation (history, captured name, context)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..tts.models import VoiceProvider
from . import storage
from .assistant import ERROR_REPLY, AssistantReply, generate_reply
from .intents import Intent, IntentType, analyze_intent

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Olá! Eu sou seu NutriAI. Qual é o seu nome?"

_OBJECTIVE_INTENTS = {IntentType.weight_loss, IntentType.muscle_gain, IntentType.energy}

ReplyFn = Callable[..., AssistantReply]


@dataclass
class Message:
    role: str
    content: str
    intent: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"role": self.role, "content": self.content, "intent": self.intent, "timestamp": self.timestamp}


@dataclass
class ConversationContext:
    has_introduced: bool = False
    last_objective: str = ""
    user_preferences: List[str] = field(default_factory=list)
    mood: str = "neutral"


class ChatConversation:
    """Turn handling for the NutriAI assistant.

    When ``conversation_id`` is set every message is persisted to
    ``nutri_ai_messages``; otherwise the history lives only in memory.
    """

    def __init__(
        self,
        *,
        user_name: str = "",
        voice_provider: VoiceProvider = VoiceProvider.elevenlabs_male,
        conversation_id: str | None = None,
        reply_fn: ReplyFn | None = None,
    ) -> None:
        self.messages: List[Message] = []
        self.user_name = user_name
        self.voice_provider = voice_provider
        self.conversation_id = conversation_id
        self.context = ConversationContext(has_introduced=bool(user_name))
        self.is_processing = False
        self._reply_fn = reply_fn or generate_reply

    @classmethod
    def from_history(cls, rows: List[Dict[str, str]], **kwargs) -> "ChatConversation":
        conv = cls(**kwargs)
        for row in rows:
            conv.messages.append(
                Message(role=row["role"], content=row["content"], intent=row.get("intent"), timestamp=row.get("created_at") or "")
            )
            if row["role"] == "user":
                conv._apply_intent(analyze_intent(row["content"]))
        return conv

    def start(self) -> Optional[Message]:
        """Seed an empty conversation with the welcome line.

        A conversation resumed from history keeps its messages and returns None.
        """
        if self.messages:
            return None
        welcome = Message(role="assistant", content=WELCOME_MESSAGE)
        self.messages = [welcome]
        self._persist(welcome)
        return welcome

    def history(self) -> List[Dict[str, str]]:
        return [{"role": m.role, "content": m.content} for m in self.messages]

    def _persist(self, message: Message) -> None:
        if not self.conversation_id:
            return
        storage.append_message(
            conversation_id=self.conversation_id,
            role=message.role,
            content=message.content,
            intent=message.intent,
        )
        if message.role == "user":
            storage.update_title_if_first_user_message(conversation_id=self.conversation_id, title=message.content)

    def _apply_intent(self, intent: Intent) -> None:
        if intent.type is IntentType.set_name and intent.data:
            self.user_name = intent.data
            self.context.has_introduced = True
        elif intent.type in _OBJECTIVE_INTENTS:
            self.context.last_objective = intent.type.value

    def send(self, content: str) -> Optional[Message]:
        """Run one user turn. Returns the assistant message, or None when ignored."""
        text = (content or "").strip()
        if not text or self.is_processing:
            return None

        self.is_processing = True
        try:
            intent = analyze_intent(text)
            user_msg = Message(role="user", content=text, intent=intent.type.value)
            self.messages.append(user_msg)
            self._persist(user_msg)
            self._apply_intent(intent)

            try:
                reply = self._reply_fn(messages=self.history(), user_name=self.user_name, intent=intent)
                answer = reply.text()
            except Exception as exc:
                logger.warning("assistant reply failed: %s", exc, exc_info=True)
                answer = ERROR_REPLY

            ai_msg = Message(role="assistant", content=answer, intent=intent.type.value)
            self.messages.append(ai_msg)
            self._persist(ai_msg)
            return ai_msg
        finally:
            self.is_processing = False
