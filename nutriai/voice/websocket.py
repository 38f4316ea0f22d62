# -*- coding: utf-8 -*-
"""Voice — WebSocket endpoint.

The browser keeps the microphone, recognizer and audio element; it forwards
their events here as JSON and carries out the commands sent back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, WebSocket, WebSocketDisconnect

from ..auth.security import user_from_token
from ..chat.conversation import ChatConversation
from ..chat.storage import create_conversation, list_messages, require_conversation
from ..config import settings
from ..profiles.storage import get_profile
from ..tts.service import TextToSpeechService, get_tts_service
from .coordinator import VoiceCoordinator
from .greetings import first_name, resolve_voice_provider
from .session import Event, VoiceSession

logger = logging.getLogger(__name__)

WS_UNAUTHORIZED = 4401
WS_NOT_FOUND = 4404


def _open_conversation(user: Dict[str, Any], conversation_id: Optional[str], legacy_gender: Optional[str]) -> ChatConversation:
    profile = get_profile(user["id"]) or {}
    provider = resolve_voice_provider(profile.get("voice_provider"), legacy_gender)
    user_name = first_name(profile["name"]) if profile.get("name") else ""

    if conversation_id:
        require_conversation(user_id=user["id"], conversation_id=conversation_id)
        return ChatConversation.from_history(
            list_messages(conversation_id=conversation_id),
            conversation_id=conversation_id,
            user_name=user_name,
            voice_provider=provider,
        )
    row = create_conversation(user_id=user["id"])
    return ChatConversation(conversation_id=row["id"], user_name=user_name, voice_provider=provider)


async def voice_websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str],
    conversation_id: Optional[str] = None,
    legacy_gender: Optional[str] = None,
    tts: TextToSpeechService | None = None,
) -> None:
    try:
        user = user_from_token(token or "")
    except HTTPException:
        await websocket.close(code=WS_UNAUTHORIZED)
        return

    try:
        conversation = await asyncio.to_thread(_open_conversation, user, conversation_id, legacy_gender)
    except HTTPException:
        await websocket.close(code=WS_NOT_FOUND)
        return

    await websocket.accept()
    connected = True

    async def emit(message: Dict[str, Any]) -> None:
        if connected:
            await websocket.send_json(message)

    coordinator = VoiceCoordinator(
        conversation=conversation,
        tts=tts or get_tts_service(),
        emit=emit,
        session=VoiceSession(
            voice_provider=conversation.voice_provider,
            restart_delay_ms=settings.recognition_restart_ms,
            start_delay_ms=settings.recognition_start_ms,
            welcome_delay_ms=settings.welcome_speak_ms,
        ),
    )
    consumer = asyncio.create_task(coordinator.run())
    logger.info("voice session connected: user=%s conversation=%s", user["id"], conversation.conversation_id)

    await websocket.send_json(
        {
            "type": "connected",
            "conversation_id": conversation.conversation_id,
            **coordinator.session.snapshot(),
        }
    )

    try:
        while True:
            data = await websocket.receive_json()
            try:
                event = Event.from_client(data if isinstance(data, dict) else {})
            except ValueError as exc:
                await websocket.send_json({"type": "error", "message": str(exc)})
                continue
            await coordinator.submit(event)
    except WebSocketDisconnect:
        logger.info("voice session disconnected: user=%s", user["id"])
    except Exception as exc:
        logger.error("voice websocket error: %s", exc)
    finally:
        connected = False
        await coordinator.close()
        try:
            await consumer
        except asyncio.CancelledError:
            pass
