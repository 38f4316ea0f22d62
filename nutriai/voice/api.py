# -*- coding: utf-8 -*-
"""Voice — preference, welcome line and the realtime session socket."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket

from ..auth.security import get_current_user
from ..config import settings
from ..profiles.storage import get_profile, set_voice_provider
from ..tts.errors import SpeechError
from ..tts.service import get_tts_service
from .greetings import first_name, legacy_voice, resolve_voice_provider, welcome_message
from .models import VoicePreference, VoicePreferenceUpdate, WelcomeResponse
from .websocket import voice_websocket_endpoint

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/voice", tags=["Voice"])


@router.get("/preference", response_model=VoicePreference, summary="Get my voice")
def get_preference(
    gender: Optional[str] = Query(default=None, description="Legacy gender hint kept by older clients"),
    user: dict = Depends(get_current_user),
):
    profile = get_profile(user["id"]) or {}
    stored = profile.get("voice_provider")
    if not stored:
        migrated = legacy_voice(gender)
        if migrated is not None:
            # Persisted so the hint is only needed once.
            set_voice_provider(user["id"], migrated.value)
            return VoicePreference(voice_provider=migrated, migrated=True)
    return VoicePreference(voice_provider=resolve_voice_provider(stored))


@router.put("/preference", response_model=VoicePreference, summary="Set my voice")
def put_preference(request: VoicePreferenceUpdate, user: dict = Depends(get_current_user)):
    set_voice_provider(user["id"], request.voice_provider.value)
    return VoicePreference(voice_provider=request.voice_provider)


@router.get("/welcome", response_model=WelcomeResponse, summary="Welcome-back line")
def welcome(
    speak: bool = Query(default=False, description="Also synthesize the line"),
    user: dict = Depends(get_current_user),
):
    profile = get_profile(user["id"]) or {}
    name = profile.get("name") or user.get("email") or ""
    provider = resolve_voice_provider(profile.get("voice_provider"))
    text = welcome_message(name, settings.app_name)
    response = WelcomeResponse(first_name=first_name(name), text=text, voice_provider=provider)
    if speak:
        try:
            result = get_tts_service().synthesize(text, provider)
        except SpeechError as exc:
            logger.warning("welcome synthesis failed: %s", exc.message)
        else:
            response.audio_content = result.audio_content
            response.provider = result.provider
    return response


@router.websocket("/ws")
async def voice_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(default=None),
    conversation_id: Optional[str] = Query(default=None),
    gender: Optional[str] = Query(default=None),
):
    await voice_websocket_endpoint(websocket, token, conversation_id=conversation_id, legacy_gender=gender)
