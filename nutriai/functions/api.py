# -*- coding: utf-8 -*-
"""Edge-function compatible routes.

The mobile client calls these by name with camelCase bodies and expects
``{"error": ...}`` on failure instead of FastAPI's ``detail`` envelope.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..auth.security import get_current_user
from ..chat.assistant import generate_reply
from ..chat.intents import Intent, IntentType, analyze_intent
from ..chat.models import IntentPayload, NutriChatRequest
from ..diet.api import analyze_image
from ..diet.models import AnalyzeFoodRequest
from ..tts.errors import SpeechError
from ..tts.models import SpeechRequest, SpeechResponse
from ..tts.service import get_tts_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["Functions"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _intent_from_payload(payload: IntentPayload | None, request: NutriChatRequest) -> Intent:
    if payload is not None:
        try:
            return Intent(type=IntentType(payload.type), data=payload.data)
        except ValueError:
            logger.info("unknown intent %r from client; reclassifying", payload.type)
    last_user = next((m.content for m in reversed(request.messages) if m.role == "user"), "")
    return analyze_intent(last_user)


@router.post("/analyze-food", summary="Analyze a meal photo")
def analyze_food(request: AnalyzeFoodRequest, user: dict = Depends(get_current_user)):
    try:
        analysis = analyze_image(user["id"], request.image_data, save=request.save)
    except HTTPException as exc:
        return _error(exc.status_code, str(exc.detail))
    return analysis.model_dump()


@router.post("/nutri-ai-chat", summary="Next assistant turn")
def nutri_ai_chat(request: NutriChatRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    intent = _intent_from_payload(request.intent, request)
    reply = generate_reply(
        messages=[m.model_dump() for m in request.messages],
        user_name=request.user_name,
        intent=intent,
    )
    return reply.to_dict()


@router.post("/text-to-speech", summary="Synthesize speech")
def text_to_speech(request: SpeechRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    try:
        result = get_tts_service().synthesize(request.text, request.voice_provider)
    except SpeechError as exc:
        logger.error("text-to-speech failed: status=%s %s", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    return SpeechResponse(
        audio_content=result.audio_content,
        provider=result.provider,
        cached=result.cached,
    ).model_dump(by_alias=True, mode="json")
