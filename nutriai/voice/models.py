# -*- coding: utf-8 -*-
"""Voice — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..tts.models import VoiceProvider


class VoicePreference(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    voice_provider: VoiceProvider = Field(..., alias="voiceProvider")
    migrated: bool = Field(False, description="True when derived from a legacy gender hint")


class VoicePreferenceUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    voice_provider: VoiceProvider = Field(..., alias="voiceProvider")


class WelcomeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str
    text: str
    voice_provider: VoiceProvider
    audio_content: Optional[str] = Field(None, alias="audioContent")
    provider: Optional[VoiceProvider] = None
