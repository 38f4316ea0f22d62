# -*- coding: utf-8 -*-
"""Text-to-speech — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VoiceProvider(str, Enum):
    elevenlabs_male = "elevenlabs-male"
    elevenlabs_female = "elevenlabs-female"
    google = "google"

    @property
    def is_elevenlabs(self) -> bool:
        return self is not VoiceProvider.google


class SpeechRequest(BaseModel):
    """Body of the ``text-to-speech`` function (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    voice_provider: VoiceProvider = Field(VoiceProvider.elevenlabs_male, alias="voiceProvider")


class SpeechResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_content: str = Field(..., alias="audioContent", description="Base64 MPEG audio")
    provider: VoiceProvider
    cached: bool = False
