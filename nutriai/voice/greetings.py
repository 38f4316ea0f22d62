# -*- coding: utf-8 -*-
"""Voice — welcome line and voice preference resolution."""

from __future__ import annotations

import re
from typing import Optional

from ..tts.models import VoiceProvider

DEFAULT_FIRST_NAME = "Amigo"

_LEGACY_GENDER = {
    "female": VoiceProvider.elevenlabs_female,
    "feminino": VoiceProvider.elevenlabs_female,
    "male": VoiceProvider.elevenlabs_male,
    "masculino": VoiceProvider.elevenlabs_male,
}


def first_name(name: Optional[str]) -> str:
    """'joao.silva+fit@x.com' -> 'Joao'; empty -> 'Amigo'."""
    raw = (name or "").strip()
    if not raw:
        return DEFAULT_FIRST_NAME
    if "@" in raw:
        raw = raw.split("@", 1)[0]
    raw = re.sub(r"[.+]", " ", raw)
    tokens = raw.split()
    if not tokens:
        return DEFAULT_FIRST_NAME
    token = tokens[0]
    return token[:1].upper() + token[1:].lower()


def welcome_message(name: Optional[str], app_name: str) -> str:
    return f"Oi! {first_name(name)}, que ótimo que está de volta no {app_name}, vamos nos seus objetivos agora!"


def legacy_voice(gender: Optional[str]) -> Optional[VoiceProvider]:
    if not gender:
        return None
    return _LEGACY_GENDER.get(gender.strip().lower())


def resolve_voice_provider(
    stored: Optional[str],
    legacy_gender: Optional[str] = None,
    default: VoiceProvider = VoiceProvider.elevenlabs_male,
) -> VoiceProvider:
    if stored:
        try:
            return VoiceProvider(stored)
        except ValueError:
            pass
    return legacy_voice(legacy_gender) or default
