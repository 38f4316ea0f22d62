# -*- coding: utf-8 -*-
"""Text-to-speech — HTTP clients for the neural and the free voice."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .errors import (
    EmptyAudioError,
    GoogleSpeechError,
    ProviderConfigError,
    SpeechError,
    SpeechTimeoutError,
    classify_elevenlabs_failure,
)

logger = logging.getLogger(__name__)

ELEVENLABS_TEXT_LIMIT = 5000
GOOGLE_TEXT_LIMIT = 200
_BROWSER_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass(frozen=True)
class ElevenLabsVoice:
    base_url: str
    api_key: str | None
    voice_id: str
    model_id: str = "eleven_multilingual_v2"
    stability: float = 0.5
    similarity_boost: float = 0.8

    def synthesize(self, client: httpx.Client, text: str) -> bytes:
        if not self.api_key:
            raise ProviderConfigError()
        url = f"{self.base_url.rstrip('/')}/text-to-speech/{self.voice_id}"
        payload = {
            "text": text[:ELEVENLABS_TEXT_LIMIT],
            "model_id": self.model_id,
            "voice_settings": {
                "stability": self.stability,
                "similarity_boost": self.similarity_boost,
            },
        }
        logger.info("elevenlabs synth: voice=%s chars=%d", self.voice_id, len(text))
        try:
            resp = client.post(
                url,
                headers={"xi-api-key": self.api_key, "Content-Type": "application/json"},
                json=payload,
            )
        except httpx.TimeoutException as exc:
            raise SpeechTimeoutError(str(exc) or None) from exc
        except httpx.HTTPError as exc:
            raise SpeechError(f"ElevenLabs unreachable: {exc}", message=f"ElevenLabs unreachable: {exc}") from exc

        if resp.status_code >= 400:
            body = resp.text or ""
            logger.error("elevenlabs error: status=%s body=%s", resp.status_code, body[:300])
            raise classify_elevenlabs_failure(resp.status_code, body)

        audio = resp.content
        if not audio:
            raise EmptyAudioError()
        return audio


@dataclass(frozen=True)
class GoogleTranslateVoice:
    url: str
    lang: str = "pt-BR"

    def synthesize(self, client: httpx.Client, text: str) -> bytes:
        params = {"ie": "UTF-8", "client": "tw-ob", "tl": self.lang, "q": text[:GOOGLE_TEXT_LIMIT]}
        try:
            resp = client.get(self.url, params=params, headers={"User-Agent": _BROWSER_UA})
        except httpx.HTTPError as exc:
            raise GoogleSpeechError(str(exc) or exc.__class__.__name__) from exc
        if resp.status_code >= 400:
            logger.error("google tts error: status=%s", resp.status_code)
            raise GoogleSpeechError(f"Google TTS falhou com status {resp.status_code}")
        audio = resp.content
        if not audio:
            raise GoogleSpeechError("Google TTS retornou áudio vazio")
        logger.info("google tts: %d bytes", len(audio))
        return audio
