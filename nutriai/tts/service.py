# -*- coding: utf-8 -*-
"""Text-to-speech — provider switch, cache and free-voice fallback."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Callable, Dict

import httpx

from ..config import settings
from .cache import SpeechCache
from .errors import EmptyTextError, SpeechError
from .models import VoiceProvider
from .providers import ElevenLabsVoice, GoogleTranslateVoice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechResult:
    audio_content: str
    provider: VoiceProvider
    cached: bool = False


class TextToSpeechService:
    """Synthesizes speech for the three voice providers.

    ElevenLabs failures fall back to the free Google voice when
    ``fallback_enabled``; if that fails too, the original error is raised.
    """

    def __init__(
        self,
        *,
        cache: SpeechCache | None = None,
        voices: Dict[VoiceProvider, object] | None = None,
        client_factory: Callable[[], httpx.Client] | None = None,
        fallback_enabled: bool | None = None,
    ) -> None:
        self.cache = cache or SpeechCache(ttl_seconds=settings.tts_cache_ttl)
        self.voices = voices or default_voices()
        self._client_factory = client_factory or (
            lambda: httpx.Client(timeout=settings.tts_timeout, follow_redirects=True)
        )
        self.fallback_enabled = settings.tts_fallback if fallback_enabled is None else fallback_enabled

    def _call(self, provider: VoiceProvider, text: str) -> str:
        voice = self.voices[provider]
        with self._client_factory() as client:
            audio = voice.synthesize(client, text)
        return base64.b64encode(audio).decode("ascii")

    def _synthesize_cached(self, provider: VoiceProvider, text: str) -> SpeechResult:
        cached = self.cache.get(provider.value, text)
        if cached is not None:
            logger.info("tts cache hit: provider=%s", provider.value)
            return SpeechResult(audio_content=cached, provider=provider, cached=True)
        audio_content = self._call(provider, text)
        self.cache.put(provider.value, text, audio_content)
        return SpeechResult(audio_content=audio_content, provider=provider)

    def synthesize(self, text: str | None, provider: VoiceProvider = VoiceProvider.elevenlabs_male) -> SpeechResult:
        if not text or not text.strip():
            raise EmptyTextError()

        logger.info("tts request: provider=%s chars=%d preview=%r", provider.value, len(text), text[:50])
        try:
            return self._synthesize_cached(provider, text)
        except SpeechError as exc:
            if not (provider.is_elevenlabs and self.fallback_enabled):
                raise
            logger.warning("tts provider %s failed (%s); falling back to google", provider.value, exc.message)
            try:
                return self._synthesize_cached(VoiceProvider.google, text)
            except SpeechError as fallback_exc:
                logger.error("tts fallback failed: %s", fallback_exc)
                raise exc from fallback_exc


def default_voices() -> Dict[VoiceProvider, object]:
    return {
        VoiceProvider.elevenlabs_male: ElevenLabsVoice(
            base_url=settings.elevenlabs_base_url,
            api_key=settings.elevenlabs_api_key,
            voice_id=settings.elevenlabs_voice_male,
            model_id=settings.elevenlabs_model,
        ),
        VoiceProvider.elevenlabs_female: ElevenLabsVoice(
            base_url=settings.elevenlabs_base_url,
            api_key=settings.elevenlabs_api_key,
            voice_id=settings.elevenlabs_voice_female,
            model_id=settings.elevenlabs_model,
        ),
        VoiceProvider.google: GoogleTranslateVoice(url=settings.google_tts_url, lang=settings.google_tts_lang),
    }


_service: TextToSpeechService | None = None


def get_tts_service() -> TextToSpeechService:
    global _service
    if _service is None:
        _service = TextToSpeechService()
    return _service
