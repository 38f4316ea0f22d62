# -*- coding: utf-8 -*-
"""Text-to-speech — failure classification.

Each provider failure maps to one exception type carrying the HTTP status and
the user-facing message returned by the ``text-to-speech`` function.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SpeechError(Exception):
    status_code = 500
    message = "Erro desconhecido"

    def __init__(self, details: str | None = None, *, message: str | None = None) -> None:
        self.details = details
        if message:
            self.message = message
        super().__init__(details or self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details and self.details != self.message:
            body["details"] = self.details
        return body


class EmptyTextError(SpeechError):
    status_code = 400
    message = "Texto é obrigatório"


class ProviderConfigError(SpeechError):
    message = "ELEVENLABS_API_KEY não configurada"


class ApiKeyInvalidError(SpeechError):
    message = "Chave de API inválida"


class ApiKeyBlockedError(SpeechError):
    status_code = 423
    message = "Serviço de voz temporariamente indisponível"


class RateLimitError(SpeechError):
    status_code = 429
    message = "Limite de requisições excedido"


class SpeechTimeoutError(SpeechError):
    status_code = 408
    message = "Timeout na requisição para ElevenLabs"


class ProviderResponseError(SpeechError):
    def __init__(self, status: Optional[int], body: str = "") -> None:
        self.upstream_status = status
        detail = f"ElevenLabs API error: {status} - {body}".strip(" -")
        super().__init__(detail, message=detail)


class EmptyAudioError(SpeechError):
    message = "Áudio vazio recebido da API"


class GoogleSpeechError(SpeechError):
    message = "Falha ao gerar voz com Google TTS. Tente novamente ou selecione outra voz."


def classify_elevenlabs_failure(status: int, body: str) -> SpeechError:
    if status == 401:
        if "detected_unusual_activity" in body:
            return ApiKeyBlockedError("Atividade incomum detectada")
        return ApiKeyInvalidError(body[:200] or None)
    if status == 429:
        return RateLimitError(body[:200] or None)
    return ProviderResponseError(status, body[:500])
