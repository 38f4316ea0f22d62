from __future__ import annotations

import os
from pathlib import Path
from typing import List


def _env_flag(name: str, default: str = "1") -> bool:
    return (os.environ.get(name) or default).strip() in {"1", "true", "True", "yes"}


class Settings:
    """Centralized configuration for the NutriAI backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("NUTRIAI_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("NUTRIAI_DB_PATH") or (self.data_root / "nutriai.db")
        ).expanduser()
        # Tokens are minted by the hosting platform; we only verify them.
        # In production you MUST set NUTRIAI_JWT_SECRET to the project's JWT secret.
        self.jwt_secret: str = os.environ.get("NUTRIAI_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("NUTRIAI_TOKEN_TTL_DAYS") or "7")
        self.app_name: str = os.environ.get("NUTRIAI_APP_NAME") or "nPnG JM"
        self.log_level: str = (os.environ.get("NUTRIAI_LOG_LEVEL") or "INFO").upper()

        # ---- Language model (OpenAI-compatible chat completions) ----
        self.llm_api_key: str | None = os.environ.get("NUTRIAI_LLM_API_KEY") or None
        self.llm_base_url: str = os.environ.get(
            "NUTRIAI_LLM_BASE_URL", "https://api.openai.com/v1"
        )
        self.llm_model: str = os.environ.get("NUTRIAI_LLM_MODEL", "gpt-4o-mini")
        self.vision_model: str = os.environ.get("NUTRIAI_VISION_MODEL") or self.llm_model
        self.llm_timeout: float = float(os.environ.get("NUTRIAI_LLM_TIMEOUT", "30"))
        self.llm_max_tokens: int = int(os.environ.get("NUTRIAI_LLM_MAX_TOKENS", "400"))
        self.llm_temperature: float = float(os.environ.get("NUTRIAI_LLM_TEMPERATURE", "0.7"))
        self.max_image_bytes: int = int(
            os.environ.get("NUTRIAI_MAX_IMAGE_BYTES") or str(5 * 1024 * 1024)
        )

        # ---- Text-to-speech ----
        self.elevenlabs_api_key: str | None = os.environ.get("ELEVENLABS_API_KEY") or None
        self.elevenlabs_base_url: str = os.environ.get(
            "ELEVENLABS_BASE_URL", "https://api.elevenlabs.io/v1"
        )
        self.elevenlabs_model: str = os.environ.get("ELEVENLABS_MODEL", "eleven_multilingual_v2")
        self.elevenlabs_voice_male: str = os.environ.get("ELEVENLABS_VOICE_MALE") or "TX3LPaxmHKxFdv7VOQHJ"
        self.elevenlabs_voice_female: str = os.environ.get("ELEVENLABS_VOICE_FEMALE") or "EXAVITQu4vr4xnSDxMaL"
        self.google_tts_url: str = os.environ.get(
            "GOOGLE_TTS_URL", "https://translate.google.com/translate_tts"
        )
        self.google_tts_lang: str = os.environ.get("GOOGLE_TTS_LANG", "pt-BR")
        self.tts_timeout: float = float(os.environ.get("NUTRIAI_TTS_TIMEOUT", "30"))
        self.tts_cache_ttl: float = float(os.environ.get("NUTRIAI_TTS_CACHE_TTL", "30"))
        self.tts_fallback: bool = _env_flag("NUTRIAI_TTS_FALLBACK")

        # ---- Voice turn-taking (client-side delays, milliseconds) ----
        self.recognition_restart_ms: int = int(os.environ.get("NUTRIAI_RECOGNITION_RESTART_MS", "800"))
        self.recognition_start_ms: int = int(os.environ.get("NUTRIAI_RECOGNITION_START_MS", "1500"))
        self.welcome_speak_ms: int = int(os.environ.get("NUTRIAI_WELCOME_SPEAK_MS", "1000"))

        cors = os.environ.get("NUTRIAI_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
