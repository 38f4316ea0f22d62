# -*- coding: utf-8 -*-
"""Text-to-speech — short-lived cache of synthesized audio.

Avoids paying twice when the same sentence is requested again within a few
seconds (duplicate clicks, welcome line replayed on re-render).
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

KEY_TEXT_PREFIX = 100


@dataclass
class _Entry:
    audio_content: str
    stored_at: float


class SpeechCache:
    def __init__(self, ttl_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(provider: str, text: str) -> str:
        return f"{provider}:{text[:KEY_TEXT_PREFIX]}"

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds

    def get(self, provider: str, text: str) -> Optional[str]:
        key = self.key(provider, text)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry.audio_content

    def put(self, provider: str, text: str, audio_content: str) -> None:
        now = self._clock()
        with self._lock:
            self._entries[self.key(provider, text)] = _Entry(audio_content, now)
            for k in [k for k, e in self._entries.items() if self._expired(e, now)]:
                del self._entries[k]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
