# -*- coding: utf-8 -*-
"""Voice — turn-taking state machine.

``VoiceSession`` is pure: ``dispatch(event)`` updates flags and returns the
commands to carry out. Client-facing commands are relayed over the socket;
internal ones (``run_turn``, ``synthesize``, ``schedule``) are executed by the
coordinator, which feeds the outcome back in as internal events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..tts.models import VoiceProvider

logger = logging.getLogger(__name__)

MIC_DENIED_NOTICE = "Permissão de microfone negada. Ative o microfone para conversar com o NutriAI."
PLAYBACK_ERROR_NOTICE = "Erro ao reproduzir áudio"


class EventType(str, Enum):
    # sent by the client
    activate = "activate"
    deactivate = "deactivate"
    recognizer_started = "recognizer_started"
    recognizer_ended = "recognizer_ended"
    recognizer_result = "recognizer_result"
    recognizer_error = "recognizer_error"
    pause = "pause"
    resume = "resume"
    toggle_pause = "toggle_pause"
    text = "text"
    playback_started = "playback_started"
    playback_ended = "playback_ended"
    playback_error = "playback_error"
    set_voice = "set_voice"
    # produced by the coordinator
    recognition_due = "recognition_due"
    speak = "speak"
    turn_completed = "turn_completed"
    speech_ready = "speech_ready"
    speech_failed = "speech_failed"


INTERNAL_EVENTS = frozenset(
    {
        EventType.recognition_due,
        EventType.speak,
        EventType.turn_completed,
        EventType.speech_ready,
        EventType.speech_failed,
    }
)


@dataclass(frozen=True)
class Event:
    type: EventType
    text: str = ""
    results: Tuple[Tuple[str, bool], ...] = ()
    error: str = ""
    provider: Optional[VoiceProvider] = None
    audio: str = ""

    @classmethod
    def from_client(cls, payload: Dict[str, Any]) -> "Event":
        """Build an event from a client JSON message; internal types are refused."""
        try:
            etype = EventType(str(payload.get("type") or ""))
        except ValueError as exc:
            raise ValueError(f"unknown event type: {payload.get('type')!r}") from exc
        if etype in INTERNAL_EVENTS:
            raise ValueError(f"event type not allowed from client: {etype.value}")

        results: List[Tuple[str, bool]] = []
        for item in payload.get("results") or []:
            if isinstance(item, dict):
                is_final = item.get("isFinal", item.get("is_final", False))
                results.append((str(item.get("transcript") or ""), bool(is_final)))

        provider = None
        raw_provider = payload.get("voiceProvider") or payload.get("voice_provider")
        if raw_provider:
            provider = VoiceProvider(str(raw_provider))
        if etype is EventType.set_voice and provider is None:
            raise ValueError("set_voice requires voiceProvider")

        return cls(
            type=etype,
            text=str(payload.get("text") or ""),
            results=tuple(results),
            error=str(payload.get("error") or ""),
            provider=provider,
        )


class CommandType(str, Enum):
    start_recognition = "start_recognition"
    stop_recognition = "stop_recognition"
    play_audio = "play_audio"
    message = "message"
    state = "state"
    notice = "notice"
    # executed by the coordinator
    run_turn = "run_turn"
    synthesize = "synthesize"
    schedule = "schedule"


INTERNAL_COMMANDS = frozenset({CommandType.run_turn, CommandType.synthesize, CommandType.schedule})


@dataclass(frozen=True)
class Command:
    type: CommandType
    payload: Dict[str, Any] = field(default_factory=dict)
    delay_ms: int = 0
    event: Optional[Event] = None

    @property
    def is_internal(self) -> bool:
        return self.type in INTERNAL_COMMANDS

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, **self.payload}


class VoiceState(str, Enum):
    idle = "idle"
    listening = "listening"
    processing = "processing"
    speaking = "speaking"
    paused = "paused"


def _schedule(event: Event, delay_ms: int) -> Command:
    return Command(type=CommandType.schedule, delay_ms=delay_ms, event=event)


class VoiceSession:
    def __init__(
        self,
        *,
        voice_provider: VoiceProvider = VoiceProvider.elevenlabs_male,
        restart_delay_ms: int = 800,
        start_delay_ms: int = 1500,
        welcome_delay_ms: int = 1000,
    ) -> None:
        self.voice_provider = voice_provider
        self.restart_delay_ms = restart_delay_ms
        self.start_delay_ms = start_delay_ms
        self.welcome_delay_ms = welcome_delay_ms

        self.active = False
        self.paused = False
        self.recognizer_running = False
        self.mic_denied = False
        self.processing = False
        self.fetching_audio = False
        self.playing_audio = False

    @property
    def speaking(self) -> bool:
        return self.fetching_audio or self.playing_audio

    @property
    def state(self) -> VoiceState:
        if not self.active:
            return VoiceState.idle
        if self.paused:
            return VoiceState.paused
        if self.speaking:
            return VoiceState.speaking
        if self.processing:
            return VoiceState.processing
        return VoiceState.listening

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "active": self.active,
            "paused": self.paused,
            "listening": self.recognizer_running,
            "voice_provider": self.voice_provider.value,
        }

    def dispatch(self, event: Event) -> List[Command]:
        before = self.snapshot()
        handler = getattr(self, f"_on_{event.type.value}")
        commands: List[Command] = handler(event)
        if self.snapshot() != before:
            commands.append(Command(type=CommandType.state, payload=self.snapshot()))
        return commands

    # ---- lifecycle ----

    def _on_activate(self, event: Event) -> List[Command]:
        if self.active:
            return []
        self.active = True
        self.paused = False
        self.mic_denied = False
        commands = []
        if event.text:
            commands.append(Command(type=CommandType.message, payload={"role": "assistant", "content": event.text}))
            commands.append(_schedule(Event(type=EventType.speak, text=event.text), self.welcome_delay_ms))
        commands.append(_schedule(Event(type=EventType.recognition_due), self.start_delay_ms))
        return commands

    def _on_deactivate(self, event: Event) -> List[Command]:
        commands = []
        if self.recognizer_running:
            commands.append(Command(type=CommandType.stop_recognition))
        self.recognizer_running = False
        self.active = False
        self.paused = False
        return commands

    # ---- recognizer ----

    def _start_if_idle(self) -> List[Command]:
        if not self.active or self.paused or self.recognizer_running or self.mic_denied:
            return []
        return [Command(type=CommandType.start_recognition)]

    def _on_recognition_due(self, event: Event) -> List[Command]:
        return self._start_if_idle()

    def _on_recognizer_started(self, event: Event) -> List[Command]:
        self.recognizer_running = True
        return []

    def _on_recognizer_ended(self, event: Event) -> List[Command]:
        self.recognizer_running = False
        if self.active and not self.paused:
            return [_schedule(Event(type=EventType.recognition_due), self.restart_delay_ms)]
        return []

    def _on_recognizer_error(self, event: Event) -> List[Command]:
        self.recognizer_running = False
        if event.error == "not-allowed":
            self.mic_denied = True
            return [Command(type=CommandType.notice, payload={"level": "error", "message": MIC_DENIED_NOTICE})]
        logger.info("recognizer error: %s", event.error or "unknown")
        return []

    def _on_recognizer_result(self, event: Event) -> List[Command]:
        if self.paused:
            return []
        transcript = "".join(text for text, is_final in event.results if is_final)
        if not transcript.strip() and event.text:
            transcript = event.text
        return self._begin_turn(transcript)

    def _on_text(self, event: Event) -> List[Command]:
        return self._begin_turn(event.text)

    def _begin_turn(self, text: str) -> List[Command]:
        content = (text or "").strip()
        if not content or self.paused:
            return []
        if self.speaking:
            # The recognizer hears the assistant's own voice.
            logger.debug("transcript ignored while speaking: %r", content[:50])
            return []
        if self.processing:
            return []
        self.processing = True
        return [
            Command(type=CommandType.message, payload={"role": "user", "content": content}),
            Command(type=CommandType.run_turn, payload={"text": content}),
        ]

    def _on_turn_completed(self, event: Event) -> List[Command]:
        self.processing = False
        if not event.text:
            return []
        commands = [Command(type=CommandType.message, payload={"role": "assistant", "content": event.text})]
        commands.extend(self._request_speech(event.text))
        return commands

    # ---- pause ----

    def _on_pause(self, event: Event) -> List[Command]:
        if not self.active or self.paused:
            return []
        self.paused = True
        if self.recognizer_running:
            return [Command(type=CommandType.stop_recognition)]
        return []

    def _on_resume(self, event: Event) -> List[Command]:
        if not self.active or not self.paused:
            return []
        self.paused = False
        self.mic_denied = False
        return self._start_if_idle()

    def _on_toggle_pause(self, event: Event) -> List[Command]:
        return self._on_resume(event) if self.paused else self._on_pause(event)

    # ---- speech ----

    def _request_speech(self, text: str) -> List[Command]:
        if not self.active or not text.strip():
            return []
        if self.speaking:
            logger.info("speech dropped, audio already in progress")
            return []
        self.fetching_audio = True
        return [Command(type=CommandType.synthesize, payload={"text": text, "provider": self.voice_provider.value})]

    def _on_speak(self, event: Event) -> List[Command]:
        return self._request_speech(event.text)

    def _on_speech_ready(self, event: Event) -> List[Command]:
        self.fetching_audio = False
        if not self.active or not event.audio:
            return []
        self.playing_audio = True
        provider = event.provider or self.voice_provider
        return [Command(type=CommandType.play_audio, payload={"audioContent": event.audio, "provider": provider.value})]

    def _on_speech_failed(self, event: Event) -> List[Command]:
        self.fetching_audio = False
        return []

    def _on_playback_started(self, event: Event) -> List[Command]:
        self.playing_audio = True
        return []

    def _on_playback_ended(self, event: Event) -> List[Command]:
        self.playing_audio = False
        return []

    def _on_playback_error(self, event: Event) -> List[Command]:
        self.playing_audio = False
        return [Command(type=CommandType.notice, payload={"level": "error", "message": PLAYBACK_ERROR_NOTICE})]

    def _on_set_voice(self, event: Event) -> List[Command]:
        if event.provider is not None:
            self.voice_provider = event.provider
        return []
