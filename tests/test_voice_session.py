# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest
from typing import List

from nutriai.tts.models import VoiceProvider
from nutriai.voice.session import (
    MIC_DENIED_NOTICE,
    PLAYBACK_ERROR_NOTICE,
    Command,
    CommandType,
    Event,
    EventType,
    VoiceSession,
    VoiceState,
)


def _types(commands: List[Command]) -> List[CommandType]:
    return [c.type for c in commands]


def _without_state(commands: List[Command]) -> List[Command]:
    return [c for c in commands if c.type is not CommandType.state]


class TestVoiceSession(unittest.TestCase):
    def setUp(self) -> None:
        self.session = VoiceSession()

    def _active_listening(self) -> None:
        self.session.dispatch(Event(EventType.activate, text="Olá!"))
        self.session.dispatch(Event(EventType.recognizer_started))

    def test_activate_welcome_and_delays(self) -> None:
        commands = self.session.dispatch(Event(EventType.activate, text="Olá! Eu sou seu NutriAI."))
        self.assertEqual(
            _types(commands),
            [CommandType.message, CommandType.schedule, CommandType.schedule, CommandType.state],
        )
        speak, start = commands[1], commands[2]
        self.assertEqual((speak.event.type, speak.delay_ms), (EventType.speak, 1000))
        self.assertEqual((start.event.type, start.delay_ms), (EventType.recognition_due, 1500))
        self.assertEqual(self.session.state, VoiceState.listening)

    def test_activate_twice_is_noop(self) -> None:
        self.session.dispatch(Event(EventType.activate))
        self.assertEqual(self.session.dispatch(Event(EventType.activate)), [])

    def test_recognition_due_starts_only_when_stopped(self) -> None:
        self.session.dispatch(Event(EventType.activate))
        self.assertEqual(_types(self.session.dispatch(Event(EventType.recognition_due))), [CommandType.start_recognition])
        self.session.dispatch(Event(EventType.recognizer_started))
        self.assertEqual(_without_state(self.session.dispatch(Event(EventType.recognition_due))), [])

    def test_recognizer_end_restarts_after_800ms(self) -> None:
        self._active_listening()
        commands = _without_state(self.session.dispatch(Event(EventType.recognizer_ended)))
        self.assertEqual(len(commands), 1)
        self.assertEqual(commands[0].delay_ms, 800)
        self.assertEqual(commands[0].event.type, EventType.recognition_due)

    def test_no_restart_when_paused_or_inactive(self) -> None:
        self._active_listening()
        self.session.dispatch(Event(EventType.pause))
        self.assertEqual(_without_state(self.session.dispatch(Event(EventType.recognizer_ended))), [])
        self.session.dispatch(Event(EventType.deactivate))
        self.assertEqual(_without_state(self.session.dispatch(Event(EventType.recognizer_ended))), [])

    def test_final_transcripts_joined(self) -> None:
        self._active_listening()
        event = Event(
            EventType.recognizer_result,
            results=(("quero ", True), ("emag", False), ("emagrecer", True)),
        )
        commands = self.session.dispatch(event)
        self.assertEqual(commands[0].payload, {"role": "user", "content": "quero emagrecer"})
        self.assertEqual(commands[1].type, CommandType.run_turn)
        self.assertEqual(self.session.state, VoiceState.processing)

    def test_results_ignored_when_paused_blank_or_busy(self) -> None:
        self._active_listening()
        self.assertEqual(self.session.dispatch(Event(EventType.recognizer_result, results=(("  ", True),))), [])

        self.session.dispatch(Event(EventType.text, text="oi"))
        self.assertEqual(self.session.dispatch(Event(EventType.text, text="de novo")), [])

        self.session.dispatch(Event(EventType.turn_completed, text="Oi! Tudo bem?"))
        self.assertTrue(self.session.speaking)
        self.assertEqual(self.session.dispatch(Event(EventType.recognizer_result, results=(("eco", True),))), [])

        self.session.dispatch(Event(EventType.speech_failed))
        self.session.dispatch(Event(EventType.pause))
        self.assertEqual(self.session.dispatch(Event(EventType.text, text="oi")), [])

    def test_turn_completion_speaks_reply(self) -> None:
        self._active_listening()
        self.session.voice_provider = VoiceProvider.google
        self.session.dispatch(Event(EventType.text, text="oi"))
        commands = self.session.dispatch(Event(EventType.turn_completed, text="Oi! Tudo bem?"))
        self.assertEqual(commands[0].payload, {"role": "assistant", "content": "Oi! Tudo bem?"})
        self.assertEqual(commands[1].type, CommandType.synthesize)
        self.assertEqual(commands[1].payload, {"text": "Oi! Tudo bem?", "provider": "google"})
        self.assertEqual(self.session.state, VoiceState.speaking)

    def test_speech_dropped_while_audio_busy(self) -> None:
        self._active_listening()
        first = self.session.dispatch(Event(EventType.speak, text="um"))
        self.assertEqual(_types(_without_state(first)), [CommandType.synthesize])
        self.assertEqual(self.session.dispatch(Event(EventType.speak, text="dois")), [])

        played = self.session.dispatch(Event(EventType.speech_ready, audio="QUJD", provider=VoiceProvider.google))
        self.assertEqual(played[0].to_dict(), {"type": "play_audio", "audioContent": "QUJD", "provider": "google"})
        self.assertEqual(self.session.dispatch(Event(EventType.speak, text="três")), [])

        self.session.dispatch(Event(EventType.playback_ended))
        self.assertEqual(self.session.state, VoiceState.listening)
        self.assertEqual(_types(_without_state(self.session.dispatch(Event(EventType.speak, text="quatro")))), [CommandType.synthesize])

    def test_playback_error_notice(self) -> None:
        self._active_listening()
        self.session.dispatch(Event(EventType.playback_started))
        commands = _without_state(self.session.dispatch(Event(EventType.playback_error)))
        self.assertEqual(commands[0].payload["message"], PLAYBACK_ERROR_NOTICE)
        self.assertFalse(self.session.speaking)

    def test_microphone_denied(self) -> None:
        self._active_listening()
        commands = self.session.dispatch(Event(EventType.recognizer_error, error="not-allowed"))
        self.assertEqual(commands[0].type, CommandType.notice)
        self.assertEqual(commands[0].payload["message"], MIC_DENIED_NOTICE)
        self.assertEqual(_without_state(self.session.dispatch(Event(EventType.recognition_due))), [])

    def test_pause_resume_toggle(self) -> None:
        self._active_listening()
        commands = self.session.dispatch(Event(EventType.toggle_pause))
        self.assertEqual(_types(commands), [CommandType.stop_recognition, CommandType.state])
        self.assertEqual(self.session.state, VoiceState.paused)
        self.session.dispatch(Event(EventType.recognizer_ended))

        commands = self.session.dispatch(Event(EventType.toggle_pause))
        self.assertEqual(_types(commands), [CommandType.start_recognition, CommandType.state])
        self.assertEqual(self.session.state, VoiceState.listening)

    def test_deactivate(self) -> None:
        self._active_listening()
        commands = self.session.dispatch(Event(EventType.deactivate))
        self.assertEqual(_types(commands), [CommandType.stop_recognition, CommandType.state])
        self.assertEqual(self.session.state, VoiceState.idle)
        self.assertEqual(self.session.dispatch(Event(EventType.speak, text="oi")), [])

    def test_set_voice(self) -> None:
        commands = self.session.dispatch(Event(EventType.set_voice, provider=VoiceProvider.elevenlabs_female))
        self.assertEqual(self.session.voice_provider, VoiceProvider.elevenlabs_female)
        self.assertEqual(commands[-1].payload["voice_provider"], "elevenlabs-female")


class TestClientEvents(unittest.TestCase):
    def test_parse_recognizer_result(self) -> None:
        event = Event.from_client(
            {"type": "recognizer_result", "results": [{"transcript": "oi", "isFinal": True}, {"transcript": "x"}]}
        )
        self.assertEqual(event.results, (("oi", True), ("x", False)))

    def test_internal_events_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Event.from_client({"type": "speech_ready", "audio": "AAA"})
        with self.assertRaises(ValueError):
            Event.from_client({"type": "nope"})
        with self.assertRaises(ValueError):
            Event.from_client({"type": "set_voice"})

    def test_voice_provider_alias(self) -> None:
        event = Event.from_client({"type": "set_voice", "voiceProvider": "google"})
        self.assertEqual(event.provider, VoiceProvider.google)


if __name__ == "__main__":
    unittest.main()
