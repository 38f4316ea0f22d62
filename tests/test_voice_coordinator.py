# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import unittest
from typing import Any, Dict, List

from nutriai.chat.assistant import AssistantReply
from nutriai.chat.conversation import WELCOME_MESSAGE, ChatConversation
from nutriai.tts.errors import RateLimitError
from nutriai.tts.models import VoiceProvider
from nutriai.tts.service import SpeechResult
from nutriai.voice.coordinator import VoiceCoordinator
from nutriai.voice.session import Event, EventType, VoiceSession


class FakeTTS:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[tuple] = []

    def synthesize(self, text: str, provider: VoiceProvider) -> SpeechResult:
        self.calls.append((text, provider))
        if self.fail:
            raise RateLimitError()
        return SpeechResult(audio_content="QUJD", provider=provider)


class TestVoiceCoordinator(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.replies: List[Dict[str, Any]] = []

        def reply_fn(**kwargs) -> AssistantReply:
            self.replies.append(kwargs)
            return AssistantReply(response=f"Certo, {kwargs['user_name'] or 'amigo'}!")

        async def emit(message: Dict[str, Any]) -> None:
            self.sent.append(message)

        self.tts = FakeTTS()
        self.conversation = ChatConversation(reply_fn=reply_fn)
        self.coordinator = VoiceCoordinator(
            conversation=self.conversation,
            tts=self.tts,
            emit=emit,
            session=VoiceSession(restart_delay_ms=0, start_delay_ms=0, welcome_delay_ms=0),
        )
        self.consumer = asyncio.create_task(self.coordinator.run())

    async def asyncTearDown(self) -> None:
        await self.coordinator.close()
        await asyncio.wait_for(self.consumer, timeout=2)

    async def _send(self, event: Event) -> None:
        await self.coordinator.submit(event)
        await asyncio.wait_for(self.coordinator.wait_idle(), timeout=2)

    def _of_type(self, kind: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m["type"] == kind]

    async def test_activation_speaks_welcome_and_starts_listening(self) -> None:
        await self._send(Event(EventType.activate))

        messages = self._of_type("message")
        self.assertEqual(messages[0], {"type": "message", "role": "assistant", "content": WELCOME_MESSAGE})
        self.assertEqual(self.tts.calls, [(WELCOME_MESSAGE, VoiceProvider.elevenlabs_male)])
        self.assertEqual(len(self._of_type("play_audio")), 1)
        self.assertEqual(len(self._of_type("start_recognition")), 1)
        self.assertEqual(self.conversation.messages[0].content, WELCOME_MESSAGE)

    async def test_voice_turn(self) -> None:
        await self._send(Event(EventType.activate))
        await self._send(Event(EventType.playback_ended))
        await self._send(Event(EventType.recognizer_started))
        self.sent.clear()

        await self._send(Event(EventType.recognizer_result, results=(("meu nome é ana", True),)))

        messages = self._of_type("message")
        self.assertEqual([m["role"] for m in messages], ["user", "assistant"])
        self.assertEqual(messages[1]["content"], "Certo, Ana!")
        self.assertEqual(self.replies[-1]["intent"].data, "Ana")
        self.assertEqual(self._of_type("play_audio")[0]["audioContent"], "QUJD")
        self.assertEqual(self.coordinator.session.state.value, "speaking")

    async def test_echo_is_ignored_while_speaking(self) -> None:
        await self._send(Event(EventType.activate))
        self.assertTrue(self.coordinator.session.speaking)
        await self._send(Event(EventType.recognizer_result, results=(("Olá! Eu sou seu NutriAI.", True),)))
        self.assertEqual(self.replies, [])

    async def test_synthesis_failure_degrades(self) -> None:
        self.tts.fail = True
        await self._send(Event(EventType.activate))
        self.assertEqual(self._of_type("play_audio"), [])
        self.assertFalse(self.coordinator.session.speaking)
        self.assertEqual(self.coordinator.session.state.value, "listening")

    async def test_resumed_conversation_keeps_history(self) -> None:
        rows = [
            {"role": "assistant", "content": WELCOME_MESSAGE},
            {"role": "user", "content": "meu nome é ana"},
            {"role": "assistant", "content": "Prazer, Ana!"},
            {"role": "user", "content": "quero emagrecer"},
            {"role": "assistant", "content": "Vamos montar um plano."},
        ]
        self.coordinator.conversation = ChatConversation.from_history(rows, reply_fn=self.conversation._reply_fn)

        await self._send(Event(EventType.activate))
        self.assertEqual(self._of_type("message"), [])
        self.assertEqual(self.tts.calls, [])
        self.assertEqual(len(self._of_type("start_recognition")), 1)

        await self._send(Event(EventType.text, text="e agora?"))
        history = self.replies[-1]["messages"]
        self.assertEqual(len(history), 6)
        self.assertEqual(history[0]["content"], WELCOME_MESSAGE)
        self.assertEqual(history[-1]["content"], "e agora?")
        self.assertEqual(self.replies[-1]["user_name"], "Ana")
        self.assertEqual(self.coordinator.conversation.context.last_objective, "weight_loss")

    async def test_set_voice_reaches_synthesis(self) -> None:
        await self._send(Event(EventType.set_voice, provider=VoiceProvider.google))
        await self._send(Event(EventType.activate))
        self.assertEqual(self.tts.calls[0][1], VoiceProvider.google)
        self.assertEqual(self.conversation.voice_provider, VoiceProvider.google)


if __name__ == "__main__":
    unittest.main()
