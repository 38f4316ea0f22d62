# -*- coding: utf-8 -*-
"""Voice — runs one VoiceSession against the chat and speech services.

A single consumer drains the event queue, so session state is only touched
from one coroutine. Chat turns and synthesis are blocking HTTP calls and run
in worker threads; their outcome is queued back as internal events.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from ..chat.assistant import ERROR_REPLY
from ..chat.conversation import ChatConversation
from ..tts.errors import SpeechError
from ..tts.models import VoiceProvider
from ..tts.service import TextToSpeechService
from .session import Command, CommandType, Event, EventType, VoiceSession

logger = logging.getLogger(__name__)

Emit = Callable[[Dict[str, Any]], Awaitable[None]]


class VoiceCoordinator:
    def __init__(
        self,
        *,
        conversation: ChatConversation,
        tts: TextToSpeechService,
        emit: Emit,
        session: Optional[VoiceSession] = None,
    ) -> None:
        self.conversation = conversation
        self.tts = tts
        self.emit = emit
        self.session = session or VoiceSession(voice_provider=conversation.voice_provider)
        self.queue: asyncio.Queue[Optional[Event]] = asyncio.Queue()
        self._tasks: Set[asyncio.Task] = set()

    async def submit(self, event: Event) -> None:
        await self.queue.put(event)

    async def run(self) -> None:
        """Consume events until ``close()`` is called."""
        while True:
            event = await self.queue.get()
            try:
                if event is None:
                    return
                await self._handle(event)
            finally:
                self.queue.task_done()

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.queue.put(None)

    async def wait_idle(self) -> None:
        """Block until the queue is drained and no background work is pending."""
        while True:
            await self.queue.join()
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                if self.queue.empty():
                    return
                continue
            await asyncio.gather(*pending, return_exceptions=True)

    async def _handle(self, event: Event) -> None:
        if event.type is EventType.activate and not self.session.active:
            welcome = await asyncio.to_thread(self.conversation.start)
            event = dataclasses.replace(event, text=welcome.content if welcome is not None else "")
        elif event.type is EventType.set_voice and event.provider is not None:
            self.conversation.voice_provider = event.provider

        for command in self.session.dispatch(event):
            await self._execute(command)

    async def _execute(self, command: Command) -> None:
        if not command.is_internal:
            await self.emit(command.to_dict())
        elif command.type is CommandType.schedule and command.event is not None:
            self._spawn(self._later(command.delay_ms, command.event))
        elif command.type is CommandType.run_turn:
            self._spawn(self._run_turn(command.payload["text"]))
        elif command.type is CommandType.synthesize:
            self._spawn(self._synthesize(command.payload["text"], VoiceProvider(command.payload["provider"])))

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _later(self, delay_ms: int, event: Event) -> None:
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000.0)
        await self.queue.put(event)

    async def _run_turn(self, text: str) -> None:
        try:
            reply = await asyncio.to_thread(self.conversation.send, text)
            answer = reply.content if reply is not None else ""
        except Exception as exc:
            logger.error("voice turn failed: %s", exc, exc_info=True)
            answer = ERROR_REPLY
        await self.queue.put(Event(type=EventType.turn_completed, text=answer))

    async def _synthesize(self, text: str, provider: VoiceProvider) -> None:
        try:
            result = await asyncio.to_thread(self.tts.synthesize, text, provider)
        except SpeechError as exc:
            logger.warning("voice synthesis failed (%s): %s", provider.value, exc.message)
            await self.queue.put(Event(type=EventType.speech_failed, error=exc.message))
            return
        await self.queue.put(
            Event(type=EventType.speech_ready, audio=result.audio_content, provider=result.provider)
        )
