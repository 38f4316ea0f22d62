# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import unittest
from unittest import mock

import httpx

from nutriai.chat import assistant
from nutriai.chat.assistant import HISTORY_LIMIT, generate_reply
from nutriai.chat.intents import Intent, IntentType


def _history(n: int):
    return [{"role": "user" if i % 2 == 0 else "assistant", "content": f"m{i}"} for i in range(n)]


class TestGenerateReply(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.object(assistant.settings, "llm_api_key", "k")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_sends_recent_history_with_system_prompt(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": " Oi, Ana! "}}]})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        reply = generate_reply(
            messages=_history(20),
            user_name="Ana",
            intent=Intent(IntentType.greeting),
            client=client,
        )

        self.assertEqual(reply.to_dict(), {"response": "Oi, Ana!"})
        sent = seen["body"]["messages"]
        self.assertEqual(sent[0]["role"], "system")
        self.assertIn("Ana", sent[0]["content"])
        self.assertEqual(len(sent), HISTORY_LIMIT + 1)
        self.assertEqual(sent[1]["content"], "m8")

    def test_empty_answer_falls_back(self) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"choices": [{"message": {"content": ""}}]}))
        )
        reply = generate_reply(messages=_history(1), user_name="", intent=Intent(IntentType.thanks), client=client)
        self.assertEqual(reply.to_dict(), {"fallback": "Por nada! Conte comigo sempre que precisar."})

    def test_upstream_error_falls_back(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")))
        reply = generate_reply(
            messages=_history(1),
            user_name="Ana",
            intent=Intent(IntentType.greeting),
            client=client,
        )
        self.assertTrue(reply.fallback.startswith("Oi, Ana!"))

    def test_not_configured(self) -> None:
        with mock.patch.object(assistant.settings, "llm_api_key", None):
            reply = generate_reply(messages=[], user_name="", intent=Intent(IntentType.general))
        self.assertEqual(reply.fallback, "Entendi! Me conta mais para eu te ajudar melhor.")


if __name__ == "__main__":
    unittest.main()
