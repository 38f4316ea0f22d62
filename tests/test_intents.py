# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest
from datetime import date

from nutriai.chat.assistant import fallback_reply, format_date_pt
from nutriai.chat.intents import Intent, IntentType, analyze_intent


class TestAnalyzeIntent(unittest.TestCase):
    def test_name_phrases(self) -> None:
        self.assertEqual(analyze_intent("Meu nome é maria"), Intent(IntentType.set_name, "Maria"))
        self.assertEqual(analyze_intent("oi, me chamo JOÃO"), Intent(IntentType.set_name, "João"))
        self.assertEqual(analyze_intent("eu sou a ana"), Intent(IntentType.set_name, "Ana"))
        self.assertEqual(analyze_intent("pode me chamar de Zé"), Intent(IntentType.set_name, "Zé"))

    def test_single_word_is_a_name(self) -> None:
        self.assertEqual(analyze_intent("carlos"), Intent(IntentType.set_name, "Carlos"))

    def test_single_keyword_is_not_a_name(self) -> None:
        self.assertEqual(analyze_intent("oi").type, IntentType.greeting)
        self.assertEqual(analyze_intent("valeu").type, IntentType.thanks)
        self.assertEqual(analyze_intent("obrigada").type, IntentType.thanks)

    def test_keywords_in_priority_order(self) -> None:
        self.assertEqual(analyze_intent("bom dia!").type, IntentType.greeting)
        self.assertEqual(analyze_intent("que dia é hoje?").type, IntentType.date_info)
        self.assertEqual(analyze_intent("quero emagrecer rápido").type, IntentType.weight_loss)
        self.assertEqual(analyze_intent("como ganho massa muscular").type, IntentType.muscle_gain)
        self.assertEqual(analyze_intent("estou muito cansado hoje à tarde").type, IntentType.date_info)
        self.assertEqual(analyze_intent("ando muito cansada").type, IntentType.energy)
        self.assertEqual(analyze_intent("o que posso comer no jantar?").type, IntentType.meal_suggestion)

    def test_whole_word_greeting(self) -> None:
        # "hipertrofia" contains "hi" and "oito" contains "oi".
        self.assertEqual(analyze_intent("quero hipertrofia").type, IntentType.muscle_gain)
        self.assertEqual(analyze_intent("treinei oito vezes").type, IntentType.general)

    def test_general(self) -> None:
        self.assertEqual(analyze_intent("qual a previsão do tempo amanhã").type, IntentType.general)
        self.assertEqual(analyze_intent("").type, IntentType.general)


class TestFallbackReply(unittest.TestCase):
    def test_uses_captured_name(self) -> None:
        reply = fallback_reply(Intent(IntentType.set_name, "Maria"))
        self.assertIn("Maria", reply)

    def test_greeting_with_user_name(self) -> None:
        self.assertTrue(fallback_reply(Intent(IntentType.greeting), user_name="Ana").startswith("Oi, Ana!"))

    def test_date_in_portuguese(self) -> None:
        today = date(2024, 3, 5)
        self.assertEqual(format_date_pt(today), "terça-feira, 5 de março de 2024")
        self.assertIn("terça-feira, 5 de março de 2024", fallback_reply(Intent(IntentType.date_info), today=today))

    def test_general_has_reply(self) -> None:
        self.assertTrue(fallback_reply(Intent(IntentType.general)))


if __name__ == "__main__":
    unittest.main()
