# -*- coding: utf-8 -*-

from __future__ import annotations

import random
import unittest
from datetime import date

from nutriai.progress.motivation import MESSAGES, pick_message
from nutriai.progress.stats import bmi, current_streak, monthly_stats
from nutriai.progress.storage import achievement_progress
from nutriai.tts.models import VoiceProvider
from nutriai.voice.greetings import first_name, resolve_voice_provider, welcome_message
from nutriai.workouts.models import Exercise
from nutriai.workouts.storage import completion_message, planned_seconds


class TestGreetings(unittest.TestCase):
    def test_first_name(self) -> None:
        self.assertEqual(first_name(""), "Amigo")
        self.assertEqual(first_name(None), "Amigo")
        self.assertEqual(first_name("maria clara souza"), "Maria")
        self.assertEqual(first_name("joao.silva+fit@example.com"), "Joao")

    def test_welcome_message(self) -> None:
        self.assertEqual(
            welcome_message("ana", "nPnG JM"),
            "Oi! Ana, que ótimo que está de volta no nPnG JM, vamos nos seus objetivos agora!",
        )

    def test_voice_provider_resolution(self) -> None:
        self.assertEqual(resolve_voice_provider("google", "female"), VoiceProvider.google)
        self.assertEqual(resolve_voice_provider(None, "female"), VoiceProvider.elevenlabs_female)
        self.assertEqual(resolve_voice_provider(None, "male"), VoiceProvider.elevenlabs_male)
        self.assertEqual(resolve_voice_provider("bogus", None), VoiceProvider.elevenlabs_male)
        self.assertEqual(
            resolve_voice_provider(None, None, default=VoiceProvider.google),
            VoiceProvider.google,
        )


class TestProgressStats(unittest.TestCase):
    def test_bmi(self) -> None:
        self.assertEqual(bmi(70, 175), 22.9)
        self.assertIsNone(bmi(70, None))

    def test_streak_stops_at_first_gap(self) -> None:
        today = date(2024, 6, 10)
        days = {"2024-06-10", "2024-06-09", "2024-06-08", "2024-06-06"}
        self.assertEqual(current_streak(days, today), 3)
        self.assertEqual(current_streak({"2024-06-09"}, today), 0)

    def test_monthly_stats(self) -> None:
        workouts = [
            {"calories_burned": 300, "duration_seconds": 2700, "completed_at": "2024-06-10T08:00:00Z"},
            {"calories_burned": 250, "duration_seconds": 1800, "completed_at": "2024-06-08T08:00:00Z"},
        ]
        meals = [
            {"calories": 900, "protein": 50, "meal_date": "2024-06-09T12:00:00Z", "is_estimated": 1},
            {"calories": 1000, "protein": 41, "meal_date": "2024-06-09T19:00:00Z", "is_estimated": 0},
            {"calories": 2500, "protein": 100, "meal_date": "2024-06-07T12:00:00Z", "is_estimated": 1},
        ]
        stats = monthly_stats(workouts, meals, date(2024, 6, 10))
        self.assertEqual(stats.workouts_completed, 2)
        self.assertEqual(stats.calories_burned, 550)
        self.assertEqual(stats.total_hours, 1.3)
        self.assertEqual(stats.current_streak, 4)
        self.assertEqual(stats.meals_registered, 3)
        self.assertEqual(stats.calorie_goal_days, 1)
        self.assertEqual(stats.avg_protein, 96)
        self.assertEqual(stats.ai_analyses, 2)

    def test_empty_month(self) -> None:
        stats = monthly_stats([], [], date(2024, 6, 10))
        self.assertEqual(stats.current_streak, 0)
        self.assertEqual(stats.avg_protein, 0)

    def test_achievement_progress(self) -> None:
        self.assertEqual(achievement_progress(5, 8), 63)
        self.assertIsNone(achievement_progress(None, 10))
        self.assertIsNone(achievement_progress(3, None))

    def test_motivation_never_repeats_previous(self) -> None:
        rng = random.Random(7)
        previous = None
        for _ in range(200):
            index, message = pick_message(previous, rng)
            self.assertNotEqual(index, previous)
            self.assertEqual(message, MESSAGES[index])
            previous = index


class TestWorkoutHelpers(unittest.TestCase):
    def test_planned_duration(self) -> None:
        exercises = [
            Exercise(name="Agachamento", duration=45, rest=15, reps=12, sets=3),
            Exercise(name="Prancha", duration=30),
        ]
        self.assertEqual(planned_seconds(exercises), 90)

    def test_completion_message(self) -> None:
        self.assertEqual(completion_message(320), "Treino concluído! 320 kcal queimadas 🔥")


if __name__ == "__main__":
    unittest.main()
