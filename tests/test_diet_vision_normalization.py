# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import json
import unittest
from unittest import mock

import httpx
from fastapi import HTTPException

from nutriai.diet import api as diet_api
from nutriai.diet import vision
from nutriai.diet.models import VisionRawResult
from nutriai.diet.vision import (
    ImagePayloadError,
    VisionConfigError,
    VisionRateLimitError,
    confidence_label,
    decode_image_payload,
    normalize_parsed,
    parse_model_output_json,
    recognize_food,
)

MAX = 5 * 1024 * 1024


class TestDietVisionNormalization(unittest.TestCase):
    def test_fenced_json_with_trailing_commas(self) -> None:
        content = "Claro! Aqui está:\n```json\n{\"foods\": [{\"name\": \"Arroz\", \"calories\": 130,},],}\n```"
        parsed = parse_model_output_json(content)
        self.assertEqual(parsed["foods"][0]["name"], "Arroz")

    def test_python_literal_dict(self) -> None:
        parsed = parse_model_output_json("{'foods': [], 'notes': None, 'ok': True}")
        self.assertEqual(parsed, {"foods": [], "notes": None, "ok": True})

    def test_no_json(self) -> None:
        with self.assertRaises(ValueError):
            parse_model_output_json("não consegui ver a imagem")

    def test_portuguese_aliases_and_nested_nutrition(self) -> None:
        parsed = {
            "alimentos": [
                {
                    "nome": "Frango grelhado",
                    "quantidade": "1 filé (120g)",
                    "nutricao": {"calorias": "198 kcal", "proteinas": 37.2, "carboidratos": 0, "gorduras": "4,3"},
                    "confianca": 0.9,
                },
                {"alimento": "Salada", "porção": "1 prato", "kcal": 25, "confidence": "media"},
            ],
            "avisos": "Porções estimadas",
        }
        known = normalize_parsed(parsed)
        result = VisionRawResult.model_validate(known)

        chicken, salad = result.foods
        self.assertEqual(chicken.name, "Frango grelhado")
        self.assertEqual(chicken.portion, "1 filé (120g)")
        self.assertEqual(chicken.portion_grams, 120)
        self.assertEqual(chicken.calories, 198)
        self.assertEqual(chicken.protein, 37.2)
        self.assertEqual(chicken.fat, 4.3)
        self.assertEqual(chicken.confidence, "alta")
        self.assertEqual(chicken.source, "Estimativa")

        self.assertEqual(salad.portion_grams, 100)
        self.assertEqual(salad.calories, 25)
        self.assertEqual(salad.confidence, "média")
        self.assertEqual(result.warnings, ["Porções estimadas"])
        self.assertIsNone(result.totals)

    def test_items_alias_and_totals(self) -> None:
        parsed = {
            "items": [{"food": "Pão", "portion_grams": 50, "calories": 130}],
            "totals": {"calorias": 130, "proteína": 4, "carbohydrates": 25, "fat": 1.5, "fibra": 2},
            "warning": "Imagem escura",
        }
        known = normalize_parsed(parsed)
        self.assertEqual(known["totals"], {"calories": 130.0, "protein": 4.0, "carbs": 25.0, "fat": 1.5})
        self.assertEqual(known["warnings"], ["Imagem escura"])
        self.assertEqual(known["foods"][0]["portion_grams"], 50.0)

    def test_legacy_envelope(self) -> None:
        parsed = {"status": "sucesso", "analise": {"alimentos": [{"nome": "Banana", "calorias": 89}]}}
        known = normalize_parsed(parsed)
        self.assertEqual(known["foods"][0]["name"], "Banana")

    def test_confidence_labels(self) -> None:
        self.assertEqual(confidence_label(0.85), "alta")
        self.assertEqual(confidence_label(0.84), "média")
        self.assertEqual(confidence_label(0.65), "média")
        self.assertEqual(confidence_label(0.5), "baixa")
        self.assertEqual(confidence_label(90), "alta")
        self.assertEqual(confidence_label("low"), "baixa")
        self.assertIsNone(confidence_label(None))


class TestImagePayload(unittest.TestCase):
    def test_empty_payloads_rejected(self) -> None:
        for payload in (None, "", "   ", "data:image/jpeg;base64,", "data:image/png;base64,   "):
            with self.assertRaises(ImagePayloadError) as ctx:
                decode_image_payload(payload, MAX)
            self.assertEqual(str(ctx.exception), "Imagem é obrigatória")

    def test_non_image_mime(self) -> None:
        with self.assertRaises(ImagePayloadError):
            decode_image_payload("data:text/plain;base64,aGVsbG8=", MAX)

    def test_invalid_base64(self) -> None:
        with self.assertRaises(ImagePayloadError):
            decode_image_payload("data:image/jpeg;base64,@@@@", MAX)

    def test_too_large(self) -> None:
        raw = base64.b64encode(b"x" * 2048).decode("ascii")
        with self.assertRaises(ImagePayloadError) as ctx:
            decode_image_payload(raw, 1024)
        self.assertEqual(str(ctx.exception), "Imagem muito grande. Máximo 5MB.")

    def test_data_url_and_raw_base64(self) -> None:
        data, mime = decode_image_payload("data:image/png;base64,aGVsbG8=", MAX)
        self.assertEqual((data, mime), (b"hello", "image/png"))
        data, mime = decode_image_payload("aGVsbG8=", MAX)
        self.assertEqual((data, mime), (b"hello", "image/jpeg"))


class TestRecognizeFood(unittest.TestCase):
    def _client(self, handler) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_not_configured(self) -> None:
        with mock.patch.object(vision.settings, "llm_api_key", None):
            with self.assertRaises(VisionConfigError):
                recognize_food(image_bytes=b"img", image_mime="image/jpeg")

    def test_rate_limited(self) -> None:
        client = self._client(lambda r: httpx.Response(429, json={"error": "slow down"}))
        with mock.patch.object(vision.settings, "llm_api_key", "k"):
            with self.assertRaises(VisionRateLimitError):
                recognize_food(image_bytes=b"img", image_mime="image/jpeg", client=client)

    def test_upstream_failure(self) -> None:
        client = self._client(lambda r: httpx.Response(500, text="boom"))
        with mock.patch.object(vision.settings, "llm_api_key", "k"):
            with self.assertRaises(RuntimeError):
                recognize_food(image_bytes=b"img", image_mime="image/jpeg", client=client)

    def test_non_json_body(self) -> None:
        client = self._client(lambda r: httpx.Response(200, text="<html>gateway</html>"))
        with mock.patch.object(vision.settings, "llm_api_key", "k"):
            with self.assertRaises(RuntimeError) as ctx:
                recognize_food(image_bytes=b"img", image_mime="image/jpeg", client=client)
        self.assertNotIsInstance(ctx.exception, VisionRateLimitError)
        self.assertIn("non-JSON", str(ctx.exception))

    def test_totals_summed_when_missing(self) -> None:
        answer = {
            "foods": [
                {"name": "Arroz", "quantity": "4 colheres (100g)", "calories": 130, "protein": 2.5, "carbs": 28, "fat": 0.3},
                {"name": "Feijão", "quantity": "1 concha", "calories": 76.4, "protein": 4.8, "carbs": 13.6, "fat": 0.5},
            ],
            "notes": "Prato equilibrado",
        }

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            image_part = body["messages"][1]["content"][1]
            self.assertTrue(image_part["image_url"]["url"].startswith("data:image/png;base64,"))
            self.assertEqual(request.headers["authorization"], "Bearer k")
            return httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(answer)}}]})

        with mock.patch.object(vision.settings, "llm_api_key", "k"):
            result, model = recognize_food(image_bytes=b"img", image_mime="image/png", client=self._client(handler))

        self.assertEqual(len(result.foods), 2)
        self.assertEqual(result.totals.calories, 206)
        self.assertEqual(result.totals.protein, 7.3)
        self.assertEqual(result.notes, "Prato equilibrado")
        self.assertTrue(model)

    def test_unparseable_output_degrades(self) -> None:
        client = self._client(
            lambda r: httpx.Response(200, json={"choices": [{"message": {"content": "Desculpe, não sei."}}]})
        )
        with mock.patch.object(vision.settings, "llm_api_key", "k"):
            result, _ = recognize_food(image_bytes=b"img", image_mime="image/jpeg", client=client)
        self.assertEqual(result.foods, [])
        self.assertTrue(result.warnings)
        self.assertEqual(result.totals.calories, 0)

    def test_non_json_body_maps_to_bad_gateway(self) -> None:
        client = self._client(lambda r: httpx.Response(200, text="<html>gateway</html>"))

        def call(**kwargs):
            return vision.recognize_food(client=client, **kwargs)

        with mock.patch.object(vision.settings, "llm_api_key", "k"), mock.patch.object(diet_api, "recognize_food", call):
            with self.assertRaises(HTTPException) as ctx:
                diet_api.analyze_image("u1", "data:image/png;base64,aGVsbG8=")
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(ctx.exception.detail, "Erro ao analisar a imagem")


if __name__ == "__main__":
    unittest.main()
