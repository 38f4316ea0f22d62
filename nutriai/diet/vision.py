# -*- coding: utf-8 -*-
"""Diet — meal photo analysis via an OpenAI-compatible vision model."""

from __future__ import annotations

import ast
import base64
import binascii
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config import settings
from .models import NutritionTotals, VisionRawResult
from .portions import DEFAULT_PORTION_GRAMS, meal_totals, round_half_up

logger = logging.getLogger(__name__)


class ImagePayloadError(ValueError):
    """The uploaded image is missing or unusable; no model call is made."""


class VisionConfigError(ValueError):
    pass


class VisionRateLimitError(RuntimeError):
    pass


_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^,]*)?),(?P<data>.*)$", re.DOTALL)


def decode_image_payload(image_data: str | None, max_bytes: int) -> Tuple[bytes, str]:
    """Accept a data URL or raw base64; return (bytes, mime)."""
    raw = (image_data or "").strip()
    if not raw:
        raise ImagePayloadError("Imagem é obrigatória")

    mime = "image/jpeg"
    match = _DATA_URL_RE.match(raw)
    if match:
        mime = (match.group("mime") or mime).lower()
        if not mime.startswith("image/"):
            raise ImagePayloadError("Por favor, selecione um arquivo de imagem válido.")
        if "base64" not in (match.group("params") or ""):
            raise ImagePayloadError("Imagem deve estar em base64")
        raw = match.group("data").strip()
        if not raw:
            raise ImagePayloadError("Imagem é obrigatória")

    try:
        data = base64.b64decode(re.sub(r"\s+", "", raw), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImagePayloadError(f"Imagem inválida: {exc}") from exc
    if not data:
        raise ImagePayloadError("Imagem é obrigatória")
    if len(data) > max_bytes:
        raise ImagePayloadError("Imagem muito grande. Máximo 5MB.")
    return data, mime


# ---------- lenient JSON extraction ----------


def _remove_trailing_commas(text: str) -> str:
    """Remove trailing commas in JSON while preserving string literals."""
    out: list[str] = []
    in_str = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_str:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            i += 1
            continue

        if ch == "\"":
            in_str = True
            out.append(ch)
            i += 1
            continue

        if ch == ",":
            j = i + 1
            while j < len(text) and text[j] in " \t\r\n":
                j += 1
            if j < len(text) and text[j] in "}]":
                i += 1
                continue

        out.append(ch)
        i += 1
    return "".join(out)


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned, flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", cleaned)


def _iter_json_object_candidates(text: str) -> list[str]:
    """Extract balanced {...} candidates from arbitrary text.

    Models sometimes wrap JSON with prose or emit several objects; scan for
    balanced braces while respecting string literals.
    """
    cleaned = _strip_fences(text)
    candidates: list[str] = []
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(cleaned):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
            continue

        if ch == "{":
            if depth == 0:
                start_idx = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                candidates.append(cleaned[start_idx : i + 1])
                start_idx = None

    return candidates


def _sanitize_json_like(text: str) -> str:
    # Full-width punctuation, curly quotes, trailing commas and non-finite floats.
    cleaned = text.replace("：", ":").replace("，", ",")
    cleaned = cleaned.replace("“", "\"").replace("”", "\"").replace("‘", "'").replace("’", "'")
    cleaned = _remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"-?\bInfinity\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def parse_model_output_json(content: str) -> Dict[str, Any]:
    last_error: Exception | None = None

    for candidate in _iter_json_object_candidates(content):
        sanitized = _sanitize_json_like(candidate)
        for attempt in (candidate, sanitized):
            try:
                parsed = json.loads(attempt)
                if isinstance(parsed, dict):
                    return parsed
            except ValueError as exc:
                last_error = exc

        # Python-literal-ish dicts (single quotes/None/True/False).
        py = re.sub(r"\bnull\b", "None", sanitized, flags=re.IGNORECASE)
        py = re.sub(r"\btrue\b", "True", py, flags=re.IGNORECASE)
        py = re.sub(r"\bfalse\b", "False", py, flags=re.IGNORECASE)
        try:
            parsed = ast.literal_eval(py)
            if isinstance(parsed, dict):
                return parsed
        except (ValueError, SyntaxError) as exc:
            last_error = exc

    raise ValueError(f"Failed to parse model JSON: {last_error or 'no JSON object found'}")


# ---------- normalisation ----------

_NUM_RE = re.compile(r"-?\d+(?:[.,]\d+)?")
_GRAMS_IN_TEXT = re.compile(r"(\d+(?:[.,]\d+)?)\s*g\b", re.IGNORECASE)

_CONFIDENCE_LABELS = {
    "alta": "alta",
    "high": "alta",
    "média": "média",
    "media": "média",
    "medium": "média",
    "baixa": "baixa",
    "low": "baixa",
}


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        m = _NUM_RE.search(value.strip())
        if not m:
            return None
        return float(m.group(0).replace(",", "."))
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        s = value.strip()
        return [s] if s else []
    if isinstance(value, list):
        return [str(x).strip() for x in value if x is not None and str(x).strip()]
    s = str(value).strip()
    return [s] if s else []


def _first_present(obj: Dict[str, Any], keys: List[str]) -> Any:
    for k in keys:
        if obj.get(k) is not None:
            return obj.get(k)
    return None


def confidence_label(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        label = _CONFIDENCE_LABELS.get(value.strip().lower())
        if label:
            return label
    score = _coerce_float(value)
    if score is None:
        return None
    if score > 1:
        score = score / 100.0
    if score >= 0.85:
        return "alta"
    if score >= 0.65:
        return "média"
    return "baixa"


def _portion_grams(raw: Dict[str, Any], portion: Optional[str]) -> float:
    grams = _coerce_float(_first_present(raw, ["portion_grams", "portionGrams", "grams", "gramas", "peso", "weight_g", "weight"]))
    if grams is None and portion:
        match = _GRAMS_IN_TEXT.search(portion)
        if match:
            grams = float(match.group(1).replace(",", "."))
    if grams is None or grams <= 0:
        return DEFAULT_PORTION_GRAMS
    return grams


def _normalize_items(items: Any) -> List[Dict[str, Any]]:
    """Normalize item schema to FoodItem as much as possible (best-effort)."""
    if not isinstance(items, list):
        return []
    out: List[Dict[str, Any]] = []
    for raw in items:
        if not isinstance(raw, dict):
            continue

        name = _first_present(raw, ["name", "nome", "alimento", "food", "item", "dish"])
        name = (str(name) if name is not None else "").strip() or "Alimento"

        portion = _first_present(raw, ["quantity", "quantidade", "portion", "porcao", "porção", "serving"])
        portion_str = str(portion).strip() if portion is not None else None

        nutrition = _first_present(raw, ["nutrition", "nutricao", "nutrição", "nutrientes"])
        source_obj = nutrition if isinstance(nutrition, dict) else raw

        def pick_num(keys: List[str]) -> float:
            val = _coerce_float(_first_present(source_obj, keys))
            return max(0.0, val) if val is not None else 0.0

        out.append(
            {
                "name": name,
                "portion": portion_str or None,
                "portion_grams": _portion_grams(raw, portion_str),
                "calories": pick_num(["calories", "calorias", "kcal", "energy_kcal", "energia"]),
                "protein": pick_num(["protein", "proteina", "proteína", "proteinas", "proteínas", "protein_g"]),
                "carbs": pick_num(["carbs", "carboidratos", "carbohydrates", "carbs_g"]),
                "fat": pick_num(["fat", "gordura", "gorduras", "lipidios", "fat_g"]),
                "confidence": confidence_label(_first_present(raw, ["confidence", "confianca", "confiança"])),
                "source": str(_first_present(raw, ["source", "fonte"]) or "Estimativa"),
            }
        )
    return out


def _normalize_totals(totals: Any) -> Optional[Dict[str, float]]:
    if not isinstance(totals, dict):
        return None
    key_map = {
        "calories": "calories",
        "calorias": "calories",
        "kcal": "calories",
        "protein": "protein",
        "proteina": "protein",
        "proteína": "protein",
        "carbs": "carbs",
        "carboidratos": "carbs",
        "carbohydrates": "carbs",
        "fat": "fat",
        "gordura": "fat",
        "gorduras": "fat",
    }
    out: Dict[str, float] = {}
    for k, v in totals.items():
        kk = key_map.get(str(k).lower())
        if not kk:
            continue
        fv = _coerce_float(v)
        if fv is not None:
            out[kk] = max(0.0, fv)
    return out or None


def normalize_parsed(parsed: Dict[str, Any]) -> Dict[str, Any]:
    # The legacy function wrapped everything in {"status": ..., "analise": {...}}.
    body = parsed.get("analise") if isinstance(parsed.get("analise"), dict) else parsed

    items_raw = _first_present(body, ["foods", "alimentos", "items", "food"])
    totals_raw = _first_present(body, ["totals", "total_refeicao", "total"])
    warnings_raw = _first_present(body, ["warnings", "warning", "avisos"])
    notes = _first_present(body, ["notes", "observacoes", "observações"])

    known_keys = {
        "foods", "alimentos", "items", "food", "totals", "total_refeicao", "total",
        "warnings", "warning", "avisos", "notes", "observacoes", "observações",
    }
    return {
        "foods": _normalize_items(items_raw),
        "totals": _normalize_totals(totals_raw),
        "warnings": _as_str_list(warnings_raw),
        "notes": str(notes).strip() if notes is not None else "",
        "extra": {k: v for k, v in body.items() if k not in known_keys},
    }


# ---------- model call ----------

SYSTEM_PROMPT = (
    "Você é um nutricionista que analisa fotos de refeições. Responda APENAS com JSON estrito, "
    "sem markdown. Use aspas duplas e nenhuma vírgula sobrando. Estime os alimentos e os "
    "nutrientes da porção mostrada; se estiver em dúvida use confiança baixa e adicione avisos."
)

USER_PROMPT = (
    "Identifique todos os alimentos da foto, estime a porção em gramas e os nutrientes da porção.\n"
    "Se não houver comida na imagem, retorne foods: [] e um aviso.\n"
    "Formato (ESTRITO):\n"
    "{\n"
    '  "foods": [\n'
    '    {"name": "string", "quantity": "string", "portion_grams": number,\n'
    '     "calories": number, "protein": number, "carbs": number, "fat": number,\n'
    '     "confidence": number, "source": "string"}\n'
    "  ],\n"
    '  "totals": {"calories": number, "protein": number, "carbs": number, "fat": number} | null,\n'
    '  "notes": "string",\n'
    '  "warnings": ["string"]\n'
    "}\n"
)


def _extract_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list):
        return ""
    out: list[str] = []
    for choice in choices:
        if not isinstance(choice, dict):
            continue
        msg = choice.get("message")
        if isinstance(msg, dict):
            content = msg.get("content")
            if isinstance(content, str):
                out.append(content)
            elif isinstance(content, list):
                out.extend(p.get("text", "") for p in content if isinstance(p, dict))
    return "".join(out)


def _data_url(mime: str, image_bytes: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def recognize_food(
    *,
    image_bytes: bytes,
    image_mime: str,
    client: httpx.Client | None = None,
) -> Tuple[VisionRawResult, str]:
    if not image_bytes:
        raise ImagePayloadError("Imagem é obrigatória")
    if not settings.llm_api_key:
        raise VisionConfigError("NUTRIAI_LLM_API_KEY não configurada")

    base = settings.llm_base_url.rstrip("/")
    url = base if base.endswith("/chat/completions") else f"{base}/chat/completions"
    payload = {
        "model": settings.vision_model,
        "temperature": 0.2,
        "max_tokens": 1200,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": _data_url(image_mime, image_bytes)}},
                ],
            },
        ],
    }
    headers = {"Authorization": f"Bearer {settings.llm_api_key}", "Content-Type": "application/json"}

    owns_client = client is None
    http = client or httpx.Client(timeout=settings.llm_timeout, follow_redirects=True)
    try:
        resp = http.post(url, headers=headers, json=payload)
        if resp.status_code == 429:
            raise VisionRateLimitError("Limite de requisições excedido")
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as exc:
        raise RuntimeError(f"Vision model call failed: {exc}") from exc
    except ValueError as exc:
        raise RuntimeError(f"Vision model returned non-JSON body: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    content = _extract_content(data)
    try:
        parsed = parse_model_output_json(content)
    except ValueError as exc:
        # Keep the request alive; the user can still type the foods in by hand.
        logger.warning("food vision output parse failed: %s", exc)
        parsed = {
            "foods": [],
            "warnings": ["Não foi possível interpretar a análise. Adicione os alimentos manualmente."],
            "raw_text": content[:800],
        }

    try:
        result = VisionRawResult.model_validate(normalize_parsed(parsed))
    except ValueError as exc:
        logger.warning("food vision output invalid: %s", exc)
        result = VisionRawResult(
            warnings=["Formato de análise inesperado. Adicione os alimentos manualmente."],
            extra={"parse_error": str(exc)},
        )

    if result.totals is None:
        result.totals = meal_totals(result.foods)
    else:
        result.totals = NutritionTotals(
            calories=round_half_up(result.totals.calories, 1),
            protein=round_half_up(result.totals.protein, 1),
            carbs=round_half_up(result.totals.carbs, 1),
            fat=round_half_up(result.totals.fat, 1),
        )
    return result, settings.vision_model
