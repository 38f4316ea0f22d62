# -*- coding: utf-8 -*-
"""NutriAI assistant — chat completion call with intent-aware fallbacks.

This is the body of the ``nutri-ai-chat`` function: message history plus the
detected intent in, one assistant reply out. When the model is unavailable the
reply is a canned answer picked by intent, returned as ``fallback``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .intents import Intent, IntentType

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 12
DEFAULT_REPLY = "Desculpe, não consegui processar sua mensagem. Pode tentar novamente?"
ERROR_REPLY = "Ops, tive um problema aqui. Vamos tentar de novo?"

_WEEKDAYS = ["segunda-feira", "terça-feira", "quarta-feira", "quinta-feira", "sexta-feira", "sábado", "domingo"]
_MONTHS = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


@dataclass
class AssistantReply:
    response: Optional[str] = None
    fallback: Optional[str] = None

    def text(self) -> str:
        if self.fallback:
            return self.fallback
        return self.response or DEFAULT_REPLY

    def to_dict(self) -> Dict[str, str]:
        if self.fallback:
            return {"fallback": self.fallback}
        return {"response": self.response or ""}


def format_date_pt(day: date) -> str:
    return f"{_WEEKDAYS[day.weekday()]}, {day.day} de {_MONTHS[day.month - 1]} de {day.year}"


def fallback_reply(intent: Intent, user_name: str = "", today: date | None = None) -> str:
    today = today or date.today()
    name = intent.data if intent.type is IntentType.set_name and intent.data else user_name
    hello = f", {name}" if name else ""
    replies = {
        IntentType.set_name: f"Prazer em te conhecer{hello}! Como posso te ajudar com sua alimentação hoje?",
        IntentType.greeting: f"Oi{hello}! Tudo bem? Estou aqui para te ajudar com nutrição e treinos.",
        IntentType.date_info: f"Hoje é {format_date_pt(today)}. Ótimo dia para cuidar da saúde!",
        IntentType.weight_loss: (
            "Para emagrecer com saúde, mantenha um déficit calórico leve, priorize proteínas, "
            "vegetais e água, e durma bem."
        ),
        IntentType.muscle_gain: (
            "Para ganhar massa, treine com progressão de carga e consuma proteína em todas as refeições, "
            "cerca de 1,6 a 2 gramas por quilo de peso."
        ),
        IntentType.energy: (
            "Para ter mais energia, capriche no sono, na hidratação e em carboidratos complexos "
            "como aveia e batata-doce."
        ),
        IntentType.meal_suggestion: (
            "Uma boa opção é arroz integral, feijão, frango grelhado e salada colorida. "
            "Equilibrado e fácil de preparar!"
        ),
        IntentType.thanks: f"Por nada{hello}! Conte comigo sempre que precisar.",
    }
    return replies.get(intent.type, "Entendi! Me conta mais para eu te ajudar melhor.")


def build_system_prompt(user_name: str, intent: Intent, today: date | None = None) -> str:
    today = today or date.today()
    lines = [
        "Você é o NutriAI, um assistente de nutrição e fitness simpático que conversa por voz em português do Brasil.",
        "Responda em no máximo três frases curtas, em linguagem falada, sem listas, markdown ou emojis.",
        "Não faça diagnósticos médicos; sugira procurar um profissional quando for o caso.",
        f"Hoje é {format_date_pt(today)}.",
    ]
    if user_name:
        lines.append(f"O nome do usuário é {user_name}; use o nome de vez em quando.")
    lines.append(f"Intenção detectada na última mensagem: {intent.type.value}.")
    if intent.type is IntentType.set_name and intent.data:
        lines.append(f"O usuário acabou de dizer que se chama {intent.data}; cumprimente pelo nome.")
    return "\n".join(lines)


def _chat_completions_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    return base if base.endswith("/chat/completions") else f"{base}/chat/completions"


def _extract_answer(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"].strip()
    text = first.get("text")
    return text.strip() if isinstance(text, str) else ""


def generate_reply(
    *,
    messages: List[Dict[str, str]],
    user_name: str,
    intent: Intent,
    client: httpx.Client | None = None,
) -> AssistantReply:
    """Ask the language model for the next assistant turn."""
    if not settings.llm_api_key:
        logger.info("LLM not configured; answering %s with fallback", intent.type.value)
        return AssistantReply(fallback=fallback_reply(intent, user_name))

    chat: List[Dict[str, str]] = [{"role": "system", "content": build_system_prompt(user_name, intent)}]
    for msg in messages[-HISTORY_LIMIT:]:
        role = msg.get("role")
        content = msg.get("content")
        if role in {"user", "assistant"} and isinstance(content, str) and content.strip():
            chat.append({"role": role, "content": content})

    payload = {
        "model": settings.llm_model,
        "messages": chat,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
    }
    headers = {"Authorization": f"Bearer {settings.llm_api_key}", "Content-Type": "application/json"}
    owns_client = client is None
    http = client or httpx.Client(timeout=settings.llm_timeout, follow_redirects=True)
    try:
        resp = http.post(_chat_completions_url(settings.llm_base_url), headers=headers, json=payload)
        resp.raise_for_status()
        answer = _extract_answer(resp.json())
    except Exception as exc:
        logger.warning("nutri-ai-chat completion failed: %s", exc)
        return AssistantReply(fallback=fallback_reply(intent, user_name))
    finally:
        if owns_client:
            http.close()

    if not answer:
        return AssistantReply(fallback=fallback_reply(intent, user_name))
    return AssistantReply(response=answer)
