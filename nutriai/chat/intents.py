# -*- coding: utf-8 -*-
"""Chat — regex intent classification for user utterances."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class IntentType(str, Enum):
    set_name = "set_name"
    greeting = "greeting"
    date_info = "date_info"
    weight_loss = "weight_loss"
    muscle_gain = "muscle_gain"
    energy = "energy"
    meal_suggestion = "meal_suggestion"
    thanks = "thanks"
    general = "general"


@dataclass(frozen=True)
class Intent:
    type: IntentType
    data: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"type": self.type.value}
        if self.data is not None:
            out["data"] = self.data
        return out


_LETTERS = "a-záàâãéèêíïóôõöúçñ"
_NAME = rf"([{_LETTERS}]{{2,20}})"

_NAME_PATTERNS = (
    re.compile(rf"\b(?:meu nome é|me chamo|sou o|sou a|pode me chamar de)\s+{_NAME}", re.IGNORECASE),
    re.compile(rf"\b(?:nome é)\s+{_NAME}", re.IGNORECASE),
)
_BARE_NAME = re.compile(rf"^{_NAME}$", re.IGNORECASE)


def _keywords(*words: str, whole: bool = False) -> re.Pattern[str]:
    tail = r"\b" if whole else ""
    return re.compile(r"\b(?:" + "|".join(words) + r")" + tail, re.IGNORECASE)


# Checked in order; the first match wins.
_KEYWORD_INTENTS: List[Tuple[IntentType, re.Pattern[str]]] = [
    (
        IntentType.greeting,
        _keywords("oi", "olá", "ola", "e aí", "eai", "hello", "hi", "opa", "bom dia", "boa tarde", "boa noite", whole=True),
    ),
    (IntentType.date_info, _keywords("dia", "data", "hoje", "que dia", whole=True)),
    (IntentType.weight_loss, _keywords("emagrecer", "perder peso", "secar", "dieta", "emagrecimento")),
    (IntentType.muscle_gain, _keywords("massa", "muscular", "ganhar", "forte", "hipertrofia")),
    (IntentType.energy, _keywords("energia", "força", "cansad", "fadiga", "disposição")),
    (
        IntentType.meal_suggestion,
        _keywords("receita", "comer", "refeição", "fome", "almoço", "janta", "jantar", "lanche", "ceia"),
    ),
    (IntentType.thanks, _keywords("obrigad", "valeu", "agradeço")),
]


def format_name(raw: str) -> str:
    name = raw.strip()
    return name[:1].upper() + name[1:].lower()


def _keyword_intent(text: str) -> Optional[IntentType]:
    for intent_type, pattern in _KEYWORD_INTENTS:
        if pattern.search(text):
            return intent_type
    return None


def _extract_name(message: str) -> Optional[str]:
    for pattern in _NAME_PATTERNS:
        match = pattern.search(message)
        if match:
            return format_name(match.group(1))

    # A lone word is taken as a name unless it is a keyword of another intent ("oi", "valeu").
    bare = message.strip()
    if _BARE_NAME.match(bare) and _keyword_intent(bare) is None:
        return format_name(bare)
    return None


def analyze_intent(message: str) -> Intent:
    """Classify a user utterance into a coarse intent."""
    name = _extract_name(message)
    if name:
        return Intent(IntentType.set_name, name)

    intent_type = _keyword_intent(message.lower().strip())
    return Intent(intent_type or IntentType.general)
