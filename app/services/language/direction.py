"""Translation direction detection from character sets.

Replaces the passthrough language middleware: a single deterministic pass
over the text, no model call. First match wins, checked in this order:

    Thai script      → TH→JA
    Japanese script  → JA→TH
    Latin letter     → EN→JA
    anything else    → JA→TH (default)
"""

from __future__ import annotations

import re
from enum import Enum


class Direction(str, Enum):
    JA_TH = "JA→TH"
    TH_JA = "TH→JA"
    EN_JA = "EN→JA"

    @property
    def target_language(self) -> str:
        """Language name used in the translation instruction."""
        return "Thai" if self is Direction.JA_TH else "Japanese"


_THAI = re.compile(r"[\u0E00-\u0E7F]")
# Hiragana ぁ-ん, katakana ァ-ン, CJK ideographs 一-龯
_JAPANESE = re.compile(r"[\u3041-\u3093\u30A1-\u30F3\u4E00-\u9FAF]")
_LATIN = re.compile(r"[A-Za-z]")

_RULES: tuple[tuple[re.Pattern[str], Direction], ...] = (
    (_THAI, Direction.TH_JA),
    (_JAPANESE, Direction.JA_TH),
    (_LATIN, Direction.EN_JA),
)

DEFAULT_DIRECTION = Direction.JA_TH


def detect_direction(text: str) -> Direction:
    """Classify text into exactly one translation direction."""
    for pattern, direction in _RULES:
        if pattern.search(text):
            return direction
    return DEFAULT_DIRECTION
