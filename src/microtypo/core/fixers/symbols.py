"""Symbol fixers."""

from __future__ import annotations

import re

from microtypo.core.fixer_base import Fixer, registry
from microtypo.core.models import FixerCategory, FixerExample
from microtypo.core.unicode_chars import COPY, REG, TRADE

_SIGN_RE = re.compile(r"\((c|r|tm)\)", re.IGNORECASE)

_SIGNS = {"c": COPY, "r": REG, "tm": TRADE}


def _token_around(text: str, start: int, end: int) -> tuple[str, str]:
    """Whitespace-delimited text glued to the left and right of [start, end)."""
    left = start
    while left > 0 and not text[left - 1].isspace():
        left -= 1
    right = end
    while right < len(text) and not text[right].isspace():
        right += 1
    return text[left:start], text[end:right]


def _replace_sign(match: "re.Match[str]") -> str:
    before, after = _token_around(match.string, match.start(), match.end())
    lowered = before.lower()
    if "http" in lowered or "www." in lowered:
        return match.group(0)
    if "/" in before and "/" in after:
        return match.group(0)
    return _SIGNS[match.group(1).lower()]


@registry.register
class TrademarkFixer(Fixer):
    fixer_id = "Trademark"
    name = "Symboles de marque"
    description = "Convertit (c), (r) et (tm) en ©, ® et ™"
    category = FixerCategory.SYMBOLS
    priority = 9

    def fix(self, text: str) -> str:
        return _SIGN_RE.sub(_replace_sign, text)

    def example(self) -> FixerExample:
        return FixerExample(
            before="Copyright (c) 2024 MonEntreprise(tm) et MaMarque(r)",
            after=f"Copyright {COPY} 2024 MonEntreprise{TRADE} et MaMarque{REG}",
        )
