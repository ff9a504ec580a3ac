"""Typographic character table.

Every fixer takes its glyphs from here so the exact code points live in one
place. The module is pure data: no regexes, no logic.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# ---------------------------------------------------------------------------
# Spaces
# ---------------------------------------------------------------------------

NO_BREAK_SPACE = "\u00a0"  # espace insécable, before ":" in French
NO_BREAK_THIN_SPACE = "\u202f"  # espace fine insécable, before ; ! ? »
NORMAL_SPACE = " "
SOFT_HYPHEN = "\u00ad"

# ---------------------------------------------------------------------------
# Punctuation
# ---------------------------------------------------------------------------

ELLIPSIS = "\u2026"  # …
NDASH = "\u2013"     # – ranges
MDASH = "\u2014"     # — incises, dialogue

# ---------------------------------------------------------------------------
# Quotes and apostrophes
# ---------------------------------------------------------------------------

LDQUO = "\u201c"  # “
RDQUO = "\u201d"  # ”
LSQUO = "\u2018"  # ‘
RSQUO = "\u2019"  # ’ typographic apostrophe
LAQUO = "\u00ab"  # «
RAQUO = "\u00bb"  # »
BDQUO = "\u201e"  # „

# ---------------------------------------------------------------------------
# Maths and marks
# ---------------------------------------------------------------------------

TIMES = "\u00d7"       # ×
DIVIDE = "\u00f7"      # ÷
PLUS_MINUS = "\u00b1"  # ±
TRADE = "\u2122"       # ™
REG = "\u00ae"         # ®
COPY = "\u00a9"        # ©
DEGREE = "\u00b0"      # °
PRIME = "\u2032"       # ′
DOUBLE_PRIME = "\u2033"  # ″
SECTION = "\u00a7"     # §
PARAGRAPH = "\u00b6"   # ¶

# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------

EURO = "\u20ac"
POUND = "\u00a3"
YEN = "\u00a5"
DOLLAR = "$"
RUPEE = "\u20b9"
RUBLE = "\u20bd"

UNICODE_CHARS: Mapping[str, str] = MappingProxyType(
    {
        "NO_BREAK_SPACE": NO_BREAK_SPACE,
        "NO_BREAK_THIN_SPACE": NO_BREAK_THIN_SPACE,
        "NORMAL_SPACE": NORMAL_SPACE,
        "SOFT_HYPHEN": SOFT_HYPHEN,
        "ELLIPSIS": ELLIPSIS,
        "NDASH": NDASH,
        "MDASH": MDASH,
        "LDQUO": LDQUO,
        "RDQUO": RDQUO,
        "LSQUO": LSQUO,
        "RSQUO": RSQUO,
        "LAQUO": LAQUO,
        "RAQUO": RAQUO,
        "BDQUO": BDQUO,
        "TIMES": TIMES,
        "DIVIDE": DIVIDE,
        "PLUS_MINUS": PLUS_MINUS,
        "TRADE": TRADE,
        "REG": REG,
        "COPY": COPY,
        "DEGREE": DEGREE,
        "PRIME": PRIME,
        "DOUBLE_PRIME": DOUBLE_PRIME,
        "SECTION": SECTION,
        "PARAGRAPH": PARAGRAPH,
        "EURO": EURO,
        "POUND": POUND,
        "YEN": YEN,
        "DOLLAR": DOLLAR,
        "RUPEE": RUPEE,
        "RUBLE": RUBLE,
    }
)

# Non-breaking variants; a fixer never replaces one of these with another.
INVISIBLE_SPACES = frozenset({NO_BREAK_SPACE, NO_BREAK_THIN_SPACE})

CURRENCY_SYMBOLS = EURO + DOLLAR + POUND + YEN + RUPEE + RUBLE


def char(name: str) -> str:
    """Return the glyph registered under *name* (e.g. ``"MDASH"``)."""
    return UNICODE_CHARS[name]
