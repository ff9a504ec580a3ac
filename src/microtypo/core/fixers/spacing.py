"""Spacing fixers.

Rewrites:
- French high punctuation spacing (; ! ? : « »), thousands grouping
- Spaces around commas
- Non-breaking space between a number and its unit
- Multiplication sign in dimensions (1920 x 1080)
"""

from __future__ import annotations

import re
from typing import Iterable

from microtypo.core.fixer_base import Fixer, has_command_modifier, registry
from microtypo.core.models import FixerCategory, FixerExample, KeystrokeResult
from microtypo.core.unicode_chars import (
    CURRENCY_SYMBOLS,
    INVISIBLE_SPACES,
    LAQUO,
    NO_BREAK_SPACE,
    NO_BREAK_THIN_SPACE,
    RAQUO,
    RDQUO,
    RSQUO,
    TIMES,
)

_NBSP = NO_BREAK_SPACE
_NNBSP = NO_BREAK_THIN_SPACE


def _char_after(match: "re.Match[str]") -> str:
    text = match.string
    return text[match.end()] if match.end() < len(text) else ""


def _char_before(match: "re.Match[str]") -> str:
    return match.string[match.start() - 1] if match.start() > 0 else ""


# ---------------------------------------------------------------------------
# French spacing
# ---------------------------------------------------------------------------

# A sign glued to a word on both sides belongs to code or a URL (a?b=c, &amp;)
_GLUED_AFTER = re.compile(r"[\w/=&%#]")

_HIGH_PUNCT_RE = re.compile(r"(?<=[^\s;!?:" + LAQUO + r"])([ \t]*)([;!?])")
_COLON_RE = re.compile(r"(?<=[^\s;!?:" + LAQUO + r"])([ \t]*):")
_CLOSING_GUILLEMET_RE = re.compile(r"(?<=[^\s" + LAQUO + r"])[ \t]*" + RAQUO)
_OPENING_GUILLEMET_RE = re.compile(LAQUO + r"[ \t]*(?=[^\s" + RAQUO + r"])")
_THOUSANDS_RE = re.compile(r"(?<![\d.," + _NBSP + _NNBSP + r"])\d{1,3}(?:[ \t]\d{3})+(?!\d)")
_HTML_ENTITY_TAIL_RE = re.compile(r"&#?\w+$")

# Markdown table delimiter row: | :--- | :---: | ---: |
_TABLE_DELIMITER_ROW_RE = re.compile(
    r"[ \t]*\|?[ \t]*:?-+:?[ \t]*(?:\|[ \t]*:?-+:?[ \t]*)*\|?[ \t]*"
)


def _line_around(match: "re.Match[str]") -> str:
    text = match.string
    start = text.rfind("\n", 0, match.start()) + 1
    end = text.find("\n", match.end())
    return text[start:] if end == -1 else text[start:end]


def _in_table_delimiter_row(line: str) -> bool:
    return "|" in line and _TABLE_DELIMITER_ROW_RE.fullmatch(line) is not None


_KEY_SPACES = {"!": _NNBSP, "?": _NNBSP, ";": _NNBSP, ":": _NBSP}
_URL_SCHEMES = ("http", "https", "ftp", "mailto", "file")


@registry.register
class FrenchNoBreakSpaceFixer(Fixer):
    """French high punctuation spacing.

    Narrow no-break space before ``; ! ? »``, no-break space before ``:`` and
    after ``«``. Ordinary spaces are replaced; a non-breaking space already
    present is kept. Inactive outside ``fr`` locales.
    """

    fixer_id = "FrenchNoBreakSpace"
    name = "Espaces français"
    description = "Ajoute des espaces insécables selon les règles françaises"
    category = FixerCategory.SPACING
    priority = 3
    locale_sensitive = True

    def fix(self, text: str) -> str:
        if not self.is_french:
            return text
        return self.apply_transforms(
            text,
            [
                (_HIGH_PUNCT_RE, self._space_high_punct),
                (_COLON_RE, self._space_colon),
                (_CLOSING_GUILLEMET_RE, _NNBSP + RAQUO),
                (_OPENING_GUILLEMET_RE, LAQUO + _NBSP),
                (_THOUSANDS_RE, lambda m: re.sub(r"[ \t]", _NNBSP, m.group(0))),
            ],
        )

    @staticmethod
    def _glued(match: "re.Match[str]") -> bool:
        return not match.group(1) and bool(_GLUED_AFTER.match(_char_after(match)))

    def _space_high_punct(self, match: "re.Match[str]") -> str:
        if self._glued(match):
            return match.group(0)
        # Markdown image: ![alt](src)
        if match.group(2) == "!" and _char_after(match) == "[":
            return match.group(0)
        # HTML comment opener: <!--
        if match.group(2) == "!" and not match.group(1) and _char_before(match) == "<":
            return match.group(0)
        if match.group(2) == ";" and _HTML_ENTITY_TAIL_RE.search(match.string, 0, match.start()):
            return match.group(0)
        return _NNBSP + match.group(2)

    def _space_colon(self, match: "re.Match[str]") -> str:
        if self._glued(match) or _char_after(match) == ":":
            return match.group(0)
        if _in_table_delimiter_row(_line_around(match)):
            return match.group(0)
        return _NBSP + ":"

    def handle_keystroke(
        self, key: str, modifiers: Iterable[str] | None, line_before_cursor: str
    ) -> KeystrokeResult | None:
        if not self.is_french or key not in _KEY_SPACES or has_command_modifier(modifiers):
            return None
        clean = line_before_cursor.rstrip(" \t")
        if not clean:
            return None
        last = clean[-1]
        if last in INVISIBLE_SPACES or last in ";!?:" + LAQUO:
            return None
        if key == "!" and line_before_cursor.endswith("<"):
            return None
        if key == ":" and last in "|-" and _in_table_delimiter_row(line_before_cursor + "-"):
            return None
        if key == ":":
            if last.isdigit() and clean == line_before_cursor:
                return None
            last_word = re.split(r"\W", clean)[-1].lower()
            if last_word in _URL_SCHEMES:
                return None
        return KeystrokeResult.replace(clean + _KEY_SPACES[key] + key)

    def example(self) -> FixerExample:
        return FixerExample(
            before="Bonjour ! Comment allez-vous ? Très bien ; merci.",
            after=(
                f"Bonjour{_NNBSP}! Comment allez-vous{_NNBSP}? "
                f"Très bien{_NNBSP}; merci."
            ),
        )


# ---------------------------------------------------------------------------
# Commas
# ---------------------------------------------------------------------------

# Ordinary spaces only; a no-break space next to a comma is kept
_SPACE_BEFORE_COMMA_RE = re.compile(r"[ \t]+,")
_COMMA_RE = re.compile(r",([ \t]*)")
# A comma directly followed by one of these takes no space
_COMMA_CLOSERS = frozenset(")]}\"'" + RDQUO + RSQUO + RAQUO + "\n")


def _space_after_comma(match: "re.Match[str]") -> str:
    after = _char_after(match)
    if not after or after in _COMMA_CLOSERS or after in INVISIBLE_SPACES:
        return ","
    # Decimal comma: 3,14
    if not match.group(1) and after.isdigit() and _char_before(match).isdigit():
        return match.group(0)
    return ", "


@registry.register
class NoSpaceBeforeCommaFixer(Fixer):
    fixer_id = "NoSpaceBeforeComma"
    name = "Virgules sans espace"
    description = "Supprime les espaces avant les virgules et normalise l'espacement"
    category = FixerCategory.SPACING
    priority = 6

    def fix(self, text: str) -> str:
        return self.apply_transforms(
            text,
            [
                (_SPACE_BEFORE_COMMA_RE, ","),
                (_COMMA_RE, _space_after_comma),
            ],
        )

    def example(self) -> FixerExample:
        return FixerExample(
            before="Pommes , poires,oranges ,bananes",
            after="Pommes, poires, oranges, bananes",
        )


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

# A whole number (not glued to a word: mp3, v2)
_NUMBER = r"(?<![\w.,])(\d+(?:[.,]\d+)?)[^\S\n]*"
_END = r"(?!\w)"

_UNIT_PATTERNS: list[tuple[str, int]] = [
    # time
    (r"(h|min|s)" + _END, 0),
    (r"(heures?|minutes?|secondes?)" + _END, re.IGNORECASE),
    # currency
    (r"([" + re.escape(CURRENCY_SYMBOLS) + r"])", 0),
    (r"(euros?|dollars?|livres?)" + _END, re.IGNORECASE),
    # percent
    (r"(%)", 0),
    # mass, length, volume
    (r"(mg|cg|dg|kg|g)" + _END, 0),
    (r"(tonnes?)" + _END, re.IGNORECASE),
    (r"(mm|cm|dm|km|m)" + _END, 0),
    (r"(ml|cl|dl|l|mL|cL|dL|L)" + _END, 0),
    (r"(litres?)" + _END, re.IGNORECASE),
    # power, frequency
    (r"([mkMG]?Wh?)" + _END, 0),
    (r"([kMG]?Hz)" + _END, 0),
    # temperature
    (r"(°[CF])" + _END, 0),
    # data size
    (r"((?:[kKMGT]i?)?[Bb]|[kMGT]?o)" + _END, 0),
    (r"(octets?|bytes?|bits?)" + _END, re.IGNORECASE),
    # angle
    (r"(degrés?|rad|radians?)" + _END, re.IGNORECASE),
    # speed
    (r"(km/h|mph|m/s)" + _END, re.IGNORECASE),
]

_UNIT_RES = [re.compile(_NUMBER + unit, flags) for unit, flags in _UNIT_PATTERNS]

# "# 1h" is a heading marker followed by a number, not a duration
_HEADING_PREFIX_RE = re.compile(r"[ \t]*#+[ \t]*")


def _is_heading_hour(match: "re.Match[str]") -> bool:
    if match.group(2) not in ("h", "H"):
        return False
    text = match.string
    line_start = text.rfind("\n", 0, match.start()) + 1
    return _HEADING_PREFIX_RE.fullmatch(text, line_start, match.start()) is not None


def _space_unit(match: "re.Match[str]") -> str:
    if _is_heading_hour(match):
        return match.group(0)
    return f"{match.group(1)}{_NBSP}{match.group(2)}"


@registry.register
class UnitFixer(Fixer):
    fixer_id = "Unit"
    name = "Espaces avant unités"
    description = "Ajoute une espace insécable entre un nombre et son unité (12 h, 50 €, 25 %)"
    category = FixerCategory.SPACING
    priority = 7

    def fix(self, text: str) -> str:
        return self.apply_transforms(text, [(r, _space_unit) for r in _UNIT_RES])

    def example(self) -> FixerExample:
        return FixerExample(
            before="Température: 25 °C, vitesse: 120 km/h, taille: 1.8 m, poids: 75 kg, prix: 299 €",
            after=(
                f"Température: 25{_NBSP}°C, vitesse: 120{_NBSP}km/h, taille: 1.8{_NBSP}m, "
                f"poids: 75{_NBSP}kg, prix: 299{_NBSP}€"
            ),
        )


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

_TERM = r"\d+(?:[.,]\d+)?(?:[^\S\n]?(?:mm|cm|dm|km|m|px|pt|in|ft)(?![a-wyzA-WYZ]))?"
_TERM_RE = re.compile(_TERM)
_DIMENSION_RE = re.compile(
    r"(?<![\w.,])(?!0x)"
    + _TERM
    + r"(?:[^\S\n]*[xX*" + TIMES + r"][^\S\n]*" + _TERM + r"){1,2}"
    + r"(?![.,]?\d)"
)


def _join_dimension(match: "re.Match[str]") -> str:
    return TIMES.join(t.group(0) for t in _TERM_RE.finditer(match.group(0)))


@registry.register
class DimensionFixer(Fixer):
    fixer_id = "Dimension"
    name = "Symboles de multiplication"
    description = "Convertit x et * entre nombres en × (12 x 34 → 12×34)"
    category = FixerCategory.SPACING
    priority = 8

    def fix(self, text: str) -> str:
        return _DIMENSION_RE.sub(_join_dimension, text)

    def example(self) -> FixerExample:
        return FixerExample(
            before="Résolution: 1920 x 1080, format 16 * 9, dimensions 12cm x 34cm x 56cm",
            after=(
                f"Résolution: 1920{TIMES}1080, format 16{TIMES}9, "
                f"dimensions 12cm{TIMES}34cm{TIMES}56cm"
            ),
        )
