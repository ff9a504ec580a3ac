"""Quote fixers: straight double quotes and apostrophes."""

from __future__ import annotations

import re
from typing import Iterable

from microtypo.core.fixer_base import Fixer, has_command_modifier, registry
from microtypo.core.models import FixerCategory, FixerExample, KeystrokeResult
from microtypo.core.unicode_chars import (
    LAQUO,
    LDQUO,
    NO_BREAK_SPACE,
    NO_BREAK_THIN_SPACE,
    RAQUO,
    RDQUO,
    RSQUO,
)

# Letter only: digits and underscores (placeholders) do not take an apostrophe
_APOSTROPHE_RE = re.compile(r"(?<=[^\W\d_])'")

# A straight double quote with the horizontal whitespace around it
_DOUBLE_QUOTE_RE = re.compile(r"([^\S\n]*)\"([^\S\n]*)")

_LETTER_RE = re.compile(r"[^\W\d_]")


@registry.register
class SmartQuotesFixer(Fixer):
    """Straight quotes to typographic quotes.

    Quotes alternate open/close over the whole text, not per line. French
    gets guillemets with a no-break space after the opening one and a narrow
    no-break space before the closing one, as FrenchNoBreakSpace spaces them
    (ordinary spaces inside the quotes are absorbed); other locales get English double quotes.
    """

    fixer_id = "SmartQuotes"
    name = "Guillemets typographiques"
    description = "Remplace les guillemets droits par des guillemets typographiques"
    category = FixerCategory.QUOTES
    priority = 4
    locale_sensitive = True

    def fix(self, text: str) -> str:
        text = _APOSTROPHE_RE.sub(RSQUO, text)
        if '"' not in text:
            return text

        opening = True

        def _swap(match: "re.Match[str]") -> str:
            nonlocal opening
            before, after = match.group(1), match.group(2)
            is_open, opening = opening, not opening
            if self.is_french:
                if is_open:
                    return f"{before}{LAQUO}{NO_BREAK_SPACE}"
                return f"{NO_BREAK_THIN_SPACE}{RAQUO}{after}"
            return f"{before}{LDQUO if is_open else RDQUO}{after}"

        return _DOUBLE_QUOTE_RE.sub(_swap, text)

    def example(self) -> FixerExample:
        if self.is_french:
            after = f"Il a dit {LAQUO}{NO_BREAK_SPACE}bonjour{NO_BREAK_THIN_SPACE}{RAQUO} et c{RSQUO}était bien"
        else:
            after = f"Il a dit {LDQUO}bonjour{RDQUO} et c{RSQUO}était bien"
        return FixerExample(before="Il a dit \"bonjour\" et c'était bien", after=after)


@registry.register
class CurlyQuoteFixer(Fixer):
    fixer_id = "CurlyQuote"
    name = "Apostrophes typographiques"
    description = "Remplace l'apostrophe droite par l'apostrophe typographique (’)"
    category = FixerCategory.QUOTES
    priority = 5

    def fix(self, text: str) -> str:
        return _APOSTROPHE_RE.sub(RSQUO, text)

    def handle_keystroke(
        self, key: str, modifiers: Iterable[str] | None, line_before_cursor: str
    ) -> KeystrokeResult | None:
        if key != "'" or has_command_modifier(modifiers):
            return None
        if not line_before_cursor or not _LETTER_RE.match(line_before_cursor[-1]):
            return None
        return KeystrokeResult.replace(line_before_cursor + RSQUO)

    def example(self) -> FixerExample:
        return FixerExample(
            before="L'apostrophe d'aujourd'hui",
            after=f"L{RSQUO}apostrophe d{RSQUO}aujourd{RSQUO}hui",
        )
