"""Punctuation fixers.

Rewrites:
- Three or more dots into an ellipsis
- Double hyphens into an em dash, numeric ranges into an en dash
- Line-leading hyphens into dialogue dashes (heuristic, off by default)
"""

from __future__ import annotations

import re
from typing import Iterable

from microtypo.core.fixer_base import Fixer, has_command_modifier, registry
from microtypo.core.models import FixerCategory, FixerExample, KeystrokeResult
from microtypo.core.unicode_chars import ELLIPSIS, MDASH, NDASH

_ELLIPSIS_RE = re.compile(r"\.{3,}")

# "--" on its own: not a Markdown rule ("---") nor an HTML comment marker.
_DOUBLE_DASH_RE = re.compile(r"(?<![!<\-])--(?![\->])")

# Whole numbers joined by one hyphen; chains such as 2024-01-15 are left alone.
_NUMBER_RANGE_RE = re.compile(r"(?<![\d\-])(\d+)[^\S\n]*-[^\S\n]*(\d+)(?![\d\-])")

_MDASH_SPACING_RE = re.compile(r"[^\S\n]*" + MDASH + r"[^\S\n]*")

_LEADING_HYPHEN_RE = re.compile(r"^([^\S\n]*)-(?![\-\d])[^\S\n]*", re.MULTILINE)

_ONLY_HYPHENS_RE = re.compile(r"^\s*-*$")


def _at_line_start(text: str, pos: int) -> bool:
    return pos == 0 or text[pos - 1] == "\n"


def _at_line_end(text: str, pos: int) -> bool:
    return pos >= len(text) or text[pos] == "\n"


@registry.register
class EllipsisFixer(Fixer):
    fixer_id = "Ellipsis"
    name = "Points de suspension"
    description = "Remplace ... par le caractère ellipse (…)"
    category = FixerCategory.PUNCTUATION
    priority = 1

    def fix(self, text: str) -> str:
        return _ELLIPSIS_RE.sub(ELLIPSIS, text)

    def handle_keystroke(
        self, key: str, modifiers: Iterable[str] | None, line_before_cursor: str
    ) -> KeystrokeResult | None:
        if key != "." or has_command_modifier(modifiers):
            return None
        if not line_before_cursor.endswith(".."):
            return None
        return KeystrokeResult.replace(line_before_cursor[:-2] + ELLIPSIS)

    def example(self) -> FixerExample:
        return FixerExample(
            before="En fait... c'est compliqué...",
            after=f"En fait{ELLIPSIS} c'est compliqué{ELLIPSIS}",
        )


@registry.register
class DashFixer(Fixer):
    """Em dash for ``--``, en dash for numeric ranges.

    French text gets exactly one space on each side of an em dash (none at
    the start or end of a line); other locales glue the em dash to its
    neighbours.
    """

    fixer_id = "Dash"
    name = "Tirets typographiques"
    description = "Convertit -- en — et les tirets entre nombres en –"
    category = FixerCategory.PUNCTUATION
    priority = 2
    locale_sensitive = True

    def fix(self, text: str) -> str:
        return self.apply_transforms(
            text,
            [
                (_DOUBLE_DASH_RE, MDASH),
                (_NUMBER_RANGE_RE, r"\1" + NDASH + r"\2"),
                (_MDASH_SPACING_RE, self._space_mdash),
            ],
        )

    def _space_mdash(self, match: "re.Match[str]") -> str:
        if not self.is_french:
            return MDASH
        text = match.string
        lead = "" if _at_line_start(text, match.start()) else " "
        trail = "" if _at_line_end(text, match.end()) else " "
        return f"{lead}{MDASH}{trail}"

    def handle_keystroke(
        self, key: str, modifiers: Iterable[str] | None, line_before_cursor: str
    ) -> KeystrokeResult | None:
        if key != "-" or has_command_modifier(modifiers):
            return None
        if not line_before_cursor.endswith("-"):
            return None
        # Horizontal rules, front-matter fences and "<!--" stay as typed
        if _ONLY_HYPHENS_RE.match(line_before_cursor) or line_before_cursor.endswith("<!-"):
            return None
        stem = line_before_cursor[:-1]
        if self.is_french:
            stem = stem.rstrip(" \t")
            replacement = f" {MDASH} " if stem else f"{MDASH} "
        else:
            replacement = MDASH
        return KeystrokeResult.replace(stem + replacement)

    def example(self) -> FixerExample:
        around = f" {MDASH} " if self.is_french else MDASH
        return FixerExample(
            before="Période 2020-2024 -- une époque importante",
            after=f"Période 2020{NDASH}2024{around}une époque importante",
        )


@registry.register
class HyphenFixer(Fixer):
    """Line-leading hyphen → dialogue dash.

    A naive heuristic (real hyphenation needs a dictionary), hence disabled by
    default: it also rewrites Markdown bullet lists.
    """

    fixer_id = "Hyphen"
    name = "Césures typographiques"
    description = "Remplace le tiret en début de ligne par un tiret cadratin (basique)"
    category = FixerCategory.PUNCTUATION
    priority = 10
    default_enabled = False
    locale_sensitive = True

    def fix(self, text: str) -> str:
        return _LEADING_HYPHEN_RE.sub(self._dialogue_dash, text)

    def _dialogue_dash(self, match: "re.Match[str]") -> str:
        indent = match.group(1)
        if self.is_french and not _at_line_end(match.string, match.end()):
            return f"{indent}{MDASH} "
        return f"{indent}{MDASH}"

    def example(self) -> FixerExample:
        sep = " " if self.is_french else ""
        return FixerExample(
            before="- Premier point\n- Deuxième point\n- Dialogue",
            after=(
                f"{MDASH}{sep}Premier point\n{MDASH}{sep}Deuxième point\n{MDASH}{sep}Dialogue"
            ),
        )
