"""Core data model dataclasses.

All other modules import from here. Keep this module free of side-effects and
web imports so it can be used in tests and CLI contexts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FixerCategory(str, Enum):
    PUNCTUATION = "punctuation"
    SPACING = "spacing"
    QUOTES = "quotes"
    SYMBOLS = "symbols"

    @classmethod
    def parse(cls, value: "str | FixerCategory") -> "FixerCategory | None":
        """Return the category named *value*, or None if it is unknown."""
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            return None


class ZoneKind(str, Enum):
    FRONTMATTER = "frontmatter"
    CODEBLOCK = "codeblock"
    SHORTCODE = "shortcode"
    NOTES = "notes"
    WIKILINK = "wikilink"
    URL = "url"
    REGEX = "regex"
    INLINECODE = "inlinecode"
    MDLINK = "mdlink"


# ---------------------------------------------------------------------------
# Fixer documentation and keystrokes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FixerExample:
    before: str
    after: str

    def to_dict(self) -> dict:
        return {"before": self.before, "after": self.after}


@dataclass(frozen=True)
class KeystrokeResult:
    """Replacement for the text before the cursor after an intercepted key."""

    line_before_cursor: str
    cursor_offset: int  # column of the cursor on the line after replacement

    @classmethod
    def replace(cls, new_line_before_cursor: str) -> "KeystrokeResult":
        return cls(new_line_before_cursor, len(new_line_before_cursor))


# ---------------------------------------------------------------------------
# Masking
# ---------------------------------------------------------------------------


@dataclass
class ProtectedZone:
    """One masked region: lives for the duration of a single masking pass."""

    placeholder: str
    original_content: str
    kind: ZoneKind


# ---------------------------------------------------------------------------
# Correction result
# ---------------------------------------------------------------------------


@dataclass
class CorrectionResult:
    """Outcome of a batch correction.

    Only a document-level dirty flag is reported: masking makes per-fixer
    attribution unreliable, so none is offered.
    """

    original: str
    corrected: str
    changed: bool

    @classmethod
    def from_texts(cls, original: str, corrected: str) -> "CorrectionResult":
        return cls(original=original, corrected=corrected, changed=original != corrected)

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "corrected": self.corrected,
            "changed": self.changed,
        }
