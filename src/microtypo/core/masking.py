"""Masking of protected regions.

Before the fixers run, every region whose text must survive untouched
(front-matter, fenced code, template tags, wikilinks, URLs, pattern literals,
inline code, Markdown links) is swapped for an opaque placeholder such as
``__TYPOGRAPHY_PROTECTED_URL_3__``. Fixers never alter placeholders: they are
uppercase ASCII, digits and underscores only.

Usage::

    masked, zones = mask_protected_content(text)
    masked = do_something(masked)
    text = unmask_protected_content(masked, zones)

Scans run in a fixed order on the progressively masked text, so a later scan
sees earlier placeholders as plain text (a URL already masked inside a
Markdown link is restored when the link is). Unmasking walks the zones in
reverse creation order.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from microtypo.core.models import ProtectedZone, ZoneKind

_log = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_PREFIX = "TYPOGRAPHY_PROTECTED"

# ---------------------------------------------------------------------------
# Patterns, in scan order
# ---------------------------------------------------------------------------

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(?:.*?\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)

_FENCE_RE = re.compile(
    r"^[ ]{0,3}(`{3,}|~{3,})[^\n]*\n(?:.*?\n)?[ ]{0,3}\1[ \t]*$",
    re.MULTILINE | re.DOTALL,
)

_SHORTCODE_RE = re.compile(r"\{%.*?%\}|\{\{.*?\}\}", re.DOTALL)
_CAPTION_RE = re.compile(r"(caption:\s*\")([^\"]*)(\")")

_NOTES_RE = re.compile(r"\(notes?\s*:\s*\"(.*?)\"\s*\)")

_WIKILINK_RE = re.compile(r"\[\[[^\]\n]+\]\]")

# Trailing sentence punctuation is not part of the URL
_URL_RE = re.compile(r"(?:https?://|www\.)[^\s\])}>]*[^\s\])}>.,;:!?'\"]")

# /pattern/flags, but not a path segment (a/b/c) nor a fraction (1/2/3)
_PATTERN_LITERAL_RE = re.compile(r"(?<![\w/])/[^/\s]+/[gimsuy]*(?!\w)")

_INLINE_CODE_RE = re.compile(r"(?<!`)(`{1,2})(?!`)[^\n]+?(?<!`)\1(?!`)")

_MDLINK_RE = re.compile(r"\[[^\]\n]*\]\([^)\n]+\)")

_SCANS: list[tuple[ZoneKind, "re.Pattern[str]"]] = [
    (ZoneKind.FRONTMATTER, _FRONTMATTER_RE),
    (ZoneKind.CODEBLOCK, _FENCE_RE),
    (ZoneKind.SHORTCODE, _SHORTCODE_RE),
    (ZoneKind.NOTES, _NOTES_RE),
    (ZoneKind.WIKILINK, _WIKILINK_RE),
    (ZoneKind.URL, _URL_RE),
    (ZoneKind.REGEX, _PATTERN_LITERAL_RE),
    (ZoneKind.INLINECODE, _INLINE_CODE_RE),
    (ZoneKind.MDLINK, _MDLINK_RE),
]


# ---------------------------------------------------------------------------
# Mask / unmask
# ---------------------------------------------------------------------------


def placeholder_prefix(text: str) -> str:
    """Return a placeholder prefix that does not occur in *text*."""
    prefix = DEFAULT_PLACEHOLDER_PREFIX
    while f"__{prefix}_" in text:
        prefix += "_X"
    return prefix


def _correct_inner(
    kind: ZoneKind, match: "re.Match[str]", transform: Callable[[str], str]
) -> str:
    """Run *transform* over the user-visible text carried by a protected construct."""
    content = match.group(0)
    if kind is ZoneKind.SHORTCODE:
        return _CAPTION_RE.sub(
            lambda m: f"{m.group(1)}{transform(m.group(2))}{m.group(3)}", content
        )
    if kind is ZoneKind.NOTES:
        offset = match.start(0)
        start, end = match.start(1) - offset, match.end(1) - offset
        return content[:start] + transform(match.group(1)) + content[end:]
    return content


def mask_protected_content(
    text: str, transform: Callable[[str], str] | None = None
) -> tuple[str, list[ProtectedZone]]:
    """Replace every protected region of *text* with a placeholder.

    Args:
        text: The document.
        transform: Optional correction applied to caption values of template
            tags and to the content of ``(notes: "...")`` before those
            constructs are masked. Without it, ``unmask(mask(text)) == text``.

    Returns:
        ``(masked_text, zones)``; *zones* is in creation order.
    """
    prefix = placeholder_prefix(text)
    zones: list[ProtectedZone] = []

    def _protect(kind: ZoneKind, content: str) -> str:
        placeholder = f"__{prefix}_{kind.name}_{len(zones)}__"
        zones.append(ProtectedZone(placeholder, content, kind))
        return placeholder

    masked = text
    for kind, pattern in _SCANS:

        def _replace(match: "re.Match[str]", kind: ZoneKind = kind) -> str:
            content = match.group(0)
            if transform is not None:
                content = _correct_inner(kind, match, transform)
            return _protect(kind, content)

        masked = pattern.sub(_replace, masked)

    if zones:
        _log.debug("Masked %d protected zone(s)", len(zones))
    return masked, zones


def unmask_protected_content(masked_text: str, zones: list[ProtectedZone]) -> str:
    """Restore the zones produced by :func:`mask_protected_content`."""
    text = masked_text
    for zone in reversed(zones):
        if zone.placeholder not in text:
            _log.warning(
                "Placeholder %s not found, %s zone lost", zone.placeholder, zone.kind.value
            )
            continue
        text = text.replace(zone.placeholder, zone.original_content, 1)
    return text


# ---------------------------------------------------------------------------
# Cursor protection
# ---------------------------------------------------------------------------


def protected_spans(text: str) -> list[tuple[int, int, ZoneKind]]:
    """Return ``(start, end, kind)`` for every protected region of *text*.

    Offsets refer to *text* itself. A match starting inside an earlier span
    is skipped; a span may contain a later one (a URL inside a Markdown link).
    """
    spans: list[tuple[int, int, ZoneKind]] = []
    for kind, pattern in _SCANS:
        for match in pattern.finditer(text):
            start = match.start()
            if any(s <= start < e for s, e, _ in spans):
                continue
            spans.append((start, match.end(), kind))
    spans.sort(key=lambda span: span[0])
    return spans


_FENCE_LINE_RE = re.compile(r"[ ]{0,3}(`{3,}|~{3,})")
_URL_TAIL_RE = re.compile(r"(?:https?://|www\.)\S*$")


def _inside_open_fence(before: str) -> bool:
    fence: str | None = None
    for line in before.split("\n"):
        m = _FENCE_LINE_RE.match(line)
        if not m:
            continue
        if fence is None:
            fence = m.group(1)
        elif line.strip() == m.group(1) and m.group(1).startswith(fence):
            fence = None
    return fence is not None


def _inside_open_frontmatter(before: str) -> bool:
    if not re.match(r"---[ \t]*\n", before):
        return False
    return _FRONTMATTER_RE.match(before) is None


def is_cursor_in_protected_zone(document: str, offset: int) -> bool:
    """True if a cursor at *offset* in *document* sits in protected text.

    Covers complete protected regions, an unterminated fence or front-matter
    above the cursor, and constructs still open on the current line (an odd
    number of backticks, ``[[`` without ``]]``, a URL being typed).
    """
    offset = max(0, min(offset, len(document)))
    if any(start < offset < end for start, end, _ in protected_spans(document)):
        return True

    before = document[:offset]
    if _inside_open_frontmatter(before) or _inside_open_fence(before):
        return True

    line = before[before.rfind("\n") + 1 :]
    if line.count("`") % 2 == 1:
        return True
    if line.rfind("[[") > line.rfind("]]"):
        return True
    return _URL_TAIL_RE.search(line) is not None
