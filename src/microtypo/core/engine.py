"""TypographyEngine: orchestrates the fixers over a document.

The engine owns one instance of every fixer and their enabled/locale state.
It holds no document state: ``process_text`` is a pure function of the text
and the current configuration.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

_log = logging.getLogger(__name__)

# Import fixers module to trigger all @registry.register decorators
import microtypo.core.fixers  # noqa: F401
from microtypo.core.fixer_base import Fixer, registry
from microtypo.core.masking import mask_protected_content, unmask_protected_content
from microtypo.core.models import CorrectionResult, FixerCategory, FixerExample, KeystrokeResult
from microtypo.core.settings import (
    TypographySettings,
    normalize_fixer_id,
    settings_for_locale,
    validate_settings,
)


class TypographyEngine:
    """Run the enabled fixers, in priority order, outside protected zones.

    Usage::

        engine = TypographyEngine()
        engine.set_configuration({"locale": "en_GB"})
        text = engine.process_text(text)
    """

    def __init__(
        self,
        settings: TypographySettings | Mapping[str, Any] | None = None,
        fixers: Iterable[Fixer] | None = None,
    ) -> None:
        # Insertion order is the tie-break between equal priorities
        self._fixers: dict[str, Fixer] = {}
        for fixer in fixers if fixers is not None else registry.create_all():
            self.register_fixer(fixer)
        self.settings = settings_for_locale()
        self.set_configuration(settings)

    # ------------------------------------------------------------------
    # Fixer set
    # ------------------------------------------------------------------

    def register_fixer(self, fixer: Fixer) -> None:
        """Add *fixer*; an existing fixer with the same id is replaced."""
        if self._fixers.pop(fixer.fixer_id, None) is not None:
            _log.debug("Replacing fixer %s", fixer.fixer_id)
        self._fixers[fixer.fixer_id] = fixer

    def get_fixers(self) -> list[Fixer]:
        """All fixers sorted by priority (stable: registration order breaks ties)."""
        return sorted(self._fixers.values(), key=lambda f: f.priority)

    def get_enabled_fixers(self) -> list[Fixer]:
        return [f for f in self.get_fixers() if f.is_active()]

    def get_fixers_by_category(self, category: FixerCategory | str) -> list[Fixer]:
        wanted = FixerCategory.parse(category)
        if wanted is None:
            return []
        return [f for f in self.get_fixers() if f.category == wanted]

    def get_fixer(self, fixer_id: str) -> Fixer | None:
        """Return the fixer registered as *fixer_id* (legacy spellings accepted)."""
        if fixer_id in self._fixers:
            return self._fixers[fixer_id]
        canonical = normalize_fixer_id(fixer_id)
        return self._fixers.get(canonical) if canonical else None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_configuration(
        self, settings: TypographySettings | Mapping[str, Any] | None
    ) -> TypographySettings:
        """Apply *settings* (sanitized) to every fixer and return them."""
        if settings is None:
            settings = settings_for_locale()
        elif not isinstance(settings, TypographySettings):
            settings = validate_settings(settings)
        self.settings = settings
        for fixer in self._fixers.values():
            fixer.set_locale(settings.locale)
            configured = settings.fixers.get(fixer.fixer_id)
            fixer.enabled = fixer.default_enabled if configured is None else configured
        _log.debug(
            "Configuration applied: locale=%s, %d/%d fixers enabled",
            settings.locale,
            len(self.get_enabled_fixers()),
            len(self._fixers),
        )
        return settings

    def toggle_fixer(self, fixer_id: str, enabled: bool) -> bool:
        """Enable or disable one fixer. Returns False if the id is unknown."""
        fixer = self.get_fixer(fixer_id)
        if fixer is None:
            return False
        fixer.enabled = bool(enabled)
        self.settings.fixers[fixer.fixer_id] = fixer.enabled
        return True

    def toggle_category(self, category: FixerCategory | str, enabled: bool) -> int:
        """Enable or disable every fixer of *category*; returns how many were set."""
        fixers = self.get_fixers_by_category(category)
        for fixer in fixers:
            self.toggle_fixer(fixer.fixer_id, enabled)
        return len(fixers)

    def reset_to_defaults(self) -> TypographySettings:
        """Back to the preset of the current locale."""
        return self.set_configuration(settings_for_locale(self.settings.locale))

    # ------------------------------------------------------------------
    # Batch correction
    # ------------------------------------------------------------------

    def _apply_fixers(self, text: str) -> str:
        for fixer in self.get_enabled_fixers():
            try:
                text = fixer.fix(text)
            except Exception as exc:
                # One broken fixer must not lose the user's text
                _log.exception("Fixer %s failed: %s", fixer.fixer_id, exc)
        return text

    def process_text(self, text: str) -> str:
        """Correct *text*: mask protected zones, run the fixers, unmask."""
        if not text:
            return text
        masked, zones = mask_protected_content(text, transform=self._apply_fixers)
        corrected = self._apply_fixers(masked)
        return unmask_protected_content(corrected, zones)

    def process_text_with_details(self, text: str) -> CorrectionResult:
        return CorrectionResult.from_texts(text, self.process_text(text))

    # ------------------------------------------------------------------
    # Keystrokes
    # ------------------------------------------------------------------

    def dispatch_keystroke(
        self,
        key: str,
        modifiers: Iterable[str] | None,
        line_before_cursor: str,
        cursor_protected: bool = False,
    ) -> KeystrokeResult | None:
        """Offer *key* to the enabled fixers; the first one to answer wins.

        Returns None (let the editor insert the key) when real-time correction
        is off, when the cursor is in a protected zone, or when no fixer
        intercepts.
        """
        if not self.settings.enable_realtime_correction or cursor_protected:
            return None
        for fixer in self.get_enabled_fixers():
            try:
                result = fixer.handle_keystroke(key, modifiers, line_before_cursor)
            except Exception as exc:
                _log.exception("Fixer %s failed on key %r: %s", fixer.fixer_id, key, exc)
                continue
            if result is not None:
                return result
        return None

    # ------------------------------------------------------------------
    # Documentation
    # ------------------------------------------------------------------

    def example_table(self) -> list[tuple[str, FixerExample]]:
        """``(fixer_id, example)`` for every fixer, in priority order."""
        return [(f.fixer_id, f.example()) for f in self.get_fixers()]
