"""Fixer base class and FixerRegistry singleton."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Sequence, Union

from microtypo.core.models import FixerCategory, FixerExample, KeystrokeResult

#: Locale every fixer starts with until the engine propagates the configured one.
DEFAULT_LOCALE = "fr_FR"

Replacement = Union[str, Callable[["re.Match[str]"], str]]
Transform = tuple["re.Pattern[str]", Replacement]

# Modifier keys that turn a keystroke into an editor command
_COMMAND_MODIFIERS = frozenset({"ctrl", "control", "meta", "cmd", "command"})


def has_command_modifier(modifiers: Iterable[str] | None) -> bool:
    """True if a Ctrl/Meta-like modifier is held (the key is a shortcut)."""
    if not modifiers:
        return False
    return any(str(m).strip().lower() in _COMMAND_MODIFIERS for m in modifiers)


class Fixer(ABC):
    """Abstract base for all typographic fixers."""

    #: Stable unique identifier, also the settings key, e.g. "Ellipsis"
    fixer_id: str

    #: Human-readable name shown to the user
    name: str = ""

    description: str = ""

    category: FixerCategory

    #: Lower runs earlier.
    priority: int

    default_enabled: bool = True

    #: Whether fix() branches on the locale.
    locale_sensitive: bool = False

    def __init__(self, locale: str = DEFAULT_LOCALE, enabled: bool | None = None) -> None:
        self.enabled: bool = self.default_enabled if enabled is None else bool(enabled)
        self.locale: str = locale

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @abstractmethod
    def fix(self, text: str) -> str:
        """Return *text* with this fixer's corrections applied.

        Must be idempotent: ``fix(fix(t)) == fix(t)``.
        """

    def handle_keystroke(
        self, key: str, modifiers: Iterable[str] | None, line_before_cursor: str
    ) -> KeystrokeResult | None:
        """Decide whether to intercept *key* typed after *line_before_cursor*.

        Returns None to let the editor insert the key normally. Only the text
        before the cursor may be consulted.
        """
        return None

    @abstractmethod
    def example(self) -> FixerExample:
        """Return a before/after pair for documentation."""

    # ------------------------------------------------------------------
    # Locale
    # ------------------------------------------------------------------

    def set_locale(self, locale: str) -> None:
        self.locale = locale

    def is_locale_compatible(self, *prefixes: str) -> bool:
        """True if the current locale starts with one of *prefixes*.

        ``fr-FR`` and ``fr_FR`` are equivalent, comparison is case-insensitive.
        """
        current = (self.locale or "").replace("-", "_").lower()
        return any(current.startswith(p.replace("-", "_").lower()) for p in prefixes)

    @property
    def is_french(self) -> bool:
        return self.is_locale_compatible("fr")

    def is_active(self) -> bool:
        return self.enabled

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def apply_transforms(text: str, transforms: Sequence[Transform]) -> str:
        """Apply ``(pattern, replacement)`` pairs to *text*, in order."""
        for pattern, replacement in transforms:
            text = pattern.sub(replacement, text)
        return text

    def to_dict(self) -> dict:
        example = self.example()
        return {
            "id": self.fixer_id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority,
            "enabled": self.enabled,
            "locale_sensitive": self.locale_sensitive,
            "example": example.to_dict(),
        }

    def __repr__(self) -> str:
        state = "on" if self.enabled else "off"
        return f"<{type(self).__name__} {self.fixer_id!r} p={self.priority} {state}>"


class FixerRegistry:
    """Singleton registry mapping fixer_id → Fixer class, in registration order."""

    _instance: "FixerRegistry | None" = None
    _fixers: dict[str, type[Fixer]]

    def __new__(cls) -> "FixerRegistry":
        if cls._instance is None:
            inst = super().__new__(cls)
            inst._fixers = {}
            cls._instance = inst
        return cls._instance

    def register(self, cls: type[Fixer]) -> type[Fixer]:
        """Register a Fixer class. Can be used as a decorator."""
        self._fixers[cls.fixer_id] = cls
        return cls

    def get(self, fixer_id: str) -> type[Fixer] | None:
        return self._fixers.get(fixer_id)

    def all_ids(self) -> list[str]:
        return list(self._fixers.keys())

    def all_fixers(self) -> list[type[Fixer]]:
        return list(self._fixers.values())

    def create_all(self, locale: str = DEFAULT_LOCALE) -> list[Fixer]:
        """Instantiate every registered fixer with its default enabled state."""
        return [cls(locale=locale) for cls in self._fixers.values()]


# Module-level convenience instance
registry = FixerRegistry()
