"""Typography settings: presets, sanitizing, YAML persistence.

Settings arrive from untrusted places (a host application, a YAML file, an
HTTP body). :func:`validate_settings` turns anything into a usable
:class:`TypographySettings` and never raises; rejected values are logged.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

# Import fixers module to trigger all @registry.register decorators
import microtypo.core.fixers  # noqa: F401
from microtypo.core.fixer_base import DEFAULT_LOCALE, registry
from microtypo.core.resources import get_preset_path, list_preset_names

_log = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_LOCALE",
    "LEGACY_FIXER_IDS",
    "TypographySettings",
    "deep_merge",
    "load_settings",
    "normalize_fixer_id",
    "save_settings",
    "settings_for_locale",
    "validate_settings",
]

#: Former spellings of the fixer ids, still found in saved host settings.
LEGACY_FIXER_IDS: dict[str, str] = {
    "ellipsis": "Ellipsis",
    "dash": "Dash",
    "french-spacing": "FrenchNoBreakSpace",
    "FrenchSpacing": "FrenchNoBreakSpace",
    "smart-quotes": "SmartQuotes",
    "curly-quote": "CurlyQuote",
    "comma": "NoSpaceBeforeComma",
    "unit": "Unit",
    "dimension": "Dimension",
    "trademark": "Trademark",
    "hyphen": "Hyphen",
}

# Host keys → dataclass fields. snake_case spellings are accepted too.
_FLAG_KEYS: dict[str, str] = {
    "enableRealTimeCorrection": "enable_realtime_correction",
    "enable_realtime_correction": "enable_realtime_correction",
    "highlightEnabled": "highlight_enabled",
    "highlight_enabled": "highlight_enabled",
}

# Keys read by presets only
_PRESET_META_KEYS = frozenset({"id", "name"})


# ---------------------------------------------------------------------------
# Dataclass
# ---------------------------------------------------------------------------


@dataclass
class TypographySettings:
    """Sanitized settings.

    ``extras`` keeps cosmetic host keys (``highlightButton``,
    ``guillemetsEnabled``, ``colonSpaceType``…) so they survive a round trip;
    the engine ignores them.
    """

    enable_realtime_correction: bool = True
    locale: str = DEFAULT_LOCALE
    fixers: dict[str, bool] = field(default_factory=dict)
    highlight_enabled: bool = False
    extras: dict[str, Any] = field(default_factory=dict)

    def is_enabled(self, fixer_id: str) -> bool | None:
        """Configured state of *fixer_id*, or None if the settings are silent."""
        canonical = normalize_fixer_id(fixer_id)
        if canonical is None:
            return None
        return self.fixers.get(canonical)

    def to_dict(self) -> dict:
        """Host representation (camelCase keys)."""
        return {
            **deepcopy(self.extras),
            "enableRealTimeCorrection": self.enable_realtime_correction,
            "locale": self.locale,
            "fixers": dict(self.fixers),
            "highlightEnabled": self.highlight_enabled,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def deep_merge(base: dict, overlay: dict) -> dict:
    """Merge overlay into base. Overlay wins on scalar conflicts.

    Dicts are merged recursively, everything else is replaced.
    """
    result = deepcopy(base)
    for key, val in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = deep_merge(result[key], val)
        else:
            result[key] = deepcopy(val)
    return result


def normalize_fixer_id(fixer_id: Any) -> str | None:
    """Return the canonical id for *fixer_id* (legacy spellings accepted).

    Unknown ids give None.
    """
    if not isinstance(fixer_id, str):
        return None
    key = fixer_id.strip()
    known = registry.all_ids()
    if key in known:
        return key
    if key in LEGACY_FIXER_IDS:
        return LEGACY_FIXER_IDS[key]
    lowered = key.lower()
    for canonical in known:
        if canonical.lower() == lowered:
            return canonical
    return None


def resolve_locale(locale: Any) -> str:
    """Map *locale* onto a shipped preset name.

    ``fr-FR`` → ``fr_FR``; an unknown region falls back to a preset of the
    same language (``fr_BE`` → ``fr_FR``), anything else to ``DEFAULT_LOCALE``.
    """
    if not isinstance(locale, str) or not locale.strip():
        return DEFAULT_LOCALE
    wanted = locale.strip().replace("-", "_")
    presets = list_preset_names()
    for name in presets:
        if name.lower() == wanted.lower():
            return name

    language = wanted.split("_", 1)[0].lower()
    candidates = [p for p in presets if p.lower().startswith(language + "_")]
    if not candidates:
        _log.warning("Unknown locale %r, falling back to %s", locale, DEFAULT_LOCALE)
        return DEFAULT_LOCALE
    # fr → fr_FR rather than fr_CA
    for name in candidates:
        if name.split("_", 1)[1].lower() == language:
            return name
    return candidates[0]


@lru_cache(maxsize=None)
def _read_preset(name: str) -> dict:
    path = get_preset_path(name)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        _log.warning("Could not read preset %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        _log.warning("Preset %s is not a mapping; ignoring.", path)
        return {}
    return data


def _default_flags() -> dict[str, bool]:
    return {cls.fixer_id: cls.default_enabled for cls in registry.all_fixers()}


def settings_for_locale(locale: str = DEFAULT_LOCALE) -> TypographySettings:
    """Return the preset settings for *locale* (resolved with :func:`resolve_locale`)."""
    name = resolve_locale(locale)
    preset = deepcopy(_read_preset(name))
    flags = _default_flags()
    for key, value in (preset.get("fixers") or {}).items():
        canonical = normalize_fixer_id(key)
        if canonical is not None and isinstance(value, bool):
            flags[canonical] = value
    return TypographySettings(
        enable_realtime_correction=bool(preset.get("enableRealTimeCorrection", True)),
        locale=name,
        fixers=flags,
        highlight_enabled=bool(preset.get("highlightEnabled", False)),
    )


# ---------------------------------------------------------------------------
# Sanitizing
# ---------------------------------------------------------------------------


def validate_settings(raw: Any) -> TypographySettings:
    """Build settings from an untrusted mapping. Never raises.

    Starts from the preset of the requested locale, then applies every valid
    value of *raw*. Non-boolean flags and unknown fixer ids are dropped with a
    warning; legacy ids are mapped to their canonical spelling. Any other key
    is kept in ``extras``.
    """
    if isinstance(raw, TypographySettings):
        raw = raw.to_dict()
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        _log.warning("Settings must be a mapping, got %s; using defaults.", type(raw).__name__)
        raw = {}

    settings = settings_for_locale(raw.get("locale", DEFAULT_LOCALE))

    for key, value in raw.items():
        if key == "locale" or key in _PRESET_META_KEYS:
            continue
        if key in _FLAG_KEYS:
            if isinstance(value, bool):
                setattr(settings, _FLAG_KEYS[key], value)
            else:
                _log.warning("Setting %s must be a boolean, got %r; ignored.", key, value)
        elif key == "fixers":
            _apply_fixer_flags(settings, value)
        else:
            settings.extras[str(key)] = deepcopy(value)

    return settings


def _apply_fixer_flags(settings: TypographySettings, flags: Any) -> None:
    if not isinstance(flags, Mapping):
        _log.warning("Setting fixers must be a mapping, got %r; ignored.", flags)
        return
    for key, value in flags.items():
        canonical = normalize_fixer_id(key)
        if canonical is None:
            _log.warning("Unknown fixer %r in settings; ignored.", key)
            continue
        if not isinstance(value, bool):
            _log.warning("Fixer %s flag must be a boolean, got %r; ignored.", canonical, value)
            continue
        settings.fixers[canonical] = value


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def load_settings(path: Path | str) -> TypographySettings:
    """Read YAML settings from *path*; unreadable files give the defaults."""
    path = Path(path)
    if not path.exists():
        _log.info("Settings file %s not found; using defaults.", path)
        return settings_for_locale(DEFAULT_LOCALE)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        _log.warning("Could not read settings %s: %s", path, exc)
        return settings_for_locale(DEFAULT_LOCALE)
    return validate_settings(data)


def save_settings(settings: TypographySettings, path: Path | str) -> Path:
    """Write *settings* to *path* as YAML and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(settings.to_dict(), allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )
    _log.debug("Settings saved to %s", path)
    return path
