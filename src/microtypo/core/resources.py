"""importlib.resources helpers for accessing the built-in locale presets.

Works both in development (editable install) and in a packaged wheel.
"""

from __future__ import annotations

import importlib.resources as _ir
from pathlib import Path

PRESET_SUFFIX = ".yml"


def get_presets_dir() -> Path:
    """Return the absolute Path to resources/presets/ inside the package."""
    # hatchling ships the presets as plain files, so the Traversable is a
    # real directory.
    return Path(str(_ir.files("microtypo.resources.presets")))


def get_preset_path(name: str) -> Path:
    """Return the Path to a named preset, e.g. ``"fr_FR"`` → ``.../fr_FR.yml``."""
    return get_presets_dir() / f"{name}{PRESET_SUFFIX}"


def list_preset_names() -> list[str]:
    """Stems of every shipped preset, sorted."""
    return sorted(p.stem for p in get_presets_dir().glob(f"*{PRESET_SUFFIX}"))
