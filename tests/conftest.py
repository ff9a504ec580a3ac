"""Pytest fixtures shared across all tests."""

from __future__ import annotations

import pytest

from microtypo.core.engine import TypographyEngine
from microtypo.core.settings import settings_for_locale


@pytest.fixture
def fr_engine() -> TypographyEngine:
    return TypographyEngine(settings_for_locale("fr_FR"))


@pytest.fixture
def en_engine() -> TypographyEngine:
    return TypographyEngine(settings_for_locale("en_GB"))


@pytest.fixture
def markdown_note() -> str:
    """A note mixing prose with every kind of protected region."""
    return (
        "---\n"
        "title: \"Notes -- brouillon\"\n"
        "---\n"
        "# Introduction\n"
        "\n"
        "Il a dit \"bonjour\"... Vraiment ? Oui -- entre 10 - 12 kg.\n"
        "Voir https://example.com/a--b?x=1 et [[Page -- liée]].\n"
        "Le motif /a--b/g et le code `x = \"y\"...` restent tels quels.\n"
        "\n"
        "```python\n"
        "print(\"Hello\")  # 3 x 4 -- (c)\n"
        "```\n"
        "\n"
        "Un [lien \"cité\"](https://example.org/(c)) et 1920 x 1080 (c) 2024.\n"
    )
