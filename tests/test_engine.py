"""Tests for TypographyEngine: ordering, configuration, protection, keystrokes."""

from __future__ import annotations

import pytest

from microtypo.core.engine import TypographyEngine
from microtypo.core.fixer_base import Fixer
from microtypo.core.fixers.punctuation import EllipsisFixer
from microtypo.core.models import FixerCategory, FixerExample, KeystrokeResult
from microtypo.core.settings import settings_for_locale

NBSP = "\u00a0"
NNBSP = "\u202f"


class _BrokenFixer(Fixer):
    fixer_id = "Broken"
    name = "Broken"
    category = FixerCategory.SYMBOLS
    priority = 0

    def fix(self, text: str) -> str:
        raise RuntimeError("boom")

    def handle_keystroke(self, key, modifiers, line_before_cursor):
        raise RuntimeError("boom")

    def example(self) -> FixerExample:
        return FixerExample("a", "a")


class _UpperFixer(Fixer):
    fixer_id = "Upper"
    category = FixerCategory.SYMBOLS
    priority = 1

    def fix(self, text: str) -> str:
        return text.upper()

    def example(self) -> FixerExample:
        return FixerExample("a", "A")


# ---------------------------------------------------------------------------
# Fixer set and ordering
# ---------------------------------------------------------------------------


class TestFixerSet:
    def test_priority_order(self, fr_engine):
        assert [f.fixer_id for f in fr_engine.get_fixers()] == [
            "Ellipsis",
            "Dash",
            "FrenchNoBreakSpace",
            "SmartQuotes",
            "CurlyQuote",
            "NoSpaceBeforeComma",
            "Unit",
            "Dimension",
            "Trademark",
            "Hyphen",
        ]

    def test_hyphen_not_enabled(self, fr_engine):
        ids = [f.fixer_id for f in fr_engine.get_enabled_fixers()]
        assert "Hyphen" not in ids
        assert len(ids) == 9

    def test_equal_priority_keeps_registration_order(self):
        engine = TypographyEngine(fixers=[_UpperFixer(), EllipsisFixer()])
        assert [f.fixer_id for f in engine.get_fixers()] == ["Upper", "Ellipsis"]

    def test_register_replaces_same_id(self, fr_engine):
        replacement = EllipsisFixer()
        fr_engine.register_fixer(replacement)
        assert fr_engine.get_fixer("Ellipsis") is replacement
        assert len(fr_engine.get_fixers()) == 10

    def test_get_fixer_accepts_legacy_id(self, fr_engine):
        assert fr_engine.get_fixer("french-spacing").fixer_id == "FrenchNoBreakSpace"
        assert fr_engine.get_fixer("comma").fixer_id == "NoSpaceBeforeComma"
        assert fr_engine.get_fixer("nope") is None

    def test_fixers_by_category(self, fr_engine):
        ids = [f.fixer_id for f in fr_engine.get_fixers_by_category("quotes")]
        assert ids == ["SmartQuotes", "CurlyQuote"]
        assert fr_engine.get_fixers_by_category("unknown") == []

    def test_example_table(self, fr_engine):
        table = fr_engine.example_table()
        assert table[0][0] == "Ellipsis"
        assert all(isinstance(example, FixerExample) for _, example in table)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_toggle_fixer(self, fr_engine):
        assert fr_engine.toggle_fixer("Ellipsis", False) is True
        assert fr_engine.process_text("Bon...") == "Bon..."
        assert fr_engine.settings.fixers["Ellipsis"] is False

    def test_toggle_unknown_fixer(self, fr_engine):
        assert fr_engine.toggle_fixer("Nope", False) is False

    def test_toggle_category(self, fr_engine):
        assert fr_engine.toggle_category(FixerCategory.QUOTES, False) == 2
        assert fr_engine.process_text('"oui" l\'été') == '"oui" l\'été'
        assert fr_engine.toggle_category("nope", False) == 0

    def test_set_configuration_from_mapping(self, fr_engine):
        settings = fr_engine.set_configuration({"locale": "en-GB", "fixers": {"dash": False}})
        assert settings.locale == "en_GB"
        assert fr_engine.get_fixer("Dash").enabled is False
        assert all(f.locale == "en_GB" for f in fr_engine.get_fixers())

    def test_set_configuration_is_idempotent(self, fr_engine):
        config = {"locale": "fr_FR", "fixers": {"Unit": False}}
        fr_engine.set_configuration(config)
        first = [(f.fixer_id, f.enabled) for f in fr_engine.get_fixers()]
        fr_engine.set_configuration(config)
        assert [(f.fixer_id, f.enabled) for f in fr_engine.get_fixers()] == first

    def test_reset_to_defaults(self, fr_engine):
        fr_engine.toggle_fixer("Dash", False)
        fr_engine.toggle_fixer("Hyphen", True)
        fr_engine.reset_to_defaults()
        assert fr_engine.get_fixer("Dash").enabled is True
        assert fr_engine.get_fixer("Hyphen").enabled is False

    def test_all_disabled_is_identity(self, fr_engine, markdown_note):
        for fixer in fr_engine.get_fixers():
            fr_engine.toggle_fixer(fixer.fixer_id, False)
        assert fr_engine.process_text(markdown_note) == markdown_note


# ---------------------------------------------------------------------------
# Batch correction
# ---------------------------------------------------------------------------


class TestProcessText:
    def test_priority_example_french(self, fr_engine):
        assert fr_engine.process_text("2020-2024 -- ...encore...") == "2020–2024 — …encore…"

    def test_locale_branching_quotes(self, fr_engine, en_engine):
        assert fr_engine.process_text('Il dit "oui"') == f"Il dit «{NBSP}oui{NNBSP}»"
        assert en_engine.process_text('He said "yes"') == "He said “yes”"

    def test_comma_keeps_closing_guillemet_padding(self, fr_engine):
        assert fr_engine.process_text('"Bonjour," dit-il.') == f"«{NBSP}Bonjour,{NNBSP}» dit-il."

    def test_guillemet_padding_is_consistent(self, fr_engine):
        typed = fr_engine.process_text("« oui »")
        converted = fr_engine.process_text('"oui"')
        assert typed == converted == f"«{NBSP}oui{NNBSP}»"

    def test_markdown_table_and_comment_survive(self, fr_engine):
        table = "| a | b |\n|:---|---:|\n| 1 | 2 |"
        assert fr_engine.process_text(table) == table
        assert fr_engine.process_text("<!-- note -->") == "<!-- note -->"

    def test_french_spacing_only_in_french(self, fr_engine, en_engine):
        assert fr_engine.process_text("Vraiment ?") == f"Vraiment{NNBSP}?"
        assert en_engine.process_text("Really ?") == "Really ?"

    def test_unit_versus_heading(self, fr_engine):
        assert fr_engine.process_text("# 1h") == "# 1h"
        assert fr_engine.process_text("Durée 2h") == f"Durée 2{NBSP}h"

    def test_trademark_in_url(self, fr_engine):
        text = "see http://example.com/(c)page"
        assert fr_engine.process_text(text) == text
        assert fr_engine.process_text("Example (c) 2024") == "Example © 2024"

    def test_protected_regions_survive(self, fr_engine, markdown_note):
        result = fr_engine.process_text(markdown_note)
        assert result.startswith('---\ntitle: "Notes -- brouillon"\n---\n')
        assert '```python\nprint("Hello")  # 3 x 4 -- (c)\n```' in result
        assert "https://example.com/a--b?x=1" in result
        assert "[[Page -- liée]]" in result
        assert "/a--b/g" in result
        assert '`x = "y"...`' in result
        assert '[lien "cité"](https://example.org/(c))' in result

    def test_prose_is_corrected(self, fr_engine, markdown_note):
        result = fr_engine.process_text(markdown_note)
        assert (
            f"Il a dit «{NBSP}bonjour{NNBSP}»… Vraiment{NNBSP}? Oui — entre 10–12{NBSP}kg." in result
        )
        assert "1920×1080 © 2024." in result

    @pytest.mark.parametrize("locale", ["fr_FR", "en_GB"])
    def test_idempotent(self, locale, markdown_note):
        engine = TypographyEngine(settings_for_locale(locale))
        once = engine.process_text(markdown_note)
        assert engine.process_text(once) == once

    def test_caption_is_corrected(self, fr_engine):
        text = '{% image src="a.png" caption: "Il dit... oui" %}'
        assert fr_engine.process_text(text) == '{% image src="a.png" caption: "Il dit… oui" %}'

    def test_notes_keep_their_delimiters(self, fr_engine):
        text = '(note: "C\'est l\'été...")'
        assert fr_engine.process_text(text) == '(note: "C’est l’été…")'

    def test_empty_text(self, fr_engine):
        assert fr_engine.process_text("") == ""

    def test_broken_fixer_is_skipped(self, caplog):
        engine = TypographyEngine(fixers=[_BrokenFixer(), EllipsisFixer()])
        with caplog.at_level("ERROR"):
            assert engine.process_text("Bon...") == "Bon…"
        assert "Broken" in caplog.text

    def test_details(self, fr_engine):
        result = fr_engine.process_text_with_details("Bon...")
        assert result.to_dict() == {"original": "Bon...", "corrected": "Bon…", "changed": True}
        assert fr_engine.process_text_with_details("Bon").changed is False


# ---------------------------------------------------------------------------
# Keystrokes
# ---------------------------------------------------------------------------


class TestDispatchKeystroke:
    def test_first_answer_wins(self, fr_engine):
        result = fr_engine.dispatch_keystroke(".", [], "Bon..")
        assert result == KeystrokeResult.replace("Bon…")

    def test_no_interception(self, fr_engine):
        assert fr_engine.dispatch_keystroke("a", [], "Bon") is None

    def test_cursor_protected(self, fr_engine):
        assert fr_engine.dispatch_keystroke(".", [], "Bon..", cursor_protected=True) is None

    def test_realtime_disabled(self, fr_engine):
        fr_engine.set_configuration({"enableRealTimeCorrection": False})
        assert fr_engine.dispatch_keystroke(".", [], "Bon..") is None

    def test_disabled_fixer_does_not_intercept(self, fr_engine):
        fr_engine.toggle_fixer("CurlyQuote", False)
        assert fr_engine.dispatch_keystroke("'", [], "l") is None

    def test_broken_fixer_is_skipped(self, caplog):
        engine = TypographyEngine(fixers=[_BrokenFixer(), EllipsisFixer()])
        with caplog.at_level("ERROR"):
            result = engine.dispatch_keystroke(".", [], "Bon..")
        assert result == KeystrokeResult.replace("Bon…")
        assert "Broken" in caplog.text

    def test_french_punctuation_keystroke(self, fr_engine):
        assert fr_engine.dispatch_keystroke("?", [], "Quoi ") == KeystrokeResult.replace(
            f"Quoi{NNBSP}?"
        )
