"""Tests for the command line (python -m microtypo)."""

from __future__ import annotations

import io

import pytest

from microtypo.__main__ import main

NNBSP = "\u202f"


class TestFix:
    def test_stdout(self, tmp_path, capsys):
        path = tmp_path / "note.md"
        path.write_text("Attends... vraiment ?", encoding="utf-8")
        assert main(["fix", str(path)]) == 0
        assert capsys.readouterr().out == f"Attends… vraiment{NNBSP}?"
        assert path.read_text(encoding="utf-8") == "Attends... vraiment ?"

    def test_in_place(self, tmp_path):
        path = tmp_path / "note.md"
        path.write_text("Attends...", encoding="utf-8")
        assert main(["fix", "--in-place", str(path)]) == 0
        assert path.read_text(encoding="utf-8") == "Attends…"

    def test_check(self, tmp_path, capsys):
        dirty = tmp_path / "dirty.md"
        dirty.write_text("Attends...", encoding="utf-8")
        clean = tmp_path / "clean.md"
        clean.write_text("Rien à faire", encoding="utf-8")
        assert main(["fix", "--check", str(dirty), str(clean)]) == 1
        out = capsys.readouterr().out
        assert "dirty.md" in out
        assert "clean.md" not in out
        assert dirty.read_text(encoding="utf-8") == "Attends..."
        assert main(["fix", "--check", str(clean)]) == 0

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO('He said "yes"'))
        assert main(["fix", "--locale", "en_GB"]) == 0
        assert capsys.readouterr().out == "He said “yes”"

    def test_disable(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Attends..."))
        assert main(["fix", "--disable", "ellipsis"]) == 0
        assert capsys.readouterr().out == "Attends..."

    def test_unknown_fixer(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(SystemExit):
            main(["fix", "--enable", "Nope"])

    def test_settings_file(self, tmp_path, monkeypatch, capsys):
        settings = tmp_path / "settings.yml"
        settings.write_text("locale: en_GB\nfixers:\n  Trademark: false\n", encoding="utf-8")
        monkeypatch.setattr("sys.stdin", io.StringIO("Example (c) -- end"))
        assert main(["fix", "--settings", str(settings)]) == 0
        assert capsys.readouterr().out == "Example (c)—end"

    def test_in_place_needs_files(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("x"))
        assert main(["fix", "--in-place"]) == 2
        assert "--in-place" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["fix", str(tmp_path / "absent.md")]) == 2
        assert "absent.md" in capsys.readouterr().err


class TestList:
    def test_lists_every_fixer(self, capsys):
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert "Locale : fr_FR" in out
        for fixer_id in ("Ellipsis", "FrenchNoBreakSpace", "Hyphen"):
            assert fixer_id in out
        assert "[off]  Hyphen" in out

    def test_locale(self, capsys):
        assert main(["list", "--locale", "en-GB"]) == 0
        assert "Locale : en_GB" in capsys.readouterr().out


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
