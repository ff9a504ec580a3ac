"""Tests for the HTTP API.

Covers:
  - GET /health
  - GET/PUT fixers and categories
  - GET/PUT/reset settings
  - POST /api/process, /api/process/details
  - POST /api/keystroke (flag and document+offset protection)
  - Erreurs 404 / 422
"""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient  # noqa: E402

from microtypo import __version__  # noqa: E402
from microtypo.core.settings import settings_for_locale  # noqa: E402
from microtypo.web import app as app_module  # noqa: E402

client = TestClient(app_module.app)

NNBSP = "\u202f"


@pytest.fixture(autouse=True)
def _reset_engine():
    """Every test starts from the French preset."""
    app_module.engine.set_configuration(settings_for_locale("fr_FR"))
    yield


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": __version__}


# ---------------------------------------------------------------------------
# Fixers
# ---------------------------------------------------------------------------


class TestFixers:
    def test_list(self):
        resp = client.get("/api/fixers")
        assert resp.status_code == 200
        data = resp.json()
        assert data["locale"] == "fr_FR"
        ids = [f["id"] for f in data["fixers"]]
        assert ids[0] == "Ellipsis"
        assert ids[-1] == "Hyphen"
        assert data["fixers"][0]["example"]["before"]

    def test_toggle(self):
        resp = client.put("/api/fixers/Ellipsis", json={"enabled": False})
        assert resp.status_code == 200
        assert resp.json()["enabled"] is False
        resp = client.post("/api/process", json={"text": "Bon..."})
        assert resp.json()["corrected"] == "Bon..."

    def test_toggle_legacy_id(self):
        resp = client.put("/api/fixers/french-spacing", json={"enabled": False})
        assert resp.status_code == 200
        assert resp.json()["id"] == "FrenchNoBreakSpace"

    def test_toggle_unknown(self):
        resp = client.put("/api/fixers/Nope", json={"enabled": False})
        assert resp.status_code == 404

    def test_toggle_requires_boolean(self):
        resp = client.put("/api/fixers/Dash", json={"enabled": "non"})
        assert resp.status_code == 422
        assert "booléen" in resp.json()["detail"]

    def test_category(self):
        resp = client.put("/api/categories/quotes", json={"enabled": False})
        assert resp.status_code == 200
        assert resp.json() == {"category": "quotes", "enabled": False, "count": 2}

    def test_unknown_category(self):
        resp = client.put("/api/categories/nope", json={"enabled": False})
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_get(self):
        data = client.get("/api/settings").json()
        assert data["locale"] == "fr_FR"
        assert data["enableRealTimeCorrection"] is True
        assert data["fixers"]["Hyphen"] is False

    def test_put_is_sanitized(self):
        resp = client.put(
            "/api/settings",
            json={"locale": "en-GB", "fixers": {"dash": False, "Nope": True}, "highlightEnabled": "x"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["locale"] == "en_GB"
        assert data["fixers"]["Dash"] is False
        assert "Nope" not in data["fixers"]
        assert data["highlightEnabled"] is False

    def test_put_requires_object(self):
        resp = client.put("/api/settings", json=["nope"])
        assert resp.status_code == 422

    def test_reset(self):
        client.put("/api/fixers/Dash", json={"enabled": False})
        data = client.post("/api/settings/reset").json()
        assert data["fixers"]["Dash"] is True


# ---------------------------------------------------------------------------
# Processing
# ---------------------------------------------------------------------------


class TestProcess:
    def test_process(self):
        resp = client.post("/api/process", json={"text": "2020-2024 -- ...encore..."})
        assert resp.status_code == 200
        assert resp.json() == {"corrected": "2020–2024 — …encore…"}

    def test_details(self):
        resp = client.post("/api/process/details", json={"text": "Bon"})
        assert resp.json() == {"original": "Bon", "corrected": "Bon", "changed": False}

    def test_missing_text(self):
        resp = client.post("/api/process", json={})
        assert resp.status_code == 422

    def test_invalid_json(self):
        resp = client.post(
            "/api/process", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 422
        assert "JSON" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Keystrokes
# ---------------------------------------------------------------------------


class TestKeystroke:
    def test_intercepted(self):
        resp = client.post("/api/keystroke", json={"key": "?", "line_before_cursor": "Quoi "})
        assert resp.status_code == 200
        assert resp.json() == {
            "intercepted": True,
            "line_before_cursor": f"Quoi{NNBSP}?",
            "cursor_offset": 6,
        }

    def test_not_intercepted(self):
        resp = client.post("/api/keystroke", json={"key": "a", "line_before_cursor": "Quoi"})
        assert resp.json() == {"intercepted": False, "line_before_cursor": "Quoi", "cursor_offset": 4}

    def test_protected_flag(self):
        resp = client.post(
            "/api/keystroke",
            json={"key": ".", "line_before_cursor": "a..", "cursor_protected": True},
        )
        assert resp.json()["intercepted"] is False

    def test_protection_from_document(self):
        document = "Voir `code.."
        resp = client.post(
            "/api/keystroke",
            json={
                "key": ".",
                "line_before_cursor": document,
                "document": document,
                "offset": len(document),
            },
        )
        assert resp.json()["intercepted"] is False

    def test_modifiers_must_be_strings(self):
        resp = client.post(
            "/api/keystroke",
            json={"key": ".", "line_before_cursor": "a..", "modifiers": "ctrl"},
        )
        assert resp.status_code == 422

    def test_offset_required_with_document(self):
        resp = client.post(
            "/api/keystroke",
            json={"key": ".", "line_before_cursor": "a..", "document": "a.."},
        )
        assert resp.status_code == 422
