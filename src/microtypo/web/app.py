"""Microtypo Web API: FastAPI backend for editor hosts.

Endpoints:
  GET  /health                    → status + version
  GET  /api/fixers                → fixers in priority order
  PUT  /api/fixers/{id}           → enable / disable one fixer
  PUT  /api/categories/{category} → enable / disable a whole category
  GET  /api/settings              → current settings (host camelCase keys)
  PUT  /api/settings              → replace settings (sanitized)
  POST /api/settings/reset        → locale preset
  POST /api/process               → corrected text
  POST /api/process/details       → original, corrected, changed
  POST /api/keystroke             → real-time interception decision

Run with:
  uvicorn microtypo.web.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from microtypo import __version__
from microtypo.core.engine import TypographyEngine
from microtypo.core.masking import is_cursor_in_protected_zone
from microtypo.core.models import FixerCategory
from microtypo.core.settings import (
    DEFAULT_LOCALE,
    load_settings,
    save_settings,
    settings_for_locale,
    validate_settings,
)

# ---------------------------------------------------------------------------
# Configuration via variables d'environnement
# ---------------------------------------------------------------------------

_LOCALE = os.environ.get("MICROTYPO_LOCALE", DEFAULT_LOCALE)

# Fichier YAML de réglages : lu au démarrage, réécrit à chaque modification
_SETTINGS_PATH_RAW = os.environ.get("MICROTYPO_SETTINGS", "")
_SETTINGS_PATH: Path | None = Path(_SETTINGS_PATH_RAW) if _SETTINGS_PATH_RAW else None

# Origines CORS : "*" = toutes, sinon liste séparée par virgules
_CORS_ORIGINS_RAW = os.environ.get("MICROTYPO_CORS_ORIGINS", "*")
_CORS_ORIGINS: list[str] = (
    ["*"]
    if _CORS_ORIGINS_RAW in ("*", "")
    else [o.strip() for o in _CORS_ORIGINS_RAW.split(",") if o.strip()]
)
# allow_credentials est incompatible avec allow_origins=["*"]
_CORS_ALLOW_CREDENTIALS = "*" not in _CORS_ORIGINS

_logger = logging.getLogger(__name__)


def _initial_settings():
    if _SETTINGS_PATH is not None:
        return load_settings(_SETTINGS_PATH)
    return settings_for_locale(_LOCALE)


engine = TypographyEngine(_initial_settings())

# ---------------------------------------------------------------------------
# Application FastAPI
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Microtypo API",
    description="API de corrections typographiques pour notes Markdown",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_CORS_ORIGINS,
    allow_credentials=_CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _log_startup() -> None:
    _logger.info(
        "Microtypo démarré — locale=%s réglages=%s cors=%s",
        engine.settings.locale,
        _SETTINGS_PATH or "-",
        _CORS_ORIGINS_RAW,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _json_object(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object or raise 422."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=422, detail="Corps de requête JSON invalide")
    if not isinstance(body, dict):
        raise HTTPException(status_code=422, detail="Le corps de la requête doit être un objet JSON")
    return body


def _require_bool(body: dict[str, Any], key: str) -> bool:
    value = body.get(key)
    if not isinstance(value, bool):
        raise HTTPException(status_code=422, detail=f"Le champ « {key} » doit être un booléen")
    return value


def _require_str(body: dict[str, Any], key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str):
        raise HTTPException(
            status_code=422, detail=f"Le champ « {key} » doit être une chaîne de caractères"
        )
    return value


def _persist() -> None:
    if _SETTINGS_PATH is None:
        return
    try:
        save_settings(engine.settings, _SETTINGS_PATH)
    except OSError as exc:
        _logger.warning("Impossible d'enregistrer les réglages dans %s : %s", _SETTINGS_PATH, exc)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


# ---------------------------------------------------------------------------
# Fixers
# ---------------------------------------------------------------------------


@app.get("/api/fixers")
async def list_fixers():
    return {
        "locale": engine.settings.locale,
        "fixers": [f.to_dict() for f in engine.get_fixers()],
    }


@app.put("/api/fixers/{fixer_id}")
async def toggle_fixer(fixer_id: str, request: Request):
    body = await _json_object(request)
    enabled = _require_bool(body, "enabled")
    if not engine.toggle_fixer(fixer_id, enabled):
        raise HTTPException(status_code=404, detail=f"Correcteur inconnu : {fixer_id}")
    _persist()
    return engine.get_fixer(fixer_id).to_dict()


@app.put("/api/categories/{category}")
async def toggle_category(category: str, request: Request):
    body = await _json_object(request)
    enabled = _require_bool(body, "enabled")
    if FixerCategory.parse(category) is None:
        raise HTTPException(status_code=404, detail=f"Catégorie inconnue : {category}")
    count = engine.toggle_category(category, enabled)
    _persist()
    return {"category": FixerCategory.parse(category).value, "enabled": enabled, "count": count}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@app.get("/api/settings")
async def get_settings():
    return engine.settings.to_dict()


@app.put("/api/settings")
async def put_settings(request: Request):
    body = await _json_object(request)
    engine.set_configuration(validate_settings(body))
    _persist()
    return engine.settings.to_dict()


@app.post("/api/settings/reset")
async def reset_settings():
    engine.reset_to_defaults()
    _persist()
    return engine.settings.to_dict()


# ---------------------------------------------------------------------------
# Correction
# ---------------------------------------------------------------------------


@app.post("/api/process")
async def process(request: Request):
    body = await _json_object(request)
    text = _require_str(body, "text")
    return {"corrected": engine.process_text(text)}


@app.post("/api/process/details")
async def process_details(request: Request):
    body = await _json_object(request)
    text = _require_str(body, "text")
    return engine.process_text_with_details(text).to_dict()


@app.post("/api/keystroke")
async def keystroke(request: Request):
    """Decide whether the host should replace the text before the cursor.

    Protection comes from ``cursor_protected`` or, if the host sends the whole
    ``document`` and the cursor ``offset``, is computed here.
    """
    body = await _json_object(request)
    key = _require_str(body, "key")
    line = _require_str(body, "line_before_cursor")

    modifiers = body.get("modifiers") or []
    if not isinstance(modifiers, list) or not all(isinstance(m, str) for m in modifiers):
        raise HTTPException(
            status_code=422, detail="Le champ « modifiers » doit être une liste de chaînes"
        )

    protected = body.get("cursor_protected", False)
    if not isinstance(protected, bool):
        raise HTTPException(status_code=422, detail="Le champ « cursor_protected » doit être un booléen")
    if "document" in body:
        document = _require_str(body, "document")
        offset = body.get("offset")
        if not isinstance(offset, int) or isinstance(offset, bool):
            raise HTTPException(status_code=422, detail="Le champ « offset » doit être un entier")
        protected = protected or is_cursor_in_protected_zone(document, offset)

    result = engine.dispatch_keystroke(key, modifiers, line, cursor_protected=protected)
    if result is None:
        return {"intercepted": False, "line_before_cursor": line, "cursor_offset": len(line)}
    return {
        "intercepted": True,
        "line_before_cursor": result.line_before_cursor,
        "cursor_offset": result.cursor_offset,
    }
