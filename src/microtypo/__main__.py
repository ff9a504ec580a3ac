"""Entry point: python -m microtypo

Subcommands:
  fix [FILES]   correct files (or stdin) and print the result
  list          show the fixers, their state and an example
  serve         run the HTTP API with uvicorn
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

_log = logging.getLogger("microtypo")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="microtypo",
        description="Microtypo — corrections typographiques pour Markdown",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Journalisation détaillée (DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    fix = sub.add_parser("fix", help="Corriger des fichiers (ou l'entrée standard)")
    fix.add_argument("files", nargs="*", type=Path, help="Fichiers à corriger ; aucun = entrée standard")
    mode = fix.add_mutually_exclusive_group()
    mode.add_argument("-i", "--in-place", action="store_true", help="Réécrire les fichiers corrigés")
    mode.add_argument(
        "--check",
        action="store_true",
        help="Ne rien écrire ; code de sortie 1 si une correction serait appliquée",
    )
    _add_config_arguments(fix)

    lst = sub.add_parser("list", help="Lister les correcteurs")
    _add_config_arguments(lst)

    serve = sub.add_parser("serve", help="Lancer l'API HTTP")
    serve.add_argument("--host", default="127.0.0.1", help="Adresse d'écoute (défaut : 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port TCP (défaut : 8000)")
    return parser


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--locale", default=None, help="Locale, par ex. fr_FR ou en_GB")
    parser.add_argument("--settings", type=Path, default=None, help="Fichier de réglages YAML")
    parser.add_argument(
        "--enable", action="append", default=[], metavar="ID", help="Activer un correcteur (répétable)"
    )
    parser.add_argument(
        "--disable", action="append", default=[], metavar="ID", help="Désactiver un correcteur (répétable)"
    )


def _build_engine(args: argparse.Namespace):
    from microtypo.core.engine import TypographyEngine
    from microtypo.core.settings import load_settings, settings_for_locale, validate_settings

    if args.settings is None:
        settings = settings_for_locale(args.locale or "")
    else:
        settings = load_settings(args.settings)
        if args.locale:
            # --locale wins over the file's locale, the file's flags are kept
            raw = settings.to_dict()
            raw["locale"] = args.locale
            settings = validate_settings(raw)

    engine = TypographyEngine(settings)
    for fixer_id, enabled in [(i, True) for i in args.enable] + [(i, False) for i in args.disable]:
        if not engine.toggle_fixer(fixer_id, enabled):
            raise SystemExit(f"Correcteur inconnu : {fixer_id}")
    return engine


def _cmd_fix(args: argparse.Namespace) -> int:
    engine = _build_engine(args)

    if not args.files:
        if args.in_place:
            print("Erreur : --in-place nécessite au moins un fichier.", file=sys.stderr)
            return 2
        result = engine.process_text_with_details(sys.stdin.read())
        if args.check:
            return 1 if result.changed else 0
        sys.stdout.write(result.corrected)
        return 0

    changed_files = 0
    for path in args.files:
        try:
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Erreur : impossible de lire {path} : {exc}", file=sys.stderr)
            return 2
        result = engine.process_text_with_details(original)
        if result.changed:
            changed_files += 1
        if args.check:
            if result.changed:
                print(f"{path} : corrections à appliquer")
        elif args.in_place:
            if result.changed:
                path.write_text(result.corrected, encoding="utf-8")
                _log.info("%s corrigé", path)
        else:
            sys.stdout.write(result.corrected)

    if args.check:
        return 1 if changed_files else 0
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    engine = _build_engine(args)
    print(f"Locale : {engine.settings.locale}")
    for fixer in engine.get_fixers():
        state = "on " if fixer.enabled else "off"
        example = fixer.example()
        print(f"{fixer.priority:>2}  [{state}]  {fixer.fixer_id:<20} {fixer.category.value:<12} {fixer.name}")
        print(f"      {example.before!r}")
        print(f"    → {example.after!r}")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    print(f"Microtypo — démarrage du serveur sur http://{args.host}:{args.port}")
    uvicorn.run("microtypo.web.app:app", host=args.host, port=args.port, log_level="info")
    return 0


_COMMANDS = {"fix": _cmd_fix, "list": _cmd_list, "serve": _cmd_serve}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
