#!/usr/bin/env python3
"""
Toggle the GNOME on-screen keyboard while the desktop is in tablet mode.

Repo source: tools/gooroom_screen_keyboard_toggler.py

Outside tablet mode this is a no-op. Toolkit accessibility is switched on
together with every toggle.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable

from gooroom_tablet_mode import (
    DEFAULT_SENTINEL,
    DESKTOP_APPLICATION_SCHEMA,
    GSETTINGS,
    _log,
    read_mode,
    set_screen_keyboard,
    setup_i18n,
)

SCREEN_KEYBOARD_KEY = "screen-keyboard-enabled"


def read_screen_keyboard_enabled() -> bool | None:
    """
    Current value of the screen-keyboard key, or None if its schema is not installed.
    """

    import gi

    gi.require_version("Gio", "2.0")
    from gi.repository import Gio

    source = Gio.SettingsSchemaSource.get_default()
    schema = source.lookup(DESKTOP_APPLICATION_SCHEMA, True) if source is not None else None
    if schema is None:
        return None
    settings = Gio.Settings.new_full(schema, None, None)
    return bool(settings.get_boolean(SCREEN_KEYBOARD_KEY))


def toggle_screen_keyboard(
    *,
    sentinel: Path = DEFAULT_SENTINEL,
    read_enabled: Callable[[], bool | None] = read_screen_keyboard_enabled,
    gsettings: str = GSETTINGS,
    dry_run: bool = False,
) -> int:
    if not read_mode(sentinel):
        _log("no_tablet_mode", sentinel=str(sentinel))
        return 0

    current = read_enabled()
    if current is None:
        _log("schema_missing", schema=DESKTOP_APPLICATION_SCHEMA)
        return 0

    _log("toggle", key=SCREEN_KEYBOARD_KEY, before=current, after=not current)
    set_screen_keyboard(not current, gsettings=gsettings, dry_run=dry_run)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Toggle the on-screen keyboard (tablet mode only).")
    parser.add_argument(
        "--sentinel-file",
        type=Path,
        default=DEFAULT_SENTINEL,
        help=f"Tablet-mode marker file (default: {DEFAULT_SENTINEL}).",
    )
    parser.add_argument("--gsettings", default=GSETTINGS, help=f"gsettings binary (default: {GSETTINGS}).")
    parser.add_argument("--dry-run", action="store_true", help="Log commands instead of running them.")
    return parser


def main(argv: list[str]) -> int:
    setup_i18n()
    args = build_parser().parse_args(argv)
    return toggle_screen_keyboard(
        sentinel=args.sentinel_file,
        gsettings=str(args.gsettings),
        dry_run=bool(args.dry_run),
    )


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
