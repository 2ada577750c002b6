#!/usr/bin/env python3
"""
Switch the Gooroom desktop between tablet mode and normal (PC) mode.

Repo source: tools/gooroom_desktop_mode_switcher.py

Reads the current mode from the tablet-mode marker, asks the user to confirm
(switching requires logging in again), runs the mode-change helper through
pkexec, updates the screen keyboard settings and logs the session out. When
the logout cannot happen the previous mode is restored.

The sequencing lives in gooroom_mode_flow; this file only provides the GTK
dialogs and the GLib main loop it runs on.
"""

from __future__ import annotations

import argparse
import gettext
import sys
from pathlib import Path
from typing import Callable

import gi

gi.require_version("Gtk", "3.0")
from gi.repository import GLib, Gtk  # noqa: E402

from gooroom_mode_flow import FlowDriver, ModeSwitchFlow  # noqa: E402
from gooroom_tablet_mode import (  # noqa: E402
    DEFAULT_ELEVATE,
    DEFAULT_HELPER,
    DEFAULT_SENTINEL,
    GSETTINGS,
    SystemActions,
    _log,
    mode_name,
    read_mode,
    setup_i18n,
)

_ = gettext.gettext


class GtkFlowUI:
    """Dialogs and scheduling for FlowDriver on top of the GTK 3 main loop."""

    def prompt(self, title: str, message: str, on_answer: Callable[[bool], None]) -> None:
        dialog = Gtk.MessageDialog(
            transient_for=None,
            modal=True,
            message_type=Gtk.MessageType.ERROR,
            buttons=Gtk.ButtonsType.NONE,
        )
        dialog.add_button(_("Yes"), Gtk.ResponseType.YES)
        dialog.add_button(_("No"), Gtk.ResponseType.NO)
        dialog.set_default_response(Gtk.ResponseType.YES)
        dialog.format_secondary_text(message)
        dialog.set_title(title)

        def on_response(dlg: Gtk.Dialog, response_id: int) -> None:
            dlg.destroy()
            # Closing the window (DELETE_EVENT) counts as "No".
            on_answer(response_id == Gtk.ResponseType.YES)

        dialog.connect("response", on_response)
        dialog.show_all()

    def show_error(self, title: str, message: str) -> None:
        if not message:
            return
        dialog = Gtk.MessageDialog(
            transient_for=None,
            modal=True,
            message_type=Gtk.MessageType.ERROR,
            buttons=Gtk.ButtonsType.CLOSE,
        )
        dialog.format_secondary_text(message)
        dialog.set_title(title)
        dialog.run()
        dialog.destroy()

    def defer(self, fn: Callable[[], None]) -> None:
        def _idle() -> bool:
            fn()
            return False

        GLib.idle_add(_idle)

    def quit(self) -> None:
        Gtk.main_quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Switch between Gooroom tablet mode and normal (PC) mode.")
    parser.add_argument(
        "--sentinel-file",
        type=Path,
        default=DEFAULT_SENTINEL,
        help=f"Tablet-mode marker file (default: {DEFAULT_SENTINEL}).",
    )
    parser.add_argument(
        "--helper",
        default=DEFAULT_HELPER,
        help=f"Privileged mode-change helper run through the elevation tool (default: {DEFAULT_HELPER}).",
    )
    parser.add_argument(
        "--elevate",
        default=DEFAULT_ELEVATE,
        help=f"Elevation tool looked up in $PATH (default: {DEFAULT_ELEVATE}).",
    )
    parser.add_argument("--gsettings", default=GSETTINGS, help=f"gsettings binary (default: {GSETTINGS}).")
    parser.add_argument("--dry-run", action="store_true", help="Log commands instead of running them.")
    return parser


def main(argv: list[str]) -> int:
    setup_i18n()
    args = build_parser().parse_args(argv)

    initial_tablet = read_mode(args.sentinel_file)
    _log("mode_read", sentinel=str(args.sentinel_file), mode=mode_name(initial_tablet))

    flow = ModeSwitchFlow(
        initial_tablet=initial_tablet,
        helper=str(args.helper),
        sentinel=str(args.sentinel_file),
    )
    system = SystemActions(
        helper=str(args.helper),
        elevate=str(args.elevate),
        gsettings=str(args.gsettings),
        dry_run=bool(args.dry_run),
    )
    driver = FlowDriver(flow, GtkFlowUI(), system)

    def _start() -> bool:
        driver.start()
        return False

    GLib.idle_add(_start)
    Gtk.main()

    # Failures were already reported by dialog; the exit status stays 0.
    _log("exit", state=driver.flow.state.value, rc=0)
    return 0


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
