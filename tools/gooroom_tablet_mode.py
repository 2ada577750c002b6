#!/usr/bin/env python3
"""
Shared primitives for the Gooroom tablet/desktop mode tools.

Repo source: tools/gooroom_tablet_mode.py

The current mode lives in a single marker file owned by the privileged
mode-change helper: if /etc/gooroom/.tablet-mode exists we are in tablet mode,
otherwise normal (PC) mode. These tools never write that file themselves; they
only ask the helper to do it through pkexec.

Command results are returned as values (Outcome) rather than raised, so the
UI side can decide which dialog to show.
"""

from __future__ import annotations

import gettext
import json
import locale
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any


DEFAULT_SENTINEL = Path("/etc/gooroom/.tablet-mode")
DEFAULT_HELPER = "/usr/libexec/gooroom-tablet-mode-change-helper"
DEFAULT_ELEVATE = "pkexec"
GSETTINGS = "/usr/bin/gsettings"

DESKTOP_INTERFACE_SCHEMA = "org.gnome.desktop.interface"
DESKTOP_APPLICATION_SCHEMA = "org.gnome.desktop.a11y.applications"

PRIMARY_LOGOUT = "gooroom-logout-command"
FALLBACK_LOGOUT = "gnome-session-quit"

GETTEXT_PACKAGE = "gooroom-desktop-mode-switcher"
LOCALEDIR = "/usr/share/locale"

OK = "ok"
FAILED = "failed"
NOT_FOUND = "not_found"


def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _log(event: str, **extra: object) -> None:
    out = {"ts": utc_iso(), "event": event, **extra}
    print(json.dumps(out, sort_keys=True, default=str), flush=True)


def setup_i18n() -> None:
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as exc:
        _log("locale_error", error=str(exc))
    gettext.bindtextdomain(GETTEXT_PACKAGE, LOCALEDIR)
    gettext.textdomain(GETTEXT_PACKAGE)


def mode_name(tablet: bool) -> str:
    return "tablet" if tablet else "desktop"


def read_mode(sentinel: Path = DEFAULT_SENTINEL) -> bool:
    """
    True when the tablet-mode marker exists. Absence is the normal-mode signal.
    """

    return Path(sentinel).exists()


@dataclass(frozen=True)
class Outcome:
    status: str
    cmd: list[str] | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OK

    def to_json(self) -> dict[str, Any]:
        return {"status": self.status, "cmd": self.cmd, "error": self.error}


def run_cmd(cmd: list[str], *, dry_run: bool = False) -> Outcome:
    """
    Run cmd to completion and classify the result.

    No timeout: pkexec keeps its authentication prompt open until the user answers.
    """

    if dry_run:
        _log("dry_run", cmd=" ".join(shlex.quote(c) for c in cmd))
        return Outcome(OK, cmd)
    _log("cmd", cmd=cmd)
    try:
        proc = subprocess.run(cmd, check=False)
    except OSError as exc:
        err = f"{type(exc).__name__}: {exc}"
        _log("cmd_error", cmd=cmd, error=err)
        return Outcome(FAILED, cmd, err)
    if proc.returncode != 0:
        err = f"rc={proc.returncode}"
        _log("cmd_error", cmd=cmd, error=err)
        return Outcome(FAILED, cmd, err)
    return Outcome(OK, cmd)


def mode_switch_command(target_is_tablet: bool, *, elevate: str, helper: str) -> list[str]:
    # The helper enables tablet mode by default; -d switches back to desktop.
    cmd = [elevate, helper]
    if not target_is_tablet:
        cmd.append("-d")
    return cmd


def switch_mode(
    target_is_tablet: bool,
    *,
    helper: str = DEFAULT_HELPER,
    elevate: str = DEFAULT_ELEVATE,
    dry_run: bool = False,
) -> Outcome:
    elevate_path = shutil.which(elevate)
    if elevate_path is None:
        if dry_run:
            elevate_path = elevate
        else:
            err = f"{elevate} not found in PATH"
            _log("cmd_error", tool=elevate, error=err)
            return Outcome(NOT_FOUND, None, err)
    cmd = mode_switch_command(target_is_tablet, elevate=elevate_path, helper=helper)
    return run_cmd(cmd, dry_run=dry_run)


def screen_keyboard_commands(enabled: bool, *, gsettings: str = GSETTINGS) -> list[list[str]]:
    return [
        [gsettings, "set", DESKTOP_APPLICATION_SCHEMA, "screen-keyboard-enabled", "true" if enabled else "false"],
        [gsettings, "set", DESKTOP_INTERFACE_SCHEMA, "toolkit-accessibility", "true"],
    ]


def set_screen_keyboard(enabled: bool, *, gsettings: str = GSETTINGS, dry_run: bool = False) -> None:
    """
    Best effort: both commands always run and their results are dropped.
    """

    for cmd in screen_keyboard_commands(enabled, gsettings=gsettings):
        run_cmd(cmd, dry_run=dry_run)


def logout_command() -> list[str] | None:
    path = shutil.which(PRIMARY_LOGOUT)
    if path:
        return [path, "--logout", "--delay=500"]
    path = shutil.which(FALLBACK_LOGOUT)
    if path:
        return [path, "--logout", "--force", "--no-prompt"]
    return None


def logout(*, dry_run: bool = False) -> Outcome:
    cmd = logout_command()
    if cmd is None:
        err = f"neither {PRIMARY_LOGOUT} nor {FALLBACK_LOGOUT} found in PATH"
        _log("logout_unavailable", error=err)
        return Outcome(NOT_FOUND, None, err)
    return run_cmd(cmd, dry_run=dry_run)


@dataclass(frozen=True)
class SystemActions:
    """The mode helper, gsettings and logout calls bound to one configuration."""

    helper: str = DEFAULT_HELPER
    elevate: str = DEFAULT_ELEVATE
    gsettings: str = GSETTINGS
    dry_run: bool = False

    def switch_mode(self, target_is_tablet: bool) -> Outcome:
        return switch_mode(target_is_tablet, helper=self.helper, elevate=self.elevate, dry_run=self.dry_run)

    def set_screen_keyboard(self, enabled: bool) -> None:
        set_screen_keyboard(enabled, gsettings=self.gsettings, dry_run=self.dry_run)

    def logout(self) -> Outcome:
        return logout(dry_run=self.dry_run)
