"""Screen keyboard toggler: tablet-mode gate and value flip."""

from __future__ import annotations

import json

import gooroom_screen_keyboard_toggler
from gooroom_screen_keyboard_toggler import build_parser, main, toggle_screen_keyboard


def _events(capsys) -> list[str]:
    return [json.loads(line)["event"] for line in capsys.readouterr().out.splitlines()]


def test_desktop_mode_is_a_noop(sentinel, fake_run, capsys):
    def read_enabled():
        raise AssertionError("settings must not be read outside tablet mode")

    rc = toggle_screen_keyboard(sentinel=sentinel, read_enabled=read_enabled)
    assert rc == 0
    assert fake_run.calls == []
    assert _events(capsys) == ["no_tablet_mode"]


def test_missing_schema_changes_nothing(sentinel, fake_run, capsys):
    sentinel.touch()
    rc = toggle_screen_keyboard(sentinel=sentinel, read_enabled=lambda: None)
    assert rc == 0
    assert fake_run.calls == []
    assert _events(capsys) == ["schema_missing"]


def test_enabled_keyboard_gets_disabled(sentinel, fake_run):
    sentinel.touch()
    toggle_screen_keyboard(sentinel=sentinel, read_enabled=lambda: True)
    assert fake_run.calls[0][-2:] == ["screen-keyboard-enabled", "false"]
    assert fake_run.calls[1][-2:] == ["toolkit-accessibility", "true"]


def test_disabled_keyboard_gets_enabled(sentinel, fake_run):
    sentinel.touch()
    toggle_screen_keyboard(sentinel=sentinel, read_enabled=lambda: False, gsettings="/opt/gsettings")
    assert fake_run.calls[0] == [
        "/opt/gsettings", "set", "org.gnome.desktop.a11y.applications", "screen-keyboard-enabled", "true",
    ]


def test_dry_run_runs_nothing(sentinel, fake_run):
    sentinel.touch()
    toggle_screen_keyboard(sentinel=sentinel, read_enabled=lambda: False, dry_run=True)
    assert fake_run.calls == []


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert str(args.sentinel_file) == "/etc/gooroom/.tablet-mode"
    assert args.gsettings == "/usr/bin/gsettings"
    assert args.dry_run is False


def test_main_sets_up_translations(monkeypatch, sentinel, fake_run):
    calls: list[str] = []
    monkeypatch.setattr(gooroom_screen_keyboard_toggler, "setup_i18n", lambda: calls.append("i18n"))

    rc = main(["--sentinel-file", str(sentinel)])

    assert rc == 0
    assert calls == ["i18n"]
    assert fake_run.calls == []
