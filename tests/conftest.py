"""Shared fixtures for the Gooroom mode tool tests."""

from __future__ import annotations

import subprocess

import pytest

import gooroom_tablet_mode
from gooroom_mode_flow import FlowDriver, ModeSwitchFlow

from tests.mocks import FakeSystem, FakeUI

HELPER = "/usr/libexec/gooroom-tablet-mode-change-helper"


class RecordingRun:
    """Stand-in for subprocess.run that records argv lists and returns scripted codes."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.returncodes: dict[str, int] = {}
        self.raise_for: dict[str, OSError] = {}

    def __call__(self, cmd, check=False, **kwargs):
        self.calls.append(list(cmd))
        name = cmd[0].rsplit("/", 1)[-1]
        if name in self.raise_for:
            raise self.raise_for[name]
        return subprocess.CompletedProcess(cmd, self.returncodes.get(name, 0))


def make_driver(initial_tablet: bool, ui: FakeUI, system: FakeSystem, sentinel: str = "/etc/gooroom/.tablet-mode"):
    flow = ModeSwitchFlow(initial_tablet=initial_tablet, helper=HELPER, sentinel=sentinel)
    return FlowDriver(flow, ui, system)


@pytest.fixture
def fake_run(monkeypatch):
    """subprocess.run replaced by a recorder inside gooroom_tablet_mode."""
    rec = RecordingRun()
    monkeypatch.setattr(gooroom_tablet_mode.subprocess, "run", rec)
    return rec


@pytest.fixture
def which(monkeypatch):
    """shutil.which limited to the tool names placed in the returned dict."""
    found: dict[str, str] = {}
    monkeypatch.setattr(gooroom_tablet_mode.shutil, "which", lambda name: found.get(name))
    return found


@pytest.fixture
def sentinel(tmp_path):
    """Path of a (not yet created) tablet-mode marker."""
    return tmp_path / ".tablet-mode"


@pytest.fixture
def ui():
    return FakeUI(answer=True)


@pytest.fixture
def system():
    return FakeSystem()
