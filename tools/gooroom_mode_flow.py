#!/usr/bin/env python3
"""
Confirm / switch / log out / restore sequence for the desktop mode switcher.

Repo source: tools/gooroom_mode_flow.py

ModeSwitchFlow is a pure state machine: step(event) returns the next flow and
the list of side effects to perform, nothing else. FlowDriver performs those
effects against a UI object (dialogs, idle scheduling, quit) and a system
object (mode helper, gsettings, logout) and feeds the results back as events.

    IDLE -> PROMPTING -> SWITCHING -> SETTING_UP -> LOGGING_OUT -> SUCCESS
                 |            |                          |
                 v            v                          v
             CANCELLED     FAILURE <--------------- RESTORING

The initial mode is captured once in the flow object; the restore path always
switches back to it, never to the target mode.
"""

from __future__ import annotations

import collections
import dataclasses
import enum
from dataclasses import dataclass
from gettext import gettext as _
from typing import Callable, Protocol

from gooroom_tablet_mode import NOT_FOUND, Outcome, _log, mode_name


class State(enum.Enum):
    IDLE = "idle"
    PROMPTING = "prompting"
    SWITCHING = "switching"
    SETTING_UP = "setting_up"
    LOGGING_OUT = "logging_out"
    RESTORING = "restoring"
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({State.SUCCESS, State.FAILURE, State.CANCELLED})


class Event(enum.Enum):
    START = "start"
    ANSWER_YES = "answer_yes"
    ANSWER_NO = "answer_no"
    SWITCH_OK = "switch_ok"
    SWITCH_FAILED = "switch_failed"
    KEYBOARD_SET = "keyboard_set"
    LOGOUT_OK = "logout_ok"
    LOGOUT_MISSING = "logout_missing"
    LOGOUT_FAILED = "logout_failed"


class FlowError(RuntimeError):
    pass


@dataclass(frozen=True)
class Prompt:
    title: str
    message: str


@dataclass(frozen=True)
class SwitchMode:
    to_tablet: bool


@dataclass(frozen=True)
class SetKeyboard:
    enabled: bool


@dataclass(frozen=True)
class ShowError:
    title: str
    message: str


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Effect = Prompt | SwitchMode | SetKeyboard | ShowError | Logout | Quit


def _prompt_message(initial_tablet: bool) -> str:
    if initial_tablet:
        return _("To switch to normal mode, you must log in again.\nWould you like to log in again now?")
    return _("To switch to tablet mode, you must log in again.\nWould you like to log in again now?")


def _switch_failed_message(initial_tablet: bool, helper: str) -> str:
    if initial_tablet:
        return _("Failed to switch Normal(PC) Mode.\nPlease check %s program") % helper
    return _("Failed to switch Tablet Mode.\nPlease check %s program") % helper


def _restore_failed_message(initial_tablet: bool, sentinel: str) -> str:
    if initial_tablet:
        return _("Failed to restore Tablet Mode\nPlease create %s manually.") % sentinel
    return _("Failed to restore Normal(PC) Mode\nPlease delete %s manually.") % sentinel


@dataclass(frozen=True)
class ModeSwitchFlow:
    initial_tablet: bool
    helper: str
    sentinel: str
    state: State = State.IDLE

    @property
    def target_tablet(self) -> bool:
        return not self.initial_tablet

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def _to(self, state: State) -> ModeSwitchFlow:
        return dataclasses.replace(self, state=state)

    def step(self, event: Event) -> tuple[ModeSwitchFlow, list[Effect]]:
        state = self.state

        if state is State.IDLE and event is Event.START:
            prompt = Prompt(_("Desktop Mode Switching"), _prompt_message(self.initial_tablet))
            return self._to(State.PROMPTING), [prompt]

        if state is State.PROMPTING:
            if event is Event.ANSWER_NO:
                return self._to(State.CANCELLED), [Quit()]
            if event is Event.ANSWER_YES:
                return self._to(State.SWITCHING), [SwitchMode(self.target_tablet)]

        if state is State.SWITCHING:
            if event is Event.SWITCH_FAILED:
                # Nothing was committed, so there is nothing to roll back.
                err = ShowError(_("Desktop Mode Switching"), _switch_failed_message(self.initial_tablet, self.helper))
                return self._to(State.FAILURE), [err, Quit()]
            if event is Event.SWITCH_OK:
                return self._to(State.SETTING_UP), [SetKeyboard(self.target_tablet)]

        if state is State.SETTING_UP and event is Event.KEYBOARD_SET:
            return self._to(State.LOGGING_OUT), [Logout()]

        if state is State.LOGGING_OUT:
            if event is Event.LOGOUT_OK:
                return self._to(State.SUCCESS), [Quit()]
            if event in (Event.LOGOUT_MISSING, Event.LOGOUT_FAILED):
                if event is Event.LOGOUT_MISSING:
                    msg = _("Not found logout command.\nInstall gooroom-logout or gnome-session-bin packages.")
                else:
                    msg = _("Failed to system logout\nPlease check gooroom-logout or gnome-session-quit program.")
                err = ShowError(_("System Logout Error"), msg)
                return self._to(State.RESTORING), [err, SwitchMode(self.initial_tablet)]

        if state is State.RESTORING:
            # A successful restore is trusted as-is; the sentinel is not re-checked.
            if event is Event.SWITCH_OK:
                return self, [SetKeyboard(self.initial_tablet)]
            if event is Event.SWITCH_FAILED:
                err = ShowError(
                    _("Desktop Mode Restore Failure"),
                    _restore_failed_message(self.initial_tablet, self.sentinel),
                )
                return self, [err, SetKeyboard(self.initial_tablet)]
            if event is Event.KEYBOARD_SET:
                return self._to(State.FAILURE), [Quit()]

        raise FlowError(f"event {event.value!r} not valid in state {state.value!r}")


class FlowUI(Protocol):
    def prompt(self, title: str, message: str, on_answer: Callable[[bool], None]) -> None: ...

    def show_error(self, title: str, message: str) -> None: ...

    def defer(self, fn: Callable[[], None]) -> None: ...

    def quit(self) -> None: ...


class FlowSystem(Protocol):
    def switch_mode(self, target_is_tablet: bool) -> Outcome: ...

    def set_screen_keyboard(self, enabled: bool) -> None: ...

    def logout(self) -> Outcome: ...


class FlowDriver:
    """
    Runs a ModeSwitchFlow to completion.

    Events produced while effects are being performed (including answers
    delivered synchronously by the UI) are queued and handled in order once
    the current batch of effects is finished.
    """

    def __init__(self, flow: ModeSwitchFlow, ui: FlowUI, system: FlowSystem) -> None:
        self.flow = flow
        self.ui = ui
        self.system = system
        self.history: list[tuple[State, Event, State]] = []
        self._pending: collections.deque[Event] = collections.deque()
        self._dispatching = False

    def start(self) -> None:
        _log(
            "flow",
            action="start",
            initial_mode=mode_name(self.flow.initial_tablet),
            target_mode=mode_name(self.flow.target_tablet),
        )
        self.dispatch(Event.START)

    def dispatch(self, event: Event) -> None:
        self._pending.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self._handle(self._pending.popleft())
        finally:
            self._dispatching = False

    def _handle(self, event: Event) -> None:
        before = self.flow.state
        self.flow, effects = self.flow.step(event)
        self.history.append((before, event, self.flow.state))
        _log("flow", trigger=event.value, from_state=before.value, to_state=self.flow.state.value)
        for effect in effects:
            self._perform(effect)

    def _perform(self, effect: Effect) -> None:
        if isinstance(effect, Prompt):
            self.ui.prompt(effect.title, effect.message, self._on_answer)
        elif isinstance(effect, SwitchMode):
            outcome = self.system.switch_mode(effect.to_tablet)
            _log("flow", action="switch_mode", to_mode=mode_name(effect.to_tablet), outcome=outcome.to_json())
            self._pending.append(Event.SWITCH_OK if outcome.ok else Event.SWITCH_FAILED)
        elif isinstance(effect, SetKeyboard):
            self.system.set_screen_keyboard(effect.enabled)
            self._pending.append(Event.KEYBOARD_SET)
        elif isinstance(effect, Logout):
            self.ui.defer(self._run_logout)
        elif isinstance(effect, ShowError):
            self.ui.show_error(effect.title, effect.message)
        elif isinstance(effect, Quit):
            self.ui.quit()
        else:
            raise FlowError(f"unknown effect {effect!r}")

    def _on_answer(self, yes: bool) -> None:
        self.dispatch(Event.ANSWER_YES if yes else Event.ANSWER_NO)

    def _run_logout(self) -> None:
        outcome = self.system.logout()
        _log("flow", action="logout", outcome=outcome.to_json())
        if outcome.ok:
            event = Event.LOGOUT_OK
        elif outcome.status == NOT_FOUND:
            event = Event.LOGOUT_MISSING
        else:
            event = Event.LOGOUT_FAILED
        self.dispatch(event)
