from __future__ import annotations

import subprocess
from typing import List

from modal_input.config import InputMethodSettings
from modal_input.keymaps import Mode
from modal_input.modes import InputMethodSwitcher


class RecordingRunner:
    def __init__(self, im_on: bool = False) -> None:
        self.commands: List[str] = []
        self.im_on = im_on

    def __call__(self, command: str) -> None:
        self.commands.append(command)
        if command == "setime get" and self.im_on:
            raise subprocess.CalledProcessError(1, command)


def make_switcher(runner: RecordingRunner, enable: bool = True) -> InputMethodSwitcher:
    return InputMethodSwitcher(InputMethodSettings(enable=enable), runner)


def test_disabled_switcher_runs_nothing() -> None:
    runner = RecordingRunner()
    switcher = make_switcher(runner, enable=False)

    switcher.mode_changed(Mode.NORMAL, Mode.INSERT)
    switcher.mode_changed(Mode.INSERT, Mode.NORMAL)

    assert runner.commands == []


def test_leaving_insert_turns_input_method_off() -> None:
    runner = RecordingRunner()
    switcher = make_switcher(runner)

    switcher.mode_changed(Mode.INSERT, Mode.NORMAL)
    switcher.mode_changed(Mode.NORMAL, Mode.INSERT)

    assert runner.commands == ["setime get", "setime off"]


def test_input_method_is_restored_when_it_was_on() -> None:
    runner = RecordingRunner(im_on=True)
    switcher = make_switcher(runner)

    switcher.mode_changed(Mode.INSERT, Mode.VISUAL)
    switcher.mode_changed(Mode.VISUAL, Mode.INSERT)

    assert runner.commands == ["setime get", "setime off", "setime on"]


def test_changes_between_other_modes_are_ignored() -> None:
    runner = RecordingRunner(im_on=True)
    switcher = make_switcher(runner)

    switcher.mode_changed(Mode.NORMAL, Mode.VISUAL_LINE)
    switcher.mode_changed(Mode.INSERT, Mode.INSERT)

    assert runner.commands == []
