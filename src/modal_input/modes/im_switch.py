"""Toggle the OS input method when entering and leaving insert mode."""

from __future__ import annotations

import shlex
import subprocess
from typing import Callable, Optional

from modal_input.config import InputMethodSettings
from modal_input.keymaps.models import Mode
from modal_input.runtime import telemetry

LOGGER_NAME = "modal_input.modes"

CommandRunner = Callable[[str], None]


def run_shell_command(command: str) -> None:
    subprocess.run(shlex.split(command), check=True, capture_output=True)


class InputMethodSwitcher:
    """Turns the input method off outside insert mode and restores it on return.

    The obtain command exits non-zero while the input method is on; that is
    the signal to switch it back on the next time insert mode is entered.
    """

    def __init__(
        self,
        settings: Optional[InputMethodSettings] = None,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.settings = settings or InputMethodSettings()
        self._run = runner or run_shell_command
        self._next_insert_im_on = False

    @property
    def enabled(self) -> bool:
        return self.settings.enable

    def mode_changed(self, previous: Optional[Mode], current: Mode) -> None:
        if not self.enabled or previous == current:
            return
        if previous == Mode.INSERT:
            self._leave_insert()
        elif current == Mode.INSERT:
            self._enter_insert()

    def _leave_insert(self) -> None:
        self._next_insert_im_on = False
        try:
            self._run(self.settings.obtain_command)
        except subprocess.CalledProcessError:
            self._next_insert_im_on = True
        self._run(self.settings.off_command)
        telemetry.record_event(
            "im.switch",
            logger_name=LOGGER_NAME,
            level="debug",
            data={"state": "off", "restore": self._next_insert_im_on},
        )

    def _enter_insert(self) -> None:
        if not self._next_insert_im_on:
            return
        self._run(self.settings.on_command)
        telemetry.record_event(
            "im.switch", logger_name=LOGGER_NAME, level="debug", data={"state": "on"}
        )


__all__ = ["InputMethodSwitcher", "run_shell_command"]
