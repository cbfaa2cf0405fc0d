"""Keystroke dispatch and mode-change side effects."""

from .dispatcher import DispatchResult, KeypressDispatcher
from .im_switch import InputMethodSwitcher, run_shell_command

__all__ = [
    "DispatchResult",
    "InputMethodSwitcher",
    "KeypressDispatcher",
    "run_shell_command",
]
