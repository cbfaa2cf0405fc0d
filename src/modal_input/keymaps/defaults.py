"""Built-in action descriptors covering the common modal-editing verbs."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import OTHER_MODES, VISUAL_MODES, ActionDescriptor, Mode
from .registry import ActionRegistry, ActionRegistryBuilder
from .tokens import ALPHA, CHARACTER, LEADER

NORMAL = (Mode.NORMAL,)
NORMAL_AND_VISUAL = tuple(OTHER_MODES)
INSERT = (Mode.INSERT,)
COMMAND = (Mode.COMMAND,)
ALL_MODES = tuple(Mode)

_define = ActionDescriptor.define

DEFAULT_ACTIONS: tuple[ActionDescriptor, ...] = (
    # Abstract kinds: never triggered directly.
    _define("movement", None, ALL_MODES, is_motion=True),
    _define("operator", None, NORMAL_AND_VISUAL, is_operator=True),
    # Motions
    _define(
        "move_left",
        [["h"], ["<left>"], ["<BS>"]],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Cursor left",
    ),
    _define(
        "move_right",
        [["l"], ["<right>"], [" "]],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Cursor right",
    ),
    _define(
        "move_down",
        [["j"], ["<down>"]],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Cursor down",
    ),
    _define(
        "move_up",
        [["k"], ["<up>"]],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Cursor up",
    ),
    _define("move_word", ["w"], NORMAL_AND_VISUAL, is_motion=True),
    _define("move_line_begin", ["0"], NORMAL_AND_VISUAL, is_motion=True),
    _define(
        "move_to_first_line",
        ["g", "g"],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Jump to the first line",
    ),
    _define(
        "move_to_last_line",
        ["G"],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Jump to the last line",
    ),
    _define(
        "find_forward",
        ["f", CHARACTER],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Find the next occurrence of a character",
    ),
    _define(
        "jump_to_mark",
        ["`", ALPHA],
        NORMAL_AND_VISUAL,
        is_motion=True,
        description="Jump to a lettered mark",
    ),
    _define("inner_word", ["i", "w"], NORMAL_AND_VISUAL, is_motion=True),
    # Operators
    _define("delete", ["d"], NORMAL_AND_VISUAL, is_operator=True, can_be_repeated_with_dot=True),
    _define("yank", ["y"], NORMAL_AND_VISUAL, is_operator=True),
    _define("change", ["c"], NORMAL_AND_VISUAL, is_operator=True, can_be_repeated_with_dot=True),
    # Normal-mode commands
    _define(
        "enter_insert",
        ["i"],
        NORMAL,
        must_be_first_key=True,
        description="Enter insert mode",
    ),
    _define(
        "append",
        ["a"],
        NORMAL,
        must_be_first_key=True,
        description="Enter insert mode after the cursor",
    ),
    _define(
        "replace_character",
        ["r", CHARACTER],
        NORMAL,
        can_be_repeated_with_dot=True,
    ),
    _define("enter_visual", ["v"], NORMAL_AND_VISUAL),
    _define("enter_visual_line", ["V"], NORMAL_AND_VISUAL),
    _define("enter_visual_block", ["<C-v>"], NORMAL_AND_VISUAL),
    _define("enter_command", [":"], NORMAL_AND_VISUAL, description="Open the command line"),
    _define("undo", ["u"], NORMAL),
    _define("redo", ["<C-r>"], NORMAL),
    _define("repeat_last_change", ["."], NORMAL),
    _define("scroll_half_page_down", ["<C-d>"], NORMAL_AND_VISUAL),
    _define("scroll_half_page_up", ["<C-u>"], NORMAL_AND_VISUAL),
    _define("leader_write", [LEADER, "w"], NORMAL, description="Write the file"),
    _define("normal_escape", ["<Esc>"], NORMAL),
    _define(
        "exit_to_normal",
        [["<Esc>"], ["<C-c>"], ["<C-[>"]],
        INSERT + tuple(VISUAL_MODES),
        description="Return to normal mode",
    ),
    # Insert mode. Backspace must be registered before the catch-all below.
    _define("insert_backspace", [["<BS>"], ["<Shift+BS>"]], INSERT),
    _define(
        "insert_character",
        [CHARACTER],
        INSERT,
        can_be_repeated_with_dot=True,
        description="Insert the typed character",
    ),
    # Command line
    _define("command_submit", [["<Enter>"], ["\n"]], COMMAND),
    _define("command_cancel", [["<Esc>"], ["<C-c>"]], COMMAND),
    _define("command_backspace", ["<BS>"], COMMAND),
    _define("command_type", [CHARACTER], COMMAND),
)


def load_default_actions(
    builder: ActionRegistryBuilder,
    *,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    extra_actions: Iterable[ActionDescriptor] | None = None,
) -> None:
    """Register the built-in descriptors, in order, then ``extra_actions``."""

    include = set(include_actions) if include_actions else None
    exclude = set(exclude_actions or ())

    for descriptor in DEFAULT_ACTIONS:
        if include is not None and descriptor.kind not in include:
            continue
        if descriptor.kind in exclude:
            continue
        builder.register(descriptor)

    for descriptor in extra_actions or ():
        builder.register(descriptor)


def default_registry(**kwargs: object) -> ActionRegistry:
    builder = ActionRegistryBuilder()
    load_default_actions(builder, **kwargs)  # type: ignore[arg-type]
    return builder.build()


__all__ = ["DEFAULT_ACTIONS", "load_default_actions", "default_registry"]
