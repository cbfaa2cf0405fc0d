from __future__ import annotations

from modal_input.keymaps import (
    Action,
    ActionDescriptor,
    ActionResolver,
    KeypressState,
    Mode,
    build_action_registry,
    default_registry,
)
from modal_input.session import SessionState


def make_descriptor(
    kind: str,
    keys: object,
    *,
    modes: tuple[Mode, ...] = (Mode.NORMAL,),
    **flags: bool,
) -> ActionDescriptor:
    return ActionDescriptor.define(kind, keys, modes, **flags)  # type: ignore[arg-type]


def make_resolver(*descriptors: ActionDescriptor, leader: str = "\\") -> ActionResolver:
    return ActionResolver(build_action_registry(descriptors), leader=leader)


def make_state(mode: Mode = Mode.NORMAL, command: tuple[str, ...] = ()) -> SessionState:
    state = SessionState(mode=mode)
    state.recorded_state.command_list.extend(command)
    return state


def test_resolver_matches_exact_sequence() -> None:
    resolver = make_resolver(make_descriptor("first_line", ("g", "g")))

    result = resolver.resolve(["g", "g"], make_state())

    assert isinstance(result, Action)
    assert result.kind == "first_line"
    assert result.keys_pressed == ("g", "g")
    assert str(result) == "gg"


def test_resolver_reports_waiting_for_prefix() -> None:
    resolver = make_resolver(make_descriptor("first_line", ("g", "g")))

    assert resolver.resolve(["g"], make_state()) is KeypressState.WAITING_ON_KEYS


def test_resolver_reports_no_match() -> None:
    resolver = make_resolver(make_descriptor("first_line", ("g", "g")))

    assert resolver.resolve(["z"], make_state()) is KeypressState.NO_POSSIBLE_MATCH


def test_registration_order_breaks_ties() -> None:
    resolver = make_resolver(
        make_descriptor("winner", ("x",)),
        make_descriptor("loser", ("x",)),
    )

    for _ in range(3):
        result = resolver.resolve(["x"], make_state())
        assert isinstance(result, Action)
        assert result.kind == "winner"


def test_exact_match_later_in_registry_beats_earlier_prefix() -> None:
    resolver = make_resolver(
        make_descriptor("long", ("d", "d")),
        make_descriptor("short", ("d",)),
    )

    result = resolver.resolve(["d"], make_state())

    assert isinstance(result, Action)
    assert result.kind == "short"


def test_mode_gates_resolution() -> None:
    resolver = make_resolver(make_descriptor("insert_only", ("x",), modes=(Mode.INSERT,)))

    assert resolver.resolve(["x"], make_state(Mode.NORMAL)) is KeypressState.NO_POSSIBLE_MATCH
    assert isinstance(resolver.resolve(["x"], make_state(Mode.INSERT)), Action)


def test_abstract_descriptors_are_skipped() -> None:
    resolver = make_resolver(
        make_descriptor("base", None),
        make_descriptor("concrete", ("x",)),
    )

    result = resolver.resolve(["x"], make_state())

    assert isinstance(result, Action)
    assert result.kind == "concrete"


def test_ignore_exact_match_only_reports_potential() -> None:
    resolver = make_resolver(make_descriptor("first_line", ("g", "g")))

    result = resolver.resolve(["g", "g"], make_state(), ignore_exact_match=True)

    assert result is KeypressState.WAITING_ON_KEYS


def test_must_be_first_key_rejects_keys_after_operator() -> None:
    resolver = make_resolver(
        make_descriptor("enter_insert", ("i",), must_be_first_key=True),
        make_descriptor("inner_word", ("i", "w")),
    )

    alone = resolver.resolve(["i"], make_state(command=("i",)))
    after_operator = resolver.resolve(["i"], make_state(command=("d", "i")))

    assert isinstance(alone, Action) and alone.kind == "enter_insert"
    assert after_operator is KeypressState.WAITING_ON_KEYS


def test_must_be_first_key_ignores_count_prefix() -> None:
    resolver = make_resolver(
        make_descriptor("enter_insert", ("i",), must_be_first_key=True),
    )

    result = resolver.resolve(["i"], make_state(command=("1", "2", "i")))

    assert isinstance(result, Action)


def test_wildcard_patterns_resolve_and_wait() -> None:
    resolver = make_resolver(make_descriptor("find", ("f", "<character>")))

    assert resolver.resolve(["f"], make_state()) is KeypressState.WAITING_ON_KEYS
    found = resolver.resolve(["f", "x"], make_state())
    assert isinstance(found, Action) and str(found) == "fx"
    assert resolver.resolve(["f", "<Esc>"], make_state()) is KeypressState.NO_POSSIBLE_MATCH


def test_leader_pattern_uses_configured_leader() -> None:
    resolver = make_resolver(make_descriptor("write", ("<leader>", "w")), leader=",")

    assert isinstance(resolver.resolve([",", "w"], make_state()), Action)
    assert resolver.resolve(["\\", "w"], make_state()) is KeypressState.NO_POSSIBLE_MATCH


def test_default_registry_tri_state() -> None:
    resolver = ActionResolver(default_registry())

    assert resolver.resolve(["g"], make_state()) is KeypressState.WAITING_ON_KEYS
    assert resolver.resolve(["z"], make_state()) is KeypressState.NO_POSSIBLE_MATCH
    result = resolver.resolve(["g", "g"], make_state())
    assert isinstance(result, Action) and result.kind == "move_to_first_line"


def test_default_registry_insert_backspace_beats_character() -> None:
    resolver = ActionResolver(default_registry())

    result = resolver.resolve(["<BS>"], make_state(Mode.INSERT))

    assert isinstance(result, Action) and result.kind == "insert_backspace"
