"""Keypress patterns, action descriptors and action resolution."""

from .matcher import KeypressMatcher, compare_keypress_sequence
from .models import (
    OTHER_MODES,
    VISUAL_MODES,
    Action,
    ActionDescriptor,
    ActionFlags,
    KeypressState,
    Mode,
)
from .registry import (
    ActionRegistry,
    ActionRegistryBuilder,
    RegistryStats,
    build_action_registry,
)
from .resolver import ActionResolver, Resolution
from .defaults import DEFAULT_ACTIONS, default_registry, load_default_actions

__all__ = [
    "Action",
    "ActionDescriptor",
    "ActionFlags",
    "ActionRegistry",
    "ActionRegistryBuilder",
    "ActionResolver",
    "DEFAULT_ACTIONS",
    "KeypressMatcher",
    "KeypressState",
    "Mode",
    "OTHER_MODES",
    "RegistryStats",
    "Resolution",
    "VISUAL_MODES",
    "build_action_registry",
    "compare_keypress_sequence",
    "default_registry",
    "load_default_actions",
]
