"""User-defined key remappings consulted before action resolution."""

from .remapper import (
    InsertModeRemapper,
    OtherModesRemapper,
    RemapGuard,
    RemapResult,
    Remapper,
)
from .chain import RemapperChain

__all__ = [
    "InsertModeRemapper",
    "OtherModesRemapper",
    "RemapGuard",
    "RemapResult",
    "Remapper",
    "RemapperChain",
]
