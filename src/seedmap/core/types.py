"""Shared type aliases for the core and domain layers."""
from typing import Literal, Tuple

NodeType = Literal[
    "start",
    "combat",
    "elite",
    "rest",
    "shop",
    "event",
    "treasure",
    "boss",
]

NODE_TYPES: Tuple[NodeType, ...] = (
    "start",
    "combat",
    "elite",
    "rest",
    "shop",
    "event",
    "treasure",
    "boss",
)

RNGStateVector = Tuple[int, int, int, int]

__all__ = ["NodeType", "NODE_TYPES", "RNGStateVector"]
