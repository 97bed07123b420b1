"""Domain models for run maps and navigation."""

from .map_models import (
    BOSS_NODE_ID,
    START_NODE_ID,
    DraftGraph,
    DraftNode,
    GenerationConfig,
    MapGraph,
    MapNode,
    NodePosition,
)
from .navigation import MapNavigationState

__all__ = [
    "BOSS_NODE_ID",
    "START_NODE_ID",
    "DraftGraph",
    "DraftNode",
    "GenerationConfig",
    "MapGraph",
    "MapNavigationState",
    "MapNode",
    "NodePosition",
]
