"""Player position tracking over a generated map."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set

from seedmap.domain.map_models import MapGraph


@dataclass
class MapNavigationState:
    """Visited set and current pointer for the active map."""

    current_map: MapGraph | None = None
    visited_nodes: Set[str] = field(default_factory=set)
    current_node_id: str | None = None

    @classmethod
    def for_map(cls, graph: MapGraph) -> "MapNavigationState":
        return cls(
            current_map=graph,
            visited_nodes={graph.start_node_id},
            current_node_id=graph.start_node_id,
        )
