"""Player movement and accessibility queries over the active map."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping

from seedmap.domain.map_models import MapGraph, MapNode
from seedmap.domain.navigation import MapNavigationState
from seedmap.services.errors import MapNotLoadedError, NodeNotAccessibleError


class MapNavigationService:
    """Tracks visited rooms and the current room on an immutable map."""

    def __init__(self, state: MapNavigationState | None = None) -> None:
        self._state = state or MapNavigationState()

    @property
    def state(self) -> MapNavigationState:
        return self._state

    @property
    def current_map(self) -> MapGraph | None:
        return self._state.current_map

    @property
    def current_node_id(self) -> str | None:
        return self._state.current_node_id

    @property
    def visited_nodes(self) -> frozenset[str]:
        return frozenset(self._state.visited_nodes)

    def set_map(self, graph: MapGraph) -> None:
        """Replace the map and place the player on its start node."""
        self._state = MapNavigationState.for_map(graph)

    def clear_map(self) -> None:
        self._state = MapNavigationState()

    def get_node(self, node_id: str) -> MapNode | None:
        if self._state.current_map is None:
            return None
        return self._state.current_map.node(node_id)

    def visit_node(self, node_id: str) -> None:
        """Mark a node visited; visiting twice is a no-op."""
        graph = self._require_map()
        if graph.node(node_id) is None:
            raise ValueError(f"Unknown map node '{node_id}'.")
        self._state.visited_nodes.add(node_id)

    def is_node_accessible(self, node_id: str) -> bool:
        """True when the node is an unvisited connection of the current node."""
        graph = self._state.current_map
        current_id = self._state.current_node_id
        if graph is None or current_id is None:
            return False
        if node_id in self._state.visited_nodes:
            return False
        current = graph.node(current_id)
        if current is None:
            return False
        return node_id in current.connections

    def get_accessible_nodes(self) -> List[str]:
        graph = self._state.current_map
        current_id = self._state.current_node_id
        if graph is None or current_id is None:
            return []
        current = graph.node(current_id)
        if current is None:
            return []
        return [node_id for node_id in current.connections if self.is_node_accessible(node_id)]

    def move_to(self, node_id: str) -> MapNode:
        """Visit an accessible node and make it the current node."""
        graph = self._require_map()
        if not self.is_node_accessible(node_id):
            raise NodeNotAccessibleError(
                f"Node '{node_id}' is not reachable from '{self._state.current_node_id}'."
            )
        self._state.visited_nodes.add(node_id)
        self._state.current_node_id = node_id
        return graph.nodes[node_id]

    def to_payload(self) -> Dict[str, Any]:
        """Return the visited set and pointer in JSON-safe form."""
        return {
            "visited_nodes": sorted(self._state.visited_nodes),
            "current_node_id": self._state.current_node_id,
        }

    @classmethod
    def from_payload(
        cls, graph: MapGraph, payload: Mapping[str, Any]
    ) -> "MapNavigationService":
        """Rebuild navigation over ``graph``; raises ValueError when inconsistent."""
        visited_raw = payload.get("visited_nodes")
        if not isinstance(visited_raw, list) or not all(isinstance(item, str) for item in visited_raw):
            raise ValueError("visited_nodes must be a list of node ids.")
        unknown = [node_id for node_id in visited_raw if node_id not in graph.nodes]
        if unknown:
            raise ValueError(f"visited_nodes references unknown nodes: {', '.join(unknown)}.")
        current_node_id = payload.get("current_node_id")
        if current_node_id is not None:
            if not isinstance(current_node_id, str) or current_node_id not in graph.nodes:
                raise ValueError("current_node_id must reference a map node.")
            if current_node_id not in visited_raw:
                raise ValueError("current_node_id must be a visited node.")
        state = MapNavigationState(
            current_map=graph,
            visited_nodes=set(visited_raw),
            current_node_id=current_node_id,
        )
        return cls(state)

    def _require_map(self) -> MapGraph:
        if self._state.current_map is None:
            raise MapNotLoadedError("No map is loaded.")
        return self._state.current_map
