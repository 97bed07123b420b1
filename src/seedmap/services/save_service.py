"""Serialization helpers for run save/load."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from seedmap.core.rng import RNGState
from seedmap.core.types import NODE_TYPES, NodeType
from seedmap.domain.map_models import MapGraph, MapNode, NodePosition
from seedmap.services.errors import SaveLoadError
from seedmap.services.map_navigation_service import MapNavigationService
from seedmap.services.map_validator import format_issue, validate_map_graph
from seedmap.services.rng_registry import RNGRegistry

logger = logging.getLogger(__name__)

SavePayload = Dict[str, Any]


@dataclass(slots=True)
class RunSnapshot:
    """Everything rebuilt from one save payload."""

    registry: RNGRegistry
    navigation: MapNavigationService


def graph_to_payload(graph: MapGraph) -> Dict[str, Any]:
    return {
        "start_node_id": graph.start_node_id,
        "boss_node_id": graph.boss_node_id,
        "layers": [list(layer_ids) for layer_ids in graph.layers],
        "nodes": [
            {
                "id": node.id,
                "layer": node.layer,
                "type": node.type,
                "position": [node.position.x, node.position.y],
                "connections": list(node.connections),
            }
            for node in graph.iter_nodes()
        ],
    }


class SaveService:
    """Converts run state to/from a validated, versioned payload."""

    SAVE_VERSION = 1

    def serialize(self, registry: RNGRegistry, navigation: MapNavigationService) -> SavePayload:
        """Snapshot the registry and return a JSON-serializable payload."""
        registry.save_state()
        graph = navigation.current_map
        return {
            "save_version": self.SAVE_VERSION,
            "metadata": self._build_metadata(registry, navigation),
            "rng": {
                "master_seed": registry.master_seed,
                "streams": [
                    [key, state.to_payload()] for key, state in registry.saved_states.items()
                ],
            },
            "map": None
            if graph is None
            else {"graph": graph_to_payload(graph), "navigation": navigation.to_payload()},
        }

    def deserialize(self, payload: Mapping[str, Any]) -> RunSnapshot:
        """Rehydrate the registry and navigation from a persisted payload."""
        try:
            return self._deserialize(payload)
        except SaveLoadError as exc:
            logger.warning("Rejected save payload: %s", exc)
            raise

    def _deserialize(self, payload: Mapping[str, Any]) -> RunSnapshot:
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        if payload.get("save_version") != self.SAVE_VERSION:
            raise SaveLoadError("Save format changed. Please start a new run.")
        rng_payload = payload.get("rng")
        if not isinstance(rng_payload, Mapping):
            raise SaveLoadError("Save data is missing required sections.")

        master_seed = self._require_str(rng_payload.get("master_seed"), "rng.master_seed")
        registry = RNGRegistry()
        registry.initialize(master_seed)
        registry.load_state(self._coerce_streams(rng_payload.get("streams")))

        map_payload = payload.get("map")
        if map_payload is None:
            return RunSnapshot(registry=registry, navigation=MapNavigationService())
        if not isinstance(map_payload, Mapping):
            raise SaveLoadError("map must be an object or null.")
        graph = self._coerce_graph(map_payload.get("graph"))
        navigation_payload = map_payload.get("navigation")
        if not isinstance(navigation_payload, Mapping):
            raise SaveLoadError("map.navigation must be an object.")
        try:
            navigation = MapNavigationService.from_payload(graph, navigation_payload)
        except ValueError as exc:
            raise SaveLoadError(f"Invalid navigation state: {exc}") from exc
        return RunSnapshot(registry=registry, navigation=navigation)

    def _build_metadata(
        self, registry: RNGRegistry, navigation: MapNavigationService
    ) -> Dict[str, Any]:
        graph = navigation.current_map
        return {
            "master_seed": registry.master_seed,
            "current_node_id": navigation.current_node_id,
            "layer_count": graph.layer_count if graph is not None else None,
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }

    def _coerce_streams(self, value: object) -> List[Tuple[str, RNGState]]:
        if not isinstance(value, list):
            raise SaveLoadError("rng.streams must be a list of [key, state] pairs.")
        streams: List[Tuple[str, RNGState]] = []
        seen: set[str] = set()
        for index, entry in enumerate(value):
            if not isinstance(entry, list) or len(entry) != 2:
                raise SaveLoadError(f"rng.streams[{index}] must be a [key, state] pair.")
            key = self._require_str(entry[0], f"rng.streams[{index}][0]")
            if key in seen:
                raise SaveLoadError(f"Duplicate RNG stream key '{key}'.")
            seen.add(key)
            state_payload = entry[1]
            if not isinstance(state_payload, Mapping):
                raise SaveLoadError(f"rng.streams[{index}][1] must be an object.")
            try:
                streams.append((key, RNGState.from_payload(state_payload)))
            except ValueError as exc:
                raise SaveLoadError(f"Invalid RNG state for '{key}': {exc}") from exc
        return streams

    def _coerce_graph(self, value: object) -> MapGraph:
        if not isinstance(value, Mapping):
            raise SaveLoadError("map.graph must be an object.")
        start_node_id = self._require_str(value.get("start_node_id"), "map.graph.start_node_id")
        boss_node_id = self._require_str(value.get("boss_node_id"), "map.graph.boss_node_id")
        layers_raw = value.get("layers")
        if not isinstance(layers_raw, list):
            raise SaveLoadError("map.graph.layers must be a list.")
        layers = tuple(
            tuple(self._coerce_str_list(layer_ids, f"map.graph.layers[{index}]"))
            for index, layer_ids in enumerate(layers_raw)
        )
        nodes_raw = value.get("nodes")
        if not isinstance(nodes_raw, list):
            raise SaveLoadError("map.graph.nodes must be a list.")
        nodes: Dict[str, MapNode] = {}
        for index, node_payload in enumerate(nodes_raw):
            node = self._coerce_node(node_payload, f"map.graph.nodes[{index}]")
            if node.id in nodes:
                raise SaveLoadError(f"Duplicate map node id '{node.id}'.")
            nodes[node.id] = node

        graph = MapGraph(
            nodes=MappingProxyType(nodes),
            layers=layers,
            start_node_id=start_node_id,
            boss_node_id=boss_node_id,
        )
        issues = validate_map_graph(graph)
        if issues:
            raise SaveLoadError(f"Saved map is malformed: {format_issue(issues[0])}")
        return graph

    def _coerce_node(self, value: object, path: str) -> MapNode:
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{path} must be an object.")
        node_id = self._require_str(value.get("id"), f"{path}.id")
        layer = value.get("layer")
        if isinstance(layer, bool) or not isinstance(layer, int) or layer < 0:
            raise SaveLoadError(f"{path}.layer must be a non-negative integer.")
        node_type = self._require_node_type(value.get("type"), f"{path}.type")
        position = value.get("position")
        if (
            not isinstance(position, list)
            or len(position) != 2
            or not all(isinstance(axis, (int, float)) and not isinstance(axis, bool) for axis in position)
        ):
            raise SaveLoadError(f"{path}.position must be an [x, y] pair of numbers.")
        connections = self._coerce_str_list(value.get("connections"), f"{path}.connections")
        return MapNode(
            id=node_id,
            layer=layer,
            type=node_type,
            position=NodePosition(x=float(position[0]), y=float(position[1])),
            connections=tuple(connections),
        )

    @staticmethod
    def _require_node_type(value: object, path: str) -> NodeType:
        for node_type in NODE_TYPES:
            if value == node_type:
                return node_type
        raise SaveLoadError(f"{path} has unknown node type {value!r}.")

    @staticmethod
    def _require_str(value: object, path: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{path} must be a string.")
        return value

    @staticmethod
    def _coerce_str_list(value: object, path: str) -> List[str]:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise SaveLoadError(f"{path} must be a list of strings.")
        return list(value)
