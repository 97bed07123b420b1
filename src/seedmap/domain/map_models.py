"""Run map data structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from seedmap.core.types import NodeType

START_NODE_ID = "start"
BOSS_NODE_ID = "boss"


def middle_node_id(layer: int, index: int) -> str:
    return f"node-{layer}-{index}"


@dataclass(slots=True)
class GenerationConfig:
    """Shape of a generated map.

    Layers are indexed ``0..layer_count``: the start node sits alone in layer 0,
    the boss alone in ``layer_count``, and every layer in between holds between
    ``min_path_width`` and ``max_path_width`` nodes.
    """

    seed: str = ""
    layer_count: int = 15
    min_path_width: int = 2
    max_path_width: int = 3

    def __post_init__(self) -> None:
        if self.layer_count < 2:
            raise ValueError("layer_count must be at least 2.")
        if self.min_path_width < 1:
            raise ValueError("min_path_width must be at least 1.")
        if self.max_path_width < self.min_path_width:
            raise ValueError("max_path_width must not be below min_path_width.")


@dataclass(frozen=True, slots=True)
class NodePosition:
    """Normalized layout coordinates in [0, 1]."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class MapNode:
    """One room on the run map."""

    id: str
    layer: int
    type: NodeType
    position: NodePosition
    connections: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MapGraph:
    """Immutable layered map; every edge points into the following layer."""

    nodes: Mapping[str, MapNode]
    layers: Tuple[Tuple[str, ...], ...]
    start_node_id: str
    boss_node_id: str

    @property
    def layer_count(self) -> int:
        return len(self.layers) - 1

    def node(self, node_id: str) -> MapNode | None:
        return self.nodes.get(node_id)

    def nodes_in_layer(self, layer: int) -> List[MapNode]:
        return [self.nodes[node_id] for node_id in self.layers[layer]]

    def iter_nodes(self) -> Iterator[MapNode]:
        """Yield nodes layer by layer, in layer order."""
        for layer_ids in self.layers:
            for node_id in layer_ids:
                yield self.nodes[node_id]


@dataclass(slots=True)
class DraftNode:
    """Mutable node used while a map is being built and typed."""

    id: str
    layer: int
    type: NodeType
    x: float
    y: float
    connections: List[str] = field(default_factory=list)

    def freeze(self) -> MapNode:
        return MapNode(
            id=self.id,
            layer=self.layer,
            type=self.type,
            position=NodePosition(x=self.x, y=self.y),
            connections=tuple(self.connections),
        )


@dataclass(slots=True)
class DraftGraph:
    """Mutable graph handed from the builder to the node assigner."""

    nodes: Dict[str, DraftNode]
    layers: List[List[str]]
    start_node_id: str = START_NODE_ID
    boss_node_id: str = BOSS_NODE_ID

    def iter_nodes(self) -> Iterator[DraftNode]:
        for layer_ids in self.layers:
            for node_id in layer_ids:
                yield self.nodes[node_id]

    def freeze(self) -> MapGraph:
        """Return an immutable copy of the draft."""
        frozen_nodes = {node.id: node.freeze() for node in self.iter_nodes()}
        return MapGraph(
            nodes=MappingProxyType(frozen_nodes),
            layers=tuple(tuple(layer_ids) for layer_ids in self.layers),
            start_node_id=self.start_node_id,
            boss_node_id=self.boss_node_id,
        )
