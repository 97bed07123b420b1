"""Layered graph construction for run maps."""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence, Tuple

from seedmap.core.rng import XorShift128Plus
from seedmap.domain.map_models import (
    BOSS_NODE_ID,
    START_NODE_ID,
    DraftGraph,
    DraftNode,
    GenerationConfig,
    middle_node_id,
)

logger = logging.getLogger(__name__)

_MAX_EDGES_PER_NODE = 3
_POSITION_JITTER = 0.1
_MIN_X = 0.1
_MAX_X = 0.9

Edge = Tuple[str, str]


class GraphBuilder:
    """Builds the untyped topology from the ``graph`` stream."""

    def __init__(self, rng: XorShift128Plus) -> None:
        self._rng = rng

    def build(self, config: GenerationConfig) -> DraftGraph:
        layer_count = config.layer_count
        nodes: Dict[str, DraftNode] = {}
        layers: List[List[str]] = []

        start = DraftNode(id=START_NODE_ID, layer=0, type="start", x=0.5, y=0.0)
        nodes[start.id] = start
        layers.append([start.id])

        widths = self._layer_widths(layer_count, config.min_path_width, config.max_path_width)
        for layer in range(1, layer_count):
            width = widths[layer]
            layer_ids: List[str] = []
            for index in range(width):
                node = DraftNode(
                    id=middle_node_id(layer, index),
                    layer=layer,
                    type="combat",
                    x=(index + 1) / (width + 1),
                    y=layer / layer_count,
                )
                nodes[node.id] = node
                layer_ids.append(node.id)
            layers.append(layer_ids)

        boss = DraftNode(id=BOSS_NODE_ID, layer=layer_count, type="boss", x=0.5, y=1.0)
        nodes[boss.id] = boss
        layers.append([boss.id])

        self._connect_layers(nodes, layers)
        self._jitter_positions(nodes, layers)
        return DraftGraph(nodes=nodes, layers=layers)

    def _layer_widths(self, layer_count: int, min_width: int, max_width: int) -> List[int]:
        """Diamond-shaped widths: narrow near start and boss, widest mid-run."""
        widths = [1] * (layer_count + 1)
        mid_point = layer_count // 2
        max_distance = max(mid_point, layer_count - mid_point - 1)
        for layer in range(1, layer_count):
            progress = 1 - abs(layer - mid_point) / max_distance
            base_width = min_width + math.floor((max_width - min_width) * progress * progress)
            variance = math.floor(self._rng.next() * 3) - 1
            widths[layer] = max(1, max(min_width, min(max_width, base_width + variance)))
        logger.debug("Layer widths: %s", widths)
        return widths

    def _connect_layers(self, nodes: Dict[str, DraftNode], layers: Sequence[List[str]]) -> None:
        for layer in range(len(layers) - 1):
            current_layer = layers[layer]
            next_layer = layers[layer + 1]
            sorted_current = sorted(current_layer, key=lambda node_id: nodes[node_id].x)
            sorted_next = sorted(next_layer, key=lambda node_id: nodes[node_id].x)
            layer_edges: List[Edge] = []

            for node_id in sorted_current:
                node = nodes[node_id]
                wanted = min(len(next_layer), 1 + math.floor(self._rng.next() * _MAX_EDGES_PER_NODE))
                added = 0
                for target_id in self._nearest_first(node, sorted_next, nodes):
                    if added >= wanted:
                        break
                    if self._would_cross(node_id, target_id, layer_edges, nodes):
                        continue
                    if target_id not in node.connections:
                        node.connections.append(target_id)
                        layer_edges.append((node_id, target_id))
                        added += 1
                if added == 0:
                    target_id = self._closest(node, sorted_next, nodes)
                    node.connections.append(target_id)
                    layer_edges.append((node_id, target_id))
                    logger.debug("Forced edge %s -> %s", node_id, target_id)

            for next_id in next_layer:
                if any(next_id in nodes[source_id].connections for source_id in current_layer):
                    continue
                source_id = self._closest(nodes[next_id], sorted_current, nodes)
                nodes[source_id].connections.append(next_id)
                layer_edges.append((source_id, next_id))
                logger.debug("Repaired orphan %s with edge from %s", next_id, source_id)

    @staticmethod
    def _nearest_first(
        source: DraftNode, targets: Sequence[str], nodes: Dict[str, DraftNode]
    ) -> List[str]:
        return sorted(targets, key=lambda node_id: abs(nodes[node_id].x - source.x))

    @staticmethod
    def _closest(node: DraftNode, candidates: Sequence[str], nodes: Dict[str, DraftNode]) -> str:
        return min(candidates, key=lambda node_id: abs(nodes[node_id].x - node.x))

    @staticmethod
    def _would_cross(
        source_id: str,
        target_id: str,
        existing: Sequence[Edge],
        nodes: Dict[str, DraftNode],
    ) -> bool:
        source = nodes[source_id]
        target = nodes[target_id]
        for other_source_id, other_target_id in existing:
            other_source = nodes[other_source_id]
            other_target = nodes[other_target_id]
            if _segments_cross(
                (source.x, source.y),
                (target.x, target.y),
                (other_source.x, other_source.y),
                (other_target.x, other_target.y),
            ):
                return True
        return False

    def _jitter_positions(self, nodes: Dict[str, DraftNode], layers: Sequence[List[str]]) -> None:
        for layer in range(1, len(layers) - 1):
            for node_id in layers[layer]:
                node = nodes[node_id]
                offset = (self._rng.next() - 0.5) * _POSITION_JITTER
                node.x = max(_MIN_X, min(_MAX_X, node.x + offset))


def _segments_cross(
    a_start: Tuple[float, float],
    a_end: Tuple[float, float],
    b_start: Tuple[float, float],
    b_end: Tuple[float, float],
) -> bool:
    """Return True when the segments cross away from their endpoints."""
    x1, y1 = a_start
    x2, y2 = a_end
    x3, y3 = b_start
    x4, y4 = b_end
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < 0.0001:
        return False
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom
    return 0.01 < t < 0.99 and 0.01 < u < 0.99
