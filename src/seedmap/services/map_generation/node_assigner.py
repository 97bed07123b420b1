"""Room type assignment for an untyped map draft."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence, Set, Tuple

from seedmap.core.rng import XorShift128Plus
from seedmap.core.types import NodeType
from seedmap.domain.map_models import DraftGraph, DraftNode

logger = logging.getLogger(__name__)

NodeTypeWeight = Tuple[NodeType, int]

BASE_WEIGHTS: Tuple[NodeTypeWeight, ...] = (
    ("combat", 60),
    ("event", 20),
    ("rest", 10),
    ("shop", 7),
    ("treasure", 3),
)

ELITE_ZONE_WEIGHTS: Tuple[NodeTypeWeight, ...] = (
    ("combat", 50),
    ("elite", 20),
    ("event", 15),
    ("rest", 8),
    ("shop", 5),
    ("treasure", 2),
)

MAX_ATTEMPTS = 10
MIN_SHOP_SPACING = 3
MIN_REST_SPACING = 2
MIN_SHOPS = 1
MIN_RESTS = 2

_PREFERRED_SHOP_LAYERS = range(3, 13)
_PREFERRED_REST_MIN_LAYER = 4
_NO_PREVIOUS_LAYER = -3


@dataclass(slots=True)
class AssignmentReport:
    """What the assigner had to force while typing a map."""

    fallback_node_ids: List[str] = field(default_factory=list)
    promoted_node_ids: List[str] = field(default_factory=list)


def is_elite_zone(layer: int, total_layers: int) -> bool:
    """Layers 6-8 and the last three layers before the boss."""
    return 6 <= layer <= 8 or layer >= total_layers - 3


def layer_weights(layer: int, total_layers: int) -> Tuple[NodeTypeWeight, ...]:
    return ELITE_ZONE_WEIGHTS if is_elite_zone(layer, total_layers) else BASE_WEIGHTS


def weighted_random(weights: Sequence[NodeTypeWeight], rng: XorShift128Plus) -> NodeType:
    """Pick a type by walking the cumulative weights with one draw.

    The last entry is returned if float drift exhausts the list.
    """
    total_weight = sum(weight for _, weight in weights)
    remaining = rng.next() * total_weight
    for node_type, weight in weights:
        remaining -= weight
        if remaining <= 0:
            return node_type
    return weights[-1][0]


class NodeAssigner:
    """Types every middle node from the ``nodes`` stream, then repairs minimums."""

    def __init__(self, rng: XorShift128Plus) -> None:
        self._rng = rng

    def assign(self, graph: DraftGraph) -> AssignmentReport:
        report = AssignmentReport()
        total_layers = len(graph.layers) - 1
        last_shop_layer = _NO_PREVIOUS_LAYER
        last_rest_layer = _NO_PREVIOUS_LAYER
        elite_layers: Set[int] = set()

        for layer in range(1, total_layers):
            layer_ids = graph.layers[layer]
            weights = layer_weights(layer, total_layers)
            for node_id in layer_ids:
                node = graph.nodes[node_id]
                assigned = False
                for _ in range(MAX_ATTEMPTS):
                    node_type = weighted_random(weights, self._rng)
                    if node_type == "shop" and layer - last_shop_layer < MIN_SHOP_SPACING:
                        continue
                    if node_type == "rest" and layer - last_rest_layer < MIN_REST_SPACING:
                        continue
                    if node_type == "elite" and layer in elite_layers and len(layer_ids) > 1:
                        continue
                    node.type = node_type
                    assigned = True
                    if node_type == "shop":
                        last_shop_layer = layer
                    elif node_type == "rest":
                        last_rest_layer = layer
                    elif node_type == "elite":
                        elite_layers.add(layer)
                    break
                if not assigned:
                    node.type = "combat"
                    report.fallback_node_ids.append(node_id)
                    logger.debug("No valid type for %s after %d draws; using combat", node_id, MAX_ATTEMPTS)

        report.promoted_node_ids.extend(self._ensure_minimum_nodes(graph))
        return report

    def _ensure_minimum_nodes(self, graph: DraftGraph) -> List[str]:
        """Promote nodes until the map has a shop and two rest sites.

        Preferred candidates are mid-run combat rooms; short maps without any
        fall back to other combat rooms, then to any non-shop, non-rest room.
        """
        middle = [node for node in graph.iter_nodes() if node.type not in ("start", "boss")]
        promoted: List[str] = []

        if sum(1 for node in middle if node.type == "shop") < MIN_SHOPS:
            for node in self._candidates(
                middle,
                lambda n: n.type == "combat" and n.layer in _PREFERRED_SHOP_LAYERS,
            ):
                node.type = "shop"
                promoted.append(node.id)
                break

        rests_needed = max(0, MIN_RESTS - sum(1 for node in middle if node.type == "rest"))
        if rests_needed:
            for node in self._candidates(
                middle,
                lambda n: n.type == "combat" and n.layer >= _PREFERRED_REST_MIN_LAYER,
            ):
                if rests_needed == 0:
                    break
                node.type = "rest"
                promoted.append(node.id)
                rests_needed -= 1

        if promoted:
            logger.debug("Promoted nodes to meet minimum counts: %s", promoted)
        return promoted

    @staticmethod
    def _candidates(
        nodes: Sequence[DraftNode], preferred: Callable[[DraftNode], bool]
    ) -> Iterable[DraftNode]:
        """Yield preferred nodes, then other combat rooms, then other rooms."""
        seen: Set[str] = set()
        tiers: Tuple[Callable[[DraftNode], bool], ...] = (
            preferred,
            lambda n: n.type == "combat",
            lambda n: n.type not in ("shop", "rest"),
        )
        for tier in tiers:
            for node in nodes:
                if node.id in seen or not tier(node):
                    continue
                seen.add(node.id)
                yield node
