from typing import List

import pytest

from seedmap.core.rng import XorShift128Plus
from seedmap.domain.map_models import DraftGraph, GenerationConfig
from seedmap.services.map_generation import GraphBuilder, NodeAssigner
from seedmap.services.map_generation.node_assigner import (
    BASE_WEIGHTS,
    ELITE_ZONE_WEIGHTS,
    MAX_ATTEMPTS,
    is_elite_zone,
    layer_weights,
    weighted_random,
)


class ScriptedRng:
    """Returns queued values from ``next()`` in order."""

    def __init__(self, values: List[float]) -> None:
        self._values = list(values)

    def next(self) -> float:
        return self._values.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._values)


def _single_file_draft(layer_count: int) -> DraftGraph:
    config = GenerationConfig(layer_count=layer_count, min_path_width=1, max_path_width=1)
    return GraphBuilder(XorShift128Plus("single-file")).build(config)


def test_weighted_random_first_entry_at_zero() -> None:
    assert weighted_random(BASE_WEIGHTS, ScriptedRng([0.0])) == "combat"  # type: ignore[arg-type]


def test_weighted_random_last_entry_at_top_of_range() -> None:
    assert weighted_random(BASE_WEIGHTS, ScriptedRng([0.9999])) == "treasure"  # type: ignore[arg-type]
    assert weighted_random(ELITE_ZONE_WEIGHTS, ScriptedRng([1.0])) == "treasure"  # type: ignore[arg-type]


def test_weighted_random_walks_cumulative_boundaries() -> None:
    assert weighted_random(BASE_WEIGHTS, ScriptedRng([0.59])) == "combat"  # type: ignore[arg-type]
    assert weighted_random(BASE_WEIGHTS, ScriptedRng([0.61])) == "event"  # type: ignore[arg-type]
    assert weighted_random(BASE_WEIGHTS, ScriptedRng([0.95])) == "shop"  # type: ignore[arg-type]


def test_weighted_random_exhausted_list_returns_last_entry() -> None:
    assert weighted_random(BASE_WEIGHTS, ScriptedRng([1.5])) == "treasure"  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "layer,expected",
    [(5, False), (6, True), (8, True), (9, False), (11, False), (12, True), (14, True)],
)
def test_elite_zone_boundaries(layer: int, expected: bool) -> None:
    assert is_elite_zone(layer, 15) is expected


def test_layer_weights_follow_elite_zone() -> None:
    assert layer_weights(5, 15) is BASE_WEIGHTS
    assert layer_weights(7, 15) is ELITE_ZONE_WEIGHTS
    assert layer_weights(12, 15) is ELITE_ZONE_WEIGHTS


def test_blocked_shop_falls_back_to_combat() -> None:
    draft = _single_file_draft(6)
    # layer 1 shop, layer 2 rest, layer 3 only draws shop, layer 4 rest, layer 5 combat
    rng = ScriptedRng([0.95, 0.85] + [0.95] * MAX_ATTEMPTS + [0.9, 0.0])

    report = NodeAssigner(rng).assign(draft)  # type: ignore[arg-type]

    assert rng.remaining == 0
    assert [draft.nodes[f"node-{layer}-0"].type for layer in range(1, 6)] == [
        "shop",
        "rest",
        "combat",
        "rest",
        "combat",
    ]
    assert report.fallback_node_ids == ["node-3-0"]
    assert report.promoted_node_ids == []


def test_fallback_nodes_can_be_promoted_to_meet_minimums() -> None:
    draft = _single_file_draft(5)
    rng = ScriptedRng([0.95] * (2 + 2 * MAX_ATTEMPTS))

    report = NodeAssigner(rng).assign(draft)  # type: ignore[arg-type]

    assert report.fallback_node_ids == ["node-2-0", "node-3-0"]
    assert report.promoted_node_ids == ["node-2-0", "node-3-0"]
    assert [draft.nodes[f"node-{layer}-0"].type for layer in range(1, 5)] == [
        "shop",
        "rest",
        "rest",
        "shop",
    ]


def test_second_elite_in_wide_layer_is_redrawn() -> None:
    config = GenerationConfig(layer_count=9, min_path_width=2, max_path_width=2)
    draft = GraphBuilder(XorShift128Plus("elites")).build(config)
    layer_six = draft.layers[6]
    assert len(layer_six) == 2
    # ten combat rooms in layers 1-5, then two elite draws in layer 6
    draws = [0.0] * 10 + [0.6, 0.6, 0.0] + [0.0] * 4
    rng = ScriptedRng(draws)

    report = NodeAssigner(rng).assign(draft)  # type: ignore[arg-type]

    assert rng.remaining == 0
    assert [draft.nodes[node_id].type for node_id in layer_six] == ["elite", "combat"]
    assert report.fallback_node_ids == []
