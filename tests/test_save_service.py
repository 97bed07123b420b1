from __future__ import annotations

import copy
import json

import pytest

from seedmap.core.rng import RNGContext
from seedmap.domain.map_models import GenerationConfig
from seedmap.services.errors import SaveLoadError
from seedmap.services.map_generation import MapGenerator
from seedmap.services.map_navigation_service import MapNavigationService
from seedmap.services.rng_registry import RNGRegistry
from seedmap.services.save_service import SaveService

REWARDS = RNGContext(category="rewards", subcategory="cards")


def _start_run(seed: str = "save-seed") -> tuple[RNGRegistry, MapNavigationService]:
    registry = RNGRegistry()
    registry.initialize(seed)
    graph = MapGenerator.from_registry(registry, GenerationConfig(layer_count=8)).generate()
    navigation = MapNavigationService()
    navigation.set_map(graph)
    return registry, navigation


def test_save_round_trip_preserves_state() -> None:
    registry, navigation = _start_run()
    rewards = registry.get_rng(REWARDS)
    for _ in range(4):
        rewards.next()
    navigation.move_to(navigation.get_accessible_nodes()[0])
    save_service = SaveService()

    payload = save_service.serialize(registry, navigation)
    expected_rewards = [rewards.next() for _ in range(5)]
    restored = save_service.deserialize(json.loads(json.dumps(payload)))

    assert restored.registry.master_seed == "save-seed"
    assert [restored.registry.get_rng(REWARDS).next() for _ in range(5)] == expected_rewards
    original_map = navigation.current_map
    restored_map = restored.navigation.current_map
    assert original_map is not None and restored_map is not None
    assert restored_map.layers == original_map.layers
    assert dict(restored_map.nodes) == dict(original_map.nodes)
    assert restored.navigation.current_node_id == navigation.current_node_id
    assert restored.navigation.visited_nodes == navigation.visited_nodes


def test_serialize_uses_association_lists() -> None:
    registry, navigation = _start_run()

    payload = SaveService().serialize(registry, navigation)

    assert payload["save_version"] == SaveService.SAVE_VERSION
    assert payload["metadata"]["master_seed"] == "save-seed"
    assert payload["metadata"]["layer_count"] == 8
    keys = [entry[0] for entry in payload["rng"]["streams"]]
    assert keys == ["map:graph", "map:nodes"]
    assert payload["map"]["navigation"]["visited_nodes"] == ["start"]


def test_serialize_without_map() -> None:
    registry = RNGRegistry()
    registry.initialize("no-map")
    registry.get_rng(REWARDS)

    payload = SaveService().serialize(registry, MapNavigationService())
    restored = SaveService().deserialize(payload)

    assert payload["map"] is None
    assert restored.navigation.current_map is None
    assert "rewards:cards" in restored.registry.saved_states


def test_regenerating_after_load_continues_map_streams() -> None:
    registry, navigation = _start_run("regen")
    payload = SaveService().serialize(registry, navigation)
    expected = MapGenerator.from_registry(registry, GenerationConfig(layer_count=6)).generate()

    restored = SaveService().deserialize(payload)
    regenerated = MapGenerator.from_registry(restored.registry, GenerationConfig(layer_count=6)).generate()

    assert dict(regenerated.nodes) == dict(expected.nodes)


def test_deserialize_rejects_version_mismatch() -> None:
    registry, navigation = _start_run()
    payload = SaveService().serialize(registry, navigation)
    payload["save_version"] = 999

    with pytest.raises(SaveLoadError):
        SaveService().deserialize(payload)


def test_deserialize_rejects_non_mapping() -> None:
    with pytest.raises(SaveLoadError):
        SaveService().deserialize([])  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p.pop("rng"),
        lambda p: p["rng"].update(master_seed=5),
        lambda p: p["rng"].update(streams={"map:graph": {}}),
        lambda p: p["rng"]["streams"][0][1].update(state=[1, 2, 3]),
        lambda p: p["rng"]["streams"][0][1].update(state=[1, 2, 3, 2**32]),
        lambda p: p["rng"]["streams"].append(copy.deepcopy(p["rng"]["streams"][0])),
        lambda p: p["map"]["graph"]["nodes"][1].update(type="merchant"),
        lambda p: p["map"]["graph"]["nodes"][1].update(connections=["nowhere"]),
        lambda p: p["map"]["graph"]["nodes"][1].update(position="left"),
        lambda p: p["map"]["graph"].update(layers="flat"),
        lambda p: p["map"]["navigation"].update(current_node_id="boss"),
        lambda p: p["map"].update(navigation=None),
    ],
)
def test_deserialize_rejects_malformed_sections(mutate) -> None:
    registry, navigation = _start_run()
    payload = json.loads(json.dumps(SaveService().serialize(registry, navigation)))
    mutate(payload)

    with pytest.raises(SaveLoadError):
        SaveService().deserialize(payload)
