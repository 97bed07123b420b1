from seedmap.core.rng import RNGContext, RNGState, XorShift128Plus
from seedmap.services.rng_registry import RNGRegistry, get_or_create_stream, stream_key

MAP_GRAPH = RNGContext(category="map", subcategory="graph")
MAP_NODES = RNGContext(category="map", subcategory="nodes")
REWARDS = RNGContext(category="rewards")


def _draws(rng: XorShift128Plus, count: int = 10) -> list[float]:
    return [rng.next() for _ in range(count)]


def test_stream_key_with_and_without_subcategory() -> None:
    assert stream_key(MAP_GRAPH) == "map:graph"
    assert stream_key(REWARDS) == "rewards"
    assert stream_key(RNGContext(category="rewards", subcategory="")) == "rewards"


def test_stream_seed_is_master_seed_plus_key() -> None:
    registry = RNGRegistry()
    registry.initialize("abc")

    rng = registry.get_rng(MAP_GRAPH)

    assert _draws(rng) == _draws(XorShift128Plus("abc:map:graph"))


def test_independent_registries_are_deterministic() -> None:
    first = RNGRegistry()
    first.initialize("run-42")
    second = RNGRegistry()
    second.initialize("run-42")

    assert _draws(first.get_rng(MAP_GRAPH), 50) == _draws(second.get_rng(MAP_GRAPH), 50)
    assert _draws(first.get_rng(REWARDS), 50) == _draws(second.get_rng(REWARDS), 50)


def test_streams_are_isolated() -> None:
    busy = RNGRegistry()
    busy.initialize("isolation")
    quiet = RNGRegistry()
    quiet.initialize("isolation")

    _draws(busy.get_rng(REWARDS), 500)

    assert _draws(busy.get_rng(MAP_NODES)) == _draws(quiet.get_rng(MAP_NODES))


def test_get_rng_returns_same_instance_and_counts_requests() -> None:
    registry = RNGRegistry()
    registry.initialize("seq")

    first = registry.get_rng(MAP_GRAPH)
    first.next()
    second = registry.get_rng(MAP_GRAPH)

    assert first is second
    assert registry.sequence_id(MAP_GRAPH) == 2
    assert registry.sequence_id(MAP_NODES) == 0
    assert registry.sequence_ids() == {"map:graph": 2}


def test_save_and_load_continue_exact_sequence() -> None:
    registry = RNGRegistry()
    registry.initialize("persist")
    graph_rng = registry.get_rng(MAP_GRAPH)
    rewards_rng = registry.get_rng(REWARDS)
    _draws(graph_rng, 7)
    _draws(rewards_rng, 3)

    registry.save_state()
    saved = registry.saved_states
    expected_graph = _draws(graph_rng, 5)
    expected_rewards = _draws(rewards_rng, 5)

    resumed = RNGRegistry()
    resumed.initialize("persist")
    resumed.load_state(saved)

    assert _draws(resumed.get_rng(MAP_GRAPH), 5) == expected_graph
    assert _draws(resumed.get_rng(REWARDS), 5) == expected_rewards
    assert resumed.sequence_id(MAP_GRAPH) == 2


def test_load_state_accepts_association_list() -> None:
    registry = RNGRegistry()
    registry.initialize("pairs")
    snapshot = RNGState(seed="pairs", state=(1, 2, 3, 4), sequence_id=3)

    registry.load_state([("map:graph", snapshot)])

    assert registry.get_rng(MAP_GRAPH).get_state() == [1, 2, 3, 4]
    assert registry.sequence_id(MAP_GRAPH) == 4


def test_load_state_does_not_touch_live_streams() -> None:
    registry = RNGRegistry()
    registry.initialize("live")
    rng = registry.get_rng(MAP_GRAPH)
    before = rng.get_state()

    registry.load_state({"map:graph": RNGState(seed="live", state=(9, 9, 9, 9), sequence_id=1)})

    assert registry.get_rng(MAP_GRAPH).get_state() == before


def test_save_state_keeps_snapshots_of_streams_not_yet_requested() -> None:
    registry = RNGRegistry()
    registry.initialize("keep")
    snapshot = RNGState(seed="keep", state=(5, 6, 7, 8), sequence_id=2)
    registry.load_state({"rewards": snapshot})
    registry.get_rng(MAP_GRAPH)

    registry.save_state()

    assert registry.saved_states["rewards"] == snapshot
    assert "map:graph" in registry.saved_states


def test_initialize_clears_streams_and_snapshots() -> None:
    registry = RNGRegistry()
    registry.initialize("first")
    registry.get_rng(MAP_GRAPH).next()
    registry.save_state()

    registry.initialize("second")

    assert registry.master_seed == "second"
    assert registry.live_keys() == []
    assert registry.saved_states == {}
    assert _draws(registry.get_rng(MAP_GRAPH)) == _draws(XorShift128Plus("second:map:graph"))


def test_reset_clears_streams_and_keeps_master_seed() -> None:
    registry = RNGRegistry()
    registry.initialize("reset")
    registry.get_rng(REWARDS).next()
    registry.save_state()

    registry.reset()

    assert registry.master_seed == "reset"
    assert registry.live_keys() == []
    assert registry.saved_states == {}


def test_get_or_create_stream_is_pure() -> None:
    instances: dict = {}
    saved = {"map:graph": RNGState(seed="pure", state=(1, 1, 1, 1), sequence_id=5)}

    stream, created = get_or_create_stream("pure", "map:graph", instances, saved)

    assert created
    assert instances == {}
    assert stream.rng.get_state() == [1, 1, 1, 1]
    assert stream.sequence_id == 5

    again, created_again = get_or_create_stream("pure", "map:graph", {"map:graph": stream}, saved)
    assert again is stream
    assert not created_again
