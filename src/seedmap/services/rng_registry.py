"""Registry of independent RNG streams derived from one master seed.

Each feature asks for its own stream by context (``map:graph``,
``rewards:cards``, ...). A stream's initial state depends only on the master
seed and its key, so adding draws to one feature never shifts another.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from seedmap.core.rng import RNGContext, RNGState, XorShift128Plus, coerce_state_vector

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RNGStream:
    """A live generator plus the number of times it has been requested."""

    rng: XorShift128Plus
    sequence_id: int = 0


def stream_key(context: RNGContext) -> str:
    """Return the ``category[:subcategory]`` key for a context."""
    return context.key


def derive_stream_seed(master_seed: str, key: str) -> str:
    return f"{master_seed}:{key}"


def get_or_create_stream(
    master_seed: str,
    key: str,
    instances: Mapping[str, RNGStream],
    saved_states: Mapping[str, RNGState],
) -> Tuple[RNGStream, bool]:
    """Resolve the stream for ``key`` without touching registry state.

    Lookup order is the live table, then a fresh stream seeded from the master
    seed, positioned at the saved snapshot when one exists. Returns the stream
    and whether it was newly created.
    """
    existing = instances.get(key)
    if existing is not None:
        return existing, False
    stream = RNGStream(rng=XorShift128Plus(derive_stream_seed(master_seed, key)))
    saved = saved_states.get(key)
    if saved is not None:
        stream.rng.set_state(saved.state)
        stream.sequence_id = saved.sequence_id
    return stream, True


class RNGRegistry:
    """Hands out per-context streams and snapshots them for save/load."""

    def __init__(self, master_seed: str = "") -> None:
        self._master_seed = master_seed
        self._instances: Dict[str, RNGStream] = {}
        self._saved_states: Dict[str, RNGState] = {}

    @property
    def master_seed(self) -> str:
        return self._master_seed

    def initialize(self, master_seed: str) -> None:
        """Start a new run: drop every stream and snapshot, record the seed."""
        self._master_seed = master_seed
        self._instances = {}
        self._saved_states = {}
        logger.info("RNG registry initialized with master seed %r", master_seed)

    def get_rng(self, context: RNGContext) -> XorShift128Plus:
        """Return the live stream for ``context``, creating it on first use."""
        key = stream_key(context)
        stream, created = get_or_create_stream(
            self._master_seed, key, self._instances, self._saved_states
        )
        if created:
            self._instances[key] = stream
            if key in self._saved_states:
                logger.debug("Restored stream %s at sequence %d", key, stream.sequence_id)
            else:
                logger.debug("Created stream %s", key)
        stream.sequence_id += 1
        return stream.rng

    def sequence_id(self, context: RNGContext) -> int:
        """Return how many times the stream has been requested (0 if never)."""
        stream = self._instances.get(stream_key(context))
        return stream.sequence_id if stream is not None else 0

    def live_keys(self) -> List[str]:
        return list(self._instances)

    def sequence_ids(self) -> Dict[str, int]:
        """Return the request count of every live stream, keyed by stream key."""
        return {key: stream.sequence_id for key, stream in self._instances.items()}

    @property
    def saved_states(self) -> Dict[str, RNGState]:
        """Return a copy of the persisted snapshot table."""
        return dict(self._saved_states)

    def save_state(self) -> None:
        """Snapshot every live stream over its previous snapshot.

        Snapshots of streams that were loaded but never requested again are
        kept, so saving right after a load loses nothing.
        """
        for key, stream in self._instances.items():
            self._saved_states[key] = RNGState(
                seed=self._master_seed,
                state=coerce_state_vector(stream.rng.get_state()),
                sequence_id=stream.sequence_id,
            )

    def load_state(
        self, saved_states: Mapping[str, RNGState] | Iterable[Tuple[str, RNGState]]
    ) -> None:
        """Replace the persisted table; live streams are left as they are."""
        if isinstance(saved_states, Mapping):
            self._saved_states = dict(saved_states)
        else:
            self._saved_states = {key: state for key, state in saved_states}

    def reset(self) -> None:
        """Drop every live stream and snapshot, keeping the master seed."""
        self._instances = {}
        self._saved_states = {}
