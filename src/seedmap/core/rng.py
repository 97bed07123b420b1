"""Deterministic xorshift128+ generator and the stream snapshot types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, TypeVar

from seedmap.core.types import RNGStateVector

T_co = TypeVar("T_co")

_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = 0x100000000
_SEED_BASIS = 0x9E3779B9
_SEED_MULTIPLIERS = (0x85EBCA6B, 0xC2B2AE35, 0x27D4EB2F, 0x165667B1)

RNGStatePayload = Dict[str, Any]


def seed_from_string(seed: str) -> RNGStateVector:
    """Hash a string seed into four 32-bit state words.

    Each word is an independent multiplicative accumulator started from the
    same basis and folded with every UTF-16 code unit of the seed, so the
    mapping is identical across processes and platforms.
    """
    words = [_SEED_BASIS] * 4
    for unit in _utf16_code_units(seed):
        words = [
            ((word ^ unit) * multiplier) & _MASK32
            for word, multiplier in zip(words, _SEED_MULTIPLIERS)
        ]
    return (words[0], words[1], words[2], words[3])


def coerce_state_vector(value: object) -> RNGStateVector:
    """Validate a raw state vector and return it as a tuple of four words."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValueError("State vector must be a sequence of four integers.")
    if len(value) != 4:
        raise ValueError(f"State vector must have 4 words, got {len(value)}.")
    words: List[int] = []
    for word in value:
        if isinstance(word, bool) or not isinstance(word, int):
            raise ValueError("State vector words must be integers.")
        if not 0 <= word <= _MASK32:
            raise ValueError(f"State vector word out of 32-bit range: {word}.")
        words.append(word)
    return (words[0], words[1], words[2], words[3])


def _utf16_code_units(text: str) -> List[int]:
    data = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(data[index : index + 2], "little") for index in range(0, len(data), 2)]


class XorShift128Plus:
    """128-bit xorshift generator with helpers for common draws."""

    def __init__(self, seed: str | Sequence[int]) -> None:
        if isinstance(seed, str):
            self._state = list(seed_from_string(seed))
        else:
            self._state = list(coerce_state_vector(seed))

    def next_uint32(self) -> int:
        """Advance the state and return the raw 32-bit output."""
        s0, s1, s2, s3 = self._state
        t = (s0 + s3) & _MASK32
        result = (t + s1) & _MASK32

        s3 = s2
        s2 = s1
        s1 = s0

        s0 = t
        s0 ^= (s0 << 11) & _MASK32
        s0 ^= s0 >> 8
        s0 ^= s3
        s0 ^= s3 >> 19

        self._state = [s0 & _MASK32, s1, s2, s3]
        return result

    def next(self) -> float:
        """Return the next floating point number in the range [0.0, 1.0)."""
        return self.next_uint32() / _TWO_POW_32

    def next_int(self, minimum: int, maximum: int) -> int:
        """Return a random integer N such that minimum <= N <= maximum."""
        if maximum < minimum:
            raise ValueError(f"Invalid range: maximum {maximum} is below minimum {minimum}.")
        return int(self.next() * (maximum - minimum + 1)) + minimum

    def next_float(self, minimum: float = 0.0, maximum: float = 1.0) -> float:
        """Return a float in [minimum, maximum)."""
        return self.next() * (maximum - minimum) + minimum

    def next_boolean(self, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        return self.next() < probability

    def pick(self, seq: Sequence[T_co]) -> T_co:
        """Return a random element from the non-empty sequence."""
        if not seq:
            raise ValueError("Cannot pick from an empty sequence.")
        return seq[self.next_int(0, len(seq) - 1)]

    def shuffle(self, seq: Sequence[T_co]) -> List[T_co]:
        """Return a shuffled copy of the sequence, leaving the input untouched."""
        result = list(seq)
        for index in range(len(result) - 1, 0, -1):
            swap = self.next_int(0, index)
            result[index], result[swap] = result[swap], result[index]
        return result

    def get_state(self) -> List[int]:
        """Return a copy of the four state words."""
        return list(self._state)

    def set_state(self, state: Sequence[int]) -> None:
        """Replace the state with a copy of the given four words."""
        self._state = list(coerce_state_vector(state))


@dataclass(frozen=True, slots=True)
class RNGContext:
    """Logical identifier of one independent stream."""

    category: str
    subcategory: str | None = None

    @property
    def key(self) -> str:
        if self.subcategory:
            return f"{self.category}:{self.subcategory}"
        return self.category


@dataclass(frozen=True, slots=True)
class RNGState:
    """Persisted position of one stream."""

    seed: str
    state: RNGStateVector
    sequence_id: int

    def to_payload(self) -> RNGStatePayload:
        return {"seed": self.seed, "state": list(self.state), "sequence_id": self.sequence_id}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RNGState":
        """Build a snapshot from its JSON form, raising ValueError when malformed."""
        seed = payload.get("seed")
        if not isinstance(seed, str):
            raise ValueError("Stream snapshot seed must be a string.")
        sequence_id = payload.get("sequence_id")
        if isinstance(sequence_id, bool) or not isinstance(sequence_id, int) or sequence_id < 0:
            raise ValueError("Stream snapshot sequence_id must be a non-negative integer.")
        return cls(seed=seed, state=coerce_state_vector(payload.get("state")), sequence_id=sequence_id)


__all__ = [
    "RNGContext",
    "RNGState",
    "RNGStatePayload",
    "XorShift128Plus",
    "coerce_state_vector",
    "seed_from_string",
]
