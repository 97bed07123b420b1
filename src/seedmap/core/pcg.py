"""PCG32 (XSH-RR) generator for single-stream score and progress contexts.

The whole generator state is one 64-bit integer, persisted as a base-10
string so it survives JSON round trips without precision loss.
"""
from __future__ import annotations

from typing import Tuple

PCG_MULTIPLIER = 6364136223846793005
PCG_INCREMENT = 1442695040888963407
_MASK64 = 0xFFFFFFFFFFFFFFFF
_MASK32 = 0xFFFFFFFF


def pcg32_step(state: int) -> Tuple[int, int]:
    """Return ``(value, next_state)`` for one step from ``state``."""
    old = state & _MASK64
    next_state = (old * PCG_MULTIPLIER + PCG_INCREMENT) & _MASK64
    xorshifted = (((old >> 18) ^ old) >> 27) & _MASK32
    rot = (old >> 59) & 31
    value = ((xorshifted >> rot) | (xorshifted << ((32 - rot) & 31))) & _MASK32
    return value, next_state


def pcg32_float(state: int) -> Tuple[float, int]:
    """Return a float in [0, 1) and the next state."""
    value, next_state = pcg32_step(state)
    return value / 0x100000000, next_state


def pcg32_int_between(state: int, minimum: int, maximum: int) -> Tuple[int, int]:
    """Return an integer in [minimum, maximum] and the next state."""
    if maximum < minimum:
        raise ValueError(f"Invalid range: maximum {maximum} is below minimum {minimum}.")
    fraction, next_state = pcg32_float(state)
    return minimum + int(fraction * (maximum - minimum + 1)), next_state


class PCG32:
    """Stateful wrapper over the pure PCG32 step functions."""

    def __init__(self, seed: int) -> None:
        if isinstance(seed, bool) or not isinstance(seed, int) or seed < 0:
            raise ValueError("PCG32 seed must be a non-negative integer.")
        self._state = seed & _MASK64

    @classmethod
    def from_state_string(cls, value: str) -> "PCG32":
        """Rebuild a generator from the decimal string produced by export_state."""
        if not isinstance(value, str) or not value.isdigit():
            raise ValueError("PCG32 state must be a decimal string.")
        state = int(value)
        if state > _MASK64:
            raise ValueError("PCG32 state exceeds 64 bits.")
        return cls(state)

    def next_uint32(self) -> int:
        value, self._state = pcg32_step(self._state)
        return value

    def next(self) -> float:
        """Return the next floating point number in the range [0.0, 1.0)."""
        value, self._state = pcg32_float(self._state)
        return value

    def next_int(self, minimum: int, maximum: int) -> int:
        """Return a random integer N such that minimum <= N <= maximum."""
        value, self._state = pcg32_int_between(self._state, minimum, maximum)
        return value

    def export_state(self) -> str:
        return str(self._state)


__all__ = [
    "PCG32",
    "PCG_INCREMENT",
    "PCG_MULTIPLIER",
    "pcg32_float",
    "pcg32_int_between",
    "pcg32_step",
]
