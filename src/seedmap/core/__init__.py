"""Core primitives shared by every layer."""

from .pcg import PCG32
from .rng import RNGContext, RNGState, XorShift128Plus, seed_from_string

__all__ = [
    "PCG32",
    "RNGContext",
    "RNGState",
    "XorShift128Plus",
    "seed_from_string",
]
