"""Deterministic run-map generation with per-feature RNG streams."""

__version__ = "0.3.0"
