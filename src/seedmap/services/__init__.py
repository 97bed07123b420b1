"""Service layer exports."""

from .errors import MapNotLoadedError, NodeNotAccessibleError, SaveLoadError
from .map_generation import MapGenerator
from .map_navigation_service import MapNavigationService
from .rng_registry import RNGRegistry
from .save_service import RunSnapshot, SaveService

__all__ = [
    "MapGenerator",
    "MapNavigationService",
    "MapNotLoadedError",
    "NodeNotAccessibleError",
    "RNGRegistry",
    "RunSnapshot",
    "SaveLoadError",
    "SaveService",
]
