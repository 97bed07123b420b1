"""Service-layer exceptions."""


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""


class MapNotLoadedError(Exception):
    """Raised when a navigation operation needs a map and none is set."""


class NodeNotAccessibleError(Exception):
    """Raised when moving to a node that is not reachable from the current node."""
