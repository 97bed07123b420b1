"""Plain-text rendering of run maps."""
from __future__ import annotations

import os
from typing import Dict, List

from seedmap.core.types import NodeType
from seedmap.domain.map_models import MapGraph, MapNode
from seedmap.services.map_navigation_service import MapNavigationService
from seedmap.services.rng_registry import RNGRegistry

NODE_SYMBOLS: Dict[NodeType, str] = {
    "start": "S",
    "combat": "C",
    "elite": "E",
    "rest": "R",
    "shop": "$",
    "event": "?",
    "treasure": "T",
    "boss": "B",
}


def debug_enabled() -> bool:
    """Return True only when SEEDMAP_DEBUG is explicitly set to '1'."""
    return os.getenv("SEEDMAP_DEBUG") == "1"


def node_marker(node_id: str, navigation: MapNavigationService | None) -> str:
    """``@`` current, ``>`` accessible, ``*`` visited, blank otherwise."""
    if navigation is None:
        return " "
    if node_id == navigation.current_node_id:
        return "@"
    if navigation.is_node_accessible(node_id):
        return ">"
    if node_id in navigation.visited_nodes:
        return "*"
    return " "


def format_node(node: MapNode, navigation: MapNavigationService | None = None) -> str:
    marker = node_marker(node.id, navigation)
    line = f"{marker}[{NODE_SYMBOLS[node.type]}] {node.id}"
    if node.connections:
        line += " -> " + ", ".join(node.connections)
    return line


def render_map(graph: MapGraph, navigation: MapNavigationService | None = None) -> List[str]:
    """Return one header line per layer followed by its nodes."""
    lines: List[str] = []
    for layer_index, layer_ids in enumerate(graph.layers):
        lines.append(f"Layer {layer_index:>2}")
        for node_id in layer_ids:
            lines.append("  " + format_node(graph.nodes[node_id], navigation))
    return lines


def render_legend() -> str:
    return "  ".join(f"{symbol}={node_type}" for node_type, symbol in NODE_SYMBOLS.items())


def render_stream_debug(registry: RNGRegistry) -> List[str]:
    """List live streams and their request counts for debugging."""
    lines = [f"master seed: {registry.master_seed!r}"]
    saved = registry.saved_states
    for key, sequence in registry.sequence_ids().items():
        suffix = " (snapshot)" if key in saved else ""
        lines.append(f"stream {key}: sequence {sequence}{suffix}")
    return lines
