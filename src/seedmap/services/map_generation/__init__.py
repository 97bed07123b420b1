"""Run map generation: topology, room typing and the generator entry point."""

from .generator import GRAPH_STREAM, NODES_STREAM, MapGenerator
from .graph_builder import GraphBuilder
from .node_assigner import AssignmentReport, NodeAssigner

__all__ = [
    "AssignmentReport",
    "GRAPH_STREAM",
    "GraphBuilder",
    "MapGenerator",
    "NODES_STREAM",
    "NodeAssigner",
]
