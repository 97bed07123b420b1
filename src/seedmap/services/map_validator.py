"""Static structural validation for generated maps."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Set

from seedmap.domain.map_models import MapGraph


Severity = str


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def validate_map_graph(graph: MapGraph) -> list[Issue]:
    """Return every structural invariant the graph violates."""
    issues: list[Issue] = []
    _validate_endpoints(graph, issues)
    layer_of = _validate_layers(graph, issues)
    incoming = _validate_connections(graph, layer_of, issues)
    _validate_degrees(graph, incoming, issues)
    _validate_reachability(graph, issues)
    return issues


def _validate_endpoints(graph: MapGraph, issues: list[Issue]) -> None:
    start = graph.node(graph.start_node_id)
    if start is None or start.layer != 0 or start.type != "start":
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_START",
                message="Start node is missing or not a start room in layer 0.",
                context={"node_id": graph.start_node_id},
            )
        )
    boss = graph.node(graph.boss_node_id)
    if (
        boss is None
        or boss.type != "boss"
        or not graph.layers
        or tuple(graph.layers[-1]) != (graph.boss_node_id,)
    ):
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_BOSS",
                message="Boss node must sit alone in the final layer.",
                context={"node_id": graph.boss_node_id},
            )
        )


def _validate_layers(graph: MapGraph, issues: list[Issue]) -> Dict[str, int]:
    layer_of: Dict[str, int] = {}
    for layer_index, layer_ids in enumerate(graph.layers):
        for node_id in layer_ids:
            layer_of[node_id] = layer_index
            node = graph.node(node_id)
            if node is None or node.layer != layer_index:
                issues.append(
                    Issue(
                        severity="ERROR",
                        code="LAYER_MISMATCH",
                        message="Node is listed in a layer that does not match its own layer index.",
                        context={"node_id": node_id, "listed_layer": str(layer_index)},
                    )
                )
    for node_id in graph.nodes:
        if node_id not in layer_of:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="LAYER_MISMATCH",
                    message="Node is not listed in any layer.",
                    context={"node_id": node_id},
                )
            )
    return layer_of


def _validate_connections(
    graph: MapGraph, layer_of: Dict[str, int], issues: list[Issue]
) -> Dict[str, int]:
    incoming: Dict[str, int] = {node_id: 0 for node_id in graph.nodes}
    for node in graph.nodes.values():
        for target_id in node.connections:
            target = graph.node(target_id)
            if target is None:
                issues.append(
                    Issue(
                        severity="ERROR",
                        code="DANGLING_CONNECTION",
                        message="Connection references a missing node.",
                        context={"node_id": node.id, "referenced_id": target_id},
                    )
                )
                continue
            incoming[target_id] += 1
            if layer_of.get(target_id) != layer_of.get(node.id, -2) + 1:
                issues.append(
                    Issue(
                        severity="ERROR",
                        code="NON_ADJACENT_CONNECTION",
                        message="Connection does not point into the next layer.",
                        context={"node_id": node.id, "referenced_id": target_id},
                    )
                )
    return incoming


def _validate_degrees(graph: MapGraph, incoming: Dict[str, int], issues: list[Issue]) -> None:
    for node in graph.nodes.values():
        if node.id != graph.start_node_id and incoming.get(node.id, 0) == 0:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="ORPHAN_NODE",
                    message="Node has no incoming connection.",
                    context={"node_id": node.id},
                )
            )
        if node.id != graph.boss_node_id and not node.connections:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DEAD_END",
                    message="Node has no outgoing connection.",
                    context={"node_id": node.id},
                )
            )


def _validate_reachability(graph: MapGraph, issues: list[Issue]) -> None:
    if graph.node(graph.start_node_id) is None:
        return
    reachable: Set[str] = set()
    queue: List[str] = [graph.start_node_id]
    while queue:
        current = queue.pop()
        if current in reachable:
            continue
        reachable.add(current)
        node = graph.node(current)
        if node is None:
            continue
        queue.extend(target for target in node.connections if target not in reachable)
    for node_id in sorted(set(graph.nodes) - reachable):
        issues.append(
            Issue(
                severity="ERROR",
                code="UNREACHABLE_NODE",
                message="Node is unreachable from the start node.",
                context={"node_id": node_id},
            )
        )
