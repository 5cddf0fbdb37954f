from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Set

import networkx as nx

from .schema import ValidationReport
from .toposort import kahn_toposort

if TYPE_CHECKING:
    from .manager import DagManager


def find_dangling(manager: "DagManager") -> Dict[str, List[str]]:
    """Map node id -> dependency ids that are not in the graph."""
    missing: Dict[str, List[str]] = {}
    for node in manager.get_all_nodes():
        unknown = [d for d in node.dependency_ids if d not in manager]
        if unknown:
            missing[node.id] = unknown
    return missing


def validate_graph(manager: "DagManager") -> ValidationReport:
    warnings: List[str] = []
    errors: List[str] = []

    g = manager.to_networkx()
    if g.number_of_nodes() == 0:
        warnings.append("Graph is empty.")
        return ValidationReport(ok=True, warnings=warnings)

    dangling = find_dangling(manager)
    for node_id, deps in dangling.items():
        errors.append(f"Node '{node_id}' depends on unknown nodes: {deps}")

    topos = kahn_toposort(g)
    if not topos.success:
        errors.append(f"Cycle detected, nodes involved in a cycle: {topos.cyclic_nodes}")

    start_nodes = [n.id for n in manager.root_nodes()]
    end_nodes = [n.id for n in manager.terminal_nodes()]

    if not start_nodes:
        errors.append("No start node (node without dependencies).")

    if len(end_nodes) > 1:
        warnings.append(f"Several terminal nodes: {end_nodes}")

    isolated: List[str] = []
    if g.number_of_nodes() > 1:
        isolated = [n for n in g.nodes() if g.in_degree(n) == 0 and g.out_degree(n) == 0]
        if isolated:
            warnings.append(f"Isolated nodes: {sorted(isolated)}")

    # a node is unreachable when no start node leads to it
    unreachable: List[str] = []
    if start_nodes:
        reachable = _reachable_from(g, start_nodes)
        unreachable = [n for n in g.nodes() if n not in reachable]
        if unreachable:
            warnings.append(f"Not reachable from any start node: {sorted(unreachable)}")

    return ValidationReport(
        ok=not errors,
        warnings=warnings,
        errors=errors,
        start_nodes=start_nodes,
        end_nodes=end_nodes,
        isolated_nodes=isolated,
        unreachable_nodes=unreachable,
        dangling=dangling,
    )


def _reachable_from(g: nx.DiGraph, starts: Iterable[str]) -> Set[str]:
    visited: Set[str] = set()
    stack = list(starts)
    while stack:
        cur = stack.pop()
        if cur in visited:
            continue
        visited.add(cur)
        for nb in g.successors(cur):
            if nb not in visited:
                stack.append(nb)
    return visited
