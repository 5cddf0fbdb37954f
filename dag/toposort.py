from __future__ import annotations

from collections import deque
from typing import Dict, List

import networkx as nx

from .schema import CycleDetectionResult


def kahn_toposort(g: nx.DiGraph) -> CycleDetectionResult:
    """Kahn's algorithm over a dependency -> dependent graph.

    Ties are broken by node insertion order: the queue is seeded in
    ``g.nodes`` order and each node's dependents are visited in the order
    their edges were added.
    """
    in_deg: Dict[str, int] = dict(g.in_degree())

    q: deque[str] = deque(n for n, d in in_deg.items() if d == 0)
    order: List[str] = []
    local = dict(in_deg)

    while q:
        cur = q.popleft()
        order.append(cur)
        for dependent in g.successors(cur):
            local[dependent] -= 1
            if local[dependent] == 0:
                q.append(dependent)

    success = len(order) == g.number_of_nodes()
    done = set(order)
    cyclic_nodes = [] if success else [n for n in g.nodes() if n not in done]
    return CycleDetectionResult(
        success=success,
        order=order,
        cyclic_nodes=cyclic_nodes,
    )
