from __future__ import annotations

from typing import Dict, Iterable, List


class DagError(Exception):
    """Base class for structural errors raised by the DAG engine."""


class CycleDetectedError(DagError):
    """Adding a node, or ordering the graph, hit a dependency cycle."""

    def __init__(self, node_ids: Iterable[str], message: str = "") -> None:
        self.node_ids: List[str] = list(node_ids)
        if not message:
            message = f"Cycle detected, nodes involved: {', '.join(self.node_ids)}"
        super().__init__(message)


class DuplicateNodeError(DagError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' is already in the graph")


class FrozenNodeError(DagError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' belongs to a graph; its dependencies can no longer change")


class DanglingDependencyError(DagError):
    def __init__(self, missing: Dict[str, List[str]]) -> None:
        self.missing = missing
        details = "; ".join(f"{nid} -> {deps}" for nid, deps in missing.items())
        super().__init__(f"Unknown dependencies: {details}")
