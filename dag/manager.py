from __future__ import annotations

import logging
from typing import Dict, Generic, Iterable, Iterator, List, Optional, TypeVar

import networkx as nx

from .errors import CycleDetectedError, DanglingDependencyError, DuplicateNodeError
from .node import DagNode, evaluate_readiness
from .schema import ReadinessSnapshot, ValidationReport
from .toposort import kahn_toposort
from .validator import find_dangling, validate_graph

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DagManager(Generic[T]):
    """Owns the nodes of one flow and keeps them acyclic.

    Nodes are kept in insertion order; that order is the tie-break for the
    topological sort and the order terminal nodes are rendered in. The graph
    is append-only: nodes cannot be removed and an inserted node's
    dependencies are frozen.

    Example:
        >>> dag = DagManager()
        >>> privacy = DagNode("privacy", "privacy_policy")
        >>> login = DagNode("login", "login").depends_on(privacy)
        >>> dag.add_nodes(privacy, login)
        >>> [n.id for n in dag.topological_order()]
        ['privacy', 'login']
    """

    def __init__(self, strict: bool = False) -> None:
        self._nodes: Dict[str, DagNode[T]] = {}
        self.strict = strict

    # ------------------------------
    # Construction
    # ------------------------------
    def add_node(self, node: DagNode[T]) -> "DagManager[T]":
        """Insert a node, rejecting it if it would close a cycle.

        Raises:
            DuplicateNodeError: A node with the same id is already present.
            CycleDetectedError: The node depends on itself, or on a node that
                in turn depends on it.
        """
        if node.id in self._nodes:
            logger.warning(f"Rejected node '{node.id}': duplicate id")
            raise DuplicateNodeError(node.id)

        if node.id in node.dependency_ids:
            logger.warning(f"Rejected node '{node.id}': depends on itself")
            raise CycleDetectedError([node.id], f"Adding node '{node.id}' would create a cycle: it depends on itself")

        # a new cycle has to come back to this node through something it depends on
        upstream = node.dependency_closure(self._nodes)
        if node.id in upstream:
            for existing in self._nodes.values():
                if existing.id in upstream and existing.is_dependent_on(node, self._nodes):
                    logger.warning(f"Rejected node '{node.id}': cycle through '{existing.id}'")
                    raise CycleDetectedError(
                        [node.id, existing.id],
                        f"Adding node '{node.id}' would create a cycle through '{existing.id}'",
                    )

        node.freeze()
        self._nodes[node.id] = node
        logger.debug(f"Added node '{node.id}' (depends on {node.dependency_ids})")
        return self

    def add_nodes(self, *nodes: DagNode[T]) -> "DagManager[T]":
        for node in nodes:
            self.add_node(node)
        return self

    def __iadd__(self, node: DagNode[T]) -> "DagManager[T]":
        return self.add_node(node)

    # ------------------------------
    # Queries
    # ------------------------------
    def get_node(self, node_id: str) -> Optional[DagNode[T]]:
        return self._nodes.get(node_id)

    def get_all_nodes(self) -> List[DagNode[T]]:
        return list(self._nodes.values())

    def get_dependencies(self, node_id: str) -> List[DagNode[T]]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._nodes[d] for d in node.dependency_ids if d in self._nodes]

    def get_dependents(self, node_id: str) -> List[DagNode[T]]:
        if node_id not in self._nodes:
            return []
        return [n for n in self._nodes.values() if node_id in n.dependency_ids]

    def is_dependent_on(self, node_id: str, other_id: str) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        return node.is_dependent_on(other_id, self._nodes)

    def is_ready(self, node_id: str) -> bool:
        if node_id not in self._nodes:
            return False
        return self.readiness([node_id]).ready[node_id]

    def readiness(self, node_ids: Optional[Iterable[str]] = None) -> ReadinessSnapshot:
        """Condition and readiness of the given nodes (default: all) and their dependencies.

        Every condition involved is evaluated once, so callers that need
        several answers should take one snapshot rather than ask per node.
        """
        if node_ids is None:
            start = list(self._nodes.values())
        else:
            start = [self._nodes[i] for i in node_ids if i in self._nodes]
        return evaluate_readiness(self._nodes, start, self.strict)

    def check_condition(self, node_id: str) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        return node.check_condition(self.strict)

    def terminal_nodes(self) -> List[DagNode[T]]:
        """Nodes nobody depends on, in insertion order."""
        depended_on = {d for n in self._nodes.values() for d in n.dependency_ids}
        return [n for n in self._nodes.values() if n.id not in depended_on]

    def root_nodes(self) -> List[DagNode[T]]:
        """Nodes without dependencies, in insertion order."""
        return [n for n in self._nodes.values() if not n.dependency_ids]

    # ------------------------------
    # Ordering and validation
    # ------------------------------
    def to_networkx(self, with_readiness: bool = False) -> nx.DiGraph:
        """Export as a DiGraph with edges pointing from dependency to dependent."""
        g: nx.DiGraph = nx.DiGraph()

        snapshot = self.readiness() if with_readiness else None

        # nodes first, so node order stays insertion order
        for node in self._nodes.values():
            attrs = {"payload": node.data}
            if snapshot is not None:
                attrs["condition_met"] = snapshot.condition_met[node.id]
                attrs["ready"] = snapshot.ready[node.id]
            g.add_node(node.id, **attrs)

        for node in self._nodes.values():
            for dep_id in node.dependency_ids:
                if dep_id in self._nodes:
                    g.add_edge(dep_id, node.id)

        return g

    def topological_order(self) -> List[DagNode[T]]:
        """Nodes ordered so every node comes after all of its dependencies.

        Raises:
            DanglingDependencyError: A node depends on an id not in the graph.
            CycleDetectedError: Names every node the sort could not consume.
        """
        dangling = find_dangling(self)
        if dangling:
            raise DanglingDependencyError(dangling)

        result = kahn_toposort(self.to_networkx())
        if not result.success:
            raise CycleDetectedError(
                result.cyclic_nodes,
                f"Cycle detected, nodes involved in a cycle: {', '.join(result.cyclic_nodes)}",
            )
        return [self._nodes[node_id] for node_id in result.order]

    def validate(self) -> ValidationReport:
        """Full re-verification of the whole graph."""
        return validate_graph(self)

    # ------------------------------
    # Rendering
    # ------------------------------
    def render_graph(self) -> str:
        lines = ["DAG dependency tree:"]
        terminals = self.terminal_nodes()
        for index, node in enumerate(terminals):
            lines.extend(
                node.iter_subtree_lines(self._nodes, is_last=index == len(terminals) - 1, strict=self.strict)
            )
        return "\n".join(lines) + "\n"

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[DagNode[T]]:
        return iter(list(self._nodes.values()))
