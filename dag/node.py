from __future__ import annotations

import logging
from typing import (
    Callable, Dict, FrozenSet, Generic, Iterable, Iterator, List, Mapping, Optional, Set, Tuple, TypeVar, Union,
)

from .errors import FrozenNodeError
from .schema import ReadinessSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

Condition = Callable[[], bool]

READY_MARK = "✓"
NOT_READY_MARK = "✗"


class DagNode(Generic[T]):
    """A step in a flow: an id, a payload and the ids of the steps it waits on.

    Dependencies are stored by id and resolved against the owning graph's
    node mapping, so every query that walks the graph takes that mapping.
    Once a node is inserted into a ``DagManager`` its dependencies are frozen.
    """

    def __init__(
        self,
        id: str,
        data: T,
        dependencies: Iterable[Union["DagNode[T]", str]] = (),
        condition: Optional[Condition] = None,
    ) -> None:
        self.id = id
        self.data = data
        self.condition: Optional[Condition] = condition
        self._dependency_ids: Dict[str, None] = {}
        self._frozen = False
        for dep in dependencies:
            self.add_dependency(dep)

    @property
    def payload(self) -> T:
        return self.data

    @property
    def dependency_ids(self) -> List[str]:
        return list(self._dependency_ids)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_dependency(self, node: Union["DagNode[T]", str]) -> "DagNode[T]":
        if self._frozen:
            raise FrozenNodeError(self.id)
        dep_id = node if isinstance(node, str) else node.id
        self._dependency_ids[dep_id] = None
        return self

    def depends_on(self, *nodes: Union["DagNode[T]", str]) -> "DagNode[T]":
        for node in nodes:
            self.add_dependency(node)
        return self

    def when(self, check: Condition) -> "DagNode[T]":
        """Set the readiness condition."""
        self.condition = check
        return self

    def freeze(self) -> None:
        self._frozen = True

    def check_condition(self, strict: bool = False) -> bool:
        """Evaluate this node's own condition, ignoring its dependencies."""
        if self.condition is None:
            return True
        try:
            return bool(self.condition())
        except Exception:
            if strict:
                raise
            logger.exception(f"Condition of node '{self.id}' failed; treating it as not ready")
            return False

    def dependency_closure(self, nodes: Mapping[str, "DagNode[T]"]) -> Set[str]:
        """Ids of every direct and transitive dependency, unknown ids included."""
        closure: Set[str] = set()
        stack = list(self._dependency_ids)
        while stack:
            cur = stack.pop()
            if cur in closure:
                continue
            closure.add(cur)
            dep = nodes.get(cur)
            if dep is not None:
                stack.extend(dep._dependency_ids)
        return closure

    def is_dependent_on(self, other: Union["DagNode[T]", str], nodes: Mapping[str, "DagNode[T]"]) -> bool:
        """True if ``other`` is a direct or transitive dependency of this node."""
        target = other if isinstance(other, str) else other.id
        visited: Set[str] = set()
        stack = list(self._dependency_ids)
        while stack:
            cur = stack.pop()
            if cur == target:
                return True
            if cur in visited:
                continue
            visited.add(cur)
            dep = nodes.get(cur)
            if dep is not None:
                stack.extend(dep._dependency_ids)
        return False

    def is_ready(self, nodes: Mapping[str, "DagNode[T]"], strict: bool = False) -> bool:
        return evaluate_readiness(nodes, [self], strict).ready[self.id]

    def iter_subtree_lines(
        self,
        nodes: Mapping[str, "DagNode[T]"],
        indent: str = "",
        is_last: bool = True,
        visited: Optional[Set[str]] = None,
        strict: bool = False,
    ) -> Iterator[str]:
        # (node, or the id of a missing one; indent; is_last; ids of its ancestors)
        stack: List[Tuple[Union["DagNode[T]", str], str, bool, FrozenSet[str]]] = [
            (self, indent, is_last, frozenset(visited or ()))
        ]
        while stack:
            node, indent, is_last, ancestors = stack.pop()
            branch = "└── " if is_last else "├── "
            if isinstance(node, str):
                yield f"{indent}{branch}{node} (missing)"
                continue
            if node.id in ancestors:
                yield f"{indent}{branch}{node.id} (cycle)"
                continue

            mark = READY_MARK if node.check_condition(strict) else NOT_READY_MARK
            yield f"{indent}{branch}{node.id} ({node.data}) {mark}"

            # siblings only see the marks of their ancestors
            ancestors = ancestors | {node.id}
            child_indent = indent + ("    " if is_last else "│   ")
            dep_ids = list(node._dependency_ids)
            for index in reversed(range(len(dep_ids))):
                dep_id = dep_ids[index]
                stack.append((nodes.get(dep_id, dep_id), child_indent, index == len(dep_ids) - 1, ancestors))

    def render_subtree(
        self,
        nodes: Mapping[str, "DagNode[T]"],
        indent: str = "",
        is_last: bool = True,
        visited: Optional[Set[str]] = None,
        strict: bool = False,
    ) -> str:
        return "".join(line + "\n" for line in self.iter_subtree_lines(nodes, indent, is_last, visited, strict))

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, DagNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"DagNode(id={self.id!r}, data={self.data!r}, dependencies={self.dependency_ids!r})"


def evaluate_readiness(
    nodes: Mapping[str, DagNode[T]],
    start: Iterable[DagNode[T]],
    strict: bool = False,
) -> ReadinessSnapshot:
    """Readiness of ``start`` and everything they depend on, in one pass.

    Each condition is evaluated at most once and the walk is iterative, so
    long chains and stacked diamonds stay linear. Unknown ids are not ready;
    a node met again while still being walked (an injected cycle) is not
    ready either.
    """
    snapshot = ReadinessSnapshot()
    ready = snapshot.ready
    in_progress: Set[str] = set()

    for root in start:
        stack: List[Tuple[DagNode[T], bool]] = [(root, False)]
        while stack:
            node, expanded = stack.pop()
            if node.id in ready:
                continue
            if expanded:
                in_progress.discard(node.id)
                met = node.check_condition(strict)
                snapshot.condition_met[node.id] = met
                ready[node.id] = met and all(ready.get(d, False) for d in node._dependency_ids)
                continue
            if node.id in in_progress:
                continue
            in_progress.add(node.id)
            stack.append((node, True))
            for dep_id in node._dependency_ids:
                dep = nodes.get(dep_id)
                if dep is not None and dep_id not in ready and dep_id not in in_progress:
                    stack.append((dep, False))

    return snapshot
