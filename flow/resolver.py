from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from dag import DagManager, DagNode, ReadinessSnapshot

from .api_models import FlowSnapshot, StepState, TransitionResult
from .builder import build_manager
from .conditions import FlagSource
from .definition import FlowDef

logger = logging.getLogger(__name__)


class FlowResolver:
    """Decides which gated step a consumer should show next.

    Holds no state of its own: every call recomputes from the graph and the
    conditions, so a consumer changes the outcome only by changing the flags
    the conditions read.
    """

    def __init__(self, manager: DagManager[str], default_destination: str) -> None:
        self.manager = manager
        self.default_destination = default_destination

    @classmethod
    def from_definition(cls, flow_def: FlowDef, store: Optional[FlagSource] = None,
                        strict: bool = False) -> "FlowResolver":
        return cls(build_manager(flow_def, store, strict=strict), flow_def.default_destination)

    # ------------------------------
    # Public APIs
    # ------------------------------
    def next_node(self) -> Optional[DagNode[str]]:
        """First step, in topological order, that still needs attention.

        A step whose own condition fails is returned as is. A step whose own
        condition holds but which has an unready dependency yields that
        dependency instead. When everything is ready the last step in
        topological order is the destination; ``None`` for an empty flow.
        """
        ordered = self.manager.topological_order()
        return self._pick_next(ordered, self.manager.readiness())

    def next_step(self) -> str:
        destination = self._destination_of(self.next_node())
        logger.debug(f"Next step: {destination}")
        return destination

    def can_reach(self, destination: str) -> bool:
        """True if every direct dependency of the step showing ``destination`` is ready.

        Readiness is recursive, so this also covers indirect dependencies.
        """
        target = self.find_by_payload(destination)
        if target is None:
            return False
        snapshot = self.manager.readiness(target.dependency_ids)
        return all(snapshot.ready.get(dep_id, False) for dep_id in target.dependency_ids)

    def navigate_next(self, navigate: Callable[[str], Any]) -> str:
        """Hand the next destination to the consumer's navigation callback"""
        destination = self.next_step()
        navigate(destination)
        return destination

    def report_transition(self, destination: str, source: Optional[str] = None) -> TransitionResult:
        """Record that the consumer moved to ``destination``.

        Advisory only: it logs, and reports whether the move agrees with
        the next step as computed for this call. Nothing is stored.
        """
        expected = self.next_step()
        matched = destination == expected
        if matched:
            logger.info(f"Transition {source or '?'} -> {destination}")
        else:
            logger.warning(f"Transition {source or '?'} -> {destination}, but next step is {expected}")
        return TransitionResult(destination=destination, expected=expected, matched=matched)

    def describe(self) -> FlowSnapshot:
        ordered = self.manager.topological_order()
        snapshot = self.manager.readiness()
        steps = [
            StepState(
                id=node.id,
                payload=node.data,
                depends_on=node.dependency_ids,
                condition_met=snapshot.condition_met[node.id],
                ready=snapshot.ready[node.id],
            )
            for node in self.manager.get_all_nodes()
        ]
        return FlowSnapshot(
            next_destination=self._destination_of(self._pick_next(ordered, snapshot)),
            default_destination=self.default_destination,
            order=[n.id for n in ordered],
            steps=steps,
        )

    def render_graph(self) -> str:
        return self.manager.render_graph()

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def find_by_payload(self, destination: str) -> Optional[DagNode[str]]:
        for node in self.manager.get_all_nodes():
            if node.data == destination:
                return node
        return None

    def _destination_of(self, node: Optional[DagNode[str]]) -> str:
        return node.data if node is not None else self.default_destination

    @staticmethod
    def _pick_next(ordered: List[DagNode[str]], snapshot: ReadinessSnapshot) -> Optional[DagNode[str]]:
        by_id = {n.id: n for n in ordered}
        for node in ordered:
            if not snapshot.condition_met[node.id]:
                return node

            for dep_id in node.dependency_ids:
                if not snapshot.ready[dep_id]:
                    return by_id[dep_id]

        return ordered[-1] if ordered else None
