from __future__ import annotations

import logging
from typing import Optional

from dag import DagManager, DagNode

from .conditions import FlagSource, constant_condition, flag_condition
from .definition import FlowDef, StepDef

logger = logging.getLogger(__name__)


def build_node(step: StepDef, store: Optional[FlagSource]) -> DagNode[str]:
    node: DagNode[str] = DagNode(step.id, step.payload, dependencies=step.depends_on)
    if step.flag is not None:
        if store is None:
            raise ValueError(f"step '{step.id}' reads flag '{step.flag}' but no flag store was given")
        node.when(flag_condition(store, step.flag, step.flag_default))
    elif step.ready is not None:
        node.when(constant_condition(step.ready))
    return node


def build_manager(flow_def: FlowDef, store: Optional[FlagSource] = None, strict: bool = False) -> DagManager[str]:
    """Build the flow's DAG, inserting steps in declaration order.

    Raises:
        dag.CycleDetectedError: The steps' dependencies form a cycle.
        dag.DanglingDependencyError: A step depends on an undeclared step.
    """
    manager: DagManager[str] = DagManager(strict=strict)
    for step in flow_def.steps:
        manager.add_node(build_node(step, store))

    # full pass: ordering fails fast on unknown dependencies
    manager.topological_order()

    logger.info(f"Built flow '{flow_def.name}' with {len(manager)} steps")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(manager.render_graph())
    return manager
