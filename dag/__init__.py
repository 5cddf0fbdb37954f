"""
DAG engine for gated flows: nodes, dependency checks, ordering and rendering
"""

from .node import DagNode, evaluate_readiness
from .manager import DagManager
from .errors import (
    DagError,
    CycleDetectedError,
    DuplicateNodeError,
    FrozenNodeError,
    DanglingDependencyError,
)
from .schema import CycleDetectionResult, ReadinessSnapshot, ValidationReport
from .toposort import kahn_toposort
from .validator import validate_graph, find_dangling
from .visualize import draw_flow

__all__ = [
    'DagNode', 'DagManager', 'evaluate_readiness',
    'DagError', 'CycleDetectedError', 'DuplicateNodeError', 'FrozenNodeError', 'DanglingDependencyError',
    'CycleDetectionResult', 'ReadinessSnapshot', 'ValidationReport',
    'kahn_toposort',
    'validate_graph', 'find_dangling',
    'draw_flow',
]
