from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class CycleDetectionResult:
    success: bool
    order: List[str]
    cyclic_nodes: List[str]


@dataclass
class ValidationReport:
    ok: bool
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    start_nodes: List[str] = field(default_factory=list)
    end_nodes: List[str] = field(default_factory=list)
    isolated_nodes: List[str] = field(default_factory=list)
    unreachable_nodes: List[str] = field(default_factory=list)
    dangling: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class ReadinessSnapshot:
    """Per-node readiness computed in a single pass."""
    condition_met: Dict[str, bool] = field(default_factory=dict)
    ready: Dict[str, bool] = field(default_factory=dict)
