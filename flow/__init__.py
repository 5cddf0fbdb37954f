from __future__ import annotations

from .definition import StepDef, FlowDef
from .conditions import flag_condition, constant_condition
from .builder import build_manager, build_node
from .resolver import FlowResolver
from .settings import Settings
from .api_models import FlowSnapshot, StepState

__all__ = [
    'StepDef', 'FlowDef',
    'flag_condition', 'constant_condition',
    'build_manager', 'build_node',
    'FlowResolver',
    'Settings',
    'FlowSnapshot', 'StepState',
]
