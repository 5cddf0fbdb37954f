from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class StepState(BaseModel):
    id: str
    payload: str
    depends_on: List[str] = Field(default_factory=list)
    condition_met: bool
    ready: bool


class FlowSnapshot(BaseModel):
    next_destination: str
    default_destination: str
    order: List[str] = Field(default_factory=list)
    steps: List[StepState] = Field(default_factory=list)


class NextStepResponse(BaseModel):
    destination: str
    step_id: Optional[str] = None


class ReachResponse(BaseModel):
    destination: str
    reachable: bool


class GraphResponse(BaseModel):
    tree: str
    snapshot: FlowSnapshot


class FlagUpdate(BaseModel):
    value: bool


class FlagsResponse(BaseModel):
    flags: Dict[str, bool] = Field(default_factory=dict)


class TransitionReport(BaseModel):
    destination: str
    source: Optional[str] = None


class TransitionResult(BaseModel):
    destination: str
    expected: str
    matched: bool
