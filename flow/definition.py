from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


# ============================================================================
# Base Configuration
# ============================================================================

class BaseConfig(BaseModel):
    """Base configuration with common settings"""
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )


# ============================================================================
# Step Definition
# ============================================================================

class StepDef(BaseConfig):
    """One gating step of a flow.

    ``flag`` makes the step ready while that flag is set in the flag store;
    ``ready`` pins the step's own condition to a constant. With neither, the
    step is ready as soon as its dependencies are.
    """
    id: str = Field(min_length=1)
    payload: str = Field(min_length=1)
    depends_on: List[str] = Field(default_factory=list)
    flag: Optional[str] = None
    flag_default: bool = False
    ready: Optional[bool] = None
    description: str = ""

    @model_validator(mode='after')
    def check_condition_source(self) -> 'StepDef':
        if self.flag is not None and self.ready is not None:
            raise ValueError(f"step '{self.id}': 'flag' and 'ready' are mutually exclusive")
        return self

    @property
    def has_condition(self) -> bool:
        return self.flag is not None or self.ready is not None


# ============================================================================
# Flow Definition
# ============================================================================

class FlowDef(BaseConfig):
    """A named flow: its steps in declaration order and the fallback destination"""
    name: str = "flow"
    default_destination: str = Field(min_length=1)
    steps: List[StepDef] = Field(default_factory=list)

    @field_validator('steps', mode='before')
    @classmethod
    def steps_from_mapping(cls, v: Any) -> Any:
        """Accept ``{step_id: {...}}`` as well as a list of steps"""
        if isinstance(v, dict):
            steps = []
            for step_id, cfg in v.items():
                cfg = dict(cfg or {})
                cfg.setdefault('id', step_id)
                cfg.setdefault('payload', step_id)
                steps.append(cfg)
            return steps
        return v

    @field_validator('steps')
    @classmethod
    def unique_step_ids(cls, steps: List[StepDef]) -> List[StepDef]:
        seen = set()
        for step in steps:
            if step.id in seen:
                raise ValueError(f"duplicate step id: {step.id}")
            seen.add(step.id)
        return steps

    def get_step(self, step_id: str) -> Optional[StepDef]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def flags(self) -> List[str]:
        """Flag names referenced by the steps, in declaration order"""
        names: Dict[str, None] = {}
        for step in self.steps:
            if step.flag:
                names[step.flag] = None
        return list(names)
