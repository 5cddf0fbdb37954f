import json
import os
from typing import Any, Dict
import logging

from flow.definition import FlowDef

logger = logging.getLogger(__name__)


def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class FlowLoader:
    """Loads flow definitions from JSON files"""

    def load_from_file(self, file_path: str) -> FlowDef:
        """Load and validate a flow definition.

        Raises FileNotFoundError, json.JSONDecodeError or pydantic's
        ValidationError; callers decide how fatal that is.
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Flow configuration file not found: {file_path}")

        raw = load_json(file_path)
        if not isinstance(raw, dict) or not raw:
            raise ValueError(f"Flow configuration is empty or not a JSON object: {file_path}")

        flow_def = FlowDef.model_validate(raw)
        logger.info(f"Loaded flow '{flow_def.name}' ({len(flow_def.steps)} steps) from {file_path}")
        return flow_def

    def load_from_dict(self, raw: Dict[str, Any]) -> FlowDef:
        return FlowDef.model_validate(raw)


def load_flow(file_path: str) -> FlowDef:
    """Convenience function to load a flow definition"""
    return FlowLoader().load_from_file(file_path)
