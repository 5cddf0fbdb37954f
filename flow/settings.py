from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from storage.flag_store import parse_bool


def _env_flag(name: str, default: bool = False) -> bool:
    return parse_bool(os.getenv(name) or None, default)


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and a ``.env`` file).

    Attributes:
        flow_config: JSON flow definition; the built-in onboarding flow when unset.
        use_redis: Keep flags in Redis instead of memory.
        strict_conditions: Propagate condition errors instead of treating the step as not ready.
        log_level: Root log level name.
        log_file: Optional log file path.
    """

    flow_config: Optional[str] = None
    use_redis: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    strict_conditions: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            flow_config=os.getenv("FLOW_CONFIG") or None,
            use_redis=_env_flag("USE_REDIS"),
            redis_host=os.getenv("REDIS_HOST", "localhost"),
            redis_port=int(os.getenv("REDIS_PORT", "6379")),
            redis_db=int(os.getenv("REDIS_DB", "0")),
            strict_conditions=_env_flag("FLOW_STRICT_CONDITIONS"),
            log_level=os.getenv("FLOW_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("FLOW_LOG_FILE") or None,
        )
