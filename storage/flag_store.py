from typing import Dict, Optional
import logging

import redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "flag:"

TRUE_TOKENS = ("1", "true", "yes", "y", "on")
FALSE_TOKENS = ("0", "false", "no", "n", "off")


def parse_bool(raw: Optional[str], default: Optional[bool] = None) -> bool:
    """Read a boolean token (``1``/``0``, ``true``/``false``, ``yes``/``no``, ``on``/``off``).

    ``None`` reads as ``default``. Unknown tokens raise ``ValueError``, as does
    ``None`` without a default.
    """
    if raw is None:
        if default is None:
            raise ValueError("missing boolean value")
        return default
    token = raw.strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


class FlagStore:
    """Boolean flag store backing the flow's readiness conditions"""

    def __init__(self, use_redis: bool = False, redis_host: str = 'localhost',
                 redis_port: int = 6379, redis_db: int = 0,
                 client: Optional[redis.Redis] = None):
        self.use_redis = use_redis or client is not None
        self.redis_client: Optional[redis.Redis] = client

        if self.use_redis and self.redis_client is None:
            try:
                self.redis_client = redis.Redis(
                    host=redis_host,
                    port=redis_port,
                    db=redis_db,
                    decode_responses=True
                )
                self.redis_client.ping()
                logger.info("Connected to Redis for flag storage")
            except redis.RedisError as e:
                logger.warning(f"Redis connection failed: {e}, falling back to in-memory storage")
                self.use_redis = False
                self.redis_client = None

        self.memory_store: Dict[str, bool] = {}
        if not self.use_redis:
            logger.info("Using in-memory storage for flags")

    def get(self, name: str, default: bool = False) -> bool:
        """Read a flag; unknown flags read as ``default``"""
        if self.use_redis and self.redis_client is not None:
            return parse_bool(self.redis_client.get(f"{KEY_PREFIX}{name}"), default)
        return self.memory_store.get(name, default)

    def set(self, name: str, value: bool) -> None:
        value = bool(value)
        if self.use_redis and self.redis_client is not None:
            self.redis_client.set(f"{KEY_PREFIX}{name}", "1" if value else "0")
        else:
            self.memory_store[name] = value
        logger.debug(f"Flag '{name}' set to {value}")

    def delete(self, name: str) -> None:
        if self.use_redis and self.redis_client is not None:
            self.redis_client.delete(f"{KEY_PREFIX}{name}")
        else:
            self.memory_store.pop(name, None)
        logger.debug(f"Flag '{name}' deleted")

    def all(self) -> Dict[str, bool]:
        """Snapshot of every stored flag"""
        if self.use_redis and self.redis_client is not None:
            flags: Dict[str, bool] = {}
            for key in self.redis_client.scan_iter(match=f"{KEY_PREFIX}*"):
                flags[key[len(KEY_PREFIX):]] = parse_bool(self.redis_client.get(key), False)
            return flags
        return dict(self.memory_store)

    def clear(self) -> int:
        """Remove every flag, returning how many were removed"""
        if self.use_redis and self.redis_client is not None:
            keys = list(self.redis_client.scan_iter(match=f"{KEY_PREFIX}*"))
            if keys:
                self.redis_client.delete(*keys)
            count = len(keys)
        else:
            count = len(self.memory_store)
            self.memory_store.clear()
        if count:
            logger.info(f"Cleared {count} flags")
        return count
