from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loaders.flow_loader import load_flow
from storage.flag_store import FlagStore

from .definition import FlowDef
from .onboarding import onboarding_flow
from .resolver import FlowResolver
from .settings import Settings


@dataclass
class FlowRuntime:
    flow_def: FlowDef
    store: FlagStore
    resolver: FlowResolver


def create_runtime(settings: Optional[Settings] = None, store: Optional[FlagStore] = None) -> FlowRuntime:
    """Load the configured flow, connect the flag store and build the resolver."""
    settings = settings or Settings.from_env()
    flow_def = load_flow(settings.flow_config) if settings.flow_config else onboarding_flow()
    if store is None:
        store = FlagStore(
            use_redis=settings.use_redis,
            redis_host=settings.redis_host,
            redis_port=settings.redis_port,
            redis_db=settings.redis_db,
        )
    resolver = FlowResolver.from_definition(flow_def, store, strict=settings.strict_conditions)
    return FlowRuntime(flow_def=flow_def, store=store, resolver=resolver)
