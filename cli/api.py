from __future__ import annotations

from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse

from flow.api_models import (
    FlagsResponse, FlagUpdate, FlowSnapshot, GraphResponse, NextStepResponse,
    ReachResponse, TransitionReport, TransitionResult,
)
from flow.runtime import FlowRuntime, create_runtime


def create_app(runtime: Optional[FlowRuntime] = None) -> FastAPI:
    runtime = runtime or create_runtime()
    resolver = runtime.resolver
    store = runtime.store

    app = FastAPI(title="Gated Flow API")
    app.state.runtime = runtime

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    @app.get("/flow/next", response_model=NextStepResponse)
    def next_step() -> NextStepResponse:
        node = resolver.next_node()
        if node is None:
            return NextStepResponse(destination=resolver.default_destination)
        return NextStepResponse(destination=node.data, step_id=node.id)

    @app.get("/flow/can-reach/{destination}", response_model=ReachResponse)
    def can_reach(destination: str) -> ReachResponse:
        if resolver.find_by_payload(destination) is None:
            raise HTTPException(status_code=404, detail=f"unknown destination: {destination}")
        return ReachResponse(destination=destination, reachable=resolver.can_reach(destination))

    @app.get("/flow/graph", response_model=GraphResponse)
    def graph() -> GraphResponse:
        return GraphResponse(tree=resolver.render_graph(), snapshot=resolver.describe())

    @app.get("/flow", response_model=FlowSnapshot)
    def snapshot() -> FlowSnapshot:
        return resolver.describe()

    @app.post("/flow/transitions", response_model=TransitionResult)
    def report_transition(body: TransitionReport) -> TransitionResult:
        return resolver.report_transition(body.destination, source=body.source)

    @app.get("/flags", response_model=FlagsResponse)
    def list_flags() -> FlagsResponse:
        return FlagsResponse(flags=store.all())

    @app.put("/flags/{name}", response_model=NextStepResponse)
    def set_flag(name: str, body: FlagUpdate) -> NextStepResponse:
        store.set(name, body.value)
        return next_step()

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "flow": runtime.flow_def.name}

    return app


app = create_app()
