from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Tuple

import networkx as nx

if TYPE_CHECKING:
    from .manager import DagManager

logger = logging.getLogger(__name__)

# readiness state -> color
COLOR_MAP: Dict[str, str] = {
    "ready": "#90EE90",
    "blocked": "#F0E68C",
    "not_ready": "#FF6B6B",
}


def _try_graphviz_layout(g: nx.DiGraph) -> Dict[str, Tuple[float, float]]:
    try:
        from networkx.drawing.nx_agraph import graphviz_layout  # type: ignore
        return graphviz_layout(g, prog="dot")
    except Exception:
        try:
            from networkx.drawing.nx_pydot import graphviz_layout  # type: ignore
            return graphviz_layout(g, prog="dot")
        except Exception:
            return {}


def _generation_layout(g: nx.DiGraph) -> Dict[str, Tuple[float, float]]:
    """One column per topological generation, left to right."""
    try:
        generations: List[List[str]] = [list(gen) for gen in nx.topological_generations(g)]
    except nx.NetworkXUnfeasible:
        return {}

    pos: Dict[str, Tuple[float, float]] = {}
    col_gap = 3.0
    row_gap = 1.5
    for col, nodes in enumerate(generations):
        offset = (len(nodes) - 1) * row_gap / 2.0
        for i, n in enumerate(nodes):
            pos[n] = (col * col_gap, -offset + i * row_gap)
    return pos


def readiness_state(attrs: Dict[str, object]) -> str:
    if attrs.get("ready"):
        return "ready"
    if attrs.get("condition_met"):
        return "blocked"
    return "not_ready"


def draw_flow(manager: "DagManager", save_path: str) -> bool:
    """Draw the flow as a PNG, coloring each node by its current readiness.

    Returns False when matplotlib is not installed.
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.patches import Patch
    except ImportError:
        logger.warning("matplotlib is not installed; skipping visualization")
        return False

    g = manager.to_networkx(with_readiness=True)

    pos = _try_graphviz_layout(g)
    if not pos:
        pos = _generation_layout(g)
    if not pos:
        pos = nx.spring_layout(g, seed=42, k=0.7)

    labels = {n: f"{n}\n({a.get('payload')})" for n, a in g.nodes(data=True)}
    colors = [COLOR_MAP[readiness_state(a)] for _, a in g.nodes(data=True)]

    plt.figure(figsize=(12, 7))
    nx.draw_networkx_nodes(
        g,
        pos,
        node_color=colors,
        node_size=2600,
        edgecolors="#444444",
        linewidths=2,
    )
    nx.draw_networkx_edges(
        g,
        pos,
        arrows=True,
        arrowstyle="-|>",
        arrowsize=22,
        width=2.6,
        edge_color="#555555",
        connectionstyle="arc3,rad=0.06",
        node_size=2600,
    )
    nx.draw_networkx_labels(g, pos, labels=labels, font_size=10, font_weight="bold", font_color="#111111")

    handles = [Patch(facecolor=col, edgecolor="#444444", label=state) for state, col in COLOR_MAP.items()]
    plt.legend(handles=handles, title="Readiness", loc="lower left", bbox_to_anchor=(1.02, 0), borderaxespad=0.0)

    plt.axis("off")
    plt.tight_layout()
    plt.savefig(save_path, dpi=200, bbox_inches="tight", facecolor="white", edgecolor="none")
    plt.close()
    logger.info(f"Flow graph drawn to {save_path}")
    return True
