"""Graphviz DOT exporter for dependency graphs and reconciled overlays."""

from typing import List, Optional, Union

from depgraph.filters import ALLOW_ALL, UnitFilter
from depgraph.model import DependencyGraph
from depgraph.reconcile import EdgeOrigin, ReconciledGraph


ORIGIN_COLORS = {
    EdgeOrigin.REGEX: "blue",
    EdgeOrigin.STRUCTURAL: "green",
    EdgeOrigin.BOTH: "red",
}


def to_dot(
    graph: Union[DependencyGraph, ReconciledGraph],
    unit_filter: Optional[UnitFilter] = None,
    name: str = "cars",
) -> str:
    """
    Convert a graph or overlay to DOT.

    Every allowed unit becomes a node, including units without dependencies.
    Edges are kept when both endpoints are allowed. Overlay edges are colored
    by origin: blue for regex only, green for structural only, red for both.

    Args:
        graph: The graph or overlay to export.
        unit_filter: Units to include; all when None.
        name: Graph name.

    Returns:
        DOT source.
    """
    if unit_filter is None:
        unit_filter = ALLOW_ALL

    lines: List[str] = [f"digraph {_quote(name)} {{"]

    for unit in sorted(graph.units):
        if unit_filter.allows(unit):
            lines.append(f"    {_quote(unit)};")

    if isinstance(graph, ReconciledGraph):
        for source, target, origin in graph.iter_edges():
            if unit_filter.allows_edge(source, target):
                lines.append(
                    f"    {_quote(source)} -> {_quote(target)} [color={ORIGIN_COLORS[origin]}];"
                )
    else:
        for edge in graph.iter_edges():
            if unit_filter.allows_edge(edge.source, edge.target):
                lines.append(f"    {_quote(edge.source)} -> {_quote(edge.target)};")

    lines.append("}")
    return "\n".join(lines) + "\n"


def _quote(value: str) -> str:
    """Quote a DOT identifier."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
