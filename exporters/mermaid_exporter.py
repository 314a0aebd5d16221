"""Mermaid flowchart exporter for dependency graphs."""

import re
from typing import Dict, List, Optional, Union

from depgraph.filters import ALLOW_ALL, UnitFilter
from depgraph.model import DependencyGraph
from depgraph.reconcile import ReconciledGraph
from .dot_exporter import ORIGIN_COLORS


def to_mermaid(
    graph: Union[DependencyGraph, ReconciledGraph],
    unit_filter: Optional[UnitFilter] = None,
    orientation: str = "LR",
) -> str:
    """
    Convert a graph or overlay to Mermaid flowchart syntax.

    Args:
        graph: The graph or overlay to export.
        unit_filter: Units to include; all when None.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).

    Returns:
        Mermaid flowchart string.
    """
    if unit_filter is None:
        unit_filter = ALLOW_ALL

    lines = [f"flowchart {orientation}"]

    node_ids: Dict[str, str] = {}
    for unit in sorted(graph.units):
        if unit_filter.allows(unit):
            node_ids[unit] = _unique_id(unit, node_ids)
            lines.append(f'    {node_ids[unit]}["{_label(unit)}"]')

    lines.append("")
    link_styles: List[str] = []
    if isinstance(graph, ReconciledGraph):
        for source, target, origin in graph.iter_edges():
            if source in node_ids and target in node_ids:
                link_styles.append(
                    f"    linkStyle {len(link_styles)} stroke:{ORIGIN_COLORS[origin]}"
                )
                lines.append(f"    {node_ids[source]} -->|{origin.value}| {node_ids[target]}")
    else:
        for edge in graph.iter_edges():
            if edge.source in node_ids and edge.target in node_ids:
                lines.append(f"    {node_ids[edge.source]} --> {node_ids[edge.target]}")

    if link_styles:
        lines.append("")
        lines.extend(link_styles)

    return "\n".join(lines)


def _unique_id(unit: str, taken: Dict[str, str]) -> str:
    """Sanitize a unit name into a Mermaid ID not used by another unit."""
    base = _sanitize_id(unit)
    used = set(taken.values())
    candidate = base
    suffix = 1
    while candidate in used:
        suffix += 1
        candidate = f"{base}_{suffix}"
    return candidate


def _label(value: str) -> str:
    """Escape a unit name for a quoted Mermaid label."""
    return value.replace('"', "#quot;")


def _sanitize_id(value: str) -> str:
    """Sanitize a string to be a valid Mermaid ID."""
    # Replace separators and dots with underscores
    sanitized = re.sub(r"[/\\.\-]", "_", value)
    # Remove any remaining invalid characters
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    # Ensure it starts with a letter
    if sanitized and not sanitized[0].isalpha():
        sanitized = "n_" + sanitized
    return sanitized or "unknown"
