"""Plain text report of unit dependencies with per-file provenance."""

from typing import List, Optional, Union

from depgraph.filters import ALLOW_ALL, UnitFilter
from depgraph.model import DependencyEdge, DependencyGraph
from depgraph.reconcile import ReconciledGraph


ARROW = " -> "
INDENT = "  "


def to_text(
    graph: Union[DependencyGraph, ReconciledGraph],
    unit_filter: Optional[UnitFilter] = None,
) -> str:
    """
    Convert a dependency graph (or reconciled overlay) to a text report.

    One block per allowed unit, in sorted order. For a graph, each dependency
    is a line ``A -> B`` followed by its provenance lines
    ``  <file><padding> -> <artifact>``, the arrows of a dependency aligned on
    its widest file name. A unit without printed dependencies is listed by
    name alone. Blocks are separated by a blank line.

    For an overlay, each dependency line carries its origin, e.g.
    ``A -> B [regex]``.

    Args:
        graph: The graph or overlay to export.
        unit_filter: Units to include; all when None.

    Returns:
        Text report.
    """
    if unit_filter is None:
        unit_filter = ALLOW_ALL

    lines: List[str] = []
    for unit in sorted(graph.units):
        if not unit_filter.allows(unit):
            continue

        if isinstance(graph, ReconciledGraph):
            block = _overlay_block(graph, unit, unit_filter)
        else:
            block = _graph_block(graph, unit, unit_filter)

        lines.extend(block if block else [unit])
        lines.append("")

    return "\n".join(lines) + ("\n" if lines else "")


def _graph_block(graph: DependencyGraph, unit: str, unit_filter: UnitFilter) -> List[str]:
    lines: List[str] = []
    for target in sorted(graph.get_targets(unit)):
        if not unit_filter.allows(target):
            continue
        edge = graph.get_edge(unit, target)
        lines.append(f"{unit}{ARROW}{target}")
        lines.extend(format_provenance(edge))
    return lines


def _overlay_block(overlay: ReconciledGraph, unit: str, unit_filter: UnitFilter) -> List[str]:
    targets = overlay.get_targets(unit)
    return [
        f"{unit}{ARROW}{target} [{targets[target].value}]"
        for target in sorted(targets)
        if unit_filter.allows(target)
    ]


def format_provenance(edge: DependencyEdge) -> List[str]:
    """Provenance lines of an edge, arrows aligned on the widest file name."""
    pairs = list(edge.iter_provenance())
    if not pairs:
        return []
    width = max(len(source_name) for source_name, _ in pairs)
    return [
        f"{INDENT}{source_name.ljust(width)}{ARROW}{artifact}"
        for source_name, artifact in pairs
    ]
