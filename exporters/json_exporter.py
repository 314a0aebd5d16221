"""JSON exporter for dependency graphs (machine-friendly format)."""

import json
from typing import Any, Dict, List, Optional, Union

from depgraph.filters import ALLOW_ALL, UnitFilter
from depgraph.model import DependencyGraph
from depgraph.reconcile import ReconciledGraph


def to_json(
    graph: Union[DependencyGraph, ReconciledGraph],
    unit_filter: Optional[UnitFilter] = None,
    indent: int = 2,
) -> str:
    """
    Convert a graph or overlay to JSON.

    Graph edges carry their provenance as ``files``: file name to sorted
    artifact names. Overlay edges carry their ``origin`` instead.

    Args:
        graph: The graph or overlay to export.
        unit_filter: Units to include; all when None.
        indent: JSON indentation level.

    Returns:
        JSON string representation of the graph.
    """
    return json.dumps(graph_to_dict(graph, unit_filter), indent=indent)


def to_json_sections(
    sections: Dict[str, Union[DependencyGraph, ReconciledGraph]],
    unit_filter: Optional[UnitFilter] = None,
    indent: int = 2,
) -> str:
    """Convert several named graphs to one JSON object keyed by name."""
    data = {name: graph_to_dict(graph, unit_filter) for name, graph in sections.items()}
    return json.dumps(data, indent=indent)


def graph_to_dict(
    graph: Union[DependencyGraph, ReconciledGraph],
    unit_filter: Optional[UnitFilter] = None,
) -> Dict[str, Any]:
    """Build the JSON-ready ``units`` and ``edges`` of a graph or overlay."""
    if unit_filter is None:
        unit_filter = ALLOW_ALL

    units: List[str] = [unit for unit in sorted(graph.units) if unit_filter.allows(unit)]

    edges: List[Dict[str, Any]] = []
    if isinstance(graph, ReconciledGraph):
        for source, target, origin in graph.iter_edges():
            if unit_filter.allows_edge(source, target):
                edges.append({"source": source, "target": target, "origin": origin.value})
    else:
        for edge in graph.iter_edges():
            if unit_filter.allows_edge(edge.source, edge.target):
                files = {name: sorted(artifacts) for name, artifacts in sorted(edge.provenance.items())}
                edges.append({"source": edge.source, "target": edge.target, "files": files})

    return {
        "units": units,
        "edges": edges,
    }
