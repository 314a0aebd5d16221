"""Overlay of two dependency graphs computed with different extraction strategies."""

from enum import Enum
from typing import Dict, Iterator, Set, Tuple

from .model import DependencyGraph


class EdgeOrigin(Enum):
    """Which strategy found an edge."""

    REGEX = "regex"
    STRUCTURAL = "structural"
    BOTH = "both"


class ReconciledGraph:
    """
    Edges of a regex graph and a structural graph, each tagged by origin.

    Diagnostic only: neither input graph is modified.
    """

    def __init__(self, units: Set[str], origins: Dict[Tuple[str, str], EdgeOrigin]):
        self._units = set(units)
        self._origins = dict(origins)

    @property
    def units(self) -> Set[str]:
        return set(self._units)

    @property
    def origins(self) -> Dict[Tuple[str, str], EdgeOrigin]:
        return dict(self._origins)

    def origin(self, source: str, target: str) -> EdgeOrigin:
        """
        Return the origin of edge source -> target.

        Raises:
            KeyError: If neither graph has the edge.
        """
        return self._origins[(source, target)]

    def iter_edges(self) -> Iterator[Tuple[str, str, EdgeOrigin]]:
        """Iterate over (source, target, origin), ordered by source then target."""
        for source, target in sorted(self._origins):
            yield source, target, self._origins[(source, target)]

    def get_targets(self, source: str) -> Dict[str, EdgeOrigin]:
        """Targets of ``source`` with the origin of each edge."""
        return {t: o for (s, t), o in self._origins.items() if s == source}

    def count(self, origin: EdgeOrigin) -> int:
        return sum(1 for o in self._origins.values() if o is origin)

    def __len__(self) -> int:
        return len(self._origins)

    def __repr__(self) -> str:
        return (
            f"ReconciledGraph(units={len(self._units)}, regex={self.count(EdgeOrigin.REGEX)}, "
            f"structural={self.count(EdgeOrigin.STRUCTURAL)}, both={self.count(EdgeOrigin.BOTH)})"
        )


def reconcile(regex_graph: DependencyGraph, structural_graph: DependencyGraph) -> ReconciledGraph:
    """
    Classify every present edge of either graph as regex-only,
    structural-only, or found by both.
    """
    regex_edges = regex_graph.edge_pairs()
    structural_edges = structural_graph.edge_pairs()

    origins: Dict[Tuple[str, str], EdgeOrigin] = {}
    for pair in regex_edges | structural_edges:
        if pair in regex_edges and pair in structural_edges:
            origins[pair] = EdgeOrigin.BOTH
        elif pair in regex_edges:
            origins[pair] = EdgeOrigin.REGEX
        else:
            origins[pair] = EdgeOrigin.STRUCTURAL

    return ReconciledGraph(regex_graph.units | structural_graph.units, origins)
