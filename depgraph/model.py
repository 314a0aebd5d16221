"""Graph data model for unit-to-unit dependencies with artifact provenance."""

from typing import Dict, Iterable, Iterator, Optional, Set, Tuple


class DependencyEdge:
    """
    A dependency of one unit on another.

    ``provenance`` maps the name of each referencing file (without
    extension) to the artifacts of the target unit that file references.
    """

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        self.present = False
        self._provenance: Dict[str, Set[str]] = {}

    @property
    def provenance(self) -> Dict[str, Set[str]]:
        """Return a copy of the file -> referenced artifacts mapping."""
        return {k: v.copy() for k, v in self._provenance.items()}

    def add_reference(self, source_name: str, artifact: str) -> None:
        """Mark the edge present and record ``source_name`` -> ``artifact``."""
        self.present = True
        if source_name not in self._provenance:
            self._provenance[source_name] = set()
        self._provenance[source_name].add(artifact)

    def iter_provenance(self) -> Iterator[Tuple[str, str]]:
        """Iterate over (source_name, artifact) pairs in sorted order."""
        for source_name in sorted(self._provenance):
            for artifact in sorted(self._provenance[source_name]):
                yield source_name, artifact

    def __eq__(self, other) -> bool:
        if not isinstance(other, DependencyEdge):
            return NotImplemented
        return (
            self.source == other.source
            and self.target == other.target
            and self.present == other.present
            and self._provenance == other._provenance
        )

    def __repr__(self) -> str:
        return (
            f"DependencyEdge({self.source!r} -> {self.target!r}, present={self.present}, "
            f"files={len(self._provenance)})"
        )


class DependencyGraph:
    """
    A directed graph of dependencies between units.

    Every known unit is a node from the start, so units without outgoing
    dependencies still show up. Self-edges are rejected. The graph itself is
    not thread-safe; concurrent writers go through DependencyAggregator.
    """

    def __init__(self, units: Iterable[str] = ()):
        self._edges: Dict[str, Dict[str, DependencyEdge]] = {unit: {} for unit in units}

    @property
    def units(self) -> Set[str]:
        """Return all units in the graph."""
        return set(self._edges)

    def add_dependency(self, source: str, target: str, source_name: str, artifact: str) -> DependencyEdge:
        """
        Record that file ``source_name`` of unit ``source`` references
        ``artifact`` owned by unit ``target``.

        Raises:
            ValueError: If source and target are the same unit.
            KeyError: If ``source`` is not a unit of this graph.
        """
        if source == target:
            raise ValueError(f"self-dependency of unit '{source}'")
        targets = self._edges[source]
        edge = targets.get(target)
        if edge is None:
            edge = DependencyEdge(source, target)
            targets[target] = edge
        edge.add_reference(source_name, artifact)
        return edge

    def get_edge(self, source: str, target: str) -> Optional[DependencyEdge]:
        """Return the edge source -> target, or None."""
        return self._edges.get(source, {}).get(target)

    def has_dependency(self, source: str, target: str) -> bool:
        """Check whether source depends on target."""
        edge = self.get_edge(source, target)
        return edge is not None and edge.present

    def get_targets(self, source: str) -> Set[str]:
        """Get all units the source unit depends on."""
        return {t for t, e in self._edges.get(source, {}).items() if e.present}

    def get_sources(self, target: str) -> Set[str]:
        """Get all units that depend on the target unit."""
        return {s for s, targets in self._edges.items() if target in targets and targets[target].present}

    def iter_edges(self) -> Iterator[DependencyEdge]:
        """Iterate over present edges, ordered by source then target."""
        for source in sorted(self._edges):
            targets = self._edges[source]
            for target in sorted(targets):
                if targets[target].present:
                    yield targets[target]

    def edge_pairs(self) -> Set[Tuple[str, str]]:
        """Return the set of (source, target) pairs of present edges."""
        return {(edge.source, edge.target) for edge in self.iter_edges()}

    def __eq__(self, other) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._edges == other._edges

    def __len__(self) -> int:
        """Return the number of units in the graph."""
        return len(self._edges)

    def __contains__(self, unit: str) -> bool:
        """Check if a unit is in the graph."""
        return unit in self._edges

    def __repr__(self) -> str:
        edge_count = sum(1 for _ in self.iter_edges())
        return f"DependencyGraph(units={len(self._edges)}, edges={edge_count})"
