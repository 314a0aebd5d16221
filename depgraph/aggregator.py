"""Thread-safe accumulation of discovered references into a DependencyGraph."""

import logging
import threading
from typing import Iterable, List, Mapping, Tuple

from .model import DependencyGraph


logger = logging.getLogger(__name__)


class DependencyAggregator:
    """
    Merges per-file reference lists into a shared DependencyGraph.

    Resolution against the reverse index happens outside the lock; only the
    writes to the graph are serialized, one critical section per call.
    The graph must not be read until every writer has finished.
    """

    def __init__(self, graph: DependencyGraph, reverse_index: Mapping[str, str]):
        self._graph = graph
        self._reverse_index = reverse_index
        self._lock = threading.Lock()

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    def resolve(self, owner: str, candidates: Iterable[str]) -> List[Tuple[str, str]]:
        """
        Map candidate names to (target unit, artifact) pairs.

        Unknown names and names owned by ``owner`` itself are dropped.
        """
        resolved: List[Tuple[str, str]] = []
        for candidate in candidates:
            target = self._reverse_index.get(candidate)
            if target is None or target == owner:
                continue
            resolved.append((target, candidate))
        return resolved

    def add_references(self, owner: str, source_name: str, candidates: Iterable[str]) -> int:
        """
        Record the references found in one file.

        Args:
            owner: Unit the scanned file belongs to.
            source_name: Name of the scanned file without extension.
            candidates: Candidate artifact names found in the file.

        Returns:
            Number of references recorded.
        """
        if owner not in self._graph:
            logger.debug("Dropping references from %s: unit '%s' has no descriptor", source_name, owner)
            return 0

        resolved = self.resolve(owner, candidates)
        if not resolved:
            return 0

        with self._lock:
            for target, artifact in resolved:
                self._graph.add_dependency(owner, target, source_name, artifact)
        return len(resolved)
