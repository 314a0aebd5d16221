"""Graph builder that orchestrates the inventory scan and the dependency scan."""

import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from depgraph.aggregator import DependencyAggregator
from depgraph.model import DependencyGraph
from depgraph.reconcile import ReconciledGraph, reconcile
from .config import ScanConfig
from .discovery import iter_files, source_name, unit_from_path
from .errors import ScanError
from .extractor import extract_references
from .inventory import Inventory, build_inventory
from .matcher import ReferenceMatcher
from .pool import run_all


logger = logging.getLogger(__name__)

REGEX = "regex"
STRUCTURAL = "structural"


def strategies_for(strategy: str) -> Tuple[str, ...]:
    """Expand a configured strategy into the extraction strategies to run."""
    if strategy == "both":
        return (REGEX, STRUCTURAL)
    return (strategy,)


@dataclass
class ScanResult:
    """Everything a run produces, ready for presentation."""

    inventory: Inventory
    matcher: ReferenceMatcher
    graphs: Dict[str, DependencyGraph]
    overlay: Optional[ReconciledGraph] = None

    @property
    def graph(self) -> DependencyGraph:
        """The structural graph when available, otherwise the only one computed."""
        if STRUCTURAL in self.graphs:
            return self.graphs[STRUCTURAL]
        return self.graphs[REGEX]


def collect_files(root: Path, config: ScanConfig) -> List[Tuple[Path, str]]:
    """
    List the files of the dependency scan with the unit owning each one.

    Files outside any unit (no ``src`` segment) are skipped.
    """
    root = root.resolve()
    files: List[Tuple[Path, str]] = []
    for path in iter_files(root, config.skip_dirs, config.skip_files, config.extension):
        unit = unit_from_path(path, root)
        if unit is None:
            logger.debug("Skipping file outside any unit: %s", path)
            continue
        files.append((path, unit))
    return files


def scan_file(
    path: Path,
    unit: str,
    matcher: ReferenceMatcher,
    aggregators: Mapping[str, DependencyAggregator],
    get_property_names: bool = False,
) -> int:
    """
    Extract the references of one file with every requested strategy.

    Args:
        path: File to scan.
        unit: Unit the file belongs to.
        matcher: Matcher used by the regex strategy.
        aggregators: Aggregator per strategy name (``regex``/``structural``).
        get_property_names: See extract_references.

    Returns:
        Number of references recorded across strategies.

    Raises:
        ScanError: If the file cannot be read, or is malformed XML when the
                   structural strategy is requested.
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ScanError(path, f"cannot read file: {e}") from e

    name = source_name(path)
    recorded = 0

    if REGEX in aggregators:
        text = content.decode("utf-8", errors="replace")
        recorded += aggregators[REGEX].add_references(unit, name, matcher.find_references(text))

    if STRUCTURAL in aggregators:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ScanError(path, f"malformed XML: {e}") from e
        candidates = extract_references(root, get_property_names, source=str(path))
        recorded += aggregators[STRUCTURAL].add_references(unit, name, candidates)

    return recorded


def build_dependency_graphs(
    root: Path,
    inventory: Inventory,
    matcher: ReferenceMatcher,
    strategies: Sequence[str] = (STRUCTURAL,),
    config: Optional[ScanConfig] = None,
) -> Dict[str, DependencyGraph]:
    """
    Walk the tree once and build one dependency graph per strategy.

    Files are scanned on a bounded worker pool; the graphs are returned only
    after every file has been processed.

    Raises:
        ScanError: On the first unreadable or malformed file.
    """
    if config is None:
        config = ScanConfig()

    reverse_index = matcher.reverse_index
    aggregators = {
        strategy: DependencyAggregator(DependencyGraph(inventory), reverse_index)
        for strategy in strategies
    }

    files = collect_files(root, config)
    counts = run_all(
        lambda entry: scan_file(entry[0], entry[1], matcher, aggregators, config.get_property_names),
        files,
        config.workers,
        "depscan",
    )
    logger.info("Scanned %d files, recorded %d references", len(files), sum(counts))

    return {strategy: aggregator.graph for strategy, aggregator in aggregators.items()}


def build_dependency_graph(
    root: Path,
    inventory: Inventory,
    matcher: ReferenceMatcher,
    strategy: str = STRUCTURAL,
    config: Optional[ScanConfig] = None,
) -> DependencyGraph:
    """Build the dependency graph for a single strategy."""
    return build_dependency_graphs(root, inventory, matcher, (strategy,), config)[strategy]


def run(root: Path, config: Optional[ScanConfig] = None) -> ScanResult:
    """
    Run the full pipeline on a tree.

    The inventory scan completes before the matcher is built, and the
    matcher before the dependency scan starts. With strategy ``both`` the
    two graphs are reconciled.

    Args:
        root: Root directory to scan.
        config: Run configuration; defaults apply if None.

    Returns:
        ScanResult holding the inventory, matcher, graphs and overlay.
    """
    if config is None:
        config = ScanConfig()
    root = root.resolve()
    start = time.monotonic()

    inventory = build_inventory(root, config.skip_dirs, config.descriptor_layout, config.workers)
    matcher = ReferenceMatcher.from_inventory(inventory, strict=config.strict_collisions)
    graphs = build_dependency_graphs(
        root, inventory, matcher, strategies_for(config.strategy), config
    )

    overlay = None
    if REGEX in graphs and STRUCTURAL in graphs:
        overlay = reconcile(graphs[REGEX], graphs[STRUCTURAL])
        logger.info("Reconciled strategies: %r", overlay)

    logger.info("Took %.2fs", time.monotonic() - start)
    return ScanResult(inventory=inventory, matcher=matcher, graphs=graphs, overlay=overlay)
