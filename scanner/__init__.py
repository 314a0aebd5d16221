"""Scanner module for artifact inventory, reference extraction and graph building."""

from .discovery import iter_descriptors, iter_files, unit_from_path
from .inventory import build_inventory, parse_descriptor
from .matcher import ReferenceMatcher
from .extractor import extract_references
from .builder import build_dependency_graph, build_dependency_graphs, run

__all__ = [
    "iter_descriptors",
    "iter_files",
    "unit_from_path",
    "build_inventory",
    "parse_descriptor",
    "ReferenceMatcher",
    "extract_references",
    "build_dependency_graph",
    "build_dependency_graphs",
    "run",
]
