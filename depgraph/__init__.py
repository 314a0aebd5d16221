"""Dependency graph model, aggregation, reconciliation and filtering."""

from .model import DependencyEdge, DependencyGraph
from .aggregator import DependencyAggregator
from .reconcile import EdgeOrigin, ReconciledGraph, reconcile
from .filters import UnitFilter

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "DependencyAggregator",
    "EdgeOrigin",
    "ReconciledGraph",
    "reconcile",
    "UnitFilter",
]
