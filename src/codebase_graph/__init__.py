"""Dependency graph construction and structural analysis for extracted code units."""

from .models import (
    UnitKind,
    Dependency,
    UnitRecord,
    HubEntry,
    BridgeEntry,
    GraphStats,
    AnalysisReport,
)
from .exceptions import CodebaseGraphError, UnitValidationError, GraphFrozenError
from .dependency_graph import DependencyGraph, AdjacencySnapshot
from .graph_analyzer import GraphAnalyzer
from .config import GraphAnalyzerConfig
from .logger import get_logger, set_log_level

__all__ = [
    "UnitKind",
    "Dependency",
    "UnitRecord",
    "HubEntry",
    "BridgeEntry",
    "GraphStats",
    "AnalysisReport",
    "CodebaseGraphError",
    "UnitValidationError",
    "GraphFrozenError",
    "DependencyGraph",
    "AdjacencySnapshot",
    "GraphAnalyzer",
    "GraphAnalyzerConfig",
    "get_logger",
    "set_log_level",
]
