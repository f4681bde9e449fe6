"""Configuration settings for the graph analyzer."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


@dataclass
class GraphAnalyzerConfig:
    """Configuration class for graph analysis settings."""

    # Orphan detection settings
    excluded_orphan_kinds: Tuple[str, ...] = ("rails_source", "gem_source")

    # Hub ranking settings
    hub_limit: int = 20

    # Bridge approximation settings
    bridge_limit: int = 20
    analyze_bridge_limit: int = 10
    bridge_sample_size: int = 200
    min_bridge_nodes: int = 3
    random_seed: Optional[int] = None

    # Cycle enumeration settings (None or 0 disables the cap)
    max_cycles: Optional[int] = 1000

    # PageRank settings
    pagerank_damping: float = 0.85
    pagerank_iterations: int = 100

    load_env: bool = field(default=True, repr=False)

    def __post_init__(self):
        """Apply environment overrides."""
        self.excluded_orphan_kinds = tuple(self.excluded_orphan_kinds)
        if self.max_cycles is not None and self.max_cycles <= 0:
            self.max_cycles = None
        if not self.load_env:
            return

        max_cycles = _env_int("CODEBASE_GRAPH_MAX_CYCLES")
        if max_cycles is not None:
            self.max_cycles = max_cycles if max_cycles > 0 else None

        sample_size = _env_int("CODEBASE_GRAPH_BRIDGE_SAMPLE_SIZE")
        if sample_size is not None:
            self.bridge_sample_size = sample_size

        seed = _env_int("CODEBASE_GRAPH_RANDOM_SEED")
        if seed is not None:
            self.random_seed = seed

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "excluded_orphan_kinds": list(self.excluded_orphan_kinds),
            "hub_limit": self.hub_limit,
            "bridge_limit": self.bridge_limit,
            "analyze_bridge_limit": self.analyze_bridge_limit,
            "bridge_sample_size": self.bridge_sample_size,
            "min_bridge_nodes": self.min_bridge_nodes,
            "random_seed": self.random_seed,
            "max_cycles": self.max_cycles,
            "pagerank_damping": self.pagerank_damping,
            "pagerank_iterations": self.pagerank_iterations,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "GraphAnalyzerConfig":
        """Create configuration from dictionary."""
        return cls(**config_dict)
