"""Tests for graph analyzer configuration."""

import pytest

from codebase_graph.config import GraphAnalyzerConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CODEBASE_GRAPH_MAX_CYCLES",
        "CODEBASE_GRAPH_BRIDGE_SAMPLE_SIZE",
        "CODEBASE_GRAPH_RANDOM_SEED",
    ):
        monkeypatch.delenv(name, raising=False)


class TestGraphAnalyzerConfig:
    """Test the configuration class."""

    def test_default_config_creation(self):
        config = GraphAnalyzerConfig()

        assert config.excluded_orphan_kinds == ("rails_source", "gem_source")
        assert config.hub_limit == 20
        assert config.bridge_limit == 20
        assert config.analyze_bridge_limit == 10
        assert config.bridge_sample_size == 200
        assert config.min_bridge_nodes == 3
        assert config.random_seed is None
        assert config.max_cycles == 1000
        assert config.pagerank_damping == 0.85
        assert config.pagerank_iterations == 100

    def test_custom_config_creation(self):
        config = GraphAnalyzerConfig(hub_limit=5, max_cycles=None, excluded_orphan_kinds=["gem_source"])

        assert config.hub_limit == 5
        assert config.max_cycles is None
        assert config.excluded_orphan_kinds == ("gem_source",)
        assert config.bridge_sample_size == 200

    def test_config_to_dict(self):
        config_dict = GraphAnalyzerConfig(bridge_sample_size=50).to_dict()

        assert config_dict["bridge_sample_size"] == 50
        assert config_dict["excluded_orphan_kinds"] == ["rails_source", "gem_source"]
        assert len(config_dict) == 10

    def test_config_from_dict(self):
        config = GraphAnalyzerConfig.from_dict({
            "hub_limit": 3,
            "random_seed": 7,
            "max_cycles": 10,
        })

        assert config.hub_limit == 3
        assert config.random_seed == 7
        assert config.max_cycles == 10

    def test_round_trip(self):
        config = GraphAnalyzerConfig(hub_limit=4, random_seed=11)
        assert GraphAnalyzerConfig.from_dict(config.to_dict()) == config

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CODEBASE_GRAPH_MAX_CYCLES", "25")
        monkeypatch.setenv("CODEBASE_GRAPH_BRIDGE_SAMPLE_SIZE", "40")
        monkeypatch.setenv("CODEBASE_GRAPH_RANDOM_SEED", "3")

        config = GraphAnalyzerConfig()

        assert config.max_cycles == 25
        assert config.bridge_sample_size == 40
        assert config.random_seed == 3

    def test_zero_max_cycles_disables_cap(self):
        assert GraphAnalyzerConfig(max_cycles=0, load_env=False).max_cycles is None

    def test_zero_max_cycles_env_disables_cap(self, monkeypatch):
        monkeypatch.setenv("CODEBASE_GRAPH_MAX_CYCLES", "0")
        assert GraphAnalyzerConfig().max_cycles is None

    def test_environment_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv("CODEBASE_GRAPH_RANDOM_SEED", "3")
        assert GraphAnalyzerConfig(load_env=False).random_seed is None
