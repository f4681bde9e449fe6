"""Shared fixtures for codebase graph tests."""

import pytest

from codebase_graph import DependencyGraph, UnitRecord


def build_unit(identifier, kind="model", deps=(), file_path=None, relationship="depends_on"):
    """Create a UnitRecord depending on each identifier in ``deps``."""
    return UnitRecord(
        identifier=identifier,
        kind=kind,
        file_path=file_path or f"app/{kind}s/{identifier.lower()}.rb",
        dependencies=[
            {"type": "model", "target": target, "relationship": relationship}
            for target in deps
        ],
    )


@pytest.fixture
def make_unit():
    return build_unit


@pytest.fixture
def graph():
    return DependencyGraph()


@pytest.fixture
def hub_graph(graph):
    """User is depended on by Order, UserService and UsersController."""
    graph.register(build_unit("User"))
    graph.register(build_unit("Order", deps=["User"]))
    graph.register(build_unit("UserService", kind="service", deps=["User"]))
    graph.register(build_unit("UsersController", kind="controller", deps=["User"]))
    graph.register(build_unit("Product"))
    return graph
