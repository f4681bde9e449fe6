"""End-to-end build then analyze scenarios."""

from codebase_graph import DependencyGraph, GraphAnalyzer, GraphAnalyzerConfig


def build(units):
    graph = DependencyGraph()
    graph.register_all(units)
    graph.freeze()
    return GraphAnalyzer(graph, GraphAnalyzerConfig(load_env=False))


def unit(identifier, kind="model", *targets):
    return {
        "identifier": identifier,
        "type": kind,
        "file_path": f"app/{identifier.lower()}.rb",
        "dependencies": [{"type": "model", "target": t, "relationship": "association"} for t in targets],
    }


def test_user_is_the_top_hub():
    analyzer = build([
        unit("User"),
        unit("Order", "model", "User"),
        unit("UserService", "service", "User"),
        unit("UsersController", "controller", "User"),
        unit("Product"),
    ])

    first = analyzer.hubs(limit=3)[0]
    assert (first.identifier, first.dependent_count) == ("User", 3)


def test_two_node_cycle():
    analyzer = build([unit("A", "model", "B"), unit("B", "model", "A")])
    assert analyzer.cycles() == [["A", "B", "A"]]


def test_three_node_cycle():
    analyzer = build([unit("A", "model", "B"), unit("B", "model", "C"), unit("C", "model", "A")])

    cycles = analyzer.cycles()
    assert len(cycles) == 1
    assert len(cycles[0]) == 4


def test_linear_chain_bridges():
    analyzer = build([
        unit("A", "model", "B"),
        unit("B", "model", "C"),
        unit("C", "model", "D"),
        unit("D"),
    ])

    identifiers = [b.identifier for b in analyzer.bridges(limit=5, sample_size=50)]
    assert "B" in identifiers
    assert "C" in identifiers


def test_vendored_source_is_never_an_orphan():
    analyzer = build([unit("gems/devise/models", "gem_source")])
    assert "gems/devise/models" not in analyzer.orphans()


def test_full_report():
    analyzer = build([
        unit("User", "model", "Account"),
        unit("Account", "model", "User"),
        unit("Order", "model", "User", "Coupon"),
        unit("OrdersController", "controller", "Order"),
        unit("rails/actionpack/metal", "rails_source"),
    ])

    report = analyzer.analyze().to_dict()

    assert report["orphans"] == ["OrdersController"]
    assert report["dead_ends"] == ["rails/actionpack/metal"]
    assert report["hubs"][0]["identifier"] == "User"
    assert report["cycles"] == [["Account", "User", "Account"]]
    assert report["bridges"][0]["identifier"] == "Order"
    assert report["stats"] == {
        "node_count": 5,
        "edge_count": 5,
        "orphan_count": 1,
        "dead_end_count": 1,
        "hub_count": 5,
        "cycle_count": 1,
        "bridge_count": len(report["bridges"]),
    }
