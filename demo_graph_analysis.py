#!/usr/bin/env python3
"""
Codebase Graph Demo Script

Registers a small set of extracted units into a dependency graph, freezes it,
and prints the structural analysis report. Settings can be overridden through
CODEBASE_GRAPH_* variables in a .env file.
"""

from dotenv import load_dotenv

from codebase_graph import DependencyGraph, GraphAnalyzer, GraphAnalyzerConfig
from codebase_graph.logger import set_log_level

load_dotenv()


SAMPLE_UNITS = [
    {"identifier": "User", "type": "model", "file_path": "app/models/user.rb",
     "dependencies": [{"type": "model", "target": "Account", "relationship": "association", "via": "has_one"}]},
    {"identifier": "Account", "type": "model", "file_path": "app/models/account.rb",
     "dependencies": [{"type": "model", "target": "User", "relationship": "association", "via": "belongs_to"}]},
    {"identifier": "Order", "type": "model", "file_path": "app/models/order.rb",
     "dependencies": [{"type": "model", "target": "User", "relationship": "association"},
                      {"type": "model", "target": "Coupon", "relationship": "association"}]},
    {"identifier": "Checkout::Create", "type": "service", "file_path": "app/services/checkout/create.rb",
     "dependencies": [{"type": "model", "target": "Order", "relationship": "method_call"},
                      {"type": "mailer", "target": "OrderMailer", "relationship": "method_call"}]},
    {"identifier": "OrderMailer", "type": "mailer", "file_path": "app/mailers/order_mailer.rb",
     "dependencies": [{"type": "model", "target": "Order", "relationship": "method_call"}]},
    {"identifier": "OrdersController", "type": "controller", "file_path": "app/controllers/orders_controller.rb",
     "dependencies": [{"type": "service", "target": "Checkout::Create", "relationship": "method_call"}]},
    {"identifier": "gems/devise/models", "type": "gem_source", "file_path": "gems/devise/lib/devise/models.rb"},
]


def main():
    """Run the codebase graph demonstration."""

    print("Codebase Graph Demo")
    print("=" * 50)

    set_log_level("WARNING")

    graph = DependencyGraph()
    graph.register_all(SAMPLE_UNITS)
    graph.freeze()

    analyzer = GraphAnalyzer(graph, GraphAnalyzerConfig())
    report = analyzer.analyze()

    stats = report.stats
    print(f"\nGraph: {stats.node_count} units, {stats.edge_count} edges")
    print(f"   Orphans: {report.orphans}")
    print(f"   Dead ends: {report.dead_ends}")

    print("\nHubs:")
    for hub in report.hubs[:5]:
        print(f"   {hub.identifier} ({hub.kind}): {hub.dependent_count} dependents")

    print("\nCycles:")
    for cycle in report.cycles:
        print(f"   {' -> '.join(cycle)}")

    print("\nBridges:")
    for bridge in report.bridges:
        print(f"   {bridge.identifier} ({bridge.kind}): score {bridge.score}")

    print("\nBlast radius of app/models/user.rb:")
    print(f"   {graph.affected_by(['app/models/user.rb'])}")

    if report.errors:
        print(f"\nFailed sections: {report.errors}")


if __name__ == "__main__":
    main()
