"""Structural analysis over a built dependency graph."""

import random
from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from .config import GraphAnalyzerConfig
from .dependency_graph import DependencyGraph
from .logger import get_logger
from .models import AnalysisReport, BridgeEntry, HubEntry

WHITE, GRAY, BLACK = 0, 1, 2


class GraphAnalyzer:
    """
    Computes structural properties of a DependencyGraph.

    The analyzer never mutates the graph. It reads an interned adjacency
    snapshot once, at construction, so the graph must be fully built and
    frozen first; constructing over an unfrozen graph logs a warning.
    Several analyzers may read the same graph concurrently.

    Analyses:
    - orphans: units nothing depends on (vendored framework/gem source excluded)
    - dead ends: units that depend on nothing
    - hubs: units with the most dependents
    - cycles: circular dependency chains, deduplicated by rotation
    - bridges: units on many sampled shortest paths (approximate betweenness)
    """

    def __init__(
        self,
        graph: DependencyGraph,
        config: Optional[GraphAnalyzerConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            graph: The dependency graph to analyze
            config: Analysis settings, defaults to GraphAnalyzerConfig()
            rng: Random source for bridge sampling; when omitted a generator
                seeded with ``config.random_seed`` (or the node count) is used
        """
        self.graph = graph
        self.config = config or GraphAnalyzerConfig()
        self.logger = get_logger()
        self._rng = rng
        self._cache: Dict[str, object] = {}

        if not graph.frozen:
            self.logger.warning(
                "Analyzing a graph that is not frozen; later registrations will not be seen"
            )

        adjacency = graph.adjacency()
        self._names = adjacency.names
        self._kinds = adjacency.kinds
        self._predecessors = adjacency.predecessors

        full = adjacency.full
        self._nodes: List[int] = sorted(
            (i for i, is_full in enumerate(full) if is_full),
            key=lambda i: self._names[i],
        )
        # Successors restricted to registered units, in identifier order
        self._successors: Dict[int, Tuple[int, ...]] = {
            i: tuple(sorted((s for s in adjacency.successors[i] if full[s]),
                            key=lambda s: self._names[s]))
            for i in self._nodes
        }
        self._has_dependencies = {i: bool(adjacency.successors[i]) for i in self._nodes}

    # ------------------------------------------------------------------
    # Public analyses
    # ------------------------------------------------------------------

    def orphans(self) -> List[str]:
        """Identifiers of units with no dependents, sorted."""
        if "orphans" not in self._cache:
            excluded = set(self.config.excluded_orphan_kinds)
            self._cache["orphans"] = [
                self._names[i]
                for i in self._nodes
                if self._kinds[i] not in excluded and not self._predecessors[i]
            ]
        return list(self._cache["orphans"])

    def dead_ends(self) -> List[str]:
        """Identifiers of units that declare no dependencies, sorted."""
        if "dead_ends" not in self._cache:
            self._cache["dead_ends"] = [
                self._names[i] for i in self._nodes if not self._has_dependencies[i]
            ]
        return list(self._cache["dead_ends"])

    def hubs(self, limit: Optional[int] = None) -> List[HubEntry]:
        """
        Units with the most dependents.

        Args:
            limit: Maximum number of hubs, defaults to ``config.hub_limit``

        Returns:
            HubEntry list sorted by dependent count descending, then identifier
        """
        limit = self.config.hub_limit if limit is None else limit
        if limit <= 0:
            return []

        if "hubs" not in self._cache:
            self._cache["hubs"] = sorted(
                self._nodes,
                key=lambda i: (-len(self._predecessors[i]), self._names[i]),
            )
        ranked: List[int] = self._cache["hubs"]

        return [
            HubEntry(
                identifier=self._names[i],
                kind=self._kinds[i],
                dependent_count=len(self._predecessors[i]),
                dependents=sorted(self._names[p] for p in self._predecessors[i]),
            )
            for i in ranked[:limit]
        ]

    def cycles(self, max_cycles: Optional[int] = None) -> List[List[str]]:
        """
        Detect circular dependency chains.

        Each cycle starts and ends with the same identifier, rotated so that
        it starts at its lexicographically smallest member, e.g.
        ``["A", "B", "C", "A"]``.

        Args:
            max_cycles: Stop after this many distinct cycles, defaults to
                ``config.max_cycles``; None or a value <= 0 means unbounded

        Returns:
            Distinct cycles in discovery order
        """
        cap = self.config.max_cycles if max_cycles is None else max_cycles
        if cap is not None and cap <= 0:
            cap = None
        key = f"cycles:{cap}"
        if key not in self._cache:
            self._cache[key] = self._detect_cycles(cap)
        return [list(c) for c in self._cache[key]]

    def bridges(self, limit: Optional[int] = None, sample_size: Optional[int] = None) -> List[BridgeEntry]:
        """
        Approximate betweenness centrality by sampling node pairs.

        For each sampled (source, target) pair one shortest path is found by
        BFS over forward edges; every intermediate unit on it scores a point.
        Small graphs, where the sample covers every ordered pair, are scored
        exhaustively.

        Args:
            limit: Maximum number of bridges, defaults to ``config.bridge_limit``
            sample_size: Number of pairs to sample, defaults to
                ``config.bridge_sample_size``

        Returns:
            BridgeEntry list sorted by score descending, then identifier
        """
        limit = self.config.bridge_limit if limit is None else limit
        sample_size = self.config.bridge_sample_size if sample_size is None else sample_size

        if len(self._nodes) < self.config.min_bridge_nodes or limit <= 0 or sample_size <= 0:
            return []

        scores: Dict[int, int] = {}
        for source, target in self._sample_pairs(sample_size):
            path = self._shortest_path(source, target)
            if path is None or len(path) <= 2:
                continue
            for intermediate in path[1:-1]:
                scores[intermediate] = scores.get(intermediate, 0) + 1

        ranked = sorted(scores.items(), key=lambda item: (-item[1], self._names[item[0]]))
        return [
            BridgeEntry(identifier=self._names[i], kind=self._kinds[i], score=score)
            for i, score in ranked[:limit]
        ]

    def importance(self) -> Dict[str, float]:
        """PageRank scores of all units, using the configured damping and iterations."""
        return self.graph.pagerank(
            damping=self.config.pagerank_damping,
            iterations=self.config.pagerank_iterations,
        )

    def analyze(self) -> AnalysisReport:
        """
        Run every analysis and combine the results.

        A section that raises is logged and recorded in ``report.errors``;
        its result stays empty and its count in ``report.stats`` stays None.

        Returns:
            AnalysisReport with orphans, dead ends, hubs, cycles, bridges and stats
        """
        report = AnalysisReport()
        report.stats.node_count = len(self._nodes)
        report.stats.edge_count = self.graph.edge_count()

        sections: List[Tuple[str, str, Callable[[], Sequence]]] = [
            ("orphans", "orphan_count", self.orphans),
            ("dead_ends", "dead_end_count", self.dead_ends),
            ("hubs", "hub_count", self.hubs),
            ("cycles", "cycle_count", self.cycles),
            ("bridges", "bridge_count",
             lambda: self.bridges(limit=self.config.analyze_bridge_limit)),
        ]

        for section, count_field, run in sections:
            try:
                with self.logger.timed(f"{section} analysis"):
                    result = run()
            except Exception as e:
                report.errors[section] = f"{type(e).__name__}: {e}"
                continue
            setattr(report, section, result)
            setattr(report.stats, count_field, len(result))

        self.logger.info(
            f"Graph analysis completed: {report.stats.node_count} nodes, "
            f"{report.stats.orphan_count} orphans, {report.stats.dead_end_count} dead ends, "
            f"{report.stats.cycle_count} cycles, {len(report.errors)} failed sections"
        )
        return report

    # ------------------------------------------------------------------
    # Cycle detection
    # ------------------------------------------------------------------

    def _detect_cycles(self, cap: Optional[int]) -> List[List[str]]:
        """Three-color iterative DFS recording a cycle for every back edge."""
        color: Dict[int, int] = {}
        found: List[List[str]] = []
        seen: Set[Tuple[str, ...]] = set()

        for root in self._nodes:
            if color.get(root, WHITE) != WHITE:
                continue

            color[root] = GRAY
            path: List[int] = [root]
            position: Dict[int, int] = {root: 0}
            stack = [(root, iter(self._successors[root]))]

            while stack:
                node, neighbors = stack[-1]
                advanced = False
                for neighbor in neighbors:
                    state = color.get(neighbor, WHITE)
                    if state == WHITE:
                        color[neighbor] = GRAY
                        position[neighbor] = len(path)
                        path.append(neighbor)
                        stack.append((neighbor, iter(self._successors[neighbor])))
                        advanced = True
                        break
                    if state == GRAY:
                        cycle = self._canonical_cycle(path[position[neighbor]:])
                        signature = tuple(cycle)
                        if signature not in seen:
                            seen.add(signature)
                            found.append(cycle)
                            if cap is not None and len(found) >= cap:
                                self.logger.warning(
                                    f"Cycle enumeration stopped at {cap} cycles"
                                )
                                return found
                if advanced:
                    continue

                stack.pop()
                color[node] = BLACK
                path.pop()
                del position[node]

        return found

    def _canonical_cycle(self, loop: Sequence[int]) -> List[str]:
        """Rotate a loop to start at its smallest identifier and close it."""
        names = [self._names[i] for i in loop]
        start = min(range(len(names)), key=names.__getitem__)
        rotated = names[start:] + names[:start]
        return rotated + [rotated[0]]

    # ------------------------------------------------------------------
    # Bridge detection
    # ------------------------------------------------------------------

    def _sample_pairs(self, sample_size: int) -> List[Tuple[int, int]]:
        """Distinct ordered pairs of distinct units; all of them when the sample covers every pair."""
        nodes = self._nodes
        count = len(nodes)
        if sample_size >= count * (count - 1):
            return [(a, b) for a in nodes for b in nodes if a != b]

        rng = self._rng
        if rng is None:
            seed = self.config.random_seed
            rng = random.Random(count if seed is None else seed)

        pairs: List[Tuple[int, int]] = []
        chosen: Set[Tuple[int, int]] = set()
        attempts = 0
        max_attempts = sample_size * 3

        while len(pairs) < sample_size and attempts < max_attempts:
            attempts += 1
            a = nodes[rng.randrange(count)]
            b = nodes[rng.randrange(count)]
            if a == b or (a, b) in chosen:
                continue
            chosen.add((a, b))
            pairs.append((a, b))

        return pairs

    def _shortest_path(self, source: int, target: int) -> Optional[List[int]]:
        """BFS shortest path following forward edges, or None if unreachable."""
        if source == target:
            return [source]

        parent: Dict[int, int] = {source: source}
        queue = deque([source])

        while queue:
            current = queue.popleft()
            for neighbor in self._successors.get(current, ()):
                if neighbor in parent:
                    continue
                parent[neighbor] = current
                if neighbor == target:
                    path = [target]
                    while path[-1] != source:
                        path.append(parent[path[-1]])
                    path.reverse()
                    return path
                queue.append(neighbor)

        return None
