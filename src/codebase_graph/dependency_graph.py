"""In-memory dependency graph over extracted code units."""

import threading
from collections import deque
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple, Union

import networkx as nx

from .exceptions import GraphFrozenError
from .logger import get_logger
from .models import Dependency, UnitRecord


class AdjacencySnapshot(NamedTuple):
    """Read-only interned view of the graph used by traversal code.

    Index ``i`` refers to the same unit in every field. Indices of pruned
    placeholders have no successors and are neither full nor present.
    """
    names: Tuple[str, ...]
    successors: Tuple[Tuple[int, ...], ...]
    predecessors: Tuple[Tuple[int, ...], ...]
    kinds: Tuple[Optional[str], ...]
    full: Tuple[bool, ...]


class DependencyGraph:
    """
    Directed graph of code units keyed by unit identifier.

    Registration keeps forward edges (what a unit depends on) and reverse
    edges (what depends on a unit) consistent. A dependency on a unit that was
    never registered creates a placeholder node, so the dependent is still
    counted, but placeholders are not reported as nodes.

    Identifiers are interned to integer indices when first seen; the
    underlying ``networkx.DiGraph`` is keyed by those indices.

    Registration is serialized by a lock and may be called from several
    extractor threads. After ``freeze()`` the graph is read-only.
    """

    def __init__(self):
        """Initialize an empty dependency graph."""
        self.logger = get_logger()
        self._graph = nx.DiGraph()
        self._index: Dict[str, int] = {}
        self._names: List[str] = []
        self._declared: Dict[int, List[Dependency]] = {}
        self._kind_index: Dict[str, List[str]] = {}
        self._file_map: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._frozen = False
        self._snapshot: Optional[AdjacencySnapshot] = None

    # ------------------------------------------------------------------
    # Build phase
    # ------------------------------------------------------------------

    def register(self, unit: Union[UnitRecord, Mapping[str, Any]]) -> UnitRecord:
        """
        Insert or replace a unit and its forward edges.

        Args:
            unit: A UnitRecord, or a mapping validated into one

        Returns:
            The registered UnitRecord

        Raises:
            UnitValidationError: If a mapping does not describe a valid unit
            GraphFrozenError: If the graph has been frozen
        """
        record = unit if isinstance(unit, UnitRecord) else UnitRecord.from_dict(unit)

        with self._lock:
            if self._frozen:
                raise GraphFrozenError(
                    f"Cannot register '{record.identifier}': graph is frozen"
                )
            self._apply(record)
            self._snapshot = None

        self.logger.debug(
            f"Registered {record.kind} '{record.identifier}' "
            f"with {len(record.dependencies)} dependencies"
        )
        return record

    def register_all(self, units: Iterable[Union[UnitRecord, Mapping[str, Any]]]) -> int:
        """Register a batch of units and return how many were registered."""
        count = 0
        for unit in units:
            self.register(unit)
            count += 1
        self.logger.info(f"Registered {count} units: {len(self)} nodes, "
                         f"{self._graph.number_of_edges()} edges")
        return count

    def freeze(self) -> None:
        """Mark the end of the build phase; further registration raises."""
        with self._lock:
            self._frozen = True
            if self._snapshot is None:
                self._snapshot = self._build_snapshot()
        self.logger.debug(f"Dependency graph frozen with {len(self)} nodes")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _intern(self, identifier: str) -> int:
        index = self._index.get(identifier)
        if index is None:
            index = len(self._names)
            self._index[identifier] = index
            self._names.append(identifier)
        return index

    def _apply(self, record: UnitRecord) -> None:
        """Mutate adjacency for one unit. Caller holds the lock."""
        graph = self._graph
        source = self._intern(record.identifier)

        stale_targets: List[int] = []
        if source in graph and not graph.nodes[source]["placeholder"]:
            previous = graph.nodes[source]
            self._unindex(record.identifier, previous)
            stale_targets = list(graph.successors(source))
            graph.remove_edges_from([(source, t) for t in stale_targets])

        graph.add_node(
            source,
            kind=record.kind,
            file_path=record.file_path,
            namespace=record.namespace,
            placeholder=False,
        )

        members = self._kind_index.setdefault(record.kind, [])
        if record.identifier not in members:
            members.append(record.identifier)
        if record.file_path:
            self._file_map[record.file_path] = record.identifier

        for dep in record.dependencies:
            target = self._intern(dep.target)
            if target not in graph:
                graph.add_node(target, kind=dep.type, file_path=None,
                               namespace=None, placeholder=True)
            if graph.has_edge(source, target):
                graph[source][target]["dependencies"].append(dep)
            else:
                graph.add_edge(source, target, dependencies=[dep])

        self._declared[source] = list(record.dependencies)

        # Placeholders that only existed for the replaced edges
        for target in stale_targets:
            attrs = graph.nodes[target]
            if attrs["placeholder"] and graph.in_degree(target) == 0:
                graph.remove_node(target)

    def _unindex(self, identifier: str, previous: Mapping[str, Any]) -> None:
        members = self._kind_index.get(previous["kind"], [])
        if identifier in members:
            members.remove(identifier)
        old_path = previous.get("file_path")
        if old_path and self._file_map.get(old_path) == identifier:
            del self._file_map[old_path]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _full_index(self, identifier: str) -> Optional[int]:
        index = self._index.get(identifier)
        if index is None or index not in self._graph:
            return None
        if self._graph.nodes[index]["placeholder"]:
            return None
        return index

    def dependents_of(self, identifier: str) -> Set[str]:
        """Identifiers of units with a forward edge into ``identifier``."""
        index = self._index.get(identifier)
        if index is None or index not in self._graph:
            return set()
        return {self._names[p] for p in self._graph.predecessors(index)}

    def dependencies_of(self, identifier: str) -> Set[str]:
        """Identifiers ``identifier`` declares a dependency on, dangling ones included."""
        index = self._index.get(identifier)
        if index is None or index not in self._graph:
            return set()
        return {self._names[s] for s in self._graph.successors(index)}

    def relationships_of(self, identifier: str) -> List[Dependency]:
        """Dependency records declared by ``identifier``, in declaration order."""
        index = self._full_index(identifier)
        if index is None:
            return []
        return list(self._declared.get(index, []))

    def nodes(self) -> Set[str]:
        """Identifiers of all registered units (placeholders excluded)."""
        return {
            self._names[i]
            for i, placeholder in self._graph.nodes(data="placeholder")
            if not placeholder
        }

    def node(self, identifier: str) -> Optional[Dict[str, Any]]:
        """Metadata of a registered unit, or None."""
        index = self._full_index(identifier)
        if index is None:
            return None
        attrs = self._graph.nodes[index]
        return {
            "kind": attrs["kind"],
            "file_path": attrs["file_path"],
            "namespace": attrs["namespace"],
        }

    def node_exists(self, identifier: str) -> bool:
        """Check whether a unit is registered under exactly ``identifier``."""
        return self._full_index(identifier) is not None

    def find_node_by_suffix(self, suffix: str) -> Optional[str]:
        """
        Find a unit by namespace suffix, e.g. "Update" matches "Order::Update".

        Bare identifiers never match; the first unit in registration order wins.
        """
        target_suffix = f"::{suffix}"
        for index, name in enumerate(self._names):
            if name.endswith(target_suffix) and self._full_index(name) == index:
                return name
        return None

    def units_of_kind(self, kind: str) -> List[str]:
        """Identifiers of units of the given kind, in registration order."""
        key = kind.value if hasattr(kind, "value") else kind
        return list(self._kind_index.get(key, []))

    def affected_by(self, changed_files: Iterable[str], max_depth: Optional[int] = None) -> List[str]:
        """
        Find all units affected by changes to the given files.

        Walks reverse edges breadth-first from the units defined in
        ``changed_files``.

        Args:
            changed_files: Changed source file paths
            max_depth: Maximum number of dependent hops (None for unlimited)

        Returns:
            Affected unit identifiers, directly changed units first
        """
        directly_changed = []
        for path in changed_files:
            identifier = self._file_map.get(path)
            if identifier is not None and identifier not in directly_changed:
                directly_changed.append(identifier)

        affected = list(directly_changed)
        seen = set(directly_changed)
        queue = deque((identifier, 0) for identifier in directly_changed)

        while queue:
            current, depth = queue.popleft()
            if max_depth is not None and depth >= max_depth:
                continue
            for dependent in sorted(self.dependents_of(current)):
                if dependent not in seen:
                    seen.add(dependent)
                    affected.append(dependent)
                    queue.append((dependent, depth + 1))

        return affected

    def pagerank(self, damping: float = 0.85, iterations: int = 100) -> Dict[str, float]:
        """
        Compute PageRank scores over registered units.

        Rank flows from a unit to its dependencies, so units with many
        dependents score highest.

        Args:
            damping: Damping factor
            iterations: Maximum power iterations

        Returns:
            Identifier to score mapping; empty for an empty graph

        Raises:
            networkx.PowerIterationFailedConvergence: If ``iterations`` is too low
        """
        full = [i for i, placeholder in self._graph.nodes(data="placeholder") if not placeholder]
        if not full:
            return {}

        scores = nx.pagerank(self._graph.subgraph(full), alpha=damping, max_iter=iterations)
        return {self._names[i]: score for i, score in scores.items()}

    def adjacency(self) -> AdjacencySnapshot:
        """Interned adjacency for traversal; cached until the next registration."""
        snapshot = self._snapshot
        if self._frozen and snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._build_snapshot()
            return self._snapshot

    def _build_snapshot(self) -> AdjacencySnapshot:
        graph = self._graph
        size = len(self._names)
        successors: List[Tuple[int, ...]] = [()] * size
        predecessors: List[Tuple[int, ...]] = [()] * size
        kinds: List[Optional[str]] = [None] * size
        full = [False] * size

        for index, attrs in graph.nodes(data=True):
            successors[index] = tuple(graph.successors(index))
            predecessors[index] = tuple(graph.predecessors(index))
            kinds[index] = attrs["kind"]
            full[index] = not attrs["placeholder"]

        return AdjacencySnapshot(
            names=tuple(self._names),
            successors=tuple(successors),
            predecessors=tuple(predecessors),
            kinds=tuple(kinds),
            full=tuple(full),
        )

    def edge_count(self) -> int:
        """Number of distinct source-target edges, dangling ones included."""
        return self._graph.number_of_edges()

    def __len__(self) -> int:
        return sum(1 for _, placeholder in self._graph.nodes(data="placeholder") if not placeholder)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.node_exists(identifier)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the graph to plain data.

        Returns:
            Dictionary with ``nodes`` (identifier -> metadata), ``edges``
            (declared dependencies in registration order) and ``stats``
        """
        with self._lock:
            nodes: Dict[str, Dict[str, Any]] = {}
            edges: List[Dict[str, Any]] = []
            kinds: Dict[str, int] = {}
            placeholder_count = 0

            for index, name in enumerate(self._names):
                if index not in self._graph:
                    continue
                attrs = self._graph.nodes[index]
                if attrs["placeholder"]:
                    placeholder_count += 1
                    continue
                nodes[name] = {
                    "kind": attrs["kind"],
                    "file_path": attrs["file_path"],
                    "namespace": attrs["namespace"],
                }
                kinds[attrs["kind"]] = kinds.get(attrs["kind"], 0) + 1
                for dep in self._declared.get(index, []):
                    edges.append({
                        "source": name,
                        "target": dep.target,
                        "relationship": dep.relationship,
                        "type": dep.type,
                        "via": dep.via,
                    })

            return {
                "nodes": nodes,
                "edges": edges,
                "stats": {
                    "node_count": len(nodes),
                    "edge_count": self._graph.number_of_edges(),
                    "placeholder_count": placeholder_count,
                    "kinds": kinds,
                },
            }

    to_h = to_dict

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependencyGraph":
        """
        Rebuild a graph from ``to_dict`` output by re-registering every unit.

        Works on JSON round-tripped data.
        """
        edges_by_source: Dict[str, List[Dict[str, Any]]] = {}
        for edge in data.get("edges", []):
            edges_by_source.setdefault(edge["source"], []).append({
                "target": edge["target"],
                "relationship": edge.get("relationship") or "depends_on",
                "type": edge.get("type"),
                "via": edge.get("via"),
            })

        graph = cls()
        for identifier, meta in data.get("nodes", {}).items():
            graph.register({
                "identifier": identifier,
                "kind": meta.get("kind"),
                "file_path": meta.get("file_path"),
                "namespace": meta.get("namespace"),
                "dependencies": edges_by_source.get(identifier, []),
            })
        return graph
