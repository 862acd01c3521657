"""DagGraph class: the canonical, merged block DAG.

Wraps a NetworkX DiGraph whose edges point from a block to each of its
parents. Per-node views are merged by hash; the merge is a union with an
equality check, so the order in which views are merged never changes the
result.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import networkx as nx
from networkx import DiGraph

from dagdemo.contracts import BlockHash, ConsistencyViolation, CorruptDag
from dagdemo.core.dag.models import DagNode, DagView


class DagGraph:
    """Block DAG keyed by block hash.

    Nodes added through merge() or add_node() carry an "info" attribute
    holding their DagNode. A parent hash that was referenced but never
    reported exists in the underlying graph without "info" until some view
    supplies it; validate() reports any that remain.
    """

    def __init__(self) -> None:
        self._graph: DiGraph[str] = nx.DiGraph()
        self._nodes: dict[BlockHash, DagNode] = {}

    @classmethod
    def merge(cls, views: Iterable[DagView]) -> DagGraph:
        """Merge per-node views into one graph.

        Does not validate; call validate() once every view is merged.

        Raises:
            ConsistencyViolation: Two views disagree on a block's parents
        """
        graph = cls()
        for view in views:
            graph.merge_view(view)
        return graph

    @property
    def node_count(self) -> int:
        """Number of reported blocks."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of parent links."""
        return self._graph.number_of_edges()

    def __contains__(self, block_hash: object) -> bool:
        return block_hash in self._nodes

    def __iter__(self) -> Iterator[DagNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, block_hash: BlockHash) -> DagNode:
        """Return the block with this hash.

        Raises:
            KeyError: If no view reported the hash
        """
        return self._nodes[block_hash]

    def get_nx_graph(self) -> DiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph (child -> parent edges)."""
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]

    def add_node(self, node: DagNode) -> None:
        """Add one reported block, deduplicating by hash.

        Raises:
            ConsistencyViolation: The hash is already known with different parents
        """
        existing = self._nodes.get(node.block_hash)
        if existing is not None:
            if existing.parents != node.parents:
                raise ConsistencyViolation(node.block_hash, existing.parents, node.parents)
            return

        self._nodes[node.block_hash] = node
        self._graph.add_node(node.block_hash, info=node)
        for parent in node.parents:
            self._graph.add_edge(node.block_hash, parent)

    def merge_view(self, view: DagView) -> None:
        """Merge every block of one node's view into this graph."""
        for node in view.nodes:
            self.add_node(node)

    def dangling_parents(self) -> list[BlockHash]:
        """Parent hashes referenced by some block but reported by no view."""
        return sorted(BlockHash(h) for h, data in self._graph.nodes(data=True) if "info" not in data)

    def validate(self) -> None:
        """Validate the merged graph structure.

        Validates:
        1. Every parent reference resolves to a reported block
        2. Graph is acyclic

        Raises:
            CorruptDag: If validation fails
        """
        dangling = self.dangling_parents()
        if dangling:
            referrers = sorted(str(child) for h in dangling for child in self._graph.predecessors(h))
            raise CorruptDag(f"{len(dangling)} unknown parent(s) {dangling} referenced by {referrers}")

        if not nx.is_directed_acyclic_graph(self._graph):
            try:
                cycle = nx.find_cycle(self._graph)
                cycle_str = " -> ".join(f"{edge[0]}" for edge in cycle)
                raise CorruptDag(f"graph contains a cycle: {cycle_str}")
            except nx.NetworkXNoCycle:
                raise CorruptDag("graph contains a cycle") from None

    def roots(self) -> list[BlockHash]:
        """Blocks with no parents, sorted by hash."""
        return sorted(h for h, node in self._nodes.items() if node.is_genesis)

    def tips(self) -> list[BlockHash]:
        """Blocks no other block references as a parent, sorted by hash."""
        return sorted(h for h in self._nodes if self._graph.in_degree(h) == 0)

    def topological_order(self) -> list[BlockHash]:
        """Blocks ordered parents-first, ties broken by hash.

        Only meaningful on a validated graph.
        """
        parents_first = self._graph.reverse(copy=False)
        return [BlockHash(h) for h in nx.lexicographical_topological_sort(parents_first)]

    def heights(self) -> dict[BlockHash, int]:
        """Height of every block: 0 for roots, else one more than its tallest parent.

        Derived on each call, never stored on DagNode. Only meaningful on a
        validated graph.
        """
        heights: dict[BlockHash, int] = {}
        for block_hash in self.topological_order():
            parents = self._nodes[block_hash].parents
            heights[block_hash] = 1 + max(heights[p] for p in parents) if parents else 0
        return heights
