"""Tests for DagGraph merge, validation and derived queries."""

from __future__ import annotations

import pytest

from dagdemo.contracts import BlockHash, ConsistencyViolation, CorruptDag
from dagdemo.core.dag import DagGraph, DagNode, DagView


def h(name: str) -> BlockHash:
    return BlockHash(name)


def node(name: str, *parents: str) -> DagNode:
    return DagNode(block_hash=h(name), parents=tuple(h(p) for p in parents))


GENESIS = node("g")


def diamond_views() -> tuple[DagView, DagView]:
    """Two overlapping partial views of g <- a, g <- b, (a, b) <- c."""
    left = DagView(node_index=0, nodes=(GENESIS, node("a", "g"), node("c", "a", "b"), node("b", "g")))
    right = DagView(node_index=1, nodes=(GENESIS, node("b", "g"), node("d", "b")))
    return left, right


class TestMerge:
    """Merging per-node views by hash."""

    def test_union_of_unique_hashes(self) -> None:
        left, right = diamond_views()

        graph = DagGraph.merge([left, right])

        assert graph.node_count == 5
        assert set(n.block_hash for n in graph) == {"g", "a", "b", "c", "d"}

    def test_edges_point_from_child_to_parent(self) -> None:
        graph = DagGraph.merge(diamond_views())

        nx_graph = graph.get_nx_graph()
        assert nx_graph.has_edge("c", "a")
        assert nx_graph.has_edge("c", "b")
        assert not nx_graph.has_edge("a", "c")
        assert graph.edge_count == 5

    def test_duplicate_report_is_deduplicated(self) -> None:
        graph = DagGraph()
        graph.add_node(node("a", "g"))
        graph.add_node(node("a", "g"))

        assert graph.node_count == 1
        assert graph.edge_count == 1

    def test_disagreeing_parents_raise_consistency_violation(self) -> None:
        first = DagView(node_index=0, nodes=(GENESIS, node("x", "g"), node("a", "g")))
        second = DagView(node_index=1, nodes=(GENESIS, node("x", "g"), node("a", "x")))

        with pytest.raises(ConsistencyViolation) as exc_info:
            DagGraph.merge([first, second])

        assert exc_info.value.block_hash == "a"
        assert exc_info.value.existing_parents == ("g",)
        assert exc_info.value.conflicting_parents == ("x",)

    def test_parent_order_is_part_of_identity(self) -> None:
        """Same parents in a different order is still a disagreement."""
        graph = DagGraph()
        graph.add_node(node("c", "a", "b"))

        with pytest.raises(ConsistencyViolation):
            graph.add_node(node("c", "b", "a"))

    def test_merge_order_does_not_change_result(self) -> None:
        left, right = diamond_views()

        forward = DagGraph.merge([left, right])
        backward = DagGraph.merge([right, left])

        assert {n.block_hash: n.parents for n in forward} == {n.block_hash: n.parents for n in backward}

    def test_empty_merge(self) -> None:
        graph = DagGraph.merge([])

        assert graph.node_count == 0
        graph.validate()


class TestValidate:
    """Acyclic and no-dangling-parent invariants."""

    def test_valid_graph_passes(self) -> None:
        DagGraph.merge(diamond_views()).validate()

    def test_dangling_parent_rejected(self) -> None:
        graph = DagGraph.merge([DagView(node_index=0, nodes=(GENESIS, node("b", "a")))])

        assert graph.dangling_parents() == ["a"]
        with pytest.raises(CorruptDag, match="unknown parent"):
            graph.validate()

    def test_dangling_parent_resolved_by_later_view(self) -> None:
        graph = DagGraph.merge(
            [
                DagView(node_index=0, nodes=(GENESIS, node("b", "a"))),
                DagView(node_index=1, nodes=(GENESIS, node("a", "g"))),
            ]
        )

        assert graph.dangling_parents() == []
        graph.validate()

    def test_cycle_rejected(self) -> None:
        graph = DagGraph()
        graph.add_node(node("a", "b"))
        graph.add_node(node("b", "a"))

        with pytest.raises(CorruptDag, match="cycle"):
            graph.validate()

    def test_self_reference_rejected(self) -> None:
        graph = DagGraph()
        graph.add_node(GENESIS)
        graph.add_node(node("a", "a"))

        with pytest.raises(CorruptDag, match="cycle"):
            graph.validate()


class TestDerivedQueries:
    """Roots, tips, heights and ordering on a validated graph."""

    def test_roots_and_tips(self) -> None:
        graph = DagGraph.merge(diamond_views())

        assert graph.roots() == ["g"]
        assert graph.tips() == ["c", "d"]

    def test_heights_use_tallest_parent(self) -> None:
        graph = DagGraph.merge(diamond_views())

        assert graph.heights() == {"g": 0, "a": 1, "b": 1, "c": 2, "d": 2}

    def test_topological_order_puts_parents_first(self) -> None:
        graph = DagGraph.merge(diamond_views())

        order = graph.topological_order()
        position = {block_hash: i for i, block_hash in enumerate(order)}
        for block in graph:
            for parent in block.parents:
                assert position[parent] < position[block.block_hash]
        assert order[0] == "g"

    def test_get_and_contains(self) -> None:
        graph = DagGraph.merge(diamond_views())

        assert "c" in graph
        assert "zz" not in graph
        assert graph.get(h("c")).parents == ("a", "b")
        with pytest.raises(KeyError):
            graph.get(h("zz"))
