"""Graph -> Graphviz DOT text.

Edge direction: the DOT source lists each edge as `parent -> child` and
sets `dir=back` on every edge, so with `rankdir=LR` genesis sits on the
left, time flows rightwards, and each arrowhead lands on the parent (a
block points at the blocks it builds on).
"""

from __future__ import annotations

from collections import defaultdict

import graphviz

from dagdemo.contracts import BlockHash
from dagdemo.core.dag import DagGraph

SHORT_HASH_LENGTH = 12

_GENESIS_STYLE = {"style": "filled", "fillcolor": "#f4d35e"}
_TIP_STYLE = {"style": "filled", "fillcolor": "#9bd1e5"}
_BLOCK_STYLE = {"style": "solid"}


def short_hash(block_hash: BlockHash) -> str:
    return block_hash[:SHORT_HASH_LENGTH]


def graph_to_dot(graph: DagGraph, *, name: str = "dag") -> str:
    """Describe a validated DagGraph in DOT.

    Blocks of equal height share a rank. Genesis blocks and tips are
    filled so they stand out.

    Args:
        graph: Merged and validated graph
        name: DOT graph name

    Returns:
        DOT source text
    """
    heights = graph.heights()
    roots = set(graph.roots())
    tips = set(graph.tips())

    by_height: dict[int, list[BlockHash]] = defaultdict(list)
    for block_hash, height in heights.items():
        by_height[height].append(block_hash)

    dot = graphviz.Digraph(
        name,
        graph_attr={"rankdir": "LR", "nodesep": "0.2", "ranksep": "0.4"},
        node_attr={"shape": "box", "fontname": "monospace", "fontsize": "9"},
        edge_attr={"dir": "back", "arrowsize": "0.6"},
    )

    for height in sorted(by_height):
        with dot.subgraph() as rank:
            rank.attr(rank="same")
            for block_hash in sorted(by_height[height]):
                if block_hash in roots:
                    style = _GENESIS_STYLE
                elif block_hash in tips:
                    style = _TIP_STYLE
                else:
                    style = _BLOCK_STYLE
                rank.node(block_hash, label=f"{short_hash(block_hash)}\\nheight {height}", **style)

    for block_hash in graph.topological_order():
        for parent in graph.get(block_hash).parents:
            dot.edge(parent, block_hash)

    return dot.source
