"""Types for block-DAG operations.

Leaf module: no intra-package imports beyond contracts (prevents import cycles).
"""

from __future__ import annotations

from dataclasses import dataclass

from dagdemo.contracts.types import BlockHash


@dataclass(frozen=True, slots=True)
class DagNode:
    """One block as reported by a node.

    Parent order is part of the block's identity: two reports of the same
    hash must carry the same parents in the same order. Genesis is the
    only block with no parents.
    """

    block_hash: BlockHash
    parents: tuple[BlockHash, ...] = ()

    @property
    def is_genesis(self) -> bool:
        return not self.parents


@dataclass(frozen=True, slots=True)
class DagView:
    """Partial DAG observed by a single node.

    Attributes:
        node_index: Index of the reporting node
        nodes: Blocks the node knows about, in the order it reported them
    """

    node_index: int
    nodes: tuple[DagNode, ...]
