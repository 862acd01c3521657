"""DagExtractor: collect every node's partial view and merge them.

Each node only knows the blocks it has seen, so no single node is trusted
as the canonical source. Views are merged by hash (see DagGraph.merge);
the merged graph is validated before it is handed to the renderer.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from dagdemo.contracts import ExtractionFailure
from dagdemo.core.dag.graph import DagGraph
from dagdemo.core.dag.models import DagNode, DagView

if TYPE_CHECKING:
    from dagdemo.cluster.provisioner import NodeHandle

logger = structlog.get_logger(__name__)


def collect_views(handles: Sequence[NodeHandle]) -> list[DagView]:
    """Read each node's locally known blocks, in handle order.

    Raises:
        ExtractionFailure: If a node cannot report its view
    """
    views: list[DagView] = []
    for handle in handles:
        try:
            nodes = tuple(handle.harness.dag_view())
        except Exception as e:
            raise ExtractionFailure(handle.index, e) from e
        for node in nodes:
            if not isinstance(node, DagNode):
                raise ExtractionFailure(handle.index, TypeError(f"expected DagNode, got {type(node).__name__}"))
        views.append(DagView(node_index=handle.index, nodes=nodes))
        logger.debug("Dag view collected", node=handle.index, blocks=len(nodes))
    return views


def extract(handles: Sequence[NodeHandle]) -> DagGraph:
    """Build the canonical DAG across all nodes.

    Returns:
        Merged, validated DagGraph

    Raises:
        ExtractionFailure: If a node cannot report its view
        ConsistencyViolation: If two nodes disagree on a block's parents
        CorruptDag: If the merged graph has a cycle or an unknown parent
    """
    views = collect_views(handles)
    graph = DagGraph.merge(views)
    graph.validate()
    logger.info(
        "Dag extracted",
        views=len(views),
        blocks=graph.node_count,
        edges=graph.edge_count,
        tips=len(graph.tips()),
    )
    return graph
