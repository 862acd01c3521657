"""Mesh connector: links every provisioned node to every other node."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import combinations

import networkx as nx
import structlog

from dagdemo.cluster.provisioner import NodeHandle
from dagdemo.contracts import MeshFailure, NodeIndex

logger = structlog.get_logger(__name__)


class MeshConnector:
    """Connects handles pairwise into a full mesh.

    Remembers which pairs it has already linked, so calling connect() again
    with the same handles opens no duplicate connections.
    """

    def __init__(self) -> None:
        self._pairs: set[frozenset[NodeIndex]] = set()

    @property
    def pairs(self) -> frozenset[frozenset[NodeIndex]]:
        """Connected pairs (by node index)."""
        return frozenset(self._pairs)

    def topology(self, handles: Sequence[NodeHandle]) -> nx.Graph:
        """Undirected connection graph over the given handles."""
        graph: nx.Graph = nx.Graph()
        graph.add_nodes_from(handle.index for handle in handles)
        graph.add_edges_from(tuple(pair) for pair in self._pairs)
        return graph

    def connect(self, handles: Sequence[NodeHandle]) -> None:
        """Connect every handle to every other handle.

        Raises:
            MeshFailure: If any pair fails to connect, or the resulting
                connection graph does not span every handle
        """
        for a, b in combinations(handles, 2):
            pair = frozenset((a.index, b.index))
            if pair in self._pairs:
                continue
            try:
                a.harness.connect(b.harness)
            except Exception as e:
                logger.error(
                    "Peer connection failed",
                    node=a.index,
                    peer=b.index,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise MeshFailure(f"node {a.index} -> node {b.index}: {e}") from e
            self._pairs.add(pair)

        if handles and not nx.is_connected(self.topology(handles)):
            components = nx.number_connected_components(self.topology(handles))
            raise MeshFailure(f"connection graph has {components} components, expected 1")

        for handle in handles:
            handle.mark_connected()
        logger.info("Cluster meshed", nodes=len(handles), connections=len(self._pairs))
