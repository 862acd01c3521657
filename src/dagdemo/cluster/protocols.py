"""Harness protocols: the contract a test node backend must satisfy.

The node process itself is an external collaborator. These protocols are
what the provisioner, mesh connector, block producer and DAG extractor
call; anything that implements them can back a run (the bundled
simulated network, or a wrapper around real node processes).

They're used for type checking, not runtime enforcement.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dagdemo.contracts import BlockHash
    from dagdemo.core.dag import DagNode


@runtime_checkable
class NodeHarness(Protocol):
    """One controllable test node instance.

    Each method is only ever called from one thread at a time for a given
    harness; the orchestrator never targets the same node concurrently.
    """

    def connect(self, peer: "NodeHarness") -> None:
        """Open a peer connection to another node so blocks propagate both ways."""
        ...

    def generate(self, count: int) -> "Sequence[BlockHash]":
        """Mine count blocks and return their hashes once all are mined.

        Blocking. The block producer runs this on a worker thread.
        """
        ...

    def dag_view(self) -> "Sequence[DagNode]":
        """Return every block this node knows about."""
        ...

    def teardown(self) -> None:
        """Stop the node and release everything it holds."""
        ...


@runtime_checkable
class HarnessFactory(Protocol):
    """Creates and fully sets up node instances."""

    def create(self, index: int) -> NodeHarness:
        """Create node number index and bring it to a running state.

        Raises:
            Exception: Any failure; the provisioner wraps it as ProvisionFailure.
        """
        ...
