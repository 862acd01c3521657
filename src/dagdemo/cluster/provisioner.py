"""Node provisioning and teardown.

provision() creates nodes one at a time. If node i fails, nodes 0..i-1 are
torn down before ProvisionFailure is raised, so a failed provision never
leaks running nodes.

teardown_all() is the release half of the cluster's lifecycle: it attempts
teardown on every handle independently, so one node failing to stop never
prevents the others from being stopped.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from dagdemo.cluster.protocols import HarnessFactory, NodeHarness
from dagdemo.contracts import HandleState, NodeIndex, ProvisionFailure

logger = structlog.get_logger(__name__)


class NodeHandle:
    """Exclusive owner of one provisioned node instance.

    Lifecycle: created -> connected -> torn_down (or created -> torn_down).
    teardown() reaches the underlying harness at most once.
    """

    def __init__(self, index: int, harness: NodeHarness) -> None:
        self._index = NodeIndex(index)
        self._harness = harness
        self._state = HandleState.CREATED

    def __repr__(self) -> str:
        return f"NodeHandle(index={self._index}, state={self._state})"

    @property
    def index(self) -> NodeIndex:
        return self._index

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def harness(self) -> NodeHarness:
        """The underlying node instance.

        Raises:
            RuntimeError: If the handle has been torn down
        """
        if self._state == HandleState.TORN_DOWN:
            raise RuntimeError(f"node {self._index} has been torn down")
        return self._harness

    def mark_connected(self) -> None:
        if self._state == HandleState.TORN_DOWN:
            raise RuntimeError(f"node {self._index} has been torn down")
        self._state = HandleState.CONNECTED

    def teardown(self) -> None:
        """Tear the node down.

        The handle counts as torn down even if the harness raises; the
        error still propagates so the caller can report it. Calling this
        again is a no-op.
        """
        if self._state == HandleState.TORN_DOWN:
            return
        self._state = HandleState.TORN_DOWN
        self._harness.teardown()


def provision(factory: HarnessFactory, count: int) -> list[NodeHandle]:
    """Create count nodes sequentially.

    Args:
        factory: Creates and sets up each node instance
        count: Number of nodes to create (>= 1)

    Returns:
        Handles ordered by index

    Raises:
        ValueError: If count < 1
        ProvisionFailure: If any node fails to come up. Already-created
            nodes have been torn down by the time this is raised.

    An interrupt (KeyboardInterrupt, SystemExit) while a node is starting
    also tears down the nodes already created, then propagates unchanged.
    """
    if count < 1:
        raise ValueError(f"node count must be >= 1, got {count}")

    handles: list[NodeHandle] = []
    try:
        for index in range(count):
            try:
                harness = factory.create(index)
            except Exception as e:
                logger.error(
                    "Node provisioning failed",
                    node=index,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise ProvisionFailure(index, e) from e

            handles.append(NodeHandle(index, harness))
            logger.debug("Node provisioned", node=index)
    except BaseException:
        teardown_all(handles)
        raise

    logger.info("Cluster provisioned", nodes=len(handles))
    return handles


def teardown_all(handles: Sequence[NodeHandle]) -> list[tuple[int, Exception]]:
    """Tear down every handle, continuing past individual failures.

    An interrupt raised by one handle's teardown does not stop the loop
    either: the remaining handles are still attempted, then the first
    interrupt is re-raised.

    Args:
        handles: Handles to release

    Returns:
        (node index, exception) for each handle whose teardown raised;
        empty when every node stopped cleanly
    """
    failures: list[tuple[int, Exception]] = []
    interrupted: BaseException | None = None
    for handle in handles:
        try:
            handle.teardown()
        except Exception as e:
            logger.warning(
                "Node teardown failed",
                node=handle.index,
                error=str(e),
                error_type=type(e).__name__,
            )
            failures.append((handle.index, e))
        except BaseException as e:
            logger.warning("Node teardown interrupted", node=handle.index, error_type=type(e).__name__)
            if interrupted is None:
                interrupted = e
    logger.debug("Cluster torn down", nodes=len(handles), failures=len(failures))
    if interrupted is not None:
        raise interrupted
    return failures
