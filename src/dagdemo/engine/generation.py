"""Concurrent block generation: fan-out to every node, then one fan-in barrier.

BlockProducer.generate() submits one generation request per node to a
thread pool sized to the cluster, and returns a GenerationFuture per node
as soon as every request is in flight. await_all() then blocks until every
future has reached a terminal state, and reports outcomes aligned to node
index regardless of completion order.

Nothing here cancels work. A generation request that has been dispatched
runs to completion or failure even if another node has already failed.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Self

import structlog

from dagdemo.contracts import BlockHash, GenerationFailure, NodeIndex
from dagdemo.engine.reorder_buffer import ReorderBuffer

if TYPE_CHECKING:
    from dagdemo.cluster.provisioner import NodeHandle

logger = structlog.get_logger(__name__)


class GenerationFuture:
    """Handle for one in-flight generation request.

    The only way to get at the result is receive(), which blocks until the
    node has finished and either returns the mined hashes or raises
    GenerationFailure citing the node's index.
    """

    def __init__(self, node_index: int, future: Future[list[BlockHash]]) -> None:
        self._node_index = NodeIndex(node_index)
        self._future = future
        self._submitted_at = time.perf_counter()
        self._finished_at: float | None = None
        future.add_done_callback(self._record_finish)

    def __repr__(self) -> str:
        state = "done" if self._future.done() else "pending"
        return f"GenerationFuture(node_index={self._node_index}, {state})"

    def _record_finish(self, _future: Future[list[BlockHash]]) -> None:
        self._finished_at = time.perf_counter()

    @property
    def node_index(self) -> NodeIndex:
        return self._node_index

    @property
    def elapsed_ms(self) -> float | None:
        """Time from dispatch to completion, or None while still pending."""
        if not self._future.done():
            return None
        if self._finished_at is None:
            # Waiters are woken before done-callbacks run
            self._finished_at = time.perf_counter()
        return (self._finished_at - self._submitted_at) * 1000

    def done(self) -> bool:
        return self._future.done()

    def receive(self) -> tuple[BlockHash, ...]:
        """Block until the request finishes.

        Returns:
            Hashes of the blocks mined, in mining order

        Raises:
            GenerationFailure: If the node raised while generating
        """
        try:
            return tuple(self._future.result())
        except Exception as e:
            raise GenerationFailure(self._node_index, e) from e


class BlockProducer:
    """Dispatches non-blocking "generate N blocks" requests, one per node.

    Usage:
        with BlockProducer() as producer:
            futures = producer.generate(handles, block_count=50)
            collected = await_all(futures)

    Leaving the context shuts the pool down and waits for any request
    still running; in-flight requests are never cancelled.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        """Initialize producer.

        Args:
            max_workers: Thread pool size; defaults to one thread per handle
                passed to the first generate() call
        """
        self._max_workers = max_workers
        self._pool: ThreadPoolExecutor | None = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(wait=True)

    def shutdown(self, wait: bool = True) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=wait, cancel_futures=False)
            self._pool = None

    def generate(self, handles: Sequence[NodeHandle], block_count: int) -> list[GenerationFuture]:
        """Issue one generation request per handle and return without waiting.

        Args:
            handles: Nodes to mine on
            block_count: Blocks to mine on each node

        Returns:
            One future per handle, index-aligned with handles
        """
        if block_count < 1:
            raise ValueError(f"block count must be >= 1, got {block_count}")
        if not handles:
            return []

        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self._max_workers or len(handles),
                thread_name_prefix="dagdemo-generate",
            )

        futures: list[GenerationFuture] = []
        for handle in handles:
            # Resolve the harness here so a torn-down handle fails at dispatch
            harness = handle.harness
            future = self._pool.submit(harness.generate, block_count)
            futures.append(GenerationFuture(handle.index, future))
            logger.debug("Generation dispatched", node=handle.index, blocks=block_count)

        logger.info("Generation dispatched to all nodes", nodes=len(futures), blocks_per_node=block_count)
        return futures


@dataclass(frozen=True, slots=True)
class GenerationOutcome:
    """Terminal state of one node's generation request.

    Attributes:
        node_index: Node the request was sent to
        blocks: Mined hashes (empty on failure)
        error: GenerationFailure if the request failed, else None
        complete_index: Order in which this node finished relative to the others
        elapsed_ms: Time from dispatch to completion
    """

    node_index: NodeIndex
    blocks: tuple[BlockHash, ...]
    error: GenerationFailure | None
    complete_index: int
    elapsed_ms: float

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class CollectionResult:
    """Every node's outcome, in node-index order."""

    outcomes: tuple[GenerationOutcome, ...]

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> tuple[GenerationOutcome, ...]:
        return tuple(o for o in self.outcomes if o.error is not None)

    @property
    def first_error(self) -> GenerationFailure | None:
        """Failure of the lowest-indexed failed node, or None if all succeeded."""
        for outcome in self.outcomes:
            if outcome.error is not None:
                return outcome.error
        return None

    def raise_for_failure(self) -> None:
        """Raise the representative failure, if any node failed."""
        error = self.first_error
        if error is not None:
            raise error


def await_all(futures: Sequence[GenerationFuture]) -> CollectionResult:
    """Wait for every future to reach a terminal state.

    Does not stop at the first failure: every outcome is collected so the
    caller sees which nodes failed, not just the first.
    A node that raised KeyboardInterrupt or SystemExit is collected like
    any other failure, and the first such interrupt is re-raised after
    every node has finished.

    Args:
        futures: Futures returned by BlockProducer.generate()

    Returns:
        CollectionResult with exactly len(futures) outcomes in input order
    """
    buffer: ReorderBuffer[GenerationFuture] = ReorderBuffer()
    slots: dict[Future[list[BlockHash]], int] = {}
    for generation_future in futures:
        slots[generation_future._future] = buffer.submit()

    by_slot = dict(enumerate(futures))
    outcomes: list[GenerationOutcome] = []
    interrupts: list[BaseException] = []

    def _to_outcome(complete_index: int, generation_future: GenerationFuture) -> GenerationOutcome:
        try:
            blocks = generation_future.receive()
        except GenerationFailure as failure:
            logger.warning(
                "Generation failed",
                node=generation_future.node_index,
                error=str(failure.cause),
                error_type=type(failure.cause).__name__,
            )
            return GenerationOutcome(
                node_index=generation_future.node_index,
                blocks=(),
                error=failure,
                complete_index=complete_index,
                elapsed_ms=generation_future.elapsed_ms or 0.0,
            )
        except BaseException as e:
            # Recorded like any failure; re-raised once every node is collected
            logger.warning("Generation interrupted", node=generation_future.node_index, error_type=type(e).__name__)
            interrupts.append(e)
            return GenerationOutcome(
                node_index=generation_future.node_index,
                blocks=(),
                error=GenerationFailure(generation_future.node_index, e),
                complete_index=complete_index,
                elapsed_ms=generation_future.elapsed_ms or 0.0,
            )
        return GenerationOutcome(
            node_index=generation_future.node_index,
            blocks=blocks,
            error=None,
            complete_index=complete_index,
            elapsed_ms=generation_future.elapsed_ms or 0.0,
        )

    for future in as_completed(slots):
        slot = slots[future]
        buffer.complete(slot, by_slot[slot])
        for entry in buffer.get_ready_results():
            outcomes.append(_to_outcome(entry.complete_index, entry.result))

    if len(outcomes) != len(futures):
        raise RuntimeError(f"Collected {len(outcomes)} outcomes for {len(futures)} futures")

    result = CollectionResult(outcomes=tuple(outcomes))
    logger.info(
        "Generation finished",
        nodes=len(result),
        failed=[o.node_index for o in result.failures],
        blocks=sum(len(o.blocks) for o in result.outcomes),
    )
    if interrupts:
        raise interrupts[0]
    return result
