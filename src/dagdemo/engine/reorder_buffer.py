"""Reorder buffer that releases results in submission order.

Generation requests finish in whatever order the nodes happen to finish,
but results are reported aligned to node index. Each released entry also
carries the order it completed in, which the run summary reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock


@dataclass(frozen=True, slots=True)
class BufferEntry[T]:
    """Entry released from the reorder buffer.

    Attributes:
        submit_index: Order in which the item was submitted (0-indexed)
        complete_index: Order in which the item completed (may differ from submit)
        result: The value the item completed with
    """

    submit_index: int
    complete_index: int
    result: T


@dataclass
class _Slot[T]:
    complete_index: int | None = None
    result: T | None = None


class ReorderBuffer[T]:
    """Thread-safe buffer that reorders results to match submission order.

    Usage:
        buffer = ReorderBuffer[GenerationOutcome]()
        idx = buffer.submit()
        ...
        buffer.complete(idx, outcome)        # any thread, any order
        ready = buffer.get_ready_results()   # head-of-line entries only
    """

    def __init__(self) -> None:
        self._slots: dict[int, _Slot[T]] = {}
        self._next_submit = 0
        self._next_emit = 0
        self._complete_counter = 0
        self._lock = Lock()

    @property
    def pending_count(self) -> int:
        """Number of submitted but not-yet-released items."""
        with self._lock:
            return self._next_submit - self._next_emit

    def submit(self) -> int:
        """Reserve the next slot and return its index."""
        with self._lock:
            idx = self._next_submit
            self._slots[idx] = _Slot()
            self._next_submit += 1
            return idx

    def complete(self, index: int, result: T) -> None:
        """Record the result for a slot.

        Raises:
            KeyError: If index was never submitted (or already released)
            ValueError: If index was already completed
        """
        with self._lock:
            if index not in self._slots:
                raise KeyError(f"Index {index} was never submitted")
            slot = self._slots[index]
            if slot.complete_index is not None:
                raise ValueError(f"Index {index} was already completed")

            slot.result = result
            slot.complete_index = self._complete_counter
            self._complete_counter += 1

    def get_ready_results(self) -> list[BufferEntry[T]]:
        """Release every completed slot whose predecessors have all been released."""
        with self._lock:
            ready: list[BufferEntry[T]] = []
            while self._next_emit in self._slots:
                slot = self._slots[self._next_emit]
                if slot.complete_index is None:
                    break
                ready.append(
                    BufferEntry(
                        submit_index=self._next_emit,
                        complete_index=slot.complete_index,
                        result=slot.result,  # type: ignore[arg-type]
                    )
                )
                del self._slots[self._next_emit]
                self._next_emit += 1
            return ready
