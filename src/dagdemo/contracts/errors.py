"""Error taxonomy for a dagdemo run.

Every stage of the run raises one of these, wrapping the underlying cause
with the context needed to act on it (stage name, node index, block hash).
None of them are retried: a fresh invocation is the retry mechanism.

The orchestrator always tears the cluster down before any of these
reaches the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from dagdemo.contracts.enums import ConversionStage
from dagdemo.contracts.types import BlockHash, NodeIndex


class DagDemoError(Exception):
    """Base class for all orchestration failures."""

    pass


class ProvisionFailure(DagDemoError):
    """A node instance could not be created or started.

    Attributes:
        index: Index of the node that failed to provision
        cause: Underlying exception from the harness
    """

    def __init__(self, index: int, cause: BaseException) -> None:
        super().__init__(f"unable to provision node {index}: {cause}")
        self.index = NodeIndex(index)
        self.cause = cause


class MeshFailure(DagDemoError):
    """Nodes could not be connected into a single network."""

    def __init__(self, cause: BaseException | str) -> None:
        super().__init__(f"unable to connect nodes: {cause}")
        self.cause = cause


class GenerationFailure(DagDemoError):
    """Block generation failed on one node.

    Attributes:
        node_index: Index of the node whose generation request failed
        cause: Underlying exception raised by the node
    """

    def __init__(self, node_index: int, cause: BaseException) -> None:
        super().__init__(f"failed to wait for blocks to generate on node {node_index}: {cause}")
        self.node_index = NodeIndex(node_index)
        self.cause = cause


class ConsistencyViolation(DagDemoError):
    """Two nodes reported different parents for the same block.

    Attributes:
        block_hash: Hash both nodes reported
        existing_parents: Parents already recorded in the merged graph
        conflicting_parents: Parents in the view being merged
    """

    def __init__(
        self,
        block_hash: BlockHash,
        existing_parents: Sequence[BlockHash],
        conflicting_parents: Sequence[BlockHash],
    ) -> None:
        super().__init__(
            f"nodes disagree on parents of block {block_hash}: {list(existing_parents)} != {list(conflicting_parents)}"
        )
        self.block_hash = block_hash
        self.existing_parents = tuple(existing_parents)
        self.conflicting_parents = tuple(conflicting_parents)


class CorruptDag(DagDemoError):
    """Merged graph has a cycle or a parent reference to an unknown block."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"corrupt dag: {reason}")
        self.reason = reason


class ConversionFailure(DagDemoError):
    """A render pipeline stage failed.

    Attributes:
        stage: Which conversion stage failed
        cause: Underlying exception
    """

    def __init__(self, stage: ConversionStage, cause: BaseException) -> None:
        super().__init__(f"render stage {stage} failed: {cause}")
        self.stage = stage
        self.cause = cause


class DestinationUnavailable(DagDemoError):
    """Output destination could not be created or opened."""

    def __init__(self, path: Path | None, cause: BaseException) -> None:
        where = str(path) if path is not None else "system temp directory"
        super().__init__(f"failed to create output file-handle in {where}: {cause}")
        self.path = path
        self.cause = cause


class WriteFailure(DagDemoError):
    """Rendered document could not be written to its destination."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(f"failed to save HTML file {path}: {cause}")
        self.path = path
        self.cause = cause


class TeardownFailure(DagDemoError):
    """One or more nodes failed to tear down after an otherwise successful run.

    Attributes:
        failures: (node index, exception) for every handle that failed
    """

    def __init__(self, failures: Sequence[tuple[int, BaseException]]) -> None:
        summary = "; ".join(f"node {index}: {type(exc).__name__}: {exc}" for index, exc in failures)
        super().__init__(f"teardown failed: {summary}")
        self.failures = tuple(failures)


class ExtractionFailure(DagDemoError):
    """A node could not report its view of the DAG.

    Attributes:
        node_index: Index of the node that failed to report
        cause: Underlying exception from the harness
    """

    def __init__(self, node_index: int, cause: BaseException) -> None:
        super().__init__(f"failed to read dag from node {node_index}: {cause}")
        self.node_index = NodeIndex(node_index)
        self.cause = cause
