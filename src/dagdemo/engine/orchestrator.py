"""Orchestrator: provision -> mesh -> generate -> collect -> extract -> render -> save.

Every stage runs sequentially on the calling thread except block
generation, which fans out to one worker per node and fans back in at a
single barrier.

Teardown discipline: once provision() has returned, every handle is torn
down on every exit path (success, stage error, KeyboardInterrupt), each
one independently. If the run already failed, teardown failures are only
logged and the original error propagates; if the run succeeded, they are
raised as TeardownFailure.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from dagdemo.cluster import (
    HarnessFactory,
    MeshConnector,
    NodeHandle,
    SimNetHarnessFactory,
    provision,
    teardown_all,
)
from dagdemo.contracts import TeardownFailure
from dagdemo.core.config import DagDemoSettings
from dagdemo.core.dag import DagGraph, extract
from dagdemo.engine.generation import BlockProducer, CollectionResult, await_all
from dagdemo.render import GraphRenderer, OutputResolver

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    """Summary of a completed run.

    Attributes:
        output_path: Where the HTML document was written
        node_count: Nodes provisioned
        blocks_per_node: Blocks each node reported mining, by node index
        dag_blocks: Blocks in the merged DAG (genesis included)
        dag_edges: Parent links in the merged DAG
        dag_tips: Blocks with no children
        duration_ms: Wall time of the whole run
    """

    output_path: Path
    node_count: int
    blocks_per_node: tuple[int, ...]
    dag_blocks: int
    dag_edges: int
    dag_tips: int
    duration_ms: float


class Orchestrator:
    """Runs one cluster end to end and guarantees its teardown.

    Usage:
        orchestrator = Orchestrator(SimNetHarnessFactory())
        result = orchestrator.run(node_count=4, block_count=50, output=None)
        print(result.output_path)
    """

    def __init__(
        self,
        factory: HarnessFactory,
        *,
        renderer: GraphRenderer | None = None,
        resolver: OutputResolver | None = None,
    ) -> None:
        self._factory = factory
        self._renderer = renderer or GraphRenderer()
        self._resolver = resolver or OutputResolver()

    def run(self, *, node_count: int, block_count: int, output: Path | str | None = None) -> RunResult:
        """Run the whole pipeline.

        Args:
            node_count: Nodes to provision
            block_count: Blocks to generate on each node
            output: Requested output path (see OutputResolver for policy)

        Returns:
            RunResult describing what was produced

        Raises:
            DagDemoError: The first stage failure, after teardown
        """
        with structlog.contextvars.bound_contextvars(run_id=uuid.uuid4().hex[:12]):
            started = time.perf_counter()
            logger.info("Run started", nodes=node_count, blocks_per_node=block_count)

            # provision() cleans up after itself if it fails part-way
            handles = provision(self._factory, node_count)
            try:
                output_path, collected, graph = self._run_cluster(handles, block_count, output)
            except BaseException as e:
                logger.error("Run failed", error=str(e), error_type=type(e).__name__)
                teardown_all(handles)
                raise
            self._teardown(handles)

            result = RunResult(
                output_path=output_path,
                node_count=len(handles),
                blocks_per_node=tuple(len(o.blocks) for o in collected.outcomes),
                dag_blocks=graph.node_count,
                dag_edges=graph.edge_count,
                dag_tips=len(graph.tips()),
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            logger.info("Run completed", path=str(output_path), duration_ms=round(result.duration_ms, 1))
            return result

    def _run_cluster(
        self,
        handles: Sequence[NodeHandle],
        block_count: int,
        output: Path | str | None,
    ) -> tuple[Path, CollectionResult, DagGraph]:
        MeshConnector().connect(handles)

        with BlockProducer() as producer:
            futures = producer.generate(handles, block_count)
            collected = await_all(futures)
        collected.raise_for_failure()

        graph = extract(handles)
        artifact = self._renderer.render(graph)
        output_path = self._resolver.save(artifact, output)
        return output_path, collected, graph

    def _teardown(self, handles: Sequence[NodeHandle]) -> None:
        failures = teardown_all(handles)
        if failures:
            raise TeardownFailure(failures)


def run_net(settings: DagDemoSettings, output: Path | str | None = None) -> RunResult:
    """Run the stock demo on the simulated network with the given settings."""
    orchestrator = Orchestrator(
        SimNetHarnessFactory(settings.simnet),
        renderer=GraphRenderer(title=settings.title),
    )
    return orchestrator.run(
        node_count=settings.node_count,
        block_count=settings.block_count,
        output=output,
    )
