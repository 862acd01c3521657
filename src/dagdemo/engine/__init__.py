"""Run engine: concurrent block generation and end-to-end orchestration."""

from dagdemo.engine.generation import (
    BlockProducer,
    CollectionResult,
    GenerationFuture,
    GenerationOutcome,
    await_all,
)
from dagdemo.engine.orchestrator import Orchestrator, RunResult, run_net

__all__ = [
    "BlockProducer",
    "CollectionResult",
    "GenerationFuture",
    "GenerationOutcome",
    "Orchestrator",
    "RunResult",
    "await_all",
    "run_net",
]
