"""Shared contracts: error taxonomy, enums and semantic types.

Leaf package: nothing here imports from the rest of dagdemo.
"""

from dagdemo.contracts.enums import ArtifactFormat, ConversionStage, HandleState
from dagdemo.contracts.errors import (
    ConsistencyViolation,
    ConversionFailure,
    CorruptDag,
    DagDemoError,
    DestinationUnavailable,
    ExtractionFailure,
    GenerationFailure,
    MeshFailure,
    ProvisionFailure,
    TeardownFailure,
    WriteFailure,
)
from dagdemo.contracts.types import BlockHash, NodeIndex

__all__ = [
    "ArtifactFormat",
    "BlockHash",
    "ConsistencyViolation",
    "ConversionFailure",
    "ConversionStage",
    "CorruptDag",
    "DagDemoError",
    "DestinationUnavailable",
    "ExtractionFailure",
    "GenerationFailure",
    "HandleState",
    "MeshFailure",
    "NodeIndex",
    "ProvisionFailure",
    "TeardownFailure",
    "WriteFailure",
]
