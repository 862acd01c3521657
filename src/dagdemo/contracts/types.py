"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different values.
"""

from typing import NewType

BlockHash = NewType("BlockHash", str)
"""Hex-encoded block identity (e.g., '3fa9c0...'). Dedup key when merging DAG views."""

NodeIndex = NewType("NodeIndex", int)
"""Position of a node in the provisioned cluster (0..N-1)."""
