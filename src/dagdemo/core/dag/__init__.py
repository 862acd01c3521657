"""Block DAG model: per-node views, merge and validation."""

from dagdemo.core.dag.extractor import collect_views, extract
from dagdemo.core.dag.graph import DagGraph
from dagdemo.core.dag.models import DagNode, DagView

__all__ = [
    "DagGraph",
    "DagNode",
    "DagView",
    "collect_views",
    "extract",
]
