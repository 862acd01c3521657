"""Rendering: DagGraph -> DOT -> SVG -> HTML, and writing the result."""

from dagdemo.render.artifact import RenderedArtifact
from dagdemo.render.output import Destination, OutputResolver
from dagdemo.render.renderer import GraphRenderer

__all__ = [
    "Destination",
    "GraphRenderer",
    "OutputResolver",
    "RenderedArtifact",
]
