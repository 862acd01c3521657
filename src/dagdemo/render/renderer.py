"""GraphRenderer: DagGraph -> DOT -> SVG -> HTML.

A strictly linear pipeline. Every stage's failure is raised as
ConversionFailure tagged with the stage, and no partial artifact escapes.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from dagdemo.contracts import ArtifactFormat, ConversionFailure, ConversionStage
from dagdemo.core.dag import DagGraph
from dagdemo.render.artifact import RenderedArtifact
from dagdemo.render.convert import dot_to_svg, strip_preamble, wrap_document
from dagdemo.render.dot import graph_to_dot

logger = structlog.get_logger(__name__)

type ToImage = Callable[[str], bytes]
type StripPreamble = Callable[[bytes], bytes]
type WrapDocument = Callable[[bytes, str], bytes]


class GraphRenderer:
    """Renders a DagGraph as an HTML document embedding an SVG image.

    The conversion functions are injectable so the pipeline can run
    without a Graphviz install (tests) or against a different layout
    engine.
    """

    def __init__(
        self,
        *,
        title: str = "dag",
        to_image: ToImage = dot_to_svg,
        strip: StripPreamble = strip_preamble,
        wrap: WrapDocument = wrap_document,
    ) -> None:
        self._title = title
        self._to_image = to_image
        self._strip = strip
        self._wrap = wrap

    def to_dot(self, graph: DagGraph) -> RenderedArtifact:
        try:
            source = graph_to_dot(graph, name=self._title)
        except Exception as e:
            raise ConversionFailure(ConversionStage.GRAPH_TO_DOT, e) from e
        return RenderedArtifact(source.encode("utf-8"), ArtifactFormat.DOT)

    def to_svg(self, dot: RenderedArtifact) -> RenderedArtifact:
        try:
            svg = self._to_image(dot.text)
        except Exception as e:
            raise ConversionFailure(ConversionStage.DOT_TO_SVG, e) from e
        return RenderedArtifact(svg, ArtifactFormat.SVG)

    def to_html(self, svg: RenderedArtifact) -> RenderedArtifact:
        try:
            fragment = self._strip(svg.content)
        except Exception as e:
            raise ConversionFailure(ConversionStage.STRIP_PREAMBLE, e) from e
        try:
            document = self._wrap(fragment, self._title)
        except Exception as e:
            raise ConversionFailure(ConversionStage.WRAP_DOCUMENT, e) from e
        return RenderedArtifact(document, ArtifactFormat.HTML)

    def render(self, graph: DagGraph) -> RenderedArtifact:
        """Run the full pipeline.

        Raises:
            ConversionFailure: If any stage fails
        """
        dot = self.to_dot(graph)
        svg = self.to_svg(dot)
        html = self.to_html(svg)
        logger.info(
            "Dag rendered",
            dot_bytes=len(dot),
            svg_bytes=len(svg),
            html_bytes=len(html),
        )
        return html
