"""Status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class HandleState(StrEnum):
    """Lifecycle state of a provisioned node handle.

    Transitions only move forward: created -> connected -> torn_down,
    or created -> torn_down when the run aborts before meshing.
    """

    CREATED = "created"
    CONNECTED = "connected"
    TORN_DOWN = "torn_down"


class ArtifactFormat(StrEnum):
    """Format tag of a rendered artifact."""

    DOT = "dot"
    SVG = "svg"
    HTML = "html"


class ConversionStage(StrEnum):
    """Stage of the render pipeline, used to tag conversion failures."""

    GRAPH_TO_DOT = "graph_to_dot"
    DOT_TO_SVG = "dot_to_svg"
    STRIP_PREAMBLE = "strip_preamble"
    WRAP_DOCUMENT = "wrap_document"
