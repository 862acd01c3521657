"""Rendered artifacts: immutable bytes tagged with their format."""

from __future__ import annotations

from dataclasses import dataclass

from dagdemo.contracts import ArtifactFormat


@dataclass(frozen=True, slots=True)
class RenderedArtifact:
    """Output of one stage of the render pipeline.

    Never mutated; each stage produces a new artifact from the previous one.
    """

    content: bytes
    format: ArtifactFormat

    def __len__(self) -> int:
        return len(self.content)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")
