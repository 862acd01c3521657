"""OutputResolver: decide where the rendered document goes and write it.

Policy, in order:
1. No path: a new uniquely named file in the system temp directory
2. Path is an existing directory: a new uniquely named file inside it
3. Otherwise: the path itself, created or truncated
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO

import structlog

from dagdemo.contracts import DestinationUnavailable, WriteFailure
from dagdemo.render.artifact import RenderedArtifact

logger = structlog.get_logger(__name__)

DEFAULT_PREFIX = "dag_"
DEFAULT_SUFFIX = ".html"


@dataclass(frozen=True)
class Destination:
    """An opened, writable output file."""

    path: Path
    handle: IO[bytes]


class OutputResolver:
    """Resolves and writes the output document.

    Auto-named files follow the pattern dag_<random>.html.
    """

    def __init__(self, *, prefix: str = DEFAULT_PREFIX, suffix: str = DEFAULT_SUFFIX) -> None:
        self._prefix = prefix
        self._suffix = suffix

    def resolve(self, requested: Path | str | None) -> Destination:
        """Open the destination for the requested path.

        Raises:
            DestinationUnavailable: If the file cannot be created or opened
        """
        path = Path(requested) if requested else None
        try:
            if path is None:
                handle: IO[bytes] = tempfile.NamedTemporaryFile(
                    mode="wb", prefix=self._prefix, suffix=self._suffix, delete=False
                )
            elif path.is_dir():
                handle = tempfile.NamedTemporaryFile(
                    mode="wb", prefix=self._prefix, suffix=self._suffix, dir=path, delete=False
                )
            else:
                handle = path.open("wb")
        except OSError as e:
            raise DestinationUnavailable(path, e) from e

        resolved = Path(handle.name)
        logger.debug("Output destination resolved", requested=str(requested or ""), path=str(resolved))
        return Destination(path=resolved, handle=handle)

    def persist(self, artifact: RenderedArtifact, destination: Destination) -> Path:
        """Write the artifact and close the destination.

        Raises:
            WriteFailure: If writing or closing fails
        """
        try:
            with destination.handle as fh:
                fh.write(artifact.content)
        except OSError as e:
            raise WriteFailure(destination.path, e) from e
        logger.info("Dag saved", path=str(destination.path), bytes=len(artifact))
        return destination.path

    def save(self, artifact: RenderedArtifact, requested: Path | str | None) -> Path:
        """Resolve the destination and write the artifact to it.

        Returns:
            Path of the file written
        """
        return self.persist(artifact, self.resolve(requested))
