"""Output path mapping and writing for neur.

The output tree mirrors the source tree. Markdown documents become ``.html``
files; everything else keeps its name. Collisions are detected across the
full set of artifacts before anything is written.

Key components:
- Artifact: A produced file waiting to be written.
- output_path_for: Map a source entry to its output path.
- check_output_paths: Fail early if two planned outputs collide.
- check_collisions: Fail if two artifacts map to the same output.
- OutputWriter: Writes artifacts under the output directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .config import Config
from .errors import CollisionError, OutputError
from .scanner import SourceEntry
from .utils import is_markdown

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """A rendered or copied file ready to be written.

    Attributes:
        entry: The source entry it was produced from.
        output_path: Path relative to the output directory.
        data: Text (written as UTF-8) or raw bytes (written verbatim).
    """

    entry: SourceEntry
    output_path: PurePosixPath
    data: str | bytes


def output_path_for(entry: SourceEntry) -> PurePosixPath:
    """Map a source entry to its path relative to the output directory.

    Examples:
        ``posts/hello.md`` maps to ``posts/hello.html``;
        ``css/site.css`` maps to ``css/site.css``.
    """
    rel = entry.relative_path
    if is_markdown(rel):
        return rel.with_suffix(".html")
    return rel


def _collision_key(path: PurePosixPath) -> str:
    # Case-insensitive filesystems would merge paths differing only in case.
    return path.as_posix().casefold()


def _raise_on_collision(pairs: Iterable[tuple[SourceEntry, PurePosixPath]]) -> None:
    seen: dict[str, list[tuple[SourceEntry, PurePosixPath]]] = {}
    for entry, path in pairs:
        seen.setdefault(_collision_key(path), []).append((entry, path))
    for group in seen.values():
        sources = {entry.relative_path for entry, _ in group}
        if len(sources) > 1:
            raise CollisionError([entry.path for entry, _ in group], Path(group[0][1]))


def check_output_paths(entries: Iterable[SourceEntry]) -> None:
    """Ensure the planned output paths of the entries are unique.

    Raises:
        CollisionError: Naming every source that maps to the contested path.
    """
    _raise_on_collision((entry, output_path_for(entry)) for entry in entries)


def check_collisions(artifacts: Iterable[Artifact]) -> None:
    """Ensure no two distinct sources produce the same output path.

    Raises:
        CollisionError: Naming every source that maps to the contested path.
    """
    _raise_on_collision((a.entry, a.output_path) for a in artifacts)


class OutputWriter:
    """Writes artifacts below the configured output directory.

    Existing files are overwritten. The output directory is never cleaned.

    Attributes:
        config: Effective build configuration.
        output_dir: Root of the output tree.
    """

    def __init__(self, config: Config):
        self.config = config
        self.output_dir = config.output

    def target(self, artifact: Artifact) -> Path:
        return self.output_dir.joinpath(*artifact.output_path.parts)

    def write(self, artifacts: Sequence[Artifact]) -> list[Path]:
        """Write every artifact after checking for collisions.

        Args:
            artifacts: All artifacts of the run.

        Returns:
            Paths that were written, in artifact order.

        Raises:
            CollisionError: Before any write, if two sources collide.
            OutputError: If the output directory or a file cannot be written.
        """
        check_collisions(artifacts)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(
                self.output_dir, f"cannot create output directory: {exc.strerror or exc}", exc
            ) from exc
        written: list[Path] = []
        for artifact in artifacts:
            written.append(self.write_one(artifact))
        return written

    def write_one(self, artifact: Artifact) -> Path:
        target = self.target(artifact)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(artifact.data, bytes):
                target.write_bytes(artifact.data)
            else:
                with open(target, "w", encoding="utf-8", newline="") as f:
                    f.write(artifact.data)
        except OSError as exc:
            raise OutputError(
                artifact.entry.path, f"cannot write {target}: {exc.strerror or exc}", exc
            ) from exc
        logger.debug("Wrote %s", target)
        return target
