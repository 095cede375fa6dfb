"""Source discovery for neur.

This module walks the source directory and classifies every regular file it
finds. Classification is a pure function of the file name.

Key classes:
- SourceKind: The five kinds of source file.
- SourceEntry: One discovered file.
- ScanResult: Entries plus the files that had to be skipped.
- SourceScanner: Walks a source tree.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath

from .config import Config
from .errors import SourceIOError
from .utils import is_hidden, is_html, is_markdown, is_partial, is_stylesheet

logger = logging.getLogger(__name__)


class SourceKind(Enum):
    HTML_PAGE = "html_page"
    HTML_PARTIAL = "html_partial"
    MARKDOWN = "markdown"
    STYLESHEET = "stylesheet"
    OTHER = "other"


def classify(name: str) -> SourceKind:
    """Classify a file by its name.

    Args:
        name: File name or path; only the final component matters.

    Returns:
        The SourceKind for the file.
    """
    path = PurePosixPath(name)
    if is_partial(path):
        return SourceKind.HTML_PARTIAL
    if is_html(path):
        return SourceKind.HTML_PAGE
    if is_markdown(path):
        return SourceKind.MARKDOWN
    if is_stylesheet(path):
        return SourceKind.STYLESHEET
    return SourceKind.OTHER


@dataclass(frozen=True)
class SourceEntry:
    """A file discovered under the source directory.

    Attributes:
        relative_path: POSIX path relative to the source root.
        kind: Classification of the file.
        root: The source root the entry was found in.
    """

    relative_path: PurePosixPath
    kind: SourceKind
    root: Path = field(default=Path("."), compare=False)

    @property
    def path(self) -> Path:
        """Filesystem path of the entry."""
        return self.root.joinpath(*self.relative_path.parts)

    @property
    def is_generated(self) -> bool:
        """Whether the entry produces an output file of its own."""
        return self.kind is not SourceKind.HTML_PARTIAL


@dataclass
class ScanResult:
    """Result of scanning a source tree.

    Attributes:
        entries: Every readable file, partials included, in sorted order.
        skipped: Relative paths of files that could not be read.
    """

    entries: list[SourceEntry] = field(default_factory=list)
    skipped: list[PurePosixPath] = field(default_factory=list)

    def generated(self) -> Iterator[SourceEntry]:
        """Iterate over the entries that produce output."""
        return (entry for entry in self.entries if entry.is_generated)


class SourceScanner:
    """Recursively enumerates the files of a source directory.

    Dot-directories are skipped, as is the output directory when it sits
    inside the source. Symlinked directories are followed. A directory
    that links back to one of its own ancestors is a loop and fails the
    scan.

    Attributes:
        config: Effective build configuration.
    """

    def __init__(self, config: Config):
        self.config = config
        self.source = config.source
        self._output = config.output.resolve()

    def scan(self) -> ScanResult:
        """Walk the source tree.

        Returns:
            ScanResult with all discovered entries.

        Raises:
            SourceIOError: If the source is missing, a directory cannot be
                listed, or a symlink loop is found.
        """
        if not self.source.is_dir():
            raise SourceIOError(self.source, "source directory does not exist")

        result = ScanResult()
        # Each pending directory carries the real paths of its ancestors.
        stack: list[tuple[Path, PurePosixPath, frozenset[Path]]] = [
            (self.source, PurePosixPath(), frozenset())
        ]

        while stack:
            directory, rel_dir, ancestors = stack.pop()
            real = directory.resolve()
            if real in ancestors:
                raise SourceIOError(directory, "symlink loop detected")
            ancestors = ancestors | {real}

            try:
                children = sorted(os.scandir(directory), key=lambda e: e.name)
            except OSError as exc:
                raise SourceIOError(directory, f"cannot read directory: {exc.strerror or exc}") from exc

            subdirs: list[tuple[Path, PurePosixPath, frozenset[Path]]] = []
            for child in children:
                rel = rel_dir / child.name
                try:
                    if child.is_dir():
                        if is_hidden(child.name) or self._is_output(Path(child.path)):
                            logger.debug("Skipping directory %s", rel)
                            continue
                        subdirs.append((Path(child.path), rel, ancestors))
                        continue
                    if not child.is_file():
                        if child.is_symlink():
                            logger.warning("Skipping broken link %s", rel)
                            result.skipped.append(rel)
                        continue
                    if not os.access(child.path, os.R_OK):
                        raise PermissionError(f"permission denied: {child.path}")
                except OSError as exc:
                    logger.warning("Skipping unreadable file %s: %s", rel, exc)
                    result.skipped.append(rel)
                    continue
                result.entries.append(
                    SourceEntry(relative_path=rel, kind=classify(child.name), root=self.source)
                )

            # Reverse so the stack pops subdirectories in sorted order.
            stack.extend(reversed(subdirs))

        result.entries.sort(key=lambda e: e.relative_path.as_posix())
        logger.debug("Discovered %d files under %s", len(result.entries), self.source)
        return result

    def _is_output(self, directory: Path) -> bool:
        return directory.resolve() == self._output
