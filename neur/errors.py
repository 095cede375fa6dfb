"""Error taxonomy for neur.

Every failure the generator reports derives from NeurError. Errors tied to a
single source file carry that file's path so the CLI can name it.

Classes:
    NeurError: Base class for all neur errors.
    ConfigError: Invalid or conflicting configuration.
    SourceIOError: Source tree could not be traversed.
    BuildError: Base for per-file failures, carries the offending path.
    FrontmatterError: Malformed frontmatter block.
    RenderError: Template rendering failed.
    AssetError: Stylesheet transformation failed.
    CollisionError: Two sources map to the same output path.
    OutputError: A result could not be written.
"""

from __future__ import annotations

from pathlib import Path


class NeurError(Exception):
    """Base class for every error raised by neur."""


class ConfigError(NeurError):
    """Raised when the effective configuration is invalid."""


class SourceIOError(NeurError):
    """Raised when a source directory cannot be read.

    Attributes:
        path: Directory that failed.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class BuildError(NeurError):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class FrontmatterError(BuildError):
    """Raised for an unterminated or malformed frontmatter block."""


class RenderError(BuildError):
    """Raised when the template engine fails on a page."""


class AssetError(BuildError):
    """Raised when a stylesheet cannot be transformed."""


class CollisionError(BuildError):
    """Raised when distinct sources resolve to the same output path.

    Attributes:
        sources: Every source path competing for the output.
        output_path: The contested output path, relative to the output dir.
    """

    def __init__(self, sources: list[Path], output_path: Path):
        self.sources = sources
        self.output_path = output_path
        names = ", ".join(p.as_posix() for p in sources)
        super().__init__(
            sources[0],
            f"output path {output_path.as_posix()} is produced by more than one source: {names}",
        )


class OutputError(BuildError):
    """Raised when a result cannot be written to the output directory."""
