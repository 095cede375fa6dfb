"""Site building functionality for neur.

This module wires the pipeline together: scan the source tree, render or
transform every generated entry, check output paths for collisions, then
write the results.

Key functions:
- build_site: Main function to build the entire site.
- _Pipeline: Produces the artifact for a single source entry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from .assets import AssetTransformer
from .config import Config
from .content import PageRenderer
from .errors import BuildError
from .output import Artifact, OutputWriter, check_output_paths, output_path_for
from .protocols import MarkdownConverter, TemplateRenderer
from .scanner import SourceEntry, SourceKind, SourceScanner
from .templates import TemplateEngine, TemplateResolver

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        artifacts: Every artifact produced, in source order.
        written: Paths of the files written.
        output_dir: Directory where the site was built.
        skipped: Source files that could not be read.
    """

    artifacts: list[Artifact]
    written: list[Path]
    output_dir: Path
    skipped: list[PurePosixPath] = field(default_factory=list)


class _Pipeline:
    """Per-entry processing shared by all workers."""

    def __init__(self, pages: PageRenderer, assets: AssetTransformer):
        self.pages = pages
        self.assets = assets

    def process(self, entry: SourceEntry) -> Artifact | None:
        """Produce the artifact for an entry, or None if it is unreadable."""
        try:
            raw = entry.path.read_bytes()
        except OSError as exc:
            logger.warning("Skipping unreadable file %s: %s", entry.relative_path, exc)
            return None

        if entry.kind is SourceKind.OTHER:
            return Artifact(entry, output_path_for(entry), raw)

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BuildError(entry.path, f"File is not valid UTF-8: {exc}", exc) from exc

        if entry.kind is SourceKind.MARKDOWN:
            data = self.pages.render_markdown(entry, text)
        elif entry.kind is SourceKind.HTML_PAGE:
            data = self.pages.render_html(entry, text)
        elif entry.kind is SourceKind.STYLESHEET:
            data = self.assets.transform_entry(entry, text)
        else:
            raise ValueError(f"Partials are not generated: {entry.relative_path}")
        logger.debug("Processed %s", entry.relative_path)
        return Artifact(entry, output_path_for(entry), data)


def build_site(
    config: Config,
    workers: int = 1,
    global_context: Mapping[str, Any] | None = None,
    engine: TemplateRenderer | None = None,
    markdown: MarkdownConverter | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        config: Effective build configuration.
        workers: Number of threads processing entries. 1 processes inline.
        global_context: Variables available to every page.
        engine: Optional template renderer replacing the Jinja2 engine.
        markdown: Optional markdown converter replacing mistune.

    Returns:
        BuildResult describing what was produced and written.

    Raises:
        SourceIOError: If the source tree cannot be traversed.
        BuildError: Or one of its subclasses, for the first fatal file error.
            Files written before the failure are left in place.
    """
    scan = SourceScanner(config).scan()
    resolver = TemplateResolver(scan.entries)
    pages = PageRenderer(
        engine or TemplateEngine(config.source),
        resolver,
        markdown=markdown,
        global_context=global_context,
    )
    pipeline = _Pipeline(pages, AssetTransformer(config))

    generated = list(scan.generated())
    check_output_paths(generated)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(pipeline.process, generated))
    else:
        results = [pipeline.process(entry) for entry in generated]

    artifacts: list[Artifact] = []
    skipped = list(scan.skipped)
    for entry, artifact in zip(generated, results):
        if artifact is None:
            skipped.append(entry.relative_path)
        else:
            artifacts.append(artifact)

    written = OutputWriter(config).write(artifacts)
    logger.info(
        "Built %d files into %s (%d skipped)", len(written), config.output, len(skipped)
    )
    return BuildResult(
        artifacts=artifacts,
        written=written,
        output_dir=config.output,
        skipped=skipped,
    )
