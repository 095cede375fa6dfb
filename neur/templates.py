"""Template resolution and rendering for neur.

Markdown documents are rendered through the nearest ``_template.html``
found in their directory or one of its ancestors. When no such file exists
the built-in fallback layout is used. HTML pages are templates themselves and
reach partials through Jinja2's own include/extends.

Key classes:
- TemplateBinding: A markdown entry paired with its governing template.
- TemplateResolver: Finds the governing template for markdown entries.
- TemplateEngine: Jinja2 environment over the source directory.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .scanner import SourceEntry, SourceKind
from .utils import TEMPLATE_NAME

__all__ = [
    "FALLBACK_TEMPLATE",
    "TemplateBinding",
    "TemplateEngine",
    "TemplateResolver",
]

FALLBACK_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
{% if title is defined %}<title>{{ title }}</title>
{% endif %}</head>
<body>
{{ content }}
</body>
</html>
"""


@dataclass(frozen=True)
class TemplateBinding:
    """Pairing of a markdown entry with the template that renders it.

    Attributes:
        entry: The markdown source entry.
        template: Source-relative name of the governing ``_template.html``,
            or None when the built-in fallback applies.
    """

    entry: SourceEntry
    template: str | None

    @property
    def is_fallback(self) -> bool:
        return self.template is None


class TemplateResolver:
    """Resolves the governing template for markdown documents.

    The resolver indexes which directories hold a ``_template.html`` from
    the scanned entries, so resolution never touches the filesystem. The
    nearest ancestor wins; templates are not merged.

    Attributes:
        template_dirs: Directories (relative to the source) holding a template.
    """

    def __init__(self, entries: Iterable[SourceEntry]):
        self.template_dirs: set[PurePosixPath] = {
            entry.relative_path.parent
            for entry in entries
            if entry.relative_path.name == TEMPLATE_NAME
        }
        self._bindings: dict[PurePosixPath, TemplateBinding] = {}

    def resolve(self, entry: SourceEntry) -> TemplateBinding:
        """Find the template for a markdown entry.

        Args:
            entry: A markdown source entry.

        Returns:
            The entry's TemplateBinding. Repeated calls return the same one.

        Raises:
            ValueError: If the entry is not a markdown document.
        """
        if entry.kind is not SourceKind.MARKDOWN:
            raise ValueError(f"Only markdown entries have templates: {entry.relative_path}")
        cached = self._bindings.get(entry.relative_path)
        if cached is not None:
            return cached
        binding = TemplateBinding(entry=entry, template=self._nearest(entry.relative_path))
        return self._bindings.setdefault(entry.relative_path, binding)

    def _nearest(self, relative_path: PurePosixPath) -> str | None:
        root = PurePosixPath()
        directory = relative_path.parent
        while True:
            if directory in self.template_dirs:
                return (directory / TEMPLATE_NAME).as_posix()
            if directory == root:
                return None
            directory = directory.parent


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Templates are loaded from the source directory by their relative POSIX
    path, so a page can ``{% include "partials/_nav.html" %}`` or
    ``{% extends "_base.html" %}``. Undefined variables are errors.

    Attributes:
        source_dir: Directory templates are loaded from.
        env: Jinja2 environment.
    """

    def __init__(self, source_dir: Path):
        self.source_dir = source_dir
        self.env = Environment(
            loader=FileSystemLoader(str(source_dir)),
            autoescape=select_autoescape(["html", "xml"], default_for_string=True),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render a template from the source directory.

        Args:
            name: Source-relative template name.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        return self.env.get_template(name).render(dict(context))

    def render_string(self, template: str, context: Mapping[str, Any]) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        tmpl = self.env.from_string(template)
        return tmpl.render(dict(context))
