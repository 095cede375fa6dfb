"""Protocol definitions for neur.

The pipeline talks to its three engines (templating, markdown, CSS) through
these interfaces only. Any implementation with the same shape can stand in
for the defaults, which keeps the pipeline contracts independent of the
libraries behind them.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MarkdownConverter(Protocol):
    """Protocol for converting markdown text to HTML."""

    @abstractmethod
    def convert(self, text: str) -> str:
        """Convert markdown source to an HTML fragment."""
        ...


@runtime_checkable
class TemplateRenderer(Protocol):
    """Protocol for rendering templates.

    Template names are POSIX paths relative to the source directory.
    Implementations raise their own exceptions on failure; the page renderer
    wraps them with the offending file path.
    """

    @abstractmethod
    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render the named template.

        Args:
            name: Source-relative template name, e.g. ``posts/_template.html``.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        ...

    @abstractmethod
    def render_string(self, template: str, context: Mapping[str, Any]) -> str:
        """Render a template given as a string.

        Args:
            template: Template source to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        ...


@runtime_checkable
class StylesheetTransformer(Protocol):
    """Protocol for the CSS transform function."""

    def __call__(self, text: str, minify: bool) -> str: ...
