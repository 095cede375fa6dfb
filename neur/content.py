"""Page rendering for neur.

Turns markdown documents and HTML pages into final HTML.

Markdown: the frontmatter becomes the render context, the body is converted
to HTML and stored under ``content``, and the document's bound template
renders the result. HTML pages are rendered as templates in their own right.

Key classes:
- PageRenderer: Renders markdown and HTML entries through the template engine.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from jinja2 import TemplateSyntaxError
from markupsafe import Markup

from .errors import RenderError
from .extractors import extract_frontmatter
from .protocols import MarkdownConverter, TemplateRenderer
from .renderers import MarkdownRenderer
from .scanner import SourceEntry
from .templates import FALLBACK_TEMPLATE, TemplateResolver

logger = logging.getLogger(__name__)

CONTENT_KEY = "content"


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    if isinstance(exc, TemplateSyntaxError):
        return f"Template syntax error on line {exc.lineno}: {exc.message}"

    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"

    return f"{error_type}: {error_msg}"


class PageRenderer:
    """Renders pages through the template engine.

    Attributes:
        engine: Template renderer (Jinja2 by default).
        resolver: Template resolver holding markdown bindings.
        markdown: Markdown converter.
        global_context: Variables passed to every page.
    """

    def __init__(
        self,
        engine: TemplateRenderer,
        resolver: TemplateResolver,
        markdown: MarkdownConverter | None = None,
        global_context: Mapping[str, Any] | None = None,
    ):
        self.engine = engine
        self.resolver = resolver
        self.markdown = markdown or MarkdownRenderer()
        self.global_context = dict(global_context or {})

    def build_context(self, frontmatter: Mapping[str, str], body_html: str) -> dict[str, Any]:
        """Build the render context for a markdown document.

        Frontmatter overrides global variables. ``content`` is always the
        rendered body and cannot be set from frontmatter.
        """
        context: dict[str, Any] = dict(self.global_context)
        context.update(frontmatter)
        context[CONTENT_KEY] = Markup(body_html)
        return context

    def render_markdown(self, entry: SourceEntry, text: str) -> str:
        """Render a markdown document with its bound template.

        Args:
            entry: The markdown source entry.
            text: Raw document text.

        Returns:
            Final HTML.

        Raises:
            FrontmatterError: If the metadata block is malformed.
            RenderError: If the template engine fails.
        """
        frontmatter = extract_frontmatter(text, entry.path)
        if CONTENT_KEY in frontmatter.context:
            logger.warning(
                "%s: frontmatter key 'content' is reserved and was ignored",
                entry.relative_path,
            )
        binding = self.resolver.resolve(entry)
        try:
            body_html = self.markdown.convert(frontmatter.body)
            context = self.build_context(frontmatter.context, body_html)
            if binding.template is None:
                return self.engine.render_string(FALLBACK_TEMPLATE, context)
            logger.debug("Rendering %s with %s", entry.relative_path, binding.template)
            return self.engine.render(binding.template, context)
        except Exception as exc:
            raise RenderError(entry.path, _format_error_message(exc), exc) from exc

    def render_html(self, entry: SourceEntry, text: str) -> str:
        """Render an HTML page as a standalone template.

        Args:
            entry: The HTML page entry.
            text: The page's template source.

        Returns:
            Final HTML.

        Raises:
            RenderError: If the template engine fails.
        """
        try:
            return self.engine.render_string(text, dict(self.global_context))
        except Exception as exc:
            raise RenderError(entry.path, _format_error_message(exc), exc) from exc
