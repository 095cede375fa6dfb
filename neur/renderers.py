"""Markdown rendering for neur.

Converts markdown bodies to HTML with mistune. Fenced code blocks that name
a language are highlighted with Pygments.

Key classes:
- MarkdownRenderer: Implements the MarkdownConverter protocol.
"""

from __future__ import annotations

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer that keeps raw HTML and highlights fenced code."""

    def __init__(self):
        super().__init__(escape=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'javascript').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info and info.strip() else None
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{lang}"' if lang else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML."""

    def __init__(self, plugins: list[str] | None = None):
        self.plugins = list(MARKDOWN_PLUGINS if plugins is None else plugins)

    def convert(self, text: str) -> str:
        """Render Markdown content to HTML.

        A fresh parser is built per call so one renderer can be shared
        between worker threads.

        Args:
            text: Markdown source.

        Returns:
            Rendered HTML.
        """
        markdown = mistune.create_markdown(
            renderer=_HighlightRenderer(), plugins=self.plugins
        )
        return markdown(text)


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML with the default renderer."""
    return MarkdownRenderer().convert(text)
