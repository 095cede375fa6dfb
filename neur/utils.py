"""Utility functions for neur.

Filename predicates used to classify source files. They look only at the
file name and extension, never at the content.

Key functions:
    is_markdown: Check if a path is a Markdown document.
    is_html: Check if a path is an HTML file.
    is_partial: Check if a path is an HTML partial or layout.
    is_stylesheet: Check if a path is a CSS stylesheet.
    is_hidden: Check if a name is a dot-file or dot-directory.
"""

from __future__ import annotations

from pathlib import PurePath

MARKDOWN_SUFFIXES = (".md", ".markdown")
TEMPLATE_NAME = "_template.html"


def is_markdown(path: PurePath) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has a .md or .markdown extension (case-insensitive).
    """
    return path.suffix.lower() in MARKDOWN_SUFFIXES


def is_html(path: PurePath) -> bool:
    """Check if a path is an HTML file, page or partial."""
    return path.suffix.lower() == ".html"


def is_partial(path: PurePath) -> bool:
    """Check if a path is an HTML partial.

    Partials and layouts are HTML files whose name starts with an
    underscore. They are only ever pulled in by other templates.

    Examples:
        >>> is_partial(PurePath("posts/_template.html"))
        True

        >>> is_partial(PurePath("_drafts/post.html"))
        False
    """
    return is_html(path) and path.name.startswith("_")


def is_stylesheet(path: PurePath) -> bool:
    return path.suffix.lower() == ".css"


def is_hidden(name: str) -> bool:
    """Check if a file or directory name is hidden (starts with a dot)."""
    return name.startswith(".")
