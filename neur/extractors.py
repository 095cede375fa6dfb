"""Frontmatter extraction for neur.

A markdown document may open with a metadata block::

    ---
    title: Hello
    author: Jane
    ---
    # Body starts here

Each line between the delimiters is a ``key: value`` pair. Values are kept
as plain strings; there are no nested structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import FrontmatterError

DELIMITER = "---"
_BOM = "\ufeff"


@dataclass(frozen=True)
class Frontmatter:
    """Parsed frontmatter and the document body that follows it.

    Attributes:
        context: Key/value pairs declared in the block.
        body: Text after the closing delimiter, or the whole document when
            there is no block.
    """

    context: dict[str, str] = field(default_factory=dict)
    body: str = ""


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def extract_frontmatter(text: str, path: Path | None = None) -> Frontmatter:
    """Split a markdown document into frontmatter and body.

    Args:
        text: Raw file content.
        path: Source path, used only in error messages.

    Returns:
        Frontmatter with the declared keys and the remaining body.

    Raises:
        FrontmatterError: If the block is never closed or a line in it is
            not a ``key: value`` pair.
    """
    source = path or Path("<string>")
    lines = text.removeprefix(_BOM).splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return Frontmatter(context={}, body=text)

    context: dict[str, str] = {}
    for index, line in enumerate(lines[1:], start=1):
        if _is_delimiter(line):
            body = "".join(lines[index + 1 :])
            return Frontmatter(context=context, body=body)
        stripped = line.strip()
        if not stripped:
            continue
        key, sep, value = stripped.partition(":")
        key = key.strip()
        if not sep or not key:
            raise FrontmatterError(
                source,
                f"line {index + 1}: expected 'key: value', got {stripped!r}",
            )
        context[key] = value.strip()

    raise FrontmatterError(source, "unterminated frontmatter block")
