"""Asset transformation for neur.

Stylesheets are checked for structural errors and, when the configuration
asks for it, minified with csscompressor. Every other non-page file is
carried through as raw bytes.

Key components:
- transform_css: The CSS transform function.
- AssetTransformer: Applies the configured transform to stylesheet entries.
"""

from __future__ import annotations

import logging

import csscompressor

from .config import Config
from .errors import AssetError
from .protocols import StylesheetTransformer
from .scanner import SourceEntry, SourceKind

logger = logging.getLogger(__name__)


class CssSyntaxError(ValueError):
    """Raised when a stylesheet is structurally broken.

    Attributes:
        line: 1-based line the problem was detected on.
    """

    def __init__(self, message: str, line: int):
        self.line = line
        super().__init__(f"line {line}: {message}")


def check_css_syntax(text: str) -> None:
    """Check that braces balance and comments and strings are terminated.

    Raises:
        CssSyntaxError: On the first structural problem found.
    """
    depth = 0
    line = 1
    opened: list[int] = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char == "\n":
            line += 1
        elif char == "/" and text.startswith("*", i + 1):
            end = text.find("*/", i + 2)
            if end == -1:
                raise CssSyntaxError("unterminated comment", line)
            line += text.count("\n", i, end)
            i = end + 2
            continue
        elif char in "\"'":
            start_line = line
            i += 1
            while i < length and text[i] != char:
                if text[i] == "\\":
                    i += 1
                elif text[i] == "\n":
                    raise CssSyntaxError("unterminated string", start_line)
                i += 1
            if i >= length:
                raise CssSyntaxError("unterminated string", start_line)
        elif char == "{":
            depth += 1
            opened.append(line)
        elif char == "}":
            if depth == 0:
                raise CssSyntaxError("unexpected '}'", line)
            depth -= 1
            opened.pop()
        i += 1
    if depth:
        raise CssSyntaxError("unclosed '{'", opened[-1])


def transform_css(text: str, minify: bool) -> str:
    """Transform a stylesheet.

    Args:
        text: Stylesheet source.
        minify: Whether to minify the output.

    Returns:
        The stylesheet, minified when requested and otherwise unchanged.

    Raises:
        CssSyntaxError: If the stylesheet is malformed.
    """
    check_css_syntax(text)
    if not minify:
        return text
    minified = csscompressor.compress(text)
    # Never hand back something longer than the input.
    return minified if len(minified) <= len(text) else text


class AssetTransformer:
    """Runs stylesheet entries through the CSS transform.

    Attributes:
        config: Effective build configuration; supplies the minify flag.
        transform: The CSS transform function.
    """

    def __init__(self, config: Config, transform: StylesheetTransformer = transform_css):
        self.config = config
        self.transform = transform

    def can_transform(self, entry: SourceEntry) -> bool:
        return entry.kind is SourceKind.STYLESHEET

    def transform_entry(self, entry: SourceEntry, text: str) -> str:
        """Transform a stylesheet entry.

        Args:
            entry: A stylesheet entry.
            text: Its source text.

        Returns:
            The transformed stylesheet.

        Raises:
            AssetError: If the stylesheet cannot be transformed.
        """
        if not self.can_transform(entry):
            raise ValueError(f"Not a stylesheet: {entry.relative_path}")
        try:
            result = self.transform(text, self.config.minify)
        except CssSyntaxError as exc:
            raise AssetError(entry.path, f"CSS parse error at {exc}", exc) from exc
        logger.debug(
            "Transformed %s (%d -> %d bytes)", entry.relative_path, len(text), len(result)
        )
        return result
