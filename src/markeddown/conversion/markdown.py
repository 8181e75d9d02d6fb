"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
from typing import Optional

import html2text

from ..models.config import ConverterConfig

logger = logging.getLogger(__name__)


class ConversionError(Exception):
    """The HTML to Markdown engine failed to produce Markdown."""


class HtmlToMarkdown:
    """
    Converts HTML content to raw Markdown.

    Uses html2text with ATX headings, inline links and no line wrapping.
    The output is expected to still contain spacing artifacts; it is meant
    to be fed through MarkdownNormalizer.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert("<h1>Title</h1><p>Body</p>")
    """

    def __init__(self, config: Optional[ConverterConfig] = None):
        """
        Initialize the Markdown converter.

        Args:
            config: Engine options (defaults to ConverterConfig())
        """
        self._config = config or ConverterConfig()

    def _build_engine(self) -> html2text.HTML2Text:
        # One HTML2Text per conversion; it keeps parser state
        config = self._config
        engine = html2text.HTML2Text()

        # Line width (0 = no wrapping for consistent output)
        engine.body_width = config.body_width

        # Link handling
        engine.inline_links = config.inline_links
        engine.wrap_links = config.wrap_links
        engine.protect_links = False

        # Content handling
        engine.ignore_images = config.ignore_images
        engine.ignore_tables = config.ignore_tables
        engine.unicode_snob = config.unicode_snob
        engine.escape_snob = config.escape_snob
        engine.emphasis_mark = config.emphasis_mark
        engine.strong_mark = config.strong_mark
        engine.mark_code = False

        engine.default_image_alt = ""
        engine.single_line_break = False
        return engine

    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML fragment

        Returns:
            Raw Markdown string

        Raises:
            ConversionError: If the engine fails
        """
        try:
            return self._build_engine().handle(html)
        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            raise ConversionError(f"HTML to Markdown conversion failed: {e}") from e
