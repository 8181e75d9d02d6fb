"""HTML document to Markdown conversion entry point."""

from __future__ import annotations

import logging
from typing import Optional, Union

from ..conversion.extractor import MainContentExtractor
from ..conversion.markdown import HtmlToMarkdown
from ..conversion.normalizer import MarkdownNormalizer
from ..conversion.protocols import ContentExtractor, MarkdownConverter
from ..models.config import ConfigLoader, MarkedDownConfig

logger = logging.getLogger(__name__)


class Converter:
    """
    Converts a full HTML page into normalized Markdown.

    Selects the main content, removes boilerplate and configured
    exclusions, runs the HTML through the Markdown engine and normalizes
    the result.

    The configuration comes either from an explicit MarkedDownConfig or
    from a ConfigLoader. With a loader, the config is read on the first
    conversion and reused until the loader is invalidated; the extractor
    and normalizer are rebuilt when that happens.

    Example:
        converter = Converter(config_loader=ConfigLoader("marked-down.yaml"))
        markdown = converter.convert(html, context_id="blog/_entry")
    """

    def __init__(
        self,
        config: Optional[MarkedDownConfig] = None,
        config_loader: Optional[ConfigLoader] = None,
        extractor: Optional[ContentExtractor] = None,
        converter: Optional[MarkdownConverter] = None,
        normalizer: Optional[MarkdownNormalizer] = None,
    ):
        """
        Initialize the converter.

        Args:
            config: Explicit configuration (exclusive with config_loader)
            config_loader: Lazily loaded configuration file
            extractor: Content extractor (built from config if None)
            converter: Markdown engine (html2text if None)
            normalizer: Markdown normalizer (built from config if None)
        """
        if config is not None and config_loader is not None:
            raise ValueError("Pass either config or config_loader, not both")

        self._config = config
        self._config_loader = config_loader
        self._extractor_override = extractor
        self._converter_override = converter
        self._normalizer_override = normalizer

        self._built_for: Optional[MarkedDownConfig] = None
        self._built: Optional[tuple[ContentExtractor, MarkdownConverter, MarkdownNormalizer]] = None

    @property
    def config(self) -> MarkedDownConfig:
        if self._config_loader is not None:
            return self._config_loader.get()
        if self._config is None:
            self._config = MarkedDownConfig()
        return self._config

    def _components(self) -> tuple[ContentExtractor, MarkdownConverter, MarkdownNormalizer]:
        config = self.config
        if self._built is None or self._built_for is not config:
            self._built = (
                self._extractor_override or MainContentExtractor(exclusions=config.exclusions),
                self._converter_override or HtmlToMarkdown(config.converter),
                self._normalizer_override or MarkdownNormalizer.from_config(config.normalizer),
            )
            self._built_for = config
        return self._built

    def convert(
        self,
        html: Union[str, bytes],
        cache_key: Optional[str] = None,
        context_id: Optional[str] = None,
    ) -> str:
        """
        Convert an HTML document to Markdown.

        Args:
            html: Full HTML document
            cache_key: Opaque key for an outer cache layer; not used here
            context_id: Template/view identifier for scoped exclusions

        Returns:
            Normalized Markdown (empty for empty input)

        Raises:
            ConversionError: If the Markdown engine fails
        """
        if not html or not html.strip():
            return ""

        extractor, converter, normalizer = self._components()

        fragment = extractor.extract(html, context_id)
        raw = converter.convert(fragment)
        markdown = normalizer.normalize(raw)

        logger.debug(f"Converted {len(fragment)} bytes of HTML to {len(markdown)} bytes of Markdown")
        return markdown


def convert(
    html: Union[str, bytes],
    cache_key: Optional[str] = None,
    context_id: Optional[str] = None,
) -> str:
    """
    Convert an HTML document with the default configuration.

    Example:
        from markeddown import convert
        markdown = convert(html)
    """
    return Converter().convert(html, cache_key, context_id)
