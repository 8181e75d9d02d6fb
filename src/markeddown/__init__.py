"""
markeddown - Convert full HTML pages to clean, readable Markdown.

Usage:
    from markeddown import ConfigLoader, Converter

    converter = Converter(config_loader=ConfigLoader("config/marked-down.yaml"))
    markdown = converter.convert(html, context_id="blog/_entry")
"""

__version__ = "1.0.0"

from .conversion import (
    ConversionError,
    HtmlToMarkdown,
    MainContentExtractor,
    MarkdownNormalizer,
    normalize,
    translate,
)
from .core import CachedConverter, Converter, convert
from .logging_config import setup_logging
from .models.config import (
    ConfigLoader,
    ConverterConfig,
    ExclusionConfig,
    MarkedDownConfig,
    NormalizerConfig,
)

__all__ = [
    "__version__",
    # Core
    "Converter",
    "CachedConverter",
    "convert",
    "ConversionError",
    # Components
    "MainContentExtractor",
    "HtmlToMarkdown",
    "MarkdownNormalizer",
    "normalize",
    "translate",
    # Config
    "MarkedDownConfig",
    "ExclusionConfig",
    "ConverterConfig",
    "NormalizerConfig",
    "ConfigLoader",
    # Logging
    "setup_logging",
]
