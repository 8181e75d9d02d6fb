"""Content conversion for markeddown (content selection, HTML to Markdown, cleanup)."""

from .exclusions import (
    UNWANTED_TAGS,
    apply_exclusions,
    context_matches,
    resolve_exclusions,
)
from .extractor import CONTENT_SELECTORS, ContentCandidate, MainContentExtractor
from .markdown import ConversionError, HtmlToMarkdown
from .normalizer import (
    ADJACENCY_REPAIR_PASSES,
    CORE_PASSES,
    LINK_REPAIR_PASSES,
    MarkdownNormalizer,
    normalize,
)
from .protocols import ContentExtractor, MarkdownCache, MarkdownConverter
from .selectors import parse_selector, translate

__all__ = [
    # Protocols
    "ContentExtractor",
    "MarkdownConverter",
    "MarkdownCache",
    # Selectors and exclusions
    "parse_selector",
    "translate",
    "UNWANTED_TAGS",
    "apply_exclusions",
    "context_matches",
    "resolve_exclusions",
    # Implementations
    "CONTENT_SELECTORS",
    "ContentCandidate",
    "MainContentExtractor",
    "HtmlToMarkdown",
    "ConversionError",
    # Normalization
    "MarkdownNormalizer",
    "normalize",
    "CORE_PASSES",
    "LINK_REPAIR_PASSES",
    "ADJACENCY_REPAIR_PASSES",
]
