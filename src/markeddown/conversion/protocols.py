"""Protocol definitions for content conversion."""

from typing import Optional, Protocol, Union


class ContentExtractor(Protocol):
    """
    Protocol for extracting main content from HTML.

    Implementations should extract the main article content while removing
    navigation, headers, footers, scripts and configured exclusions.
    """

    def extract(self, html: Union[str, bytes], context_id: Optional[str] = None) -> str:
        """
        Extract main content from HTML.

        Args:
            html: Full HTML document
            context_id: Template/view identifier (for scoped exclusions)

        Returns:
            Extracted HTML content as string (cleaned but still HTML)
        """
        ...


class MarkdownConverter(Protocol):
    """
    Protocol for the HTML to Markdown token-mapping engine.

    Implementations raise ConversionError when they cannot produce Markdown.
    """

    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string

        Returns:
            Markdown string
        """
        ...


class MarkdownCache(Protocol):
    """
    Protocol for an external cache of converted Markdown.

    How entries are stored and expired is up to the implementation.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the cached Markdown for ``key``, or None on a miss."""
        ...

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store Markdown under ``key`` for ``ttl`` seconds (None = no expiry)."""
        ...
