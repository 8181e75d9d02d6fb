"""Main content extraction from HTML pages."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import Doctype

from ..models.config import ExclusionConfig
from .exclusions import UNWANTED_TAGS, apply_exclusions, resolve_exclusions
from .selectors import parse_selector

logger = logging.getLogger(__name__)

# Content roots in priority order; body is the fallback
CONTENT_SELECTORS = (
    "main",
    "article",
    "#content",
    "#main-content",
    ".content",
    ".main-content",
    "body",
)

FALLBACK_SELECTOR = "body"

# Removed when the document root stands in for a missing body
HEAD_TAGS = ("head", "title", "meta", "link", "base")


@dataclass
class ContentCandidate:
    """A subtree chosen as page content, and the selector that found it."""

    node: Tag
    selector: str


def _is_within(node: Tag, ancestor: Tag) -> bool:
    """True if ``node`` is ``ancestor`` or one of its descendants."""
    current: Optional[Tag] = node
    while current is not None:
        if current is ancestor:
            return True
        current = current.parent
    return False


def _strip_document_head(soup: BeautifulSoup) -> None:
    for node in list(soup.contents):
        if isinstance(node, Doctype):
            node.extract()
    for name in HEAD_TAGS:
        for element in soup.find_all(name):
            if not element.decomposed:
                element.decompose()


def _tidy_lines(html: str) -> str:
    """Trim every line and allow at most one blank line in a row."""
    lines = [line.strip() for line in html.split("\n")]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines))


class MainContentExtractor:
    """
    Extracts main content from HTML documents.

    Picks content roots by a fixed selector priority and strips boilerplate
    and configured exclusions from them before serializing them back to
    an HTML fragment.

    Example:
        extractor = MainContentExtractor(exclusions=config.exclusions)
        fragment = extractor.extract(html, context_id="blog/_entry")
    """

    def __init__(
        self,
        exclusions: Optional[ExclusionConfig] = None,
        content_selectors: tuple[str, ...] = CONTENT_SELECTORS,
        unwanted_tags: tuple[str, ...] = UNWANTED_TAGS,
    ):
        """
        Initialize the content extractor.

        Args:
            exclusions: Configured global and scoped exclusions
            content_selectors: Content root selectors in priority order
            unwanted_tags: Tags always removed from content roots
        """
        self._exclusions = exclusions
        self._content_selectors = content_selectors
        self._unwanted_tags = unwanted_tags

    def _detect_encoding(self, html: bytes) -> str:
        """Detect character encoding from HTML content."""
        head = html[:2048].decode("latin-1", errors="ignore")
        charset_match = re.search(r'charset=["\']?([^"\'\s>;/]+)', head, re.IGNORECASE)
        if charset_match:
            return charset_match.group(1).strip()
        return "utf-8"

    def _decode(self, html: Union[str, bytes]) -> str:
        if isinstance(html, str):
            return html
        encoding = self._detect_encoding(html)
        try:
            return html.decode(encoding, errors="replace")
        except LookupError:
            return html.decode("utf-8", errors="replace")

    def find_candidates(self, soup: BeautifulSoup) -> list[ContentCandidate]:
        """
        Find the content roots of a parsed document.

        The first selector that matches anything decides the candidates.
        Matches equal to or nested inside an already collected candidate
        are skipped. A document without a body element falls back to the
        document root.
        """
        candidates: list[ContentCandidate] = []

        for source in self._content_selectors:
            selector = parse_selector(source)
            if selector is None:
                logger.warning(f"Unsupported content selector skipped: {source!r}")
                continue

            for node in soup.find_all(selector.matches):
                if any(_is_within(node, c.node) for c in candidates):
                    continue
                candidates.append(ContentCandidate(node=node, selector=source))

            if source == FALLBACK_SELECTOR and not candidates:
                # html.parser only builds a body when the markup has one
                candidates.append(ContentCandidate(node=soup, selector=source))

            if candidates and source != FALLBACK_SELECTOR:
                break

        return candidates

    def _render(self, candidate: ContentCandidate) -> str:
        node = candidate.node
        if candidate.selector == FALLBACK_SELECTOR:
            html = node.decode_contents()
        else:
            html = str(node)
        return _tidy_lines(html)

    def extract(self, html: Union[str, bytes], context_id: Optional[str] = None) -> str:
        """
        Extract main content from HTML.

        Args:
            html: Full HTML document
            context_id: Template/view identifier used for scoped exclusions

        Returns:
            Cleaned HTML fragment; the input unchanged if no content root
            was found or the document could not be parsed
        """
        text = self._decode(html)
        if not text.strip():
            return ""

        try:
            soup = BeautifulSoup(text, "html.parser")
        except Exception as e:
            logger.warning(f"Could not parse HTML, using it as-is: {e}")
            return text

        candidates = self.find_candidates(soup)
        if not candidates:
            logger.debug("No content root found, using the whole document")
            return text

        configured = resolve_exclusions(self._exclusions, context_id)
        for candidate in candidates:
            logger.debug(f"Content root <{candidate.node.name}> matched by {candidate.selector!r}")
            if candidate.node is soup:
                _strip_document_head(soup)
            apply_exclusions(candidate.node, self._unwanted_tags, configured)

        return "".join(self._render(candidate) + "\n" for candidate in candidates)
