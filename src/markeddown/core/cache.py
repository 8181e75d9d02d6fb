"""Cache layer around a Converter."""

from __future__ import annotations

import hashlib
import logging
from typing import Optional, Union

from ..conversion.protocols import MarkdownCache
from .converter import Converter

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "marked-down:"

# Default TTL for cached Markdown (24 hours)
DEFAULT_TTL_SECONDS = 86400


def build_cache_key(
    html: Union[str, bytes],
    cache_key: Optional[str] = None,
    context_id: Optional[str] = None,
) -> str:
    """
    Build the storage key for a conversion.

    Uses the caller's key when given, otherwise a SHA-256 of the HTML.
    Scoped exclusions make the output depend on the context, so a context
    id is part of the key either way.

    Example:
        build_cache_key(html, "page-1")  # "marked-down:page-1"
        build_cache_key(html, "page-1", "blog/_entry")  # "marked-down:page-1:blog/_entry"
    """
    if cache_key is not None:
        key = cache_key if context_id is None else f"{cache_key}:{context_id}"
        return CACHE_KEY_PREFIX + key

    digest = hashlib.sha256(html.encode("utf-8") if isinstance(html, str) else html)
    if context_id is not None:
        digest.update(b"\0" + context_id.encode("utf-8"))
    return CACHE_KEY_PREFIX + digest.hexdigest()


class CachedConverter:
    """
    Converter that consults a MarkdownCache before converting.

    Output is exactly what the wrapped Converter returns; the cache only
    saves the work. Empty input and failed conversions are never cached.

    Example:
        cached = CachedConverter(Converter(), cache=my_cache)
        markdown = cached.convert(html, cache_key=request_url_hash)
    """

    def __init__(
        self,
        converter: Converter,
        cache: MarkdownCache,
        ttl: Optional[int] = DEFAULT_TTL_SECONDS,
    ):
        self._converter = converter
        self._cache = cache
        self._ttl = ttl

    def convert(
        self,
        html: Union[str, bytes],
        cache_key: Optional[str] = None,
        context_id: Optional[str] = None,
    ) -> str:
        if not html or not html.strip():
            return ""

        key = build_cache_key(html, cache_key, context_id)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        markdown = self._converter.convert(html, cache_key, context_id)
        self._cache.set(key, markdown, self._ttl)
        return markdown
