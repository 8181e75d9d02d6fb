"""Conversion entry points."""

from .cache import CACHE_KEY_PREFIX, CachedConverter, build_cache_key
from .converter import Converter, convert

__all__ = [
    "Converter",
    "convert",
    "CachedConverter",
    "CACHE_KEY_PREFIX",
    "build_cache_key",
]
