"""Removal of boilerplate and configured elements from content subtrees."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional

from bs4 import Tag

from ..models.config import ExclusionConfig
from .selectors import translate

logger = logging.getLogger(__name__)

# Always removed from every content candidate, before configured exclusions
UNWANTED_TAGS = (
    "nav",
    "header",
    "footer",
    "aside",
    "script",
    "style",
    "noscript",
    "iframe",
    "canvas",
    "svg",
)


def strip_suffix(name: str, suffixes: Iterable[str]) -> str:
    """Strip the first recognized template-file suffix from a name."""
    for suffix in suffixes:
        if suffix and name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def context_matches(context_id: str, pattern: str, suffixes: Iterable[str] = (".twig",)) -> bool:
    """
    Check whether a scoped-exclusion pattern applies to a context identifier.

    Both sides have a recognized suffix stripped first. The pattern applies
    on exact equality, when the context ends with ``"/" + pattern``, or when
    the context contains the pattern anywhere.

    Example:
        context_matches("site/blog/_entry.twig", "blog/_entry")  # True
        context_matches("news/_entry", "blog/_entry")  # False
    """
    suffixes = tuple(suffixes)
    context = strip_suffix(context_id, suffixes)
    normalized = strip_suffix(pattern, suffixes)
    if not normalized:
        return False

    if context == normalized:
        return True
    if context.endswith("/" + normalized):
        return True
    return normalized in context


def resolve_exclusions(config: Optional[ExclusionConfig], context_id: Optional[str] = None) -> list[str]:
    """
    Collect the selector strings that apply for a context.

    Global selectors come first, followed by the selectors of every scoped
    pattern matching ``context_id`` in configuration order.

    Args:
        config: Loaded exclusion configuration (None = no exclusions)
        context_id: Template/view identifier, if known

    Returns:
        Ordered list of selector strings
    """
    if config is None or config.is_empty:
        return []

    selectors = list(config.global_exclusions)

    if context_id:
        for pattern, scoped in config.template_exclusions.items():
            if context_matches(context_id, pattern, config.template_suffixes):
                logger.debug(f"Scoped exclusions for {pattern!r} apply to {context_id!r}")
                selectors.extend(scoped)

    return selectors


def _remove_all(elements: Sequence[Tag]) -> int:
    removed = 0
    for element in elements:
        # Descendants of an already removed match are gone with it
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    return removed


def remove_unwanted(root: Tag, unwanted: Iterable[str] = UNWANTED_TAGS) -> int:
    """
    Remove built-in boilerplate elements below ``root``.

    Returns:
        Number of removed elements
    """
    removed = 0
    for name in unwanted:
        removed += _remove_all(root.find_all(name))
    return removed


def remove_by_selectors(root: Tag, selectors: Iterable[str]) -> int:
    """
    Remove every element below ``root`` matched by one of ``selectors``.

    Selectors are processed in the given order, and each selector's matches
    in document order. Unsupported selectors and selectors that fail while
    matching are skipped with a warning.

    Returns:
        Number of removed elements
    """
    removed = 0
    for raw in selectors:
        selector = raw.strip()
        if not selector:
            continue

        predicate = translate(selector)
        if predicate is None:
            continue

        try:
            matches = root.find_all(predicate)
        except Exception as e:
            logger.warning(f"Selector {selector!r} failed while matching: {e}")
            continue

        removed += _remove_all(matches)
    return removed


def apply_exclusions(
    root: Tag,
    unwanted: Iterable[str] = UNWANTED_TAGS,
    configured: Sequence[str] = (),
) -> None:
    """
    Remove unwanted and configured elements from a subtree in place.

    Built-in unwanted tags always go first; configured selectors follow.
    """
    count = remove_unwanted(root, unwanted)
    count += remove_by_selectors(root, configured)
    if count:
        logger.debug(f"Removed {count} excluded elements from <{root.name}>")
