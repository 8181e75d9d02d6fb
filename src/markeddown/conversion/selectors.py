"""Restricted CSS-like selectors for exclusion rules.

Only five shapes are understood:

    #id            any element with that id
    .class         any element whose class list contains that class
    tag            any element with that tag name
    tag#id         element with tag name and id
    tag.class      element with tag name and class

Anything else (attribute selectors, combinators, pseudo-classes) is not
supported and translates to ``None``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from bs4 import Tag

logger = logging.getLogger(__name__)

MatchPredicate = Callable[[Tag], bool]

_IDENT = r"[A-Za-z][A-Za-z0-9_-]*"
_TAG_RE = re.compile(rf"^{_IDENT}$")
_TAG_WITH_ID_RE = re.compile(rf"^({_IDENT})#({_IDENT})$")
_TAG_WITH_CLASS_RE = re.compile(rf"^({_IDENT})\.({_IDENT})$")

# Characters that would turn a bare #id/.class into a compound selector
_UNSUPPORTED_VALUE_RE = re.compile(r"[\s,>+~\[\]():]")


def _class_tokens(tag: Tag) -> list[str]:
    value = tag.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [token for item in value for token in str(item).split()]


def _id_of(tag: Tag) -> Optional[str]:
    value = tag.get("id")
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


@dataclass(frozen=True)
class IdSelector:
    """Matches ``#value``."""

    value: str

    def matches(self, tag: Tag) -> bool:
        return _id_of(tag) == self.value


@dataclass(frozen=True)
class ClassSelector:
    """Matches ``.value`` against the whitespace-tokenized class list."""

    value: str

    def matches(self, tag: Tag) -> bool:
        return self.value in _class_tokens(tag)


@dataclass(frozen=True)
class TagSelector:
    """Matches a bare tag name (case-insensitive)."""

    name: str

    def matches(self, tag: Tag) -> bool:
        return (tag.name or "").lower() == self.name


@dataclass(frozen=True)
class TagWithIdSelector:
    name: str
    id: str

    def matches(self, tag: Tag) -> bool:
        return (tag.name or "").lower() == self.name and _id_of(tag) == self.id


@dataclass(frozen=True)
class TagWithClassSelector:
    name: str
    class_name: str

    def matches(self, tag: Tag) -> bool:
        return (tag.name or "").lower() == self.name and self.class_name in _class_tokens(tag)


Selector = Union[IdSelector, ClassSelector, TagSelector, TagWithIdSelector, TagWithClassSelector]


def parse_selector(text: str) -> Optional[Selector]:
    """
    Parse a selector string into one of the supported selector shapes.

    Shapes are tried in precedence order and the first syntactic match
    wins. Values are kept as plain strings and compared directly against
    attribute values, so quotes or other special characters in an id or
    class can never alter what is matched.

    Args:
        text: Selector source, e.g. ``"#comments"`` or ``"div.author-bio"``

    Returns:
        The parsed selector, or None if the syntax is unsupported
    """
    selector = text.strip()
    if not selector:
        return None

    if selector.startswith("#"):
        value = selector[1:]
        if value and not _UNSUPPORTED_VALUE_RE.search(value):
            return IdSelector(value)
        return None

    if selector.startswith("."):
        value = selector[1:]
        if value and not _UNSUPPORTED_VALUE_RE.search(value):
            return ClassSelector(value)
        return None

    if _TAG_RE.match(selector):
        return TagSelector(selector.lower())

    match = _TAG_WITH_ID_RE.match(selector)
    if match:
        return TagWithIdSelector(match.group(1).lower(), match.group(2))

    match = _TAG_WITH_CLASS_RE.match(selector)
    if match:
        return TagWithClassSelector(match.group(1).lower(), match.group(2))

    return None


def translate(text: str) -> Optional[MatchPredicate]:
    """
    Translate a selector string into a node-matching predicate.

    Unsupported syntax is logged and yields None so callers can skip the
    rule and carry on.
    """
    selector = parse_selector(text)
    if selector is None:
        logger.warning(f"Unsupported selector skipped: {text!r}")
        return None
    return selector.matches
