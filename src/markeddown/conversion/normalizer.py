"""
Markdown normalization passes.

Every pass is a pure ``str -> str`` function. MarkdownNormalizer runs them
in a fixed order, each pass receiving the previous pass's output:

    1. normalize_line_endings
    2. decode_entities
    3. fix_image_spacing
       (optional repair passes, preceded by remove_empty_headings
       and strip_document)
    4. collapse_blank_lines
    5. remove_empty_headings
    6. strip_document

The optional repairs come in two families. LINK_REPAIR_PASSES fix links
that swallowed headings, duplicated links and image+caption links.
ADJACENCY_REPAIR_PASSES insert the blank lines the converter leaves out
around headings, images and lists. Both families skip fenced code blocks.

Running the full sequence on its own output changes nothing.
"""

from __future__ import annotations

import functools
import html
import logging
import re
from collections.abc import Sequence
from typing import Callable, Optional

from ..models.config import NormalizerConfig

logger = logging.getLogger(__name__)

Pass = Callable[[str], str]

# URL part of a link: stops at the first unescaped ')' and never crosses lines
_URL = r"(?:\\.|[^)\\\n])+"
# Image markers: alt text has no brackets
_IMAGE = rf"!\[[^\[\]]*\]\({_URL}\)"

_FENCE_RE = re.compile(r"^[ \t]{0,3}(```|~~~)")


# ---------------------------------------------------------------------------
# Core passes
# ---------------------------------------------------------------------------


def normalize_line_endings(text: str) -> str:
    """CRLF and lone CR become LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def decode_entities(text: str) -> str:
    """
    Decode HTML character references to literal characters.

    Decodes until nothing changes, so double-encoded references such as
    ``&amp;lt;`` end up as ``<`` and a second run finds nothing left.
    """
    previous = None
    while previous != text:
        previous, text = text, html.unescape(text)
    return text


_IMAGE_MARKER_GAP_RE = re.compile(r"![ \t]+\[")
_BRACKET_OPEN_GAP_RE = re.compile(r"\[[ \t]+")
_BRACKET_CLOSE_GAP_RE = re.compile(r"[ \t]+\]")


def fix_image_spacing(text: str) -> str:
    """
    Join ``! [`` into ``![`` and trim spaces just inside brackets.

    Only spaces and tabs are touched; line breaks inside link text are
    left for the link repairs.
    """
    text = _IMAGE_MARKER_GAP_RE.sub("![", text)
    text = _BRACKET_OPEN_GAP_RE.sub("[", text)
    return _BRACKET_CLOSE_GAP_RE.sub("]", text)


_BLANK_RUN_RE = re.compile(r"\n{3,}")


def collapse_blank_lines(text: str) -> str:
    """Three or more newlines become exactly two."""
    return _BLANK_RUN_RE.sub("\n\n", text)


_EMPTY_HEADING_RE = re.compile(r"^[ \t]*#+[ \t]*(?:\n|\Z)", re.MULTILINE)


def remove_empty_headings(text: str) -> str:
    """
    Delete lines made only of ``#`` markers and whitespace.

    Postcondition: no empty heading lines and, as with collapse_blank_lines,
    no runs of more than one blank line (deleting a line between two blank
    lines would otherwise leave three newlines in a row).
    """
    return collapse_blank_lines(_EMPTY_HEADING_RE.sub("", text))


def strip_document(text: str) -> str:
    return text.strip()


# ---------------------------------------------------------------------------
# Fenced code handling
# ---------------------------------------------------------------------------


def _split_fenced(text: str) -> list[tuple[str, bool]]:
    """Split text into (chunk, is_fenced_code) pairs, preserving every character."""
    chunks: list[tuple[str, bool]] = []
    current: list[str] = []
    fence: Optional[str] = None

    for line in text.splitlines(keepends=True):
        match = _FENCE_RE.match(line)
        if fence is None and match:
            if current:
                chunks.append(("".join(current), False))
            current = [line]
            fence = match.group(1)
        elif fence is not None and match and match.group(1) == fence:
            current.append(line)
            chunks.append(("".join(current), True))
            current = []
            fence = None
        else:
            current.append(line)

    if current:
        chunks.append(("".join(current), fence is not None))
    return chunks


def outside_code_fences(func: Pass) -> Pass:
    """Wrap a pass so it only rewrites text outside fenced code blocks."""

    @functools.wraps(func)
    def wrapper(text: str) -> str:
        if "```" not in text and "~~~" not in text:
            return func(text)
        return "".join(chunk if fenced else func(chunk) for chunk, fenced in _split_fenced(text))

    return wrapper


# ---------------------------------------------------------------------------
# Link repairs
# ---------------------------------------------------------------------------

_IMAGE_LINK_RE = re.compile(
    r"\[\s*!\[(?P<alt>[^\[\]]*)\]\((?P<src>" + _URL + r")\)"
    r"(?P<caption>[^\[\]]*)\][ \t]*\((?P<href>" + _URL + r")\)"
)
_CAPTION_HEADING_MARK_RE = re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE)


@outside_code_fences
def split_image_links(text: str) -> str:
    """
    Rewrite ``[![alt](img) caption](href)`` as ``![alt](img) [caption](href)``.

    The caption may run over several lines; its whitespace is collapsed and
    heading markers are dropped. An empty caption leaves only the image.
    """

    def replace(match: re.Match[str]) -> str:
        image = f"![{match.group('alt')}]({match.group('src').strip()})"
        caption = _CAPTION_HEADING_MARK_RE.sub("", match.group("caption"))
        caption = " ".join(caption.split())
        if not caption:
            return image
        return f"{image} [{caption}]({match.group('href').strip()})"

    return _IMAGE_LINK_RE.sub(replace, text)


_LINK_RE = re.compile(r"(?<!!)\[(?P<text>[^\[\]]*)\]\((?P<url>" + _URL + r")\)")
_TEXT_HEADING_RE = re.compile(r"^[ \t]*(#{1,6}[ \t]+\S[^\n]*)$", re.MULTILINE)


@outside_code_fences
def hoist_link_headings(text: str) -> str:
    """
    Move headings out of link text and tidy link text whitespace.

    A link whose text runs over several lines and contains a heading line
    is split into the heading block(s) followed by a link made of the
    remaining text. If no text remains, the URL is used as the text.

    Example:
        "[Some text\\n\\n## Heading\\nmore](http://x)"
        -> "## Heading\\n\\n[Some text more](http://x)"
    """

    def replace(match: re.Match[str]) -> str:
        body = match.group("text")
        url = match.group("url").strip()

        headings = _TEXT_HEADING_RE.findall(body) if "\n" in body else []
        if not headings:
            return f"[{' '.join(body.split())}]({url})"

        remainder = " ".join(_TEXT_HEADING_RE.sub(" ", body).split())
        block = "\n\n".join(h.strip() for h in headings)
        link = f"[{remainder or url}]({url})"

        start = match.start()
        before = match.string[max(0, start - 2) : start]
        if start == 0 or before == "\n\n":
            prefix = ""
        elif before.endswith("\n"):
            prefix = "\n"
        else:
            prefix = "\n\n"
        return f"{prefix}{block}\n\n{link}"

    return _LINK_RE.sub(replace, text)


_DUPLICATE_LINK_RE = re.compile(r"(?<!!)(\[[^\[\]\n]*\]\(" + _URL + r"\))(?:\s+\1)+")


@outside_code_fences
def collapse_duplicate_links(text: str) -> str:
    """``[Home](/) [Home](/)`` becomes ``[Home](/)``."""
    return _DUPLICATE_LINK_RE.sub(r"\1", text)


# ---------------------------------------------------------------------------
# Adjacency repairs
# ---------------------------------------------------------------------------

_IMAGE_PARTS_RE = re.compile(r"!\[(?P<alt>[^\[\]]*)\][ \t]*\((?P<src>" + _URL + r")\)")


@outside_code_fences
def fix_image_formatting(text: str) -> str:
    """Tidy whitespace in image alt text and URL, and between ``]`` and ``(``."""

    def replace(match: re.Match[str]) -> str:
        alt = " ".join(match.group("alt").split())
        return f"![{alt}]({match.group('src').strip()})"

    return _IMAGE_PARTS_RE.sub(replace, text)


_INLINE_HEADING_RE = re.compile(r"(\]\(" + _URL + r"\))[ \t]+(?=#{1,6}[ \t]+\S)")
_HEADING_LINE_RE = re.compile(r"^ {0,3}#{1,6}[ \t]+\S")


@outside_code_fences
def separate_headings(text: str) -> str:
    """
    Give every heading a blank line before it.

    A heading marker left on the same line right after a link or image is
    moved to its own line first.
    """
    text = _INLINE_HEADING_RE.sub("\\1\n\n", text)

    lines: list[str] = []
    for line in text.split("\n"):
        if _HEADING_LINE_RE.match(line) and lines and lines[-1].strip():
            lines.append("")
        lines.append(line)
    return "\n".join(lines)


_IMAGE_THEN_TEXT_RE = re.compile(rf"({_IMAGE})(?=[^\s\]])")
_TEXT_THEN_IMAGE_RE = re.compile(rf"(?<=[^\s\[])({_IMAGE})")
_IMAGE_RUN_RE = re.compile(rf"({_IMAGE})\s+(?={_IMAGE})")
_IMAGE_THEN_LINK_RE = re.compile(rf"({_IMAGE})[ \t]+(?=\[)")


@outside_code_fences
def separate_images(text: str) -> str:
    """
    Put images in their own blocks.

    An image glued to text on either side, an image followed by another
    image, and an image followed by a link on the same line all get a
    blank line between them. Images wrapped in link brackets are left
    alone.
    """
    text = _IMAGE_THEN_TEXT_RE.sub("\\1\n\n", text)
    text = _TEXT_THEN_IMAGE_RE.sub("\n\n\\1", text)
    text = _IMAGE_RUN_RE.sub("\\1\n\n", text)
    return _IMAGE_THEN_LINK_RE.sub("\\1\n\n", text)


_LIST_ITEM_RE = re.compile(r"^[ \t]*(?:[-*+]|\d{1,9}[.)])[ \t]+\S")


@outside_code_fences
def separate_lists(text: str) -> str:
    """Start a list with a blank line when it directly follows a paragraph line."""
    lines: list[str] = []
    for line in text.split("\n"):
        if _LIST_ITEM_RE.match(line) and lines:
            previous = lines[-1]
            if (
                previous.strip()
                and not previous[0].isspace()
                and not _LIST_ITEM_RE.match(previous)
                and not _HEADING_LINE_RE.match(previous)
            ):
                lines.append("")
        lines.append(line)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

LEADING_PASSES: tuple[Pass, ...] = (
    normalize_line_endings,
    decode_entities,
    fix_image_spacing,
)

TRAILING_PASSES: tuple[Pass, ...] = (
    collapse_blank_lines,
    remove_empty_headings,
    strip_document,
)

CORE_PASSES: tuple[Pass, ...] = LEADING_PASSES + TRAILING_PASSES

# Run ahead of the repairs, which inspect neighbouring lines
REPAIR_PREPARE_PASSES: tuple[Pass, ...] = (
    remove_empty_headings,
    strip_document,
)

LINK_REPAIR_PASSES: tuple[Pass, ...] = (
    split_image_links,
    hoist_link_headings,
    collapse_duplicate_links,
)

ADJACENCY_REPAIR_PASSES: tuple[Pass, ...] = (
    fix_image_formatting,
    separate_headings,
    separate_images,
    separate_lists,
)


class MarkdownNormalizer:
    """
    Runs the normalization passes over raw converter output.

    Repair passes run after the leading core passes and before the
    trailing ones, so blank lines they add are collapsed again and the
    document is trimmed last. Empty headings and outer whitespace are
    removed before the repairs as well, so a second run sees the same
    neighbouring lines as the first. Link repairs should come before
    adjacency repairs: splitting an image+caption link produces an image
    followed by a link, which the adjacency repairs then separate.

    Example:
        normalizer = MarkdownNormalizer(repairs=LINK_REPAIR_PASSES)
        markdown = normalizer.normalize(raw)
    """

    def __init__(self, repairs: Sequence[Pass] = ()):
        repair_passes = tuple(repairs)
        prepare = REPAIR_PREPARE_PASSES if repair_passes else ()
        self.passes: tuple[Pass, ...] = LEADING_PASSES + prepare + repair_passes + TRAILING_PASSES

    @classmethod
    def from_config(cls, config: Optional[NormalizerConfig] = None) -> "MarkdownNormalizer":
        config = config or NormalizerConfig()
        repairs: list[Pass] = []
        if config.repair_links:
            repairs.extend(LINK_REPAIR_PASSES)
        if config.repair_adjacency:
            repairs.extend(ADJACENCY_REPAIR_PASSES)
        return cls(repairs=repairs)

    def normalize(self, text: str) -> str:
        for step in self.passes:
            text = step(text)
        return text


def normalize(raw: str, repairs: Sequence[Pass] = ()) -> str:
    """Normalize Markdown with the core passes plus any given repairs."""
    return MarkdownNormalizer(repairs=repairs).normalize(raw)
