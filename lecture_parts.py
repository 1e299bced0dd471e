"""
Locate lecture parts in a rendered beamer document and pick the ones to export.

A part starts at every ``\\lecture[short]{title}{label}`` command. Titles and
labels may contain nested brace groups, so arguments are read with a
depth-tracking scan instead of a regular expression.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from lecture_errors import RangeError
from lecture_model import DateValue, Part

logger = logging.getLogger(__name__)

MARKER = "\\lecture"


class Marker(NamedTuple):
    start: int
    end: int
    title: str
    label: str
    short: Optional[str]


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def read_group(text: str, pos: int, opening: str = "{", closing: str = "}") -> Optional[Tuple[str, int]]:
    """Read a balanced group starting at ``text[pos]``.

    Returns the group's inner text and the index just past the closing
    delimiter, or ``None`` when ``pos`` does not start a complete group.
    Backslash-escaped characters never change the depth.
    """
    if pos >= len(text) or text[pos] != opening:
        return None
    depth = 0
    brace_depth = 0
    i = pos
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if opening != "{" and char == "{":
            brace_depth += 1
        elif opening != "{" and char == "}":
            brace_depth -= 1
        elif char == opening and brace_depth == 0:
            depth += 1
        elif char == closing and brace_depth == 0:
            depth -= 1
            if depth == 0:
                return text[pos + 1:i], i + 1
        i += 1
    return None


def _in_comment(text: str, pos: int) -> bool:
    line_start = text.rfind("\n", 0, pos) + 1
    i = line_start
    while i < pos:
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == "%":
            return True
        i += 1
    return False


def scan_markers(body: str) -> Iterator[Marker]:
    """Yield every well-formed lecture marker in document order."""
    pos = body.find(MARKER)
    while pos != -1:
        after = pos + len(MARKER)
        if after < len(body) and body[after].isalpha():
            pos = body.find(MARKER, after)
            continue
        if _in_comment(body, pos):
            pos = body.find(MARKER, after)
            continue
        cursor = _skip_whitespace(body, after)
        short = None
        optional = read_group(body, cursor, "[", "]")
        if optional is not None:
            short, cursor = optional
            cursor = _skip_whitespace(body, cursor)
        title_group = read_group(body, cursor)
        label_group = None
        if title_group is not None:
            label_group = read_group(body, _skip_whitespace(body, title_group[1]))
        if title_group is None or label_group is None:
            line = body.count("\n", 0, pos) + 1
            logger.warning("Ignoring malformed \\lecture command on line %d.", line)
            pos = body.find(MARKER, after)
            continue
        title, _ = title_group
        label, end = label_group
        yield Marker(pos, end, title, label, short)
        pos = body.find(MARKER, end)


def attach_dates(parts: Sequence[Part], dates: Optional[Sequence[DateValue]]) -> List[Part]:
    """Give the Nth part the Nth date; parts without a recorded date get ``None``."""
    dates = list(dates or [])
    if len(dates) > len(parts):
        logger.warning("%d date(s) recorded for %d lecture part(s); ignoring the rest.", len(dates), len(parts))
    dated: List[Part] = []
    for part in parts:
        value = dates[part.index - 1] if part.index <= len(dates) else None
        dated.append(Part(part.label, part.title, part.index, value))
    return dated


def extract_parts(body: str, dates: Optional[Sequence[DateValue]] = None) -> List[Part]:
    parts = [
        Part(label=marker.label, title=marker.title, index=index)
        for index, marker in enumerate(scan_markers(body), start=1)
    ]
    logger.info("Found %d lecture part(s).", len(parts))
    if dates:
        parts = attach_dates(parts, dates)
    return parts


def select_parts(parts: Sequence[Part], selector: int) -> List[Part]:
    """Return all parts for selector 0, else the single part at that 1-based index."""
    if isinstance(selector, bool) or not isinstance(selector, int):
        raise RangeError(f"Part selector must be an integer, got {selector!r}.")
    if selector < 0 or selector > len(parts):
        raise RangeError(
            f"Part selector {selector} is out of range; the document has {len(parts)} part(s) "
            f"(use 0 for all or 1..{len(parts)})."
        )
    if selector == 0:
        return list(parts)
    return [parts[selector - 1]]
