"""Filesystem-safe identifiers derived from lecture titles."""

from __future__ import annotations

import re

COMMAND_PATTERN = re.compile(r"\\(?:[A-Za-z]+\*?|.)")
BRACE_GROUP_PATTERN = re.compile(r"\{[^{}]*\}")
STRAY_BRACE_PATTERN = re.compile(r"[{}]")
DASH_PATTERN = re.compile(r"\s*-\s*")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Order matters: III before II before I.
ROMAN_SUFFIXES = (("III", "3"), ("II", "2"), ("I", "1"), ("IV", "4"), ("V", "5"))
ROMAN_PATTERN = re.compile(r"\b(" + "|".join(numeral for numeral, _ in ROMAN_SUFFIXES) + r")$")
ROMAN_DIGITS = dict(ROMAN_SUFFIXES)


def strip_markup(title: str) -> str:
    """Drop LaTeX commands and every brace group, keeping plain text only."""
    text = COMMAND_PATTERN.sub("", title)
    previous = None
    while previous != text:
        previous = text
        text = BRACE_GROUP_PATTERN.sub("", text)
    text = STRAY_BRACE_PATTERN.sub("", text)
    return text.strip()


def slugify(title: str) -> str:
    text = strip_markup(title)
    text = ROMAN_PATTERN.sub(lambda match: ROMAN_DIGITS[match.group(1)], text)
    text = DASH_PATTERN.sub("-", text)
    text = WHITESPACE_PATTERN.sub("-", text)
    return text.lower()
