"""
Combined article version of a lecture document.

The article keeps the whole rendered body, switches to an article class with
``beamerarticle`` and turns every lecture marker into a chapter whose label
follows the per-part directory naming.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from lecture_errors import ConfigurationError
from lecture_model import Part
from lecture_parts import read_group, scan_markers
from lecture_variants import (
    BEAMER_CLASS_PATTERN,
    BEGIN_DOCUMENT,
    DATE_COMMAND_PATTERN,
    DATE_PLACEHOLDER,
    fill_placeholders,
    output_directory_name,
)

logger = logging.getLogger(__name__)

INCLUDE_ONLY = "\\includeonlylecture"
DEFAULT_DOCUMENTCLASS = "scrreprt"


def drop_include_only(document: str) -> str:
    out: List[str] = []
    pos = 0
    while True:
        start = document.find(INCLUDE_ONLY, pos)
        if start == -1:
            out.append(document[pos:])
            break
        group = read_group(document, start + len(INCLUDE_ONLY))
        if group is None:
            out.append(document[pos:start + len(INCLUDE_ONLY)])
            pos = start + len(INCLUDE_ONLY)
            continue
        out.append(document[pos:start])
        pos = group[1]
        if document.startswith("\n", pos):
            pos += 1
    return "".join(out)


def article_source(document: str, documentclass: str = DEFAULT_DOCUMENTCLASS, date_text: str = "") -> str:
    begin = document.find(BEGIN_DOCUMENT)
    if begin == -1:
        raise ConfigurationError("Rendered document has no \\begin{document}.")
    match = BEAMER_CLASS_PATTERN.search(document, 0, begin)
    if not match:
        raise ConfigurationError("Rendered document does not use the beamer document class.")
    document = (
        document[:match.start()]
        + f"\\documentclass{{{documentclass}}}\n\\usepackage{{beamerarticle}}"
        + document[match.end():]
    )
    document = drop_include_only(document)
    if DATE_PLACEHOLDER not in document and not DATE_COMMAND_PATTERN.search(document):
        begin = document.find(BEGIN_DOCUMENT)
        document = document[:begin] + f"\\date{{{DATE_PLACEHOLDER}}}\n" + document[begin:]

    out: List[str] = []
    pos = 0
    for index, marker in enumerate(scan_markers(document), start=1):
        name = output_directory_name(Part(marker.label, marker.title, index))
        out.append(document[pos:marker.start])
        out.append(f"\\chapter{{{marker.title}}}\\label{{lecture:{name}}}")
        pos = marker.end
    out.append(document[pos:])
    return fill_placeholders("".join(out), {"mode": "", "label": "", "date": date_text})


def article_path(output_dir: Path, subdir: str, stem: str, suffix: str) -> Path:
    return output_dir / subdir / f"{stem}{suffix}.tex"


def write_article(document: str, path: Path, documentclass: str = DEFAULT_DOCUMENTCLASS, date_text: str = "") -> Path:
    text = article_source(document, documentclass, date_text)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote article %s", path)
    return path
