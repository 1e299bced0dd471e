"""
Write one presentation and one handout source per lecture part.

Every variant is the full rendered document with its ``@@name@@`` placeholders
filled in. Beamer's ``\\includeonlylecture`` keeps only the selected part, and
the ``handout`` class option switches the handout variant.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from lecture_errors import ConfigurationError, DirectoryCollisionError, InvalidTitleError
from lecture_model import HANDOUT, PRESENTATION, Artifact, ArtifactPair, ExportContext, Part
from lecture_slug import slugify

logger = logging.getLogger(__name__)

DELIMITER = "@@"
MODE_PLACEHOLDER = "@@mode@@"
LABEL_PLACEHOLDER = "@@label@@"
DATE_PLACEHOLDER = "@@date@@"

MODE_VALUES = {PRESENTATION: "", HANDOUT: "handout"}

BEAMER_CLASS_PATTERN = re.compile(r"\\documentclass\s*(?:\[(?P<options>[^\]]*)\])?\s*\{beamer\}")
DATE_COMMAND_PATTERN = re.compile(r"\\date\s*[\[{]")
BEGIN_DOCUMENT = "\\begin{document}"


def _is_name_char(char: str) -> bool:
    return char.isalpha() or char == "_"


def fill_placeholders(template: str, values: Mapping[str, str]) -> str:
    """Replace ``@@name@@`` tokens whose name is in ``values``.

    Everything else, including unknown placeholders and stray ``@``, braces or
    percent signs, is copied unchanged.
    """
    out: List[str] = []
    i = 0
    n = len(template)
    while i < n:
        start = template.find(DELIMITER, i)
        if start == -1:
            out.append(template[i:])
            break
        out.append(template[i:start])
        name_start = start + len(DELIMITER)
        j = name_start
        while j < n and _is_name_char(template[j]):
            j += 1
        name = template[name_start:j]
        if name and name in values and template.startswith(DELIMITER, j):
            out.append(values[name])
            i = j + len(DELIMITER)
        else:
            out.append(template[start])
            i = start + 1
    return "".join(out)


def prepare_template(document: str) -> str:
    """Make sure a rendered beamer document carries the variant placeholders."""
    begin = document.find(BEGIN_DOCUMENT)
    if begin == -1:
        raise ConfigurationError("Rendered document has no \\begin{document}.")
    if MODE_PLACEHOLDER not in document:
        match = BEAMER_CLASS_PATTERN.search(document, 0, begin)
        if not match:
            raise ConfigurationError("Rendered document does not use the beamer document class.")
        options = match.group("options")
        options = f"{MODE_PLACEHOLDER},{options}" if options and options.strip() else MODE_PLACEHOLDER
        document = document[:match.start()] + f"\\documentclass[{options}]{{beamer}}" + document[match.end():]
    inserted: List[str] = []
    if LABEL_PLACEHOLDER not in document:
        inserted.append(f"\\includeonlylecture{{{LABEL_PLACEHOLDER}}}\n")
    if DATE_PLACEHOLDER not in document and not DATE_COMMAND_PATTERN.search(document):
        inserted.append(f"\\date{{{DATE_PLACEHOLDER}}}\n")
    if inserted:
        begin = document.find(BEGIN_DOCUMENT)
        document = document[:begin] + "".join(inserted) + document[begin:]
    return document


UNSAFE_NAMES = {".", ".."}


def output_directory_name(part: Part) -> str:
    slug = slugify(part.title)
    if not slug:
        raise InvalidTitleError(
            f"Lecture {part.index} ({part.label!r}) has title {part.title!r}, which leaves no text for a directory name."
        )
    name = f"{part.label}-{slug}"
    separators = {"/", os.sep} | ({os.altsep} if os.altsep else set())
    if part.label in UNSAFE_NAMES or any(sep in name for sep in separators):
        raise InvalidTitleError(
            f"Lecture {part.index} ({part.label!r}, {part.title!r}) gives directory name {name!r}, "
            "which is not a single path component."
        )
    return name


def check_suffixes(context: ExportContext, include_handout: bool) -> None:
    if include_handout and context.presentation_suffix == context.handout_suffix:
        raise ConfigurationError(
            f"Presentation and handout suffixes are both {context.presentation_suffix!r}; "
            "the handout would overwrite the presentation."
        )


def write_variant(
    directory: Path,
    stem: str,
    template: str,
    kind: str,
    part: Part,
    context: ExportContext,
) -> Path:
    template_vars: Dict[str, str] = {
        "mode": MODE_VALUES[kind],
        "label": part.label,
        "date": context.formatted_date(),
    }
    path = directory / f"{stem}.tex"
    path.write_text(fill_placeholders(template, template_vars), encoding="utf-8")
    context.artifacts.append(Artifact(kind, path, template_vars))
    logger.info("Wrote %s variant %s", kind, path)
    return path


def materialize(
    parts: Sequence[Part],
    template: str,
    context: ExportContext,
    include_handout: bool = True,
) -> List[ArtifactPair]:
    """Write the variant sources for ``parts`` and queue them for building."""
    check_suffixes(context, include_handout)
    pairs: List[ArtifactPair] = []
    for part in parts:
        name = output_directory_name(part)
        earlier = context.claimed_dirs.get(name)
        if earlier is not None:
            raise DirectoryCollisionError(
                f"Lecture {part.index} ({part.label!r}, {part.title!r}) and lecture {earlier.index} "
                f"({earlier.label!r}, {earlier.title!r}) both map to directory {name!r}."
            )
        context.claimed_dirs[name] = part
        directory = context.output_dir / name
        directory.mkdir(parents=True, exist_ok=True)

        context.current_date = part.date
        presentation = write_variant(
            directory, name + context.presentation_suffix, template, PRESENTATION, part, context
        )
        handout = None
        if include_handout:
            handout = write_variant(directory, name + context.handout_suffix, template, HANDOUT, part, context)
        pair = ArtifactPair(presentation, handout)
        context.build_queue.append(pair)
        pairs.append(pair)
    return pairs
