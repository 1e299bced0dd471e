"""Records shared by the extraction, templating and build steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Union

DateValue = Union[date, str, None]

PRESENTATION = "presentation"
HANDOUT = "handout"


@dataclass(frozen=True)
class Part:
    label: str
    title: str
    index: int
    date: DateValue = None


@dataclass(frozen=True)
class Artifact:
    kind: str
    path: Path
    template_vars: Dict[str, str]


class ArtifactPair(NamedTuple):
    presentation: Path
    handout: Optional[Path]


@dataclass
class BuildResult:
    source: Path
    output: Optional[Path] = None
    error: Optional[str] = None
    pages: int = 0
    returncode: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.output is not None and self.error is None


@dataclass
class ExportContext:
    """State of a single export invocation.

    Created by the caller for each run and dropped afterwards; the templater
    fills ``build_queue`` and ``artifacts``, the orchestrator appends to
    ``results``.
    """

    output_dir: Path
    presentation_suffix: str = "-beamer"
    handout_suffix: str = ""
    date_format: str = "%d %B %Y"
    current_date: DateValue = None
    build_queue: List[ArtifactPair] = field(default_factory=list)
    artifacts: List[Artifact] = field(default_factory=list)
    results: List[BuildResult] = field(default_factory=list)
    claimed_dirs: Dict[str, Part] = field(default_factory=dict)

    def formatted_date(self) -> str:
        value = self.current_date
        if value is None:
            return ""
        if isinstance(value, date):
            try:
                return value.strftime(self.date_format)
            except ValueError:
                return value.isoformat()
        return str(value)
