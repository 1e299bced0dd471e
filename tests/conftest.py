import sys
from pathlib import Path

import pytest
from pypdf import PdfWriter

# Put the repository root on sys.path so the lecture_* modules import
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from lecture_model import BuildResult  # noqa: E402


SAMPLE_DOCUMENT = r"""\documentclass[t]{beamer}
\usepackage{amsmath}
\title{Materials Science}
\begin{document}
\lecture{Welcome}{lecture01}
\begin{frame}{Overview}
  Sets like $\{x \mid x > 0\}$ cost 100\% of the time; mail me@@example.org.
\end{frame}
\lecture{Content I}{lecture02}
\begin{frame}{Details}
  \textbf{bold}
\end{frame}
\end{document}
"""


def write_blank_pdf(path: Path, pages: int = 1) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        writer.write(handle)
    return path


class FakeCompiler:
    """Writes a one-page PDF next to each source instead of running LaTeX."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def command_for(self, path, fast=False):
        return ["fake-tex", "--fast" if fast else "--full", Path(path).name]

    def compile(self, path, fast=False):
        path = Path(path)
        self.calls.append((path, fast))
        if path.name in self.fail_on:
            return BuildResult(path, error="! LaTeX Error: boom", returncode=1)
        output = write_blank_pdf(path.with_suffix(".pdf"))
        return BuildResult(path, output=output, pages=1, returncode=0)


@pytest.fixture
def sample_document():
    return SAMPLE_DOCUMENT


@pytest.fixture
def sample_source(tmp_path: Path):
    source = tmp_path / "course.tex"
    source.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    return source


@pytest.fixture
def fake_compiler():
    return FakeCompiler()


@pytest.fixture
def compiler_factory():
    return FakeCompiler


@pytest.fixture
def blank_pdf():
    return write_blank_pdf
