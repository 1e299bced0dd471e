"""
Compile queued lecture sources with an external LaTeX toolchain.

Artifacts are built one after another in queue order. The first compiler
failure aborts the run with ``CompileError``; PDFs produced before that point
stay on disk.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from lecture_errors import CompileError, NothingToCompileError
from lecture_model import ArtifactPair, BuildResult, ExportContext

logger = logging.getLogger(__name__)

DEFAULT_FULL_COMMAND = "latexmk -pdf -interaction=nonstopmode -halt-on-error"
DEFAULT_FAST_COMMAND = "pdflatex -interaction=nonstopmode -halt-on-error"
DEFAULT_TIMEOUT_SECONDS = 600
LOG_TAIL_LINES = 20


def describe_command(arguments: Iterable[str]) -> str:
    return " ".join(shlex.quote(str(arg)) for arg in arguments)


def log_tail(output: Optional[str], lines: int = LOG_TAIL_LINES) -> str:
    if not output:
        return ""
    return "\n".join(output.rstrip().splitlines()[-lines:])


def count_pages(pdf_path: Path) -> int:
    reader = PdfReader(str(pdf_path))
    return len(reader.pages)


class LatexCompiler:
    """Runs a full (``latexmk``) or fast (single ``pdflatex`` pass) build for one file."""

    def __init__(
        self,
        full_command: str = DEFAULT_FULL_COMMAND,
        fast_command: str = DEFAULT_FAST_COMMAND,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.full_command = full_command
        self.fast_command = fast_command
        self.timeout = timeout

    def command_for(self, path: Path, fast: bool = False) -> List[str]:
        template = self.fast_command if fast else self.full_command
        return shlex.split(template) + [path.name]

    def compile(self, path: Path, fast: bool = False) -> BuildResult:
        path = Path(path)
        cmd = self.command_for(path, fast)
        logger.info("exec: %s (in %s)", describe_command(cmd), path.parent)
        try:
            proc = subprocess.run(
                cmd,
                cwd=path.parent,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError:
            return BuildResult(path, error=f"compiler executable not found: {cmd[0]}")
        except subprocess.TimeoutExpired:
            return BuildResult(path, error=f"compiler timed out after {self.timeout} s")
        if proc.returncode != 0:
            return BuildResult(
                path,
                error=f"compiler exited with code {proc.returncode}\n{log_tail(proc.stdout)}",
                returncode=proc.returncode,
            )
        output = path.with_suffix(".pdf")
        if not output.exists():
            return BuildResult(path, error=f"compiler reported success but {output.name} is missing", returncode=0)
        try:
            pages = count_pages(output)
        except (PdfReadError, OSError, ValueError) as exc:
            return BuildResult(path, error=f"{output.name} is not a readable PDF: {exc}", returncode=0)
        return BuildResult(path, output=output, pages=pages, returncode=0)


def compile_artifact(compiler, path: Path, fast: bool, context: Optional[ExportContext] = None) -> BuildResult:
    result = compiler.compile(path, fast)
    if context is not None:
        context.results.append(result)
    if not result.ok:
        raise CompileError(f"Compiling {path} failed: {result.error}", source=path, returncode=result.returncode)
    logger.info("Built %s (%d page(s))", result.output, result.pages)
    return result


def compile_all(
    queue: Sequence[ArtifactPair],
    include_handout: bool,
    compiler,
    fast: bool = False,
    context: Optional[ExportContext] = None,
) -> Path:
    """Build every queued pair in order and return the last presentation PDF."""
    if not queue:
        raise NothingToCompileError("No lecture artifacts were queued for compilation.")
    last_presentation: Optional[Path] = None
    for pair in queue:
        result = compile_artifact(compiler, pair.presentation, fast, context)
        last_presentation = result.output
        if include_handout and pair.handout is not None:
            compile_artifact(compiler, pair.handout, fast, context)
    return last_presentation


def bundle_pdfs(sources: Sequence[Path], output_path: Path) -> Path:
    """Concatenate ``sources`` into a single PDF at ``output_path``."""
    existing = [Path(src) for src in sources if Path(src).exists()]
    if not existing:
        raise NothingToCompileError("No compiled PDFs available to bundle.")
    writer = PdfWriter()
    for src in existing:
        reader = PdfReader(str(src))
        for page in reader.pages:
            writer.add_page(page)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as handle:
        writer.write(handle)
    logger.info("Bundled %d PDF(s) into %s", len(existing), output_path)
    return output_path
