"""Exceptions raised by the lecture export steps."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ExportError(RuntimeError):
    """Raised when a lecture export step fails."""


class ConfigurationError(ExportError):
    """Raised for unusable configuration or input documents."""


class RangeError(ExportError):
    """Raised when a part selector is outside ``[0, part count]``."""


class InvalidTitleError(ExportError):
    """Raised when a part title yields an empty slug."""


class DirectoryCollisionError(ExportError):
    """Raised when two parts map to the same output directory."""


class CompileError(ExportError):
    """Raised when the external compiler fails on an artifact."""

    def __init__(self, message: str, source: Optional[Path] = None, returncode: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.returncode = returncode


class NothingToCompileError(ExportError):
    """Raised when the build queue is empty."""
