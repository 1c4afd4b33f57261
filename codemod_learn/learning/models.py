"""
Data model shared by the learning pipeline: snippet pairs, per-file
inputs and the diagnostics emitted when a unit of work is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .hunk_parser import DiffHunk


class FailureKind(str, Enum):
    """Why a hunk or a file was left out of the result."""
    PARSE_ERROR = "parse_error"
    MISSING_CONTENT = "missing_content"


@dataclass
class Diagnostic:
    """A recoverable failure local to one hunk or one file."""
    kind: FailureKind
    path: str
    message: str
    hunk_header: Optional[str] = None

    def __str__(self) -> str:
        where = self.path
        if self.hunk_header:
            where = f"{where} {self.hunk_header}"
        return f"{self.kind.value}: {where}: {self.message}"


@dataclass(frozen=True)
class SnippetPair:
    """The before/after text of one change. One side may be empty."""
    before: str
    after: str

    @property
    def is_empty(self) -> bool:
        return not self.before and not self.after

    def as_dict(self) -> dict[str, str]:
        return {"before": self.before, "after": self.after}


@dataclass
class FileDiff:
    """Everything known about one modified file."""
    path: str
    hunks: list[DiffHunk] = field(default_factory=list)
    before_text: str = ""
    after_text: str = ""


@dataclass
class FileOutcome:
    """Result of processing a single file."""
    path: str
    pairs: list[SnippetPair] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
