"""
Snippet aggregator — merges per-file results into the request handed to
the learning service.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from .models import Diagnostic, FileOutcome, SnippetPair

logger = logging.getLogger(__name__)


class NothingToLearnError(Exception):
    """Raised when no processed file produced a snippet pair."""


@dataclass
class LearningRequest:
    """The ordered snippet pairs submitted in a single request."""
    pairs: list[SnippetPair] = field(default_factory=list)
    # File path for each entry of ``pairs``
    sources: list[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {"snippets": [pair.as_dict() for pair in self.pairs]}


class SnippetAggregator:
    """Collect snippet pairs per file, in the order files are added."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_file: dict[str, list[SnippetPair]] = {}
        self._diagnostics: list[Diagnostic] = []
        self._files_seen = 0

    def add(self, outcome: FileOutcome) -> None:
        """Record one file's outcome. Files without pairs are not included."""
        with self._lock:
            self._files_seen += 1
            self._diagnostics.extend(outcome.diagnostics)
            if not outcome.pairs:
                logger.info("[Learn] %s contributed no snippets", outcome.path)
                return
            self._by_file.setdefault(outcome.path, []).extend(outcome.pairs)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    @property
    def files(self) -> list[str]:
        """Paths that contributed at least one pair."""
        with self._lock:
            return list(self._by_file)

    @property
    def pairs(self) -> list[SnippetPair]:
        """All pairs, file by file, each file's pairs in hunk order."""
        with self._lock:
            return [pair for pairs in self._by_file.values() for pair in pairs]

    def is_empty(self) -> bool:
        with self._lock:
            return not self._by_file

    def to_request(self) -> LearningRequest:
        """Flatten the collected pairs into a :class:`LearningRequest`.

        Raises
        ------
        NothingToLearnError
            If no file contributed a pair.
        """
        with self._lock:
            if not self._by_file:
                raise NothingToLearnError(
                    f"None of the {self._files_seen} processed file(s) "
                    f"produced a change to learn from"
                )
            request = LearningRequest()
            for path, pairs in self._by_file.items():
                request.pairs.extend(pairs)
                request.sources.extend([path] * len(pairs))
            return request
