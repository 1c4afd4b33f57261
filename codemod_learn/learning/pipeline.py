"""
Learning pipeline — fetches a file's diff and snapshots from a source,
reduces them to snippet pairs, and aggregates the results across files.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol, Sequence

from .aggregator import SnippetAggregator
from .hunk_parser import HunkParser
from .models import Diagnostic, FailureKind, FileDiff, FileOutcome
from .snapshot_slicer import SnapshotSlicer
from .statement_correlator import StatementCorrelator
from .statements import detect_language, parse_statements

logger = logging.getLogger(__name__)

STRATEGIES = ("hunks", "statements")


class _CollaboratorError(Exception):
    """A FileSource call raised; the original exception is the cause."""


class FileSource(Protocol):
    """Supplies diff text and file snapshots. ``None`` means unavailable."""

    def get_diff(self, path: str) -> Optional[str]: ...

    def get_before_text(self, path: str) -> Optional[str]: ...

    def get_after_text(self, path: str) -> Optional[str]: ...


class LearningPipeline:
    """Turn modified files into snippet pairs.

    Parameters
    ----------
    source:
        The :class:`FileSource` to read diffs and snapshots from.
    strategy:
        ``"hunks"`` emits one pair per diff hunk; ``"statements"`` emits
        at most one pair per file built from whole top-level statements.
    matching:
        Matching mode of the statements strategy, see
        :class:`StatementCorrelator`.
    max_workers:
        Upper bound on files processed concurrently.
    """

    def __init__(
        self,
        source: FileSource,
        strategy: str = "hunks",
        matching: str = "position",
        max_workers: int = 4,
    ) -> None:
        if strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy {strategy!r}, expected one of {', '.join(STRATEGIES)}"
            )
        self.source = source
        self.strategy = strategy
        self.max_workers = max(1, max_workers)
        self._hunk_parser = HunkParser()
        self._slicer = SnapshotSlicer()
        self._correlator = StatementCorrelator(matching)

    def run(self, paths: Sequence[str]) -> SnippetAggregator:
        """Process *paths* concurrently and merge results in input order."""
        aggregator = SnippetAggregator()
        if not paths:
            return aggregator

        workers = min(len(paths), self.max_workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(self.process_file, paths))

        for outcome in outcomes:
            aggregator.add(outcome)
        return aggregator

    def process_file(self, path: str) -> FileOutcome:
        """Reduce a single file's change. Never raises for per-file failures."""
        logger.debug("[Learn] Processing %s with %s strategy", path, self.strategy)
        try:
            if self.strategy == "statements":
                return self._process_statements(path)
            return self._process_hunks(path)
        except _CollaboratorError as exc:
            return _missing(path, f"Collaborator failed: {exc}")

    def _fetch(self, getter, path: str) -> Optional[str]:
        try:
            return getter(path)
        except Exception as exc:
            logger.warning("[Learn] Failed to read %s: %s", path, exc)
            raise _CollaboratorError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _process_hunks(self, path: str) -> FileOutcome:
        diff_text = self._fetch(self.source.get_diff, path)
        if diff_text is None:
            return _missing(path, "Diff is unavailable")

        parsed = self._hunk_parser.parse(diff_text, path)
        diagnostics = [
            Diagnostic(kind=FailureKind.PARSE_ERROR, path=path, message=error)
            for error in parsed.errors
        ]
        if not parsed.hunks:
            logger.info("[Learn] %s has no hunks", path)
            return FileOutcome(path=path, diagnostics=diagnostics)

        before_text = self._fetch(self.source.get_before_text, path)
        after_text = self._fetch(self.source.get_after_text, path)
        if before_text is None or after_text is None:
            side = "before" if before_text is None else "after"
            return _missing(path, f"Content of the {side} version is unavailable")

        outcome = self._slicer.slice_file(FileDiff(
            path=path,
            hunks=parsed.hunks,
            before_text=before_text,
            after_text=after_text,
        ))
        outcome.diagnostics[:0] = diagnostics
        return outcome

    def _process_statements(self, path: str) -> FileOutcome:
        language = detect_language(path)
        if language is None:
            return _missing(path, "No grammar for this file type")

        diff_text = self._fetch(self.source.get_diff, path)
        if diff_text is None:
            return _missing(path, "Diff is unavailable")
        if not diff_text.strip():
            logger.info("[Learn] %s has no hunks", path)
            return FileOutcome(path=path)

        before_text = self._fetch(self.source.get_before_text, path)
        after_text = self._fetch(self.source.get_after_text, path)
        if before_text is None or after_text is None:
            side = "before" if before_text is None else "after"
            return _missing(path, f"Content of the {side} version is unavailable")

        return self._correlator.correlate(
            diff_text,
            parse_statements(before_text, language),
            parse_statements(after_text, language),
            path,
        )


def _missing(path: str, message: str) -> FileOutcome:
    logger.warning("[Learn] %s: %s", path, message)
    return FileOutcome(
        path=path,
        diagnostics=[Diagnostic(
            kind=FailureKind.MISSING_CONTENT, path=path, message=message,
        )],
    )
