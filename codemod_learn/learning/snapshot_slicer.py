"""
Snapshot slicer — cuts the before/after line ranges of a hunk out of the
full file contents at the old commit and in the working tree.
"""

from __future__ import annotations

import logging

from .hunk_parser import DiffHunk, split_lines
from .models import Diagnostic, FailureKind, FileDiff, FileOutcome, SnippetPair

logger = logging.getLogger(__name__)


class SnapshotSlicer:
    """Extract the snippet pair for each hunk of a file."""

    def slice_hunk(
        self,
        hunk: DiffHunk,
        before_text: str,
        after_text: str,
        path: str = "",
    ) -> SnippetPair | Diagnostic:
        """Slice a single hunk.

        Returns the :class:`SnippetPair`, or a ``PARSE_ERROR``
        :class:`Diagnostic` when a range runs past the end of the file.
        """
        return self._slice(
            hunk,
            split_lines(before_text),
            split_lines(after_text),
            path,
        )

    def slice_file(self, file_diff: FileDiff) -> FileOutcome:
        """Slice every hunk of *file_diff*, skipping inconsistent ones."""
        outcome = FileOutcome(path=file_diff.path)
        before_lines = split_lines(file_diff.before_text)
        after_lines = split_lines(file_diff.after_text)

        for hunk in file_diff.hunks:
            sliced = self._slice(hunk, before_lines, after_lines, file_diff.path)
            if isinstance(sliced, Diagnostic):
                outcome.diagnostics.append(sliced)
                continue
            if sliced.is_empty:
                logger.debug(
                    "[Learn] Empty hunk %s in %s", hunk.header, file_diff.path,
                )
                continue
            outcome.pairs.append(sliced)

        return outcome

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _slice(
        self,
        hunk: DiffHunk,
        before_lines: list[str],
        after_lines: list[str],
        path: str,
    ) -> SnippetPair | Diagnostic:
        before = _take(before_lines, hunk.old_start, hunk.old_count)
        if before is None:
            return self._out_of_range(hunk, "old", len(before_lines), path)
        after = _take(after_lines, hunk.new_start, hunk.new_count)
        if after is None:
            return self._out_of_range(hunk, "new", len(after_lines), path)
        return SnippetPair(before=before, after=after)

    @staticmethod
    def _out_of_range(
        hunk: DiffHunk, side: str, total: int, path: str,
    ) -> Diagnostic:
        start = getattr(hunk, f"{side}_start")
        end = start + getattr(hunk, f"{side}_count") - 1
        message = (
            f"{side} range {start}-{end} exceeds file length ({total} lines)"
        )
        logger.warning("[Learn] %s %s: %s", path, hunk.header, message)
        return Diagnostic(
            kind=FailureKind.PARSE_ERROR,
            path=path,
            message=message,
            hunk_header=hunk.header,
        )


def _take(lines: list[str], start: int, count: int) -> str | None:
    """Lines ``start .. start + count - 1`` (1-indexed) joined as text.

    Interior line terminators are kept as they are in the file; the
    terminator of the last line is dropped. Returns None when the range
    does not fit inside *lines*.
    """
    if count == 0:
        return ""
    if start < 1 or start + count - 1 > len(lines):
        return None
    text = "".join(lines[start - 1 : start - 1 + count])
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith(("\n", "\r")):
        return text[:-1]
    return text
