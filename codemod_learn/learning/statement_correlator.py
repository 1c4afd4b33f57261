"""
Statement correlator — reduces a file's change to the top-level
statements touched by the diff, dropping statements whose text is the
same on both sides.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from .hunk_parser import DiffHunk, HunkParser
from .models import Diagnostic, FailureKind, FileOutcome, SnippetPair
from .statements import Statement

logger = logging.getLogger(__name__)

MATCHING_MODES = ("position", "substring")

# Characters that carry no meaning on their own
_PUNCTUATION = re.compile(r"[{}()\[\]:;,/?'\"<>|=`!\s]")


@dataclass(frozen=True)
class ChangedLine:
    """A deletion (``-``) or addition (``+``) line of a hunk body."""
    marker: str
    content: str        # marker removed, whitespace trimmed
    line_number: int    # on the old side for deletions, new side for additions


@dataclass
class StatementCandidateSet:
    """Statement texts suspected to be part of the change, per side."""
    before: dict[str, None] = field(default_factory=dict)
    after: dict[str, None] = field(default_factory=dict)

    def cancel_unchanged(self) -> set[str]:
        """Drop texts present on both sides and return them."""
        unchanged = self.before.keys() & self.after.keys()
        for text in unchanged:
            del self.before[text]
            del self.after[text]
        return unchanged


def is_meaningful(content: str) -> bool:
    """False for lines made only of punctuation and whitespace."""
    return bool(_PUNCTUATION.sub("", content))


def iter_changed_lines(hunks: Sequence[DiffHunk]) -> Iterator[ChangedLine]:
    """Yield the ``-``/``+`` lines of *hunks* with their line numbers."""
    for hunk in hunks:
        old_line = hunk.old_start
        new_line = hunk.new_start
        for line in hunk.body_lines:
            if line.startswith("\\"):
                # "\ No newline at end of file"
                continue
            if line.startswith("-"):
                yield ChangedLine("-", line[1:].strip(), old_line)
                old_line += 1
            elif line.startswith("+"):
                yield ChangedLine("+", line[1:].strip(), new_line)
                new_line += 1
            else:
                old_line += 1
                new_line += 1


class StatementCorrelator:
    """Correlate diff lines with top-level statements of both file versions.

    Parameters
    ----------
    matching:
        ``"position"`` maps each changed line to the statements whose line
        span contains it. ``"substring"`` selects every statement whose text
        contains the changed line's content, which can pull in unrelated
        statements that happen to share a fragment.
    """

    def __init__(self, matching: str = "position") -> None:
        if matching not in MATCHING_MODES:
            raise ValueError(
                f"Unknown matching mode {matching!r}, "
                f"expected one of {', '.join(MATCHING_MODES)}"
            )
        self.matching = matching
        self._hunk_parser = HunkParser()

    def correlate(
        self,
        diff_text: str,
        before_statements: Optional[Sequence[Statement]],
        after_statements: Optional[Sequence[Statement]],
        path: str = "",
    ) -> FileOutcome:
        """Reduce the change in *diff_text* to at most one snippet pair.

        Returns an outcome with no pairs when the diff is empty or every
        candidate cancels out. When a statement list is missing or a hunk
        header is malformed the file is skipped with a diagnostic.
        """
        outcome = FileOutcome(path=path)

        if before_statements is None or after_statements is None:
            side = "before" if before_statements is None else "after"
            message = f"No syntax tree available for the {side} version"
            logger.warning("[Learn] %s: %s", path, message)
            outcome.diagnostics.append(Diagnostic(
                kind=FailureKind.MISSING_CONTENT, path=path, message=message,
            ))
            return outcome

        parsed = self._hunk_parser.parse(diff_text, path)
        if parsed.errors:
            outcome.diagnostics.extend(
                Diagnostic(kind=FailureKind.PARSE_ERROR, path=path, message=error)
                for error in parsed.errors
            )
            return outcome

        candidates = self.collect_candidates(
            parsed.hunks, before_statements, after_statements,
        )
        unchanged = candidates.cancel_unchanged()
        if unchanged:
            logger.debug(
                "[Learn] %s: cancelled %d unchanged statement(s)", path, len(unchanged),
            )

        pair = SnippetPair(
            before="".join(candidates.before).lstrip("\n"),
            after="".join(candidates.after).lstrip("\n"),
        )
        if pair.is_empty:
            logger.debug("[Learn] %s: no changed statements", path)
            return outcome

        outcome.pairs.append(pair)
        return outcome

    def collect_candidates(
        self,
        hunks: Sequence[DiffHunk],
        before_statements: Sequence[Statement],
        after_statements: Sequence[Statement],
    ) -> StatementCandidateSet:
        """Find the statements touched by each changed line.

        Candidate texts are kept in document order, each text at most once.
        """
        before_hits: set[int] = set()
        after_hits: set[int] = set()

        for changed in iter_changed_lines(hunks):
            if not is_meaningful(changed.content):
                continue
            if changed.marker == "-":
                before_hits.update(self._match(changed, before_statements))
            else:
                after_hits.update(self._match(changed, after_statements))

        return StatementCandidateSet(
            before=_texts_in_order(before_statements, before_hits),
            after=_texts_in_order(after_statements, after_hits),
        )

    def _match(
        self, changed: ChangedLine, statements: Sequence[Statement],
    ) -> Iterator[int]:
        for statement in statements:
            if self.matching == "position":
                hit = statement.covers(changed.line_number)
            else:
                hit = changed.content in statement.text
            if hit:
                yield statement.index


def _texts_in_order(
    statements: Sequence[Statement], hits: set[int],
) -> dict[str, None]:
    texts: dict[str, None] = {}
    for statement in statements:
        if statement.index in hits:
            texts.setdefault(statement.text, None)
    return texts
