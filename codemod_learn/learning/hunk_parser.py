"""
Hunk parser — splits unified-diff text for one file into hunks carrying
their old/new line ranges.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

# Any line that looks like a hunk header, well-formed or not
_HEADER_PREFIX = re.compile(r"^@@\s")
_HEADER_PATTERN = re.compile(
    r"^@@ -(?P<old_start>\S+?)(?:,(?P<old_count>\S+?))?"
    r" \+(?P<new_start>\S+?)(?:,(?P<new_count>\S+?))? @@"
)


@dataclass
class DiffHunk:
    """One region of change: old/new line ranges plus the raw hunk text."""
    header: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    raw_body: str = ""

    @property
    def is_insertion(self) -> bool:
        return self.old_count == 0

    @property
    def is_deletion(self) -> bool:
        return self.new_count == 0

    @property
    def body_lines(self) -> list[str]:
        """The body lines below the header, without line terminators."""
        lines = split_lines(self.raw_body)[1:]
        return [line[:-1] if line.endswith("\n") else line for line in lines]


@dataclass
class HunkParseResult:
    """Hunks found in one diff, plus messages for headers that were skipped."""
    hunks: list[DiffHunk] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def split_lines(text: str) -> list[str]:
    """Split on line feeds only, keeping terminators.

    Unlike ``str.splitlines`` this leaves form feeds and other exotic
    separators inside a line, matching how git counts lines.
    """
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


class _State(Enum):
    SCANNING_FOR_HEADER = "scanning"
    IN_HUNK_BODY = "in_hunk"


class HunkParser:
    """Parse unified-diff text into an ordered list of :class:`DiffHunk`."""

    def parse(self, diff_text: str, file_path: str = "") -> HunkParseResult:
        """Parse *diff_text*.

        Parameters
        ----------
        diff_text:
            Raw ``git diff`` output for a single file. May be empty.
        file_path:
            Used in log messages only.

        Returns
        -------
        HunkParseResult
            Hunks in text order. A header whose ranges are not numeric is
            reported in ``errors`` and its body is dropped; parsing resumes
            at the next header.
        """
        result = HunkParser._scan(diff_text)
        for message in result.errors:
            logger.warning("[Learn] %s: %s", file_path or "<diff>", message)
        return result

    @staticmethod
    def _scan(diff_text: str) -> HunkParseResult:
        result = HunkParseResult()
        if not diff_text:
            return result

        state = _State.SCANNING_FOR_HEADER
        lines = split_lines(diff_text)
        current: DiffHunk | None = None
        body: list[str] = []

        def _close() -> None:
            if current is not None:
                current.raw_body = "".join(body)
                result.hunks.append(current)

        for line in lines:
            if _HEADER_PREFIX.match(line):
                if state is _State.IN_HUNK_BODY:
                    _close()
                current = None
                body = []
                hunk = HunkParser._parse_header(line.rstrip("\r\n"))
                if isinstance(hunk, str):
                    result.errors.append(hunk)
                    # Skip this hunk's body
                    state = _State.SCANNING_FOR_HEADER
                    continue
                current = hunk
                body = [line]
                state = _State.IN_HUNK_BODY
                continue

            if state is _State.IN_HUNK_BODY:
                body.append(line)

        if state is _State.IN_HUNK_BODY:
            _close()

        return result

    @staticmethod
    def _parse_header(header: str) -> DiffHunk | str:
        """Build a hunk from its header, or return an error message."""
        match = _HEADER_PATTERN.match(header)
        if match is None:
            return f"Malformed hunk header {header!r}"

        values: dict[str, int] = {}
        for name in ("old_start", "old_count", "new_start", "new_count"):
            raw = match.group(name)
            if raw is None:
                # Single-line hunks omit the count
                values[name] = 1
                continue
            if not (raw.isascii() and raw.isdigit()):
                return f"Non-numeric range {raw!r} in hunk header {header!r}"
            values[name] = int(raw)

        for side in ("old", "new"):
            if values[f"{side}_count"] > 0 and values[f"{side}_start"] < 1:
                return f"Invalid {side} start line in hunk header {header!r}"

        return DiffHunk(header=header, **values)
