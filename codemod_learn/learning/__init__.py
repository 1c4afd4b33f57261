"""Diff-to-snippet reduction: hunks, snapshots and top-level statements."""

from .hunk_parser import HunkParser, HunkParseResult, DiffHunk
from .snapshot_slicer import SnapshotSlicer
from .statements import Statement, detect_language, parse_statements
from .statement_correlator import StatementCorrelator, StatementCandidateSet
from .aggregator import SnippetAggregator, LearningRequest, NothingToLearnError
from .models import SnippetPair, FileDiff, FileOutcome, Diagnostic, FailureKind
from .pipeline import LearningPipeline, FileSource

__all__ = [
    "HunkParser", "HunkParseResult", "DiffHunk",
    "SnapshotSlicer",
    "Statement", "detect_language", "parse_statements",
    "StatementCorrelator", "StatementCandidateSet",
    "SnippetAggregator", "LearningRequest", "NothingToLearnError",
    "SnippetPair", "FileDiff", "FileOutcome", "Diagnostic", "FailureKind",
    "LearningPipeline", "FileSource",
]
