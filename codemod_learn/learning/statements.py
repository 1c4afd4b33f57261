"""
Top-level statement extraction with tree-sitter.

Each statement keeps its full text, i.e. the statement itself plus the
leading trivia (whitespace and comments) between it and the previous
top-level statement, so concatenating every statement reproduces the
file up to the end of its last statement.

Uses tree-sitter >= 0.22 API with individual language packages.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language mapping
# ---------------------------------------------------------------------------

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "c_sharp",
}


def detect_language(file_path: str) -> Optional[str]:
    """
    Return the tree-sitter language name for *file_path*, or None if unsupported.

    Only the extension is examined.
    """
    ext = os.path.splitext(file_path)[1].lower()
    return EXTENSION_TO_LANGUAGE.get(ext)


@dataclass(frozen=True)
class Statement:
    """A top-level statement of a parsed file."""
    index: int          # position in document order
    kind: str           # tree-sitter node type
    text: str           # full text including leading trivia
    first_line: int     # 1-indexed, first line of the leading trivia
    last_line: int      # 1-indexed, inclusive

    def covers(self, line: int) -> bool:
        return self.first_line <= line <= self.last_line


# ---------------------------------------------------------------------------
# Language → tree-sitter objects
# ---------------------------------------------------------------------------

def _get_lang_func(language: str):
    """Return the tree-sitter language() function for *language*, or None."""
    try:
        if language == "python":
            import tree_sitter_python as m  # type: ignore
            return m.language
        elif language == "javascript":
            import tree_sitter_javascript as m  # type: ignore
            return m.language
        elif language == "typescript":
            import tree_sitter_typescript as m  # type: ignore
            return m.language_typescript
        elif language == "tsx":
            import tree_sitter_typescript as m  # type: ignore
            return m.language_tsx
        elif language == "java":
            import tree_sitter_java as m  # type: ignore
            return m.language
        elif language == "c":
            import tree_sitter_c as m  # type: ignore
            return m.language
        elif language == "cpp":
            import tree_sitter_cpp as m  # type: ignore
            return m.language
        elif language == "go":
            import tree_sitter_go as m  # type: ignore
            return m.language
        elif language == "rust":
            import tree_sitter_rust as m  # type: ignore
            return m.language
        elif language == "ruby":
            import tree_sitter_ruby as m  # type: ignore
            return m.language
        elif language == "php":
            import tree_sitter_php as m  # type: ignore
            return m.language_php
        elif language == "c_sharp":
            import tree_sitter_c_sharp as m  # type: ignore
            return m.language
    except ImportError:
        logger.debug("Grammar package for %s is not installed", language)
    return None


# A tree-sitter Parser must not be shared between threads
_local = threading.local()


def _get_ts_parser(language: str):
    """
    Return a tree-sitter Parser configured for *language*, or None.

    Caches parsers per language and thread.
    """
    cache = getattr(_local, "parsers", None)
    if cache is None:
        cache = _local.parsers = {}
    if language in cache:
        return cache[language]
    func = _get_lang_func(language)
    if func is None:
        return None
    try:
        import tree_sitter as ts  # type: ignore
        parser = ts.Parser(ts.Language(func()))
    except Exception as exc:
        logger.warning("Cannot create tree-sitter parser for %s: %s", language, exc)
        return None
    cache[language] = parser
    return parser


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_statements(source: str, language: str) -> Optional[list[Statement]]:
    """
    Parse *source* and return its top-level statements in document order.

    Parameters
    ----------
    source:
        Full text of the file.
    language:
        A tree-sitter language name as returned by :func:`detect_language`.

    Returns
    -------
    list[Statement] | None
        None when no parser is available for *language* or parsing fails.
        Comments between statements are folded into the leading trivia of
        the statement that follows them; trailing comments are dropped.
    """
    ts_parser = _get_ts_parser(language)
    if ts_parser is None:
        return None

    source_bytes = source.encode("utf-8")
    try:
        tree = ts_parser.parse(source_bytes)
    except Exception as exc:
        logger.warning("[Learn] tree-sitter failed on %s source: %s", language, exc)
        return None

    root = tree.root_node
    if root.has_error:
        logger.debug("[Learn] %s source contains syntax errors", language)

    statements: list[Statement] = []
    lead_byte = 0
    lead_row = 0

    for node in root.named_children:
        if "comment" in node.type:
            continue
        start_row = node.start_point[0]
        end_row = _last_row(node)
        statements.append(Statement(
            index=len(statements),
            kind=node.type,
            text=source_bytes[lead_byte:node.end_byte].decode("utf-8", errors="replace"),
            first_line=min(lead_row, start_row) + 1,
            last_line=end_row + 1,
        ))
        lead_byte = node.end_byte
        lead_row = end_row + 1

    return statements


def _last_row(node) -> int:
    """Row of the last character of *node* (0-indexed)."""
    row, column = node.end_point
    if column == 0 and row > node.start_point[0]:
        # Node ends right after a newline
        return row - 1
    return row
