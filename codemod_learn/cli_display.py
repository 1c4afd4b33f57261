"""
Console output and file logging for the ``codemod-learn`` command.
"""

import logging
import os
from datetime import datetime

from .learning.models import Diagnostic, SnippetPair

C_CYAN = "\033[38;5;81m"
C_GREEN = "\033[38;5;114m"
C_RED = "\033[38;5;203m"
C_YELLOW = "\033[38;5;221m"
C_DIM = "\033[38;5;243m"
C_BOLD = "\033[1m"
C_RESET = "\033[0m"


def setup_logger(log_dir: str = ".codemod-learn/logs") -> logging.Logger:
    """Attach a file handler under *log_dir* to the package logger.

    Calling it again with the same directory reuses the existing handler.
    """
    logger = logging.getLogger("codemod_learn")
    logger.setLevel(logging.DEBUG)

    log_dir = os.path.abspath(log_dir)
    for handler in logger.handlers:
        if (isinstance(handler, logging.FileHandler)
                and os.path.dirname(handler.baseFilename) == log_dir):
            return logger

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"learn_{timestamp}.log")

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


# Package logger; handlers are attached by setup_logger()
log = logging.getLogger("codemod_learn")


def print_info(message: str) -> None:
    print(f"{C_CYAN}{message}{C_RESET}")


def print_error(message: str) -> None:
    print(f"  {C_RED}[ERROR]{C_RESET} {message}")


def print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    """List skipped hunks and files, one per line."""
    for diag in diagnostics:
        print(f"  {C_YELLOW}[SKIPPED]{C_RESET} {diag}")


def format_snippet_pair(pair: SnippetPair, source: str = "") -> str:
    """Render a pair as red ``-`` and green ``+`` lines under a header."""
    lines = [f"{C_BOLD}{'─' * 60}{C_RESET}"]
    if source:
        lines.append(f"{C_DIM}{source}{C_RESET}")
    for line in pair.before.splitlines():
        lines.append(f"{C_RED}-{line}{C_RESET}")
    for line in pair.after.splitlines():
        lines.append(f"{C_GREEN}+{line}{C_RESET}")
    return "\n".join(lines)


def prompt_file_selection(paths: list[str]) -> list[str]:
    """Ask which of *paths* to learn from. All are selected by default.

    Accepts a comma-separated list of numbers, ``a`` for all, or an empty
    answer for all.
    """
    print("\n" + "=" * 60)
    print("  Select the files you want to learn the diff from")
    print("=" * 60)
    for i, path in enumerate(paths, 1):
        print(f"  [{i}] {os.path.basename(path)}  {C_DIM}{path}{C_RESET}")
    print()

    while True:
        choice = input("  Files (e.g. 1,3) [all]: ").strip().lower()
        if choice in ("", "a", "all"):
            return list(paths)
        try:
            picked = sorted({int(part) for part in choice.split(",") if part.strip()})
        except ValueError:
            print("  Invalid choice. Use numbers separated by commas.")
            continue
        if picked and all(1 <= n <= len(paths) for n in picked):
            return [paths[n - 1] for n in picked]
        print(f"  Invalid choice. Pick numbers between 1 and {len(paths)}.")
