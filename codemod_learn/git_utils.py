"""
Git integration — modified-file discovery, diffs and historical file
content for the learning pipeline.
"""

import logging
import os
import shlex
import subprocess
import threading

logger = logging.getLogger(__name__)


def _run_git(cmd: str, cwd: str | None = None) -> tuple[bool, str]:
    """Run a git command and return ``(success, stdout)``.

    stdout is returned verbatim; on failure it is replaced by stderr.
    """
    try:
        result = subprocess.run(
            f"git {cmd}",
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=cwd or None,
            check=False,
        )
    except OSError as e:
        return False, str(e)
    if result.returncode != 0:
        logger.debug("git %s failed: %s", cmd, result.stderr.strip())
        return False, result.stderr.strip()
    return True, result.stdout


def _split(path: str) -> tuple[str, str]:
    """Split *path* into ``(directory, quoted basename)`` for git calls."""
    directory = os.path.dirname(os.path.abspath(path))
    return directory, shlex.quote(os.path.basename(path))


def is_file_in_git_repo(path: str) -> bool:
    """Return ``True`` if *path* lives inside a git work tree."""
    directory = path if os.path.isdir(path) else os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(directory):
        return False
    ok, output = _run_git("rev-parse --is-inside-work-tree", cwd=directory)
    return ok and output.strip() == "true"


def get_repo_root(cwd: str | None = None) -> str | None:
    """Return the absolute path of the enclosing repository, or ``None``."""
    ok, output = _run_git("rev-parse --show-toplevel", cwd=cwd)
    return output.strip() if ok else None


def find_modified_files(cwd: str | None = None) -> list[str] | None:
    """Return absolute paths of files with staged or unstaged changes.

    Deleted files are left out. Returns ``None`` if git fails.
    """
    root = get_repo_root(cwd)
    if root is None:
        return None

    paths: list[str] = []
    # NUL-separated, unquoted names so non-ASCII paths come back as-is
    for cmd in ("-c core.quotePath=false diff --name-only -z --diff-filter=d",
                "-c core.quotePath=false diff --name-only -z --cached --diff-filter=d"):
        ok, output = _run_git(cmd, cwd=root)
        if not ok:
            return None
        for name in output.split("\0"):
            if not name:
                continue
            full = os.path.join(root, name)
            if full not in paths:
                paths.append(full)
    return paths


def get_latest_commit_hash(directory: str) -> str | None:
    """Return the ``HEAD`` commit hash of the repository containing *directory*."""
    ok, output = _run_git("rev-parse HEAD", cwd=directory)
    return output.strip() if ok and output.strip() else None


def get_diff_for_file(commit: str, path: str) -> str | None:
    """Unified diff of *path* between *commit* and the working tree."""
    directory, name = _split(path)
    ok, output = _run_git(
        f"diff --no-color --no-ext-diff {shlex.quote(commit)} -- {name}",
        cwd=directory,
    )
    return output if ok else None


def show_file_at_commit(commit: str, path: str) -> str | None:
    """Content of *path* as of *commit*, or ``None`` if it did not exist."""
    directory, _ = _split(path)
    revision = shlex.quote(f"{commit}:./{os.path.basename(path)}")
    ok, output = _run_git(f"show {revision}", cwd=directory)
    return output if ok else None


def read_working_file(path: str) -> str | None:
    """Current content of *path* in the working tree."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return None


class GitFileSource:
    """Reads diffs against the latest commit of each file's directory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._commits: dict[str, str | None] = {}

    def commit_for(self, path: str) -> str | None:
        directory = os.path.dirname(os.path.abspath(path))
        with self._lock:
            if directory not in self._commits:
                self._commits[directory] = get_latest_commit_hash(directory)
            return self._commits[directory]

    def get_diff(self, path: str) -> str | None:
        commit = self.commit_for(path)
        if commit is None:
            return None
        return get_diff_for_file(commit, path)

    def get_before_text(self, path: str) -> str | None:
        commit = self.commit_for(path)
        if commit is None:
            return None
        return show_file_at_commit(commit, path)

    def get_after_text(self, path: str) -> str | None:
        return read_working_file(path)
