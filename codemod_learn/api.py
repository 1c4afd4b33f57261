"""
Programmatic API — learn a codemod example from the working tree.

Example usage::

    from codemod_learn import learn_diff

    result = learn_diff(["src/app.ts"], strategy="statements", submit=False)
    for pair in result.request.pairs:
        print(pair.before, "=>", pair.after)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Sequence

from . import git_utils
from .config import Config
from .learning import (
    Diagnostic, FileSource, LearningPipeline, LearningRequest, NothingToLearnError,
)
from .service import LearningServiceClient, LearningServiceError, build_studio_url

_logger = logging.getLogger(__name__)


@dataclass
class LearnResult:
    """Structured result returned by :func:`learn_diff`."""
    success: bool
    request: Optional[LearningRequest] = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    diff_id: str = ""
    iv: str = ""
    url: Optional[str] = None
    error: str = ""


def resolve_targets(targets: Sequence[str] | None, cfg: Config) -> tuple[list[str], str]:
    """Return ``(paths, error)`` for the files to learn from.

    Without explicit *targets*, every modified file with an accepted
    extension is used.
    """
    if targets:
        paths = [os.path.abspath(t) for t in targets]
        outside = [p for p in paths if not git_utils.is_file_in_git_repo(p)]
        if outside:
            return [], f"Not in a git repository: {', '.join(outside)}"
    else:
        modified = git_utils.find_modified_files()
        if modified is None:
            return [], "Could not list modified files. Is this a git repository?"
        paths = modified

    accepted = [p for p in paths if cfg.accepts(p)]
    rejected = [p for p in paths if not cfg.accepts(p)]
    for path in rejected:
        _logger.info("Skipping %s: extension not in %s", path, cfg.EXTENSIONS)
    if not accepted:
        if rejected:
            return [], (f"No modified file has a supported extension "
                        f"({', '.join(cfg.EXTENSIONS)})")
        return [], "Could not find any modified file to learn from."
    return accepted, ""


def learn_diff(
    targets: Sequence[str] | None = None,
    *,
    config_path: str | None = None,
    strategy: str | None = None,
    matching: str | None = None,
    max_workers: int | None = None,
    submit: bool = True,
    source: FileSource | None = None,
    service: LearningServiceClient | None = None,
    cfg: Config | None = None,
) -> LearnResult:
    """Build a learning request from modified files and optionally submit it.

    Args:
        targets: Files to learn from. Defaults to every modified file.
        config_path: Explicit path to ``.codemod-learn.yaml``.
        strategy: ``"hunks"`` or ``"statements"`` (default: from config).
        matching: ``"position"`` or ``"substring"`` (default: from config).
        max_workers: Files processed concurrently (default: from config).
        submit: Send the request to the learning service. When false the
            request is only built.
        source: Where diffs and snapshots come from (default: git).
        service: Learning service client (default: built from config).
        cfg: Preloaded configuration; *config_path* is ignored if given.

    Returns:
        A :class:`LearnResult`. ``success`` is false when nothing could be
        learned or the submission failed; ``error`` says why.
    """
    cfg = cfg or Config.load(config_path)

    paths, error = resolve_targets(targets, cfg)
    if error:
        return LearnResult(success=False, error=error)

    try:
        pipeline = LearningPipeline(
            source or git_utils.GitFileSource(),
            strategy=strategy or cfg.STRATEGY,
            matching=matching or cfg.MATCHING,
            max_workers=max_workers or cfg.MAX_WORKERS,
        )
    except ValueError as e:
        return LearnResult(success=False, error=str(e))

    _logger.info("Learning from %d file(s) with %s strategy",
                 len(paths), pipeline.strategy)
    aggregator = pipeline.run(paths)
    diagnostics = aggregator.diagnostics

    try:
        request = aggregator.to_request()
    except NothingToLearnError as e:
        return LearnResult(success=False, diagnostics=diagnostics, error=str(e))

    result = LearnResult(success=True, request=request, diagnostics=diagnostics)
    if not submit:
        return result

    client = service or LearningServiceClient(
        cfg.LEARN_API_URL,
        timeout=cfg.REQUEST_TIMEOUT,
        max_retries=cfg.MAX_RETRIES,
        retry_delay=cfg.RETRY_DELAY,
    )
    try:
        submission = client.submit(request)
    except LearningServiceError as e:
        _logger.error("Submission failed: %s", e)
        result.success = False
        result.error = str(e)
        return result

    result.diff_id = submission.diff_id
    result.iv = submission.iv
    result.url = build_studio_url(cfg.STUDIO_URL, cfg.ENGINE,
                                  submission.diff_id, submission.iv)
    return result
