"""
CLI entry point — argument parsing and main execution flow.
"""

import argparse
import sys
import webbrowser

from .api import learn_diff, resolve_targets
from .cli_display import (
    format_snippet_pair, log, print_diagnostics, print_error, print_info,
    prompt_file_selection, setup_logger,
)
from .config import Config
from .learning.pipeline import STRATEGIES
from .learning.statement_correlator import MATCHING_MODES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codemod-learn",
        description="Learn a codemod example from your latest changes")
    parser.add_argument("targets", nargs="*",
                        help="Files to learn from (default: all modified files)")
    parser.add_argument("--strategy", choices=STRATEGIES, default=None,
                        help="Reduce by diff hunks or by top-level statements "
                             "(default: from config)")
    parser.add_argument("--matching", choices=MATCHING_MODES, default=None,
                        help="How the statements strategy maps diff lines "
                             "to statements (default: from config)")
    parser.add_argument("--workers", type=int, default=None,
                        help="Number of files processed in parallel")
    parser.add_argument("--config", default=None,
                        help="Path to .codemod-learn.yaml config file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the snippets instead of submitting them")
    parser.add_argument("--no-open", action="store_true",
                        help="Print the studio URL without opening a browser")
    parser.add_argument("--yes", "-y", action="store_true",
                        help="Learn from every modified file without asking")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR)

    # ── 1. Pick files ──
    paths, error = resolve_targets(args.targets, cfg)
    if error:
        print_error(error)
        return 1
    if len(paths) > 1 and not args.targets and not args.yes and sys.stdin.isatty():
        paths = prompt_file_selection(paths)

    print_info('Learning "git diff" has begun...\n')
    log.info(f"Learning from: {', '.join(paths)}")

    # ── 2. Reduce and submit ──
    result = learn_diff(
        paths, cfg=cfg,
        strategy=args.strategy, matching=args.matching,
        max_workers=args.workers, submit=not args.dry_run,
    )
    print_diagnostics(result.diagnostics)

    if result.request is not None and args.dry_run:
        for pair, source in zip(result.request.pairs, result.request.sources):
            print(format_snippet_pair(pair, source))
        print(f"\n  {len(result.request.pairs)} snippet pair(s) ready (dry run).")
        return 0

    if not result.success:
        print_error(result.error)
        return 1

    # ── 3. Open the studio ──
    if result.url is None:
        print_error("Unexpected error occurred while creating a URL.")
        return 1

    print_info("Learning went successful! Opening the Codemod Studio...\n")
    print(f"  {result.url}")
    if not args.no_open and not webbrowser.open(result.url):
        print_error("Unexpected error occurred while opening the Codemod Studio.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
