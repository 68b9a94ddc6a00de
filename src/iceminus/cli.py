#!/usr/bin/env python3
"""
Comment out dictionary lines that contain sensitive words.

Usage examples:
  iceminus --path ~/Library/Rime --dry-run
  iceminus --path cn_dicts/base.dict.yaml --sensitive my_words.txt
  ICEMINUS_PATH=cn_dicts iceminus --continue-on-error

Notes:
- Matched lines get "# " prepended; everything else is left byte-for-byte intact.
- Precedence: CLI args > env vars (ICEMINUS_*, optionally from a .env file) > defaults.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from iceminus.core.config import ConfigManager
from iceminus.core.config_models import DEFAULT_WORDLIST_NAME
from iceminus.core.errors import ConfigError, FileReplaceError, TraversalError, WordListLoadError
from iceminus.core.logging import UnifiedLogger, get_logger
from iceminus.core.reporting import format_summary
from iceminus.core.scanner import TreeScanner
from iceminus.core.word_set import load_word_set

USAGE = "usage: iceminus --path <path> [--dry-run] [--sensitive <file>]"

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iceminus",
        description="Comment out lines containing sensitive words in yaml dictionaries.",
    )
    parser.add_argument("--path", help="Directory or file path to scan for yaml files.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Print what would be changed without modifying files.",
    )
    parser.add_argument(
        "--sensitive",
        help=f"Path to sensitive words file (default: built-in {DEFAULT_WORDLIST_NAME}).",
    )
    parser.add_argument(
        "--ext",
        action="append",
        dest="extensions",
        metavar="SUFFIX",
        help="File extension to scan in directories; repeatable (default: .yaml, .yml).",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        default=None,
        help="Skip files that cannot be replaced instead of aborting; exits non-zero at the end.",
    )
    parser.add_argument("--log-level", help="Console log level (default: WARNING).")
    parser.add_argument("--env-file", help="Load settings from this dotenv file.")
    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    return {
        "scan": {
            "path": args.path,
            "dry_run": args.dry_run,
            "sensitive": args.sensitive,
            "extensions": args.extensions,
            "continue_on_error": args.continue_on_error,
        },
        "log": {"log_level": args.log_level},
    }


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = ConfigManager(env_file=args.env_file).load(_overrides(args))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 2

    UnifiedLogger.configure(settings.log)
    scan = settings.scan

    try:
        words = load_word_set(scan.sensitive)
    except WordListLoadError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    if not words:
        print("no sensitive words found; nothing to do", file=sys.stderr)
        return 0

    scanner = TreeScanner(
        words,
        dry_run=scan.dry_run,
        extensions=scan.extensions,
        continue_on_error=scan.continue_on_error,
    )
    try:
        stats = scanner.scan(scan.path)
    except (TraversalError, FileReplaceError) as exc:
        logger.debug("Scan aborted", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for line in format_summary(stats, dry_run=scan.dry_run):
        print(line)
    return 1 if stats.failed_files else 0


if __name__ == "__main__":
    raise SystemExit(main())
