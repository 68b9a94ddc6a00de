"""
Purpose: Format match reports and the end-of-run summary.
Constraints: String formatting only; printing is left to callers.
"""

from typing import List

from iceminus.core.models import LineMatch, ScanStats


def format_match(path: str, match: LineMatch) -> str:
    return f"{path}:{match.line_number} -> {', '.join(match.words)}"


def format_summary(stats: ScanStats, dry_run: bool = False) -> List[str]:
    lines = [
        "",
        "Summary (dry run):" if dry_run else "Summary:",
        f"  scanned folder: {stats.scanned_folder}",
        f"  yaml files scanned: {stats.files_scanned}",
        f"  files with matches: {stats.files_with_matches}",
        f"  total matched lines: {stats.total_matches}",
    ]
    if stats.ops_per_file:
        lines.append("  per-file operations:")
        lines.extend(f"    {path}: {count}" for path, count in stats.ops_per_file.items())
    if stats.failed_files:
        lines.append("  failed files:")
        lines.extend(f"    {path}: {error}" for path, error in stats.failed_files.items())
    return lines
