"""
Purpose: Comment out lines that contain sensitive words, preserving every other byte.
Constraints: Pure transformation of bytes; no file I/O.

Lines are split on LF only, so a CR before it stays part of the content and
Windows line endings survive untouched. Bytes are decoded with
surrogateescape, which lets any input (including invalid UTF-8) round-trip
exactly.
"""

from __future__ import annotations

from typing import Iterator, List

from iceminus.core.models import Line, LineMatch, RewriteOutcome
from iceminus.core.word_set import WordSet

COMMENT_MARKER = "#"
COMMENT_PREFIX = COMMENT_MARKER + " "
NEWLINE = "\n"

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def decode(data: bytes) -> str:
    return data.decode(_ENCODING, _ERRORS)


def encode(text: str) -> bytes:
    return text.encode(_ENCODING, _ERRORS)


def split_lines(text: str) -> Iterator[Line]:
    """Yield physical lines; a final line without newline keeps an empty terminator."""
    parts = text.split(NEWLINE)
    last = len(parts) - 1
    for index, content in enumerate(parts):
        if index < last:
            yield Line(number=index + 1, content=content, terminator=NEWLINE)
        elif content:
            yield Line(number=index + 1, content=content, terminator="")


def is_commented(content: str) -> bool:
    return content.startswith(COMMENT_MARKER)


def comment_out(line: Line) -> Line:
    return Line(number=line.number, content=COMMENT_PREFIX + line.content, terminator=line.terminator)


def rewrite(data: bytes, words: WordSet, dry_run: bool = False) -> RewriteOutcome:
    """
    Comment out every uncommented line containing a sensitive word.

    In dry-run mode matches are still reported but no content is produced.
    new_content stays None unless at least one line changed, so callers can
    leave untouched files alone.
    """
    matches: List[LineMatch] = []
    output: List[str] = []
    modified = False

    for line in split_lines(decode(data)):
        hits = [] if is_commented(line.content) else words.matches(line.content)
        if hits:
            matches.append(LineMatch(line_number=line.number, words=hits))
            if not dry_run:
                line = comment_out(line)
                modified = True
        output.append(line.content + line.terminator)

    if not modified:
        return RewriteOutcome(new_content=None, matches=matches)
    return RewriteOutcome(new_content=encode("".join(output)), matches=matches)
