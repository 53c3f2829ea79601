"""
Unified diff parsing for struct-history.

The parser turns the zero-context unified diff git produces for a pair
of blobs into line hunks, and then maps those line hunks onto byte
ranges of the actual blob contents.

Byte lengths are always measured on the blobs themselves rather than on
the diff text, so decoding of the diff output and trailing newline
markers have no influence on offsets.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from .domain import DiffHunk, DiffLine, LineHunk
from .errors import DiffParseError, UnsupportedContentError


_HUNK_HEADER_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))?"
    r" \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))?"
    r" @@"
)


def parse_unified_diff(raw_diff: str) -> List[LineHunk]:
    """
    Parse the unified diff of a single file into line hunks.

    Any preamble (`diff --git`, `index`, `---`/`+++` headers) is skipped.
    A binary diff raises UnsupportedContentError.
    """

    lines = raw_diff.splitlines()
    hunks: List[LineHunk] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("Binary files ") and " differ" in line:
            raise UnsupportedContentError(f"cannot track spans through binary content: {line}")
        if line.startswith("GIT binary patch"):
            raise UnsupportedContentError("cannot track spans through binary content")
        if line.startswith("@@"):
            hunk, i = _parse_hunk(lines, i)
            hunks.append(hunk)
        else:
            i += 1

    return hunks


def _parse_hunk(lines: Sequence[str], start_index: int) -> Tuple[LineHunk, int]:
    """
    Parse a single hunk starting at `start_index`.
    """

    header = lines[start_index]
    match = _HUNK_HEADER_RE.match(header)
    if not match:
        raise DiffParseError(f"malformed hunk header: {header!r}")

    old_start = int(match.group("old_start"))
    new_start = int(match.group("new_start"))
    # An omitted count means a single line.
    old_count = int(match.group("old_count") or 1)
    new_count = int(match.group("new_count") or 1)

    original_lineno: Optional[int] = old_start
    new_lineno: Optional[int] = new_start
    diff_lines: List[DiffLine] = []

    i = start_index + 1
    while i < len(lines):
        line = lines[i]

        if line.startswith("diff --git ") or line.startswith("@@"):
            break

        if line.startswith("\\ No newline at end of file"):
            i += 1
            continue

        if not line:
            line_type = " "
            content = ""
        else:
            first_char = line[0]
            if first_char in ("+", "-", " "):
                line_type = first_char
                content = line[1:]
            else:
                line_type = " "
                content = line

        diff_lines.append(
            DiffLine(
                line_type=line_type,  # type: ignore[arg-type]
                content=content,
                original_lineno=original_lineno if line_type != "+" else None,
                new_lineno=new_lineno if line_type != "-" else None,
            )
        )

        if line_type in (" ", "-"):
            original_lineno += 1
        if line_type in (" ", "+"):
            new_lineno += 1

        i += 1

    return (
        LineHunk(
            header=header,
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            lines=diff_lines,
        ),
        i,
    )


def line_starts(content: bytes) -> List[int]:
    """
    Return the byte offset of every line start plus a final sentinel.

    Line n (1-based) occupies content[starts[n - 1]:starts[n]]. Only
    b"\\n" terminates a line, as in git.
    """

    starts = [0]
    pos = content.find(b"\n")
    while pos != -1:
        starts.append(pos + 1)
        pos = content.find(b"\n", pos + 1)
    if starts[-1] != len(content):
        starts.append(len(content))
    return starts


def _byte_range(starts: Sequence[int], first_line: int, count: int, side: str) -> Tuple[int, int]:
    last_index = first_line - 1 + count
    if first_line < 1 or last_index >= len(starts):
        raise DiffParseError(
            f"diff refers to lines {first_line}..{first_line + count - 1} "
            f"but the {side} content has {len(starts) - 1} lines"
        )
    return starts[first_line - 1], starts[last_index]


def line_hunks_to_byte_hunks(
    line_hunks: Sequence[LineHunk],
    newer: bytes,
    older: bytes,
) -> List[DiffHunk]:
    """
    Map line hunks of a newer -> older diff onto byte hunks.

    Deletions are lines of the newer content; their offset is where they
    start in it. Additions are lines of the older content; their offset
    is the newer-side position they are inserted at: after line `a` for a
    pure insertion (`-a,0`), in place of the deleted lines otherwise.
    """

    newer_starts = line_starts(newer)
    older_starts = line_starts(older)
    hunks: List[DiffHunk] = []

    for line_hunk in line_hunks:
        if line_hunk.old_count > 0:
            begin, end = _byte_range(newer_starts, line_hunk.old_start, line_hunk.old_count, "newer")
            hunks.append(DiffHunk(tag="deletion", offset=begin, length=end - begin))
            insert_at = begin
        else:
            if line_hunk.old_start >= len(newer_starts):
                raise DiffParseError(f"insertion point out of range: {line_hunk.header!r}")
            insert_at = newer_starts[line_hunk.old_start]

        if line_hunk.new_count > 0:
            begin, end = _byte_range(older_starts, line_hunk.new_start, line_hunk.new_count, "older")
            hunks.append(DiffHunk(tag="addition", offset=insert_at, length=end - begin))

    # Stable sort keeps a deletion ahead of the addition replacing it.
    return sorted(hunks, key=lambda hunk: hunk.offset)
