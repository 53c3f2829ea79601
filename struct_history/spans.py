"""
Byte span arithmetic for struct-history.

A tracked span always starts on the newline that precedes the entity's
declaration line (or at offset 0 when the declaration is on the first
line) and ends right after its closing delimiter. With that convention
a hunk that touches only the declaration line starts after `start` and
moves only `end`. Lines inserted or removed above the entity move both
bounds, and a hunk that replaces the declaration line together with
lines above it re-anchors `start` in front of the replaced region.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .analysis.struct_parser import find_struct
from .domain import DiffHunk, TrackedSpan
from .errors import EntityNotFoundError

LOG = logging.getLogger(__name__)


def translate(span: TrackedSpan, hunks: Iterable[DiffHunk]) -> TrackedSpan:
    """
    Return the span equivalent to `span` on the other side of a diff.

    Every hunk offset is compared against the bounds of the input span,
    never against partially shifted ones, and the shifts are summed:

      - an addition before a bound pushes it forward by its length; at
        exactly `end` it still counts, so trailing insertions are
        captured;
      - a deletion starting before a bound pulls it back by its length;
      - context hunks and hunks past `end` have no effect.

    A deletion that straddles `start` replaces the declaration line
    together with lines above it. `start` is then re-anchored on the
    newline before the replaced region, and the replacement text at that
    offset does not move it.

    A span starting at 0 starts on a line, not on a newline, so lines
    inserted at offset 0 lie before the entity and `start` lands on the
    last inserted newline. When the first line itself was replaced the
    two cannot be told apart and `start` stays at 0.

    The result may be collapsed (`end <= start`), which means the entity
    does not exist on the other side. Bounds never drop below zero.
    """

    relevant = [hunk for hunk in hunks if hunk.tag != "context" and hunk.offset <= span.end]

    start_base = span.start
    start_limit = span.start
    head_replaced = False
    for hunk in relevant:
        if hunk.tag != "deletion":
            continue
        if hunk.offset < span.start < hunk.offset + hunk.length:
            start_base = hunk.offset - 1
            start_limit = hunk.offset
        head_replaced = head_replaced or hunk.offset == 0

    start_shift = 0
    end_shift = 0

    for hunk in relevant:
        if hunk.tag == "addition":
            if hunk.offset < start_limit:
                start_shift += hunk.length
            elif span.start == 0 and hunk.offset == 0 and not head_replaced:
                start_shift += hunk.length - 1
            end_shift += hunk.length
        else:
            if hunk.offset < start_limit:
                start_shift -= hunk.length
            if hunk.offset < span.end:
                end_shift -= hunk.length

    return TrackedSpan(
        start=max(0, start_base + start_shift),
        end=max(0, span.end + end_shift),
    )


def _is_continuation_byte(value: int) -> bool:
    return value & 0xC0 == 0x80


def align_span(content: bytes, span: TrackedSpan) -> TrackedSpan:
    """
    Clamp a span to the content and snap it to UTF-8 character boundaries.

    `start` moves backward and `end` moves forward, so a misaligned span
    grows to cover whole characters instead of cutting one in half.
    """

    size = len(content)
    start = min(max(span.start, 0), size)
    end = min(max(span.end, 0), size)

    while 0 < start < size and _is_continuation_byte(content[start]):
        start -= 1
    while 0 < end < size and _is_continuation_byte(content[end]):
        end += 1

    aligned = TrackedSpan(start=start, end=end)
    if aligned != span:
        LOG.warning(
            "Adjusted span [%d, %d) to [%d, %d) to fit %d bytes of content",
            span.start,
            span.end,
            aligned.start,
            aligned.end,
            size,
        )
    return aligned


def locate_entity(content: bytes, name: str) -> TrackedSpan:
    """
    Find the span of the declaration of struct `name` in content.

    The span ends after the closing brace, or after the terminating `;`
    of a tuple or unit declaration.
    """

    found = find_struct(content, name)
    if found is None:
        raise EntityNotFoundError(f"could not find 'struct {name}'")

    decl_start, end = found
    newline = content.rfind(b"\n", 0, decl_start)
    start = newline if newline != -1 else 0

    LOG.debug("Located struct %s at [%d, %d)", name, start, end)
    return TrackedSpan(start=start, end=end)
