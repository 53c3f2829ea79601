"""
Entity extraction for struct-history.

Cuts the tracked span out of a revision's content and hands the text to
a structural parser.
"""

from __future__ import annotations

from typing import Callable, Optional

from .analysis.struct_parser import parse_struct
from .domain import FieldSignature, TrackedSpan
from .errors import EntityParseError

StructuralParser = Callable[[str], FieldSignature]


def extract_signature(
    content: bytes,
    span: TrackedSpan,
    parser: StructuralParser = parse_struct,
    commit_id: Optional[str] = None,
) -> FieldSignature:
    """
    Return the field signature of the text under span.

    The span must already be aligned to character boundaries. Any
    failure to decode or parse raises EntityParseError with the snippet.
    """

    raw = content[span.start : span.end]
    try:
        snippet = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EntityParseError(
            f"tracked span is not valid UTF-8: {exc}",
            raw.decode("utf-8", errors="replace"),
            commit_id,
        ) from exc

    try:
        return parser(snippet)
    except EntityParseError as exc:
        if exc.commit_id is None:
            exc.commit_id = commit_id
        raise
