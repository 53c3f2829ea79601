"""
Custom exception types used across struct-history.

Every fatal condition of a history walk is raised as a subclass of
StructHistoryError so the CLI can tell user-facing failures apart from
unexpected bugs. A collapsed span is not an error and never appears here.
"""

from __future__ import annotations

from typing import Optional


class StructHistoryError(Exception):
    """Base class for all struct-history specific errors."""


class ResolutionError(StructHistoryError):
    """Raised when a commit, tree, blob or path cannot be resolved."""


class GitError(ResolutionError):
    """Raised when git operations fail."""


class DiffParseError(StructHistoryError):
    """Raised when parsing a diff fails."""


class UnsupportedContentError(StructHistoryError):
    """Raised when a tracked file has binary content at some revision."""


class EntityNotFoundError(StructHistoryError):
    """Raised when the entity to track cannot be located in the start revision."""


class NoRevisionError(StructHistoryError):
    """Raised when the history walk yields no relevant commit at all."""

    def __init__(self, path: str) -> None:
        super().__init__(f"no prior revision available for {path}")
        self.path = path


class EntityParseError(StructHistoryError):
    """
    Raised when the text under a tracked span is not a valid declaration.

    The offending snippet is kept on the exception for diagnosis.
    """

    def __init__(self, reason: str, snippet: str, commit_id: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.snippet = snippet
        self.commit_id = commit_id

    def __str__(self) -> str:
        where = f" (at {self.commit_id})" if self.commit_id else ""
        return f"{self.reason}{where}\n--- snippet ---\n{self.snippet}"
