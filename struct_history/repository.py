"""
Abstract repository capability for struct-history.

The history walk only needs a handful of read-only operations from a
version-controlled repository. Keeping them behind this interface makes
it possible to run the walk against the git CLI or against an in-memory
fake history in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, List

from .domain import Commit, DiffHunk


class Repository(ABC):
    """
    Abstract interface for repository access.
    """

    @abstractmethod
    def resolve(self, rev: str) -> Commit:
        """
        Resolve a revision expression (e.g. "HEAD") to a commit.

        Raises ResolutionError when the revision does not exist.
        """

    @abstractmethod
    def iter_commits(self, start: str) -> Iterator[Commit]:
        """
        Yield every commit reachable from start, newest first by commit
        time, never yielding a parent before one of its children.
        """

    @abstractmethod
    def path_in_tree(self, commit: Commit, path: str) -> bool:
        """
        Return True if path exists in the commit's tree.
        """

    @abstractmethod
    def tree_differs(self, parent_id: str, commit_id: str, path: str) -> bool:
        """
        Return True if the two commits' trees differ under path.
        """

    @abstractmethod
    def read_blob(self, commit: Commit, path: str) -> bytes:
        """
        Return the raw content of path at commit.

        Raises ResolutionError when the path does not exist there.
        """

    @abstractmethod
    def diff_blobs(self, newer: Commit, older: Commit, path: str) -> List[DiffHunk]:
        """
        Return the line-level diff of path going from newer to older.

        Hunk offsets are expressed in the newer content: deletions are
        bytes that exist in newer but not in older, additions are bytes
        from older inserted at a newer-side position. Hunks are sorted by
        offset.
        """
