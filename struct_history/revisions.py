"""
Selection of the commits that matter for one file.

Walking from a start revision backward in time, a commit is kept only
when the file's content differs from every one of its parents. Merges
that took the file unchanged from at least one side are dropped, which
approximates git's history simplification for a single path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from .domain import Commit
from .repository import Repository

LOG = logging.getLogger(__name__)


@dataclass
class WalkStats:
    """
    Counters filled in while the selector is consumed.
    """

    commits_visited: int = 0
    commits_selected: int = 0


def is_relevant(repo: Repository, commit: Commit, path: str) -> bool:
    """
    Return True if commit materially changed path.

    A root commit is relevant when it contains the file. Any other commit
    is relevant when the file differs from each of its parents.
    """

    if commit.is_root:
        return repo.path_in_tree(commit, path)

    return all(repo.tree_differs(parent, commit.id, path) for parent in commit.parents)


def select_revisions(
    repo: Repository,
    path: str,
    start: str = "HEAD",
    stats: Optional[WalkStats] = None,
) -> Iterator[Commit]:
    """
    Lazily yield the commits relevant to path, newest first.

    Repository failures propagate; a commit that cannot be resolved is
    never silently skipped.
    """

    for commit in repo.iter_commits(start):
        if stats is not None:
            stats.commits_visited += 1

        if not is_relevant(repo, commit, path):
            LOG.debug("Skipping %s: %s unchanged", commit.short_id, path)
            continue

        if stats is not None:
            stats.commits_selected += 1
        yield commit
