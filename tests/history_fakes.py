"""
In-memory repository used by the unit tests.

Line diffs are computed with difflib and converted with the same
line -> byte mapping the git backed repository uses.
"""

from __future__ import annotations

import difflib
from typing import Dict, Iterator, List, Optional, Sequence

from struct_history.diff_parser import line_hunks_to_byte_hunks, line_starts
from struct_history.domain import Commit, DiffHunk, LineHunk
from struct_history.errors import ResolutionError
from struct_history.repository import Repository


def _lines(content: bytes) -> List[bytes]:
    starts = line_starts(content)
    return [content[a:b] for a, b in zip(starts, starts[1:])]


def line_diff(newer: bytes, older: bytes) -> List[LineHunk]:
    matcher = difflib.SequenceMatcher(a=_lines(newer), b=_lines(older), autojunk=False)
    hunks: List[LineHunk] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        hunks.append(
            LineHunk(
                header=f"@@ -{i1},{i2 - i1} +{j1},{j2 - j1} @@",
                old_start=i1 + 1 if i2 > i1 else i1,
                old_count=i2 - i1,
                new_start=j1 + 1 if j2 > j1 else j1,
                new_count=j2 - j1,
            )
        )
    return hunks


class FakeRepository(Repository):
    """
    A linear or branching history built commit by commit, newest last.
    """

    def __init__(self) -> None:
        self.commits: Dict[str, Commit] = {}
        self.files: Dict[str, Dict[str, bytes]] = {}
        self.broken: set = set()
        self._time = 1_700_000_000

    def commit(
        self,
        commit_id: str,
        files: Dict[str, str],
        parents: Sequence[str] = (),
        time: Optional[int] = None,
    ) -> Commit:
        self._time += 60
        commit = Commit(
            id=commit_id,
            time=time if time is not None else self._time,
            parents=tuple(parents),
        )
        self.commits[commit_id] = commit
        self.files[commit_id] = {path: text.encode("utf-8") for path, text in files.items()}
        return commit

    def _lookup(self, commit_id: str) -> Commit:
        if commit_id in self.broken or commit_id not in self.commits:
            raise ResolutionError(f"cannot resolve {commit_id}")
        return self.commits[commit_id]

    def resolve(self, rev: str) -> Commit:
        if rev == "HEAD":
            return max(self.commits.values(), key=lambda c: c.time)
        return self._lookup(rev)

    def iter_commits(self, start: str) -> Iterator[Commit]:
        head = self.resolve(start)
        seen = set()
        pending = [head]
        reachable: List[Commit] = []
        while pending:
            commit = pending.pop()
            if commit.id in seen:
                continue
            seen.add(commit.id)
            reachable.append(commit)
            pending.extend(self._lookup(parent) for parent in commit.parents)
        for commit in sorted(reachable, key=lambda c: c.time, reverse=True):
            yield self._lookup(commit.id)

    def path_in_tree(self, commit: Commit, path: str) -> bool:
        return path in self.files[self._lookup(commit.id).id]

    def tree_differs(self, parent_id: str, commit_id: str, path: str) -> bool:
        self._lookup(parent_id)
        self._lookup(commit_id)
        return self.files[parent_id].get(path) != self.files[commit_id].get(path)

    def read_blob(self, commit: Commit, path: str) -> bytes:
        files = self.files[self._lookup(commit.id).id]
        if path not in files:
            raise ResolutionError(f"{path} does not exist at {commit.id}")
        return files[path]

    def diff_blobs(self, newer: Commit, older: Commit, path: str) -> List[DiffHunk]:
        newer_content = self.read_blob(newer, path)
        older_content = self.read_blob(older, path)
        return line_hunks_to_byte_hunks(
            line_diff(newer_content, older_content), newer_content, older_content
        )
