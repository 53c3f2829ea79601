"""
Git integration for struct-history.

This module implements the Repository capability on top of the git
CLI. Every invocation goes through `_run_git` so that error handling and
logging are centralized. Nothing here writes to the repository.
"""

from __future__ import annotations

import logging
import subprocess
from collections import OrderedDict
from typing import Iterator, List, Optional, Tuple

from .diff_parser import line_hunks_to_byte_hunks, parse_unified_diff
from .domain import Commit, DiffHunk
from .errors import GitError, ResolutionError
from .repository import Repository

LOG = logging.getLogger(__name__)

_LOG_FORMAT = "%H %ct %P"

# A history step diffs the blob it just read against the one read for the
# previous step.
_BLOB_CACHE_SIZE = 4


def _run_git(
    args: List[str],
    cwd: Optional[str] = None,
    binary: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run a git command and return the completed process.

    With binary=True stdout is returned as bytes, otherwise as text.
    A non-zero exit status raises GitError with git's stderr attached.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            text=not binary,
            capture_output=True,
        )
    except OSError as exc:
        raise GitError(f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        stderr = completed.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        LOG.debug("git stderr: %s", stderr)
        raise GitError(f"git command failed: {' '.join(cmd)}: {stderr.strip()}")

    return completed


def discover(path: str = ".") -> str:
    """
    Return the top-level directory of the repository containing path.
    """

    return _run_git(["rev-parse", "--show-toplevel"], cwd=path).stdout.strip()


def _parse_commit_line(line: str) -> Commit:
    parts = line.split()
    if len(parts) < 2:
        raise GitError(f"unexpected git log output: {line!r}")
    return Commit(id=parts[0], time=int(parts[1]), parents=tuple(parts[2:]))


class GitRepository(Repository):
    """
    Repository capability backed by the git executable.

    Blobs are cached by commit id and path. Commits are immutable, so a
    cached blob never goes stale.
    """

    def __init__(self, repo_dir: str = ".", diff_algorithm: str = "myers") -> None:
        self.repo_dir = repo_dir
        self.diff_algorithm = diff_algorithm
        self._blobs: "OrderedDict[Tuple[str, str], bytes]" = OrderedDict()

    def _git(self, args: List[str], binary: bool = False) -> subprocess.CompletedProcess:
        return _run_git(args, cwd=self.repo_dir, binary=binary)

    def resolve(self, rev: str) -> Commit:
        try:
            output = self._git(["log", "-1", f"--format={_LOG_FORMAT}", rev, "--"]).stdout
        except GitError as exc:
            raise ResolutionError(f"cannot resolve revision {rev}: {exc}") from exc
        return _parse_commit_line(output.strip())

    def iter_commits(self, start: str) -> Iterator[Commit]:
        """
        Stream `git log` so that a walk stopped early never waits for the
        rest of the history.
        """

        # --date-order sorts by commit time without showing a parent
        # before all of its children.
        cmd = ["git", "log", "--date-order", f"--format={_LOG_FORMAT}", start, "--"]
        LOG.debug("Running git command (streamed): %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=self.repo_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as exc:
            raise GitError(f"failed to execute git: {exc}") from exc

        try:
            for line in proc.stdout:
                if line.strip():
                    yield _parse_commit_line(line)
            stderr = proc.stderr.read()
            if proc.wait() != 0:
                raise GitError(f"git command failed: {' '.join(cmd)}: {stderr.strip()}")
        finally:
            if proc.poll() is None:
                proc.kill()
            proc.stdout.close()
            proc.stderr.close()
            proc.wait()

    def path_in_tree(self, commit: Commit, path: str) -> bool:
        output = self._git(["ls-tree", "--name-only", commit.id, "--", path]).stdout
        return bool(output.strip())

    def tree_differs(self, parent_id: str, commit_id: str, path: str) -> bool:
        cmd = ["git", "diff", "--quiet", "--no-ext-diff", parent_id, commit_id, "--", path]
        LOG.debug("Running git command (diff for equality): %s", " ".join(cmd))
        completed = subprocess.run(
            cmd,
            cwd=self.repo_dir,
            check=False,
            text=True,
            capture_output=True,
        )
        if completed.returncode == 0:
            return False
        if completed.returncode == 1:
            return True
        raise GitError(f"git diff failed: {' '.join(cmd)}: {completed.stderr.strip()}")

    def read_blob(self, commit: Commit, path: str) -> bytes:
        key = (commit.id, path)
        if key in self._blobs:
            self._blobs.move_to_end(key)
            return self._blobs[key]

        try:
            content = self._git(["cat-file", "blob", f"{commit.id}:{path}"], binary=True).stdout
        except GitError as exc:
            raise ResolutionError(f"{path} does not exist at {commit.short_id}: {exc}") from exc

        self._blobs[key] = content
        if len(self._blobs) > _BLOB_CACHE_SIZE:
            self._blobs.popitem(last=False)
        return content

    def diff_blobs(self, newer: Commit, older: Commit, path: str) -> List[DiffHunk]:
        newer_content = self.read_blob(newer, path)
        older_content = self.read_blob(older, path)
        if newer_content == older_content:
            return []

        raw = self._git(
            [
                "diff",
                "-U0",
                "--no-color",
                "--no-ext-diff",
                "--no-renames",
                f"--diff-algorithm={self.diff_algorithm}",
                f"{newer.id}:{path}",
                f"{older.id}:{path}",
            ],
            binary=True,
        ).stdout
        text = raw.decode("utf-8", errors="replace")
        return line_hunks_to_byte_hunks(parse_unified_diff(text), newer_content, older_content)
