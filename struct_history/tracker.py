"""
High-level orchestration for struct-history.

The tracker is responsible for:
  - resolving the start revision and the tracked file's content there,
  - selecting the commits that changed the file,
  - carrying the entity's span backward through each of those commits,
  - parsing the entity at every step, and
  - folding the observed signatures into a chronological report.
"""

from __future__ import annotations

import logging
from typing import Optional

from .collector import ChangeCollector
from .config import Config
from .domain import Commit, HistoryReport, TrackedSpan
from .errors import NoRevisionError
from .extractor import StructuralParser, extract_signature
from .analysis.struct_parser import parse_struct
from .repository import Repository
from .revisions import WalkStats, select_revisions
from .spans import align_span, locate_entity, translate

LOG = logging.getLogger(__name__)


class StructHistoryTracker:
    """
    Walks one file's history and records how one entity's fields evolved.

    The collector is kept on the instance so that the signatures gathered
    before a fatal error are still available to the caller.
    """

    def __init__(
        self,
        repo: Repository,
        config: Optional[Config] = None,
        parser: StructuralParser = parse_struct,
    ) -> None:
        self.repo = repo
        self.config = config or Config()
        self.parser = parser
        self.collector = ChangeCollector()
        self.stats = WalkStats()

    def track_entity(self, path: str, name: str) -> HistoryReport:
        """
        Locate `struct <name>` in the start revision and track it.
        """

        head = self.repo.resolve(self.config.start_rev)
        content = self.repo.read_blob(head, path)
        span = locate_entity(content, name)
        return self.track(path, span)

    def track(self, path: str, span: TrackedSpan) -> HistoryReport:
        """
        Track the entity found at span in the start revision of path.

        Raises NoRevisionError when no commit ever changed the file, and
        lets resolution and parse errors propagate.
        """

        self.collector = ChangeCollector()
        self.stats = WalkStats()

        head = self.repo.resolve(self.config.start_rev)
        prev_commit: Commit = head
        prev_content = self.repo.read_blob(head, path)
        span = align_span(prev_content, span)
        LOG.info("Tracking %s [%d, %d) from %s", path, span.start, span.end, head.short_id)

        stopped_reason = "exhausted"
        examined = 0
        commits = select_revisions(self.repo, path, self.config.start_rev, self.stats)

        for commit in commits:
            if self.config.max_revisions is not None and examined >= self.config.max_revisions:
                stopped_reason = "limit"
                break

            if commit.id == prev_commit.id:
                content = prev_content
            else:
                content = self.repo.read_blob(commit, path)
                hunks = self.repo.diff_blobs(newer=prev_commit, older=commit, path=path)
                span = translate(span, hunks)
                if span.is_collapsed:
                    LOG.info("Entity disappears before %s; stopping", commit.short_id)
                    stopped_reason = "collapsed"
                    break
                span = align_span(content, span)

            examined += 1
            signature = extract_signature(content, span, self.parser, commit.id)
            LOG.debug("%s: %s", commit.short_id, signature.text)
            self.collector.observe(signature, commit)

            prev_commit = commit
            prev_content = content

        if examined == 0 and stopped_reason == "exhausted":
            raise NoRevisionError(path)

        LOG.info(
            "Examined %d revisions out of %d commits visited",
            examined,
            self.stats.commits_visited,
        )

        return HistoryReport(
            path=path,
            records=self.collector.records(),
            change_sets=self.collector.change_sets(),
            commits_visited=self.stats.commits_visited,
            revisions_examined=examined,
            stopped_reason=stopped_reason,  # type: ignore[arg-type]
        )
