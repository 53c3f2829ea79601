"""
Core domain models for struct-history.

These dataclasses describe commits, byte spans, diff hunks, field
signatures and the change records collected while walking history.
They intentionally avoid any direct git or parser dependencies so they
can be reused by different parts of the system and by in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple

HunkTag = Literal["addition", "deletion", "context"]


@dataclass(frozen=True)
class Commit:
    """
    A commit as seen by the history walk.

    time is the committer timestamp in seconds since the epoch; parents
    are commit ids in the order git reports them.
    """

    id: str
    time: int
    parents: Tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def short_id(self) -> str:
        return self.id[:7]


@dataclass(frozen=True)
class TrackedSpan:
    """
    A half-open byte range [start, end) into one blob's content.
    """

    start: int
    end: int

    @property
    def is_collapsed(self) -> bool:
        return self.end <= self.start

    @property
    def length(self) -> int:
        return max(0, self.end - self.start)


@dataclass(frozen=True)
class DiffHunk:
    """
    A contiguous run of added, removed or unchanged bytes.

    offset is expressed in the content the tracked span is currently
    valid in. For a deletion it is the first removed byte; for an
    addition it is the point where the bytes are inserted.
    """

    tag: HunkTag
    offset: int
    length: int


@dataclass
class DiffLine:
    """
    A single line within a line-level diff hunk.

    Line numbers are 1-based and refer to the "from" side for deletions
    and to the "to" side for additions.
    """

    line_type: Literal["+", "-", " "]
    content: str
    original_lineno: Optional[int] = None
    new_lineno: Optional[int] = None


@dataclass
class LineHunk:
    """
    One `@@ -a,b +c,d @@` section of a unified diff.
    """

    header: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[DiffLine] = field(default_factory=list)


@dataclass(frozen=True)
class Field:
    """
    One field of a struct declaration.

    name is None for tuple struct fields. ty is the canonical token text
    of the declared type.
    """

    name: Optional[str]
    ty: str
    visibility: str = ""
    attributes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldSignature:
    """
    Canonical representation of an entity's field list at one revision.

    Two signatures are the same shape exactly when their text is equal.
    """

    text: str
    fields: Tuple[Field, ...] = field(default=(), compare=False)
    kind: Literal["named", "tuple", "unit"] = field(default="named", compare=False)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ChangeRecord:
    """
    A field signature together with the commit it was recorded at.
    """

    signature: FieldSignature
    commit_id: str
    time: int


@dataclass(frozen=True)
class FieldChange:
    """
    One field level difference between two consecutive signatures.
    """

    kind: Literal["added", "removed", "renamed", "retyped"]
    name: str
    ty: Optional[str] = None
    old_name: Optional[str] = None
    old_ty: Optional[str] = None

    def describe(self) -> str:
        if self.kind == "added":
            return f"+ {self.name}: {self.ty}"
        if self.kind == "removed":
            return f"- {self.name}: {self.ty}"
        if self.kind == "renamed":
            return f"~ {self.old_name} -> {self.name}"
        return f"~ {self.name}: {self.old_ty} -> {self.ty}"


@dataclass
class ChangeSet:
    """
    A change record with the field changes that lead to it from the
    previous record in chronological order.
    """

    record: ChangeRecord
    changes: List[FieldChange] = field(default_factory=list)


@dataclass
class HistoryReport:
    """
    The result of tracking one entity through the history of one file.

    records are ordered ascending by recorded commit time.
    stopped_reason is "exhausted" when the walk ran out of commits,
    "collapsed" when the entity's span disappeared, and "limit" when the
    configured revision limit was reached.
    """

    path: str
    records: List[ChangeRecord] = field(default_factory=list)
    change_sets: List[ChangeSet] = field(default_factory=list)
    commits_visited: int = 0
    revisions_examined: int = 0
    stopped_reason: Literal["exhausted", "collapsed", "limit"] = "exhausted"

    @property
    def signatures(self) -> List[str]:
        return [record.signature.text for record in self.records]
