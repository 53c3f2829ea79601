"""
Collection of the distinct field signatures seen during a history walk.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .analysis.field_changes import diff_fields
from .domain import ChangeRecord, ChangeSet, Commit, FieldSignature


class ChangeCollector:
    """
    Keeps one ChangeRecord per distinct signature.

    Observing a signature again replaces its record, so when commits are
    observed newest first a signature ends up attributed to the oldest
    commit it was seen at.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ChangeRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def observe(self, signature: FieldSignature, commit: Commit) -> None:
        self._records[signature.text] = ChangeRecord(
            signature=signature,
            commit_id=commit.id,
            time=commit.time,
        )

    def records(self) -> List[ChangeRecord]:
        """
        Return the records ordered ascending by recorded commit time.
        """

        return sorted(self._records.values(), key=lambda record: record.time)

    def signatures(self) -> List[str]:
        return [record.signature.text for record in self.records()]

    def change_sets(self) -> List[ChangeSet]:
        """
        Pair every record with the field changes from its predecessor.
        """

        change_sets: List[ChangeSet] = []
        previous: Optional[FieldSignature] = None
        for record in self.records():
            change_sets.append(
                ChangeSet(record=record, changes=diff_fields(previous, record.signature))
            )
            previous = record.signature
        return change_sets
