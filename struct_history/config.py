"""
Configuration model for struct-history.

The CLI constructs a Config instance and passes it down into the
tracker so behavior can be adjusted without relying on global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DIFF_ALGORITHMS = ("myers", "minimal", "patience", "histogram")
OUTPUT_FORMATS = ("text", "json")


@dataclass
class Config:
    """
    Top-level configuration for a struct-history run.
    """

    repo_dir: str = "."
    start_rev: str = "HEAD"
    diff_algorithm: str = "myers"
    max_revisions: Optional[int] = None
    show_changes: bool = False
    output_format: str = "text"
    verbosity: int = 0

    def validate(self) -> None:
        """
        Reject settings the tracker cannot honor.
        """

        if self.diff_algorithm not in DIFF_ALGORITHMS:
            raise ValueError(
                f"unknown diff algorithm {self.diff_algorithm!r}; "
                f"expected one of {', '.join(DIFF_ALGORITHMS)}"
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"unknown output format {self.output_format!r}; "
                f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )
        if self.max_revisions is not None and self.max_revisions <= 0:
            raise ValueError("max_revisions must be a positive integer")
