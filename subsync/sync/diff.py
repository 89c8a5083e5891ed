"""
Diff detection for sync engine.

Compares a freshly normalized EntrySet against the persisted one to
decide whether the artifact needs to be rewritten.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from ..storage.models import EntrySet


class ChangeType(Enum):
    """Classification of a single entry between two EntrySets."""

    # Present in new, absent from old
    ADDED = auto()

    # Present in both
    UNCHANGED = auto()

    # Present in old, absent from new
    REMOVED = auto()


@dataclass(frozen=True)
class DiffResult:
    """
    Summary of comparing two EntrySets.

    Only counts are kept; the entries themselves are not materialized.

    Attributes:
        added: Entries only in the new set
        unchanged: Entries in both sets
        removed: Entries only in the old set
    """
    added: int = 0
    unchanged: int = 0
    removed: int = 0

    @property
    def has_changes(self) -> bool:
        """Check if the new set differs from the old one."""
        return self.added > 0 or self.removed > 0

    @property
    def total_new(self) -> int:
        return self.added + self.unchanged

    @property
    def total_old(self) -> int:
        return self.removed + self.unchanged

    def __str__(self) -> str:
        return (
            f"{self.added} added, {self.unchanged} unchanged, "
            f"{self.removed} removed"
        )


def classify_entries(
    old: EntrySet,
    new: EntrySet,
) -> Iterator[tuple[str, ChangeType]]:
    """
    Classify every entry of both sets.

    Entries of ``new`` are yielded first in their order, then the
    removed entries of ``old`` in theirs.

    Args:
        old: Previously persisted entries (empty if none)
        new: Freshly normalized entries

    Yields:
        (entry, ChangeType) pairs
    """
    old_members = old.as_set()
    for entry in new:
        if entry in old_members:
            yield entry, ChangeType.UNCHANGED
        else:
            yield entry, ChangeType.ADDED

    new_members = new.as_set()
    for entry in old:
        if entry not in new_members:
            yield entry, ChangeType.REMOVED


def compute_diff(old: EntrySet, new: EntrySet) -> DiffResult:
    """
    Compute the diff between the persisted and the fetched entries.

    The result depends on membership only, never on order.

    Rules:
    - No prior state (empty old) → every entry is added
    - Empty new → every old entry is removed

    Args:
        old: Previously persisted entries
        new: Freshly normalized entries

    Returns:
        DiffResult with per-class counts
    """
    counts = Counter(change for _, change in classify_entries(old, new))
    return DiffResult(
        added=counts[ChangeType.ADDED],
        unchanged=counts[ChangeType.UNCHANGED],
        removed=counts[ChangeType.REMOVED],
    )
