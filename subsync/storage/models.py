"""
Persistent state storage models.

An EntrySet is the canonical form of a subscription: the unit that is
persisted, loaded back and compared between runs.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator


@dataclass(frozen=True)
class EntrySet:
    """
    Ordered sequence of unique, trimmed, non-empty lines.

    Instances are produced by the normalizer and never mutated afterwards.
    Order is kept for output only; comparisons between sets go through
    as_set().

    Attributes:
        entries: Entries in first-seen order
    """
    entries: tuple[str, ...] = ()
    _members: frozenset[str] = field(
        default=frozenset(), init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "entries", tuple(self.entries))
        object.__setattr__(self, "_members", frozenset(self.entries))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "EntrySet":
        """Build from lines that are already trimmed and unique."""
        return cls(entries=tuple(lines))

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, entry: object) -> bool:
        return entry in self._members

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def as_set(self) -> frozenset[str]:
        """Membership view used for comparisons."""
        return self._members

    def join(self) -> str:
        """Serialize as newline-separated text without a trailing newline."""
        return "\n".join(self.entries)

    def __repr__(self) -> str:
        return f"EntrySet({len(self.entries)} entries)"
