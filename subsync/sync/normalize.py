"""
Text normalization.

Turns raw subscription text into the canonical EntrySet form.
"""

from ..storage.models import EntrySet


def normalize(text: str) -> EntrySet:
    """
    Split text into trimmed, unique, non-empty lines.

    Lines are split on "\\n" only, so CRLF input is handled by the trim.
    Duplicates are dropped by exact trimmed-string equality and the first
    occurrence wins. Any input is valid; degenerate input gives an empty set.

    Args:
        text: Raw or decoded subscription text

    Returns:
        EntrySet in first-seen order
    """
    seen: set[str] = set()
    lines: list[str] = []

    for line in text.split("\n"):
        line = line.strip()
        if not line or line in seen:
            continue
        seen.add(line)
        lines.append(line)

    return EntrySet.from_lines(lines)
