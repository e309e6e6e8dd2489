"""Filtering and chronological ordering of captured log entries.

Level filtering is an exact, case-sensitive match against the stored
uppercase level; ``ALL`` disables it. Substring filtering runs after level
filtering. Sorting is stable, so entries with equal timestamps keep their
arrival order.
"""

from typing import Iterable, List, Optional, TypeVar

from ..models.capture import ConsoleEntry

ALL_LEVELS = "ALL"

T = TypeVar('T')


def sort_by_timestamp(entries: Iterable[T]) -> List[T]:
    """Return a new list of entries sorted ascending by ``timestamp``."""
    return sorted(entries, key=lambda entry: entry.timestamp)


def filter_by_level(entries: Iterable[ConsoleEntry], level: str = ALL_LEVELS) -> List[ConsoleEntry]:
    if level == ALL_LEVELS:
        return list(entries)
    return [entry for entry in entries if entry.level == level]


def filter_by_text(
    entries: Iterable[ConsoleEntry],
    text: Optional[str] = None,
    ignore_case: bool = False
) -> List[ConsoleEntry]:
    """Keep entries whose message contains ``text``.

    Args:
        entries: Console entries to filter
        text: Substring to look for; None or empty keeps everything
        ignore_case: Compare case-insensitively

    Returns:
        Matching entries in their original order
    """
    if not text:
        return list(entries)
    if ignore_case:
        needle = text.casefold()
        return [entry for entry in entries if needle in entry.message.casefold()]
    return [entry for entry in entries if text in entry.message]


def filter_console_logs(
    entries: Iterable[ConsoleEntry],
    level: str = ALL_LEVELS,
    text: Optional[str] = None,
    ignore_case: bool = False
) -> List[ConsoleEntry]:
    """Apply level then substring filtering and sort chronologically.

    Args:
        entries: Console entries to query
        level: Exact level to keep, or ``ALL``
        text: Optional substring the message must contain
        ignore_case: Compare the substring case-insensitively

    Returns:
        New list of matching entries sorted by timestamp
    """
    matching = filter_by_level(entries, level)
    matching = filter_by_text(matching, text, ignore_case=ignore_case)
    return sort_by_timestamp(matching)
