"""
Preference models — Typed view of the stored task-list preferences

The store holds two flat entries:
- show_completed: bool
- sort_order: str, one of the SortOrder names

Sort order multiplexes two independent criteria (deadline, priority) onto
one four-valued field. Internally the pair is handled as SortFlags; the
four-valued encoding only exists at the persistence boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InvalidPreferenceStateError(ValueError):
    """Stored preference data does not decode (corruption or schema mismatch)."""


class SortOrder(Enum):
    NONE = "NONE"
    BY_DEADLINE = "BY_DEADLINE"
    BY_PRIORITY = "BY_PRIORITY"
    BY_DEADLINE_AND_PRIORITY = "BY_DEADLINE_AND_PRIORITY"


def decode_sort_order(raw: Optional[str]) -> SortOrder:
    """
    Decode the persisted sort order name.

    Args:
        raw: Stored string, or None when the entry is absent

    Returns:
        SortOrder.NONE for a missing entry, otherwise the named member

    Raises:
        InvalidPreferenceStateError: raw is not exactly one of the names
    """
    if raw is None:
        return SortOrder.NONE
    try:
        return SortOrder[raw]
    except KeyError:
        raise InvalidPreferenceStateError(f"Unknown sort order '{raw}'") from None


@dataclass(frozen=True)
class SortFlags:
    """The two sort criteria as independent switches."""
    by_deadline: bool = False
    by_priority: bool = False

    @classmethod
    def from_sort_order(cls, order: SortOrder) -> 'SortFlags':
        return cls(
            by_deadline=order in (SortOrder.BY_DEADLINE, SortOrder.BY_DEADLINE_AND_PRIORITY),
            by_priority=order in (SortOrder.BY_PRIORITY, SortOrder.BY_DEADLINE_AND_PRIORITY),
        )

    def to_sort_order(self) -> SortOrder:
        if self.by_deadline and self.by_priority:
            return SortOrder.BY_DEADLINE_AND_PRIORITY
        if self.by_deadline:
            return SortOrder.BY_DEADLINE
        if self.by_priority:
            return SortOrder.BY_PRIORITY
        return SortOrder.NONE


@dataclass(frozen=True)
class UserPreferences:
    """One decoded snapshot of the user's preferences."""
    show_completed: bool
    sort_order: SortOrder

    @classmethod
    def default(cls) -> 'UserPreferences':
        """Preferences when nothing has been stored yet."""
        return cls(show_completed=False, sort_order=SortOrder.NONE)

    @property
    def sort_flags(self) -> SortFlags:
        return SortFlags.from_sort_order(self.sort_order)
