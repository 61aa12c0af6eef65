"""
Preferences — Task-list user preferences

Contains:
- SortOrder / SortFlags: sort criteria, stored and internal forms
- UserPreferences: immutable decoded snapshot
- UserPreferencesRepository: observe, fetch and update preferences
"""

from .models import (
    SortOrder, SortFlags, UserPreferences, InvalidPreferenceStateError, decode_sort_order,
)
from .repository import (
    UserPreferencesRepository, open_repository,
    SHOW_COMPLETED_KEY, SORT_ORDER_KEY,
)

__all__ = [
    # Models
    "SortOrder", "SortFlags", "UserPreferences", "InvalidPreferenceStateError",
    "decode_sort_order",
    # Repository
    "UserPreferencesRepository", "open_repository",
    "SHOW_COMPLETED_KEY", "SORT_ORDER_KEY",
]
