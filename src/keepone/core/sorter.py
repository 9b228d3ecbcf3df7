"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sorter.py
Pure sorting logic for lists of duplicate groups (presentation order only).
"""
from enum import Enum
from typing import List

from keepone.core.models import DuplicateGroup


class GroupSortOrder(Enum):
    WASTED_DESC = "wasted-desc"
    WASTED_ASC = "wasted-asc"
    SIZE_DESC = "size-desc"
    SIZE_ASC = "size-asc"
    COPIES_DESC = "copies-desc"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            GroupSortOrder.WASTED_DESC: "Wasted Space (Most)",
            GroupSortOrder.WASTED_ASC: "Wasted Space (Least)",
            GroupSortOrder.SIZE_DESC: "File Size (Largest)",
            GroupSortOrder.SIZE_ASC: "File Size (Smallest)",
            GroupSortOrder.COPIES_DESC: "Copies (Most)",
        }
        return mapping.get(self, self.value)


class GroupSorter:
    """
    Returns a new, sorted list; groups themselves are not touched.
    Ties always fall back to the content hash so output is stable between runs.
    """

    @staticmethod
    def sort_groups(groups: List[DuplicateGroup], order: GroupSortOrder = None) -> List[DuplicateGroup]:
        if not groups:
            return []

        if order is None:
            order = GroupSortOrder.WASTED_DESC

        if order == GroupSortOrder.WASTED_ASC:
            key_func = lambda g: (g.wasted_size, g.hash)
        elif order == GroupSortOrder.SIZE_DESC:
            key_func = lambda g: (-g.file_size, g.hash)
        elif order == GroupSortOrder.SIZE_ASC:
            key_func = lambda g: (g.file_size, g.hash)
        elif order == GroupSortOrder.COPIES_DESC:
            key_func = lambda g: (-len(g.files), g.hash)
        else:
            key_func = lambda g: (-g.wasted_size, g.hash)
        return sorted(groups, key=key_func)
