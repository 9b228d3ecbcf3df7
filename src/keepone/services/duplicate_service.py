"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Selection and bookkeeping helpers over scan results.
Every mutator preserves the group invariant: exactly one kept member, never selected.
"""
from collections import defaultdict
from typing import Iterable, List, Optional, Tuple

from keepone.core.assembler import GroupAssembler
from keepone.core.models import DuplicateFile, DuplicateGroup, FileType


class DuplicateService:

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @staticmethod
    def toggle_file_selection(group: DuplicateGroup, file: DuplicateFile) -> None:
        """Flip `selected` on one member. The kept member cannot be selected."""
        if file.kept:
            return
        file.selected = not file.selected

    @staticmethod
    def toggle_all_in_group(group: DuplicateGroup) -> None:
        """Select every non-kept member, or deselect them all if they already are."""
        selectable = [f for f in group.files if not f.kept]
        all_selected = all(f.selected for f in selectable)
        for file in selectable:
            file.selected = not all_selected

    @staticmethod
    def set_kept_file(group: DuplicateGroup, file: DuplicateFile) -> None:
        group.set_kept(file)

    @staticmethod
    def select_all_duplicates(groups: List[DuplicateGroup]) -> None:
        for group in groups:
            for file in group.files:
                if not file.kept:
                    file.selected = True

    @staticmethod
    def deselect_all(groups: List[DuplicateGroup]) -> None:
        for group in groups:
            for file in group.files:
                file.selected = False

    @staticmethod
    def select_oldest_in_each_group(groups: List[DuplicateGroup]) -> None:
        """
        Re-apply the keep policy (newest kept) and select every other member for deletion.
        """
        for group in groups:
            newest = min(group.files, key=GroupAssembler.keep_policy_key)
            for file in group.files:
                file.kept = file is newest
                file.selected = file is not newest

    @staticmethod
    def files_to_reclaim(groups: List[DuplicateGroup]) -> List[DuplicateFile]:
        """Members eligible under the default predicate (selected and not kept)."""
        return [f for group in groups for f in group.files if f.is_reclaimable]

    # ------------------------------------------------------------------
    # Maintenance after deletion
    # ------------------------------------------------------------------

    @staticmethod
    def remove_files_from_groups(groups: List[DuplicateGroup], file_paths: Iterable[str]) -> List[DuplicateGroup]:
        """
        Removes files with the specified paths from all duplicate groups.

        Groups that contain fewer than 2 files after removal are discarded.
        If a group lost its kept member, the keep policy elects a new one.

        Args:
            groups: List of duplicate groups to update.
            file_paths: Paths of files that no longer exist.

        Returns:
            Updated list of duplicate groups (same objects, pruned in place).
        """
        removed = set(file_paths)
        updated_groups = []
        for group in groups:
            group.files = [f for f in group.files if f.path not in removed]
            if len(group.files) < 2:
                continue
            if group.kept_file is None:
                newest = min(group.files, key=GroupAssembler.keep_policy_key)
                newest.kept = True
                newest.selected = False
            updated_groups.append(group)
        return updated_groups

    # ------------------------------------------------------------------
    # Views and totals
    # ------------------------------------------------------------------

    @staticmethod
    def filter_groups(
            groups: List[DuplicateGroup],
            search_text: str = "",
            file_type: Optional[FileType] = None,
    ) -> List[DuplicateGroup]:
        """Case-insensitive match on any member's name or path, plus an optional type filter."""
        result = groups
        query = (search_text or "").strip().lower()
        if query:
            result = [
                g for g in result
                if any(query in f.name.lower() or query in f.path.lower() for f in g.files)
            ]
        if file_type is not None:
            result = [g for g in result if g.file_type == file_type]
        return list(result)

    @staticmethod
    def total_wasted_size(groups: List[DuplicateGroup]) -> int:
        return sum(g.wasted_size for g in groups)

    @staticmethod
    def selected_size(groups: List[DuplicateGroup]) -> int:
        return sum(f.size for f in DuplicateService.files_to_reclaim(groups))

    @staticmethod
    def selected_count(groups: List[DuplicateGroup]) -> int:
        return len(DuplicateService.files_to_reclaim(groups))

    @staticmethod
    def duplicate_file_count(groups: List[DuplicateGroup]) -> int:
        """Redundant copies: every member except one per group."""
        return sum(len(g.files) - 1 for g in groups)

    @staticmethod
    def file_type_stats(groups: List[DuplicateGroup]) -> List[Tuple[FileType, int, int]]:
        """(file type, group count, wasted bytes), most wasted first."""
        stats = defaultdict(lambda: [0, 0])
        for group in groups:
            entry = stats[group.file_type]
            entry[0] += 1
            entry[1] += group.wasted_size
        return sorted(
            ((t, count, size) for t, (count, size) in stats.items()),
            key=lambda item: (-item[2], item[0].value),
        )
