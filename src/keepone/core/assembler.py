"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/assembler.py
Turns verified full-hash buckets into DuplicateGroups and applies the keep policy.

Keep policy (user-facing safety decision):
1. Members are ordered by last-modified time, newest first
2. Equal (or unknown) timestamps fall back to lexicographic path order
3. The first member is kept; nobody is selected for deletion automatically
Unknown timestamps sort after every known timestamp.
Members are re-stat'ed before grouping: the keep policy sees current mtimes, and a file
whose size changed after bucketing is dropped.

Result order: wasted size descending, then hash ascending. Ordering is presentation only;
a group's identity is its content hash.
"""

import logging
import os
from typing import Iterable, List, Optional, Tuple

from keepone.core.models import DuplicateFile, DuplicateGroup, ScanEntry, ScanStats

logger = logging.getLogger(__name__)

STAGE = "assemble"


class GroupAssembler:

    @staticmethod
    def keep_policy_key(file: DuplicateFile):
        known = file.modified is not None
        return (not known, -(file.modified or 0.0), file.path)

    @staticmethod
    def build_group(content_hash: str, entries: List[ScanEntry]) -> DuplicateGroup:
        files = [DuplicateFile(path=e.path, size=e.size, modified=e.modified) for e in entries]
        files.sort(key=GroupAssembler.keep_policy_key)
        files[0].kept = True
        return DuplicateGroup(hash=content_hash, files=files)

    @staticmethod
    def refresh_members(entries: List[ScanEntry], stats: Optional[ScanStats] = None) -> List[ScanEntry]:
        """
        Re-stat every member after hashing. Members that vanished or whose size no longer
        matches the size they were bucketed by are dropped; survivors carry the current mtime.
        """
        fresh = []
        for entry in entries:
            try:
                st = os.stat(entry.path)
            except OSError as e:
                reason = e.strerror or str(e)
            else:
                if st.st_size == entry.size:
                    fresh.append(ScanEntry(path=entry.path, size=st.st_size, modified=st.st_mtime))
                    continue
                reason = f"size changed from {entry.size} to {st.st_size} during scan"
            logger.debug(f"Dropping {entry.path}: {reason}")
            if stats is not None:
                stats.record_issue(entry.path, STAGE, reason)
        return fresh

    @staticmethod
    def assemble(buckets: Iterable[Tuple[str, List[ScanEntry]]]) -> List[DuplicateGroup]:
        """
        Args:
            buckets: (full hash, entries) pairs; every pair must come from a single size bucket
        Returns:
            Groups with 2+ members, highest wasted size first
        """
        groups = [
            GroupAssembler.build_group(content_hash, entries)
            for content_hash, entries in buckets
            if len(entries) >= 2
        ]
        groups.sort(key=lambda g: (-g.wasted_size, g.hash))
        return groups
