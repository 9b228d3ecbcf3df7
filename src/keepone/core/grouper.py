"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements progressive bucketing of scan entries: size, then partial hash, then full hash.
Hashing may fan out over a thread pool; buckets are built from unordered key→list maps,
so any interleaving of workers yields the same buckets.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Any, Callable, Optional, Tuple

from keepone.core.hasher import HasherImpl
from keepone.core.interfaces import FileGrouper, Hasher
from keepone.core.models import ScanEntry, ScanStats
from keepone.core.progress import CancellationToken

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    A concrete implementation of FileGrouper.
    Uses an injected Hasher instance for flexibility and testability.

    Attributes:
        hasher: Partial/full hasher
        workers: Number of hashing threads; 1 hashes inline on the calling thread
    """

    def __init__(self, hasher: Optional[Hasher] = None, workers: int = 1):
        if workers < 1:
            raise ValueError("Workers must be at least 1")
        self.hasher = hasher or HasherImpl()
        self.workers = workers

    def group_by_size(self, entries: List[ScanEntry]) -> Dict[int, List[ScanEntry]]:
        """Groups entries by exact byte size."""
        groups = defaultdict(list)
        for entry in entries:
            groups[entry.size].append(entry)
        return self._drop_singles(groups)

    def group_by_partial_hash(
        self,
        entries: List[ScanEntry],
        token: Optional[CancellationToken] = None,
        stats: Optional[ScanStats] = None,
        on_file_hashed: Optional[Callable[[bool], None]] = None,
    ) -> Dict[str, List[ScanEntry]]:
        """Groups entries by the digest of their leading bytes."""
        return self._group_by_hash(
            entries, self.hasher.compute_partial_hash, "partial-hash", token, stats, on_file_hashed)

    def group_by_full_hash(
        self,
        entries: List[ScanEntry],
        token: Optional[CancellationToken] = None,
        stats: Optional[ScanStats] = None,
        on_file_hashed: Optional[Callable[[bool], None]] = None,
    ) -> Dict[str, List[ScanEntry]]:
        """Groups entries by full content digest."""
        return self._group_by_hash(
            entries, self.hasher.compute_full_hash, "full-hash", token, stats, on_file_hashed)

    def _group_by_hash(
        self,
        entries: List[ScanEntry],
        compute: Callable[[str], str],
        stage: str,
        token: Optional[CancellationToken],
        stats: Optional[ScanStats],
        on_file_hashed: Optional[Callable[[bool], None]],
    ) -> Dict[str, List[ScanEntry]]:
        """
        Helper method to hash every entry and bucket by digest.
        Entries whose digest cannot be computed are excluded and recorded as issues.
        Entries reached after cancellation are skipped silently; the caller checks the token.
        `on_file_hashed(ok)` fires once per processed entry, with ok=False when hashing failed.
        """
        def hash_one(entry: ScanEntry) -> Tuple[ScanEntry, Optional[str]]:
            if token and token.is_cancelled:
                return entry, None
            try:
                key = compute(entry.path)
            except RuntimeError as e:
                logger.debug(f"⚠️ Excluding {entry.path}: {e}")
                if stats is not None:
                    stats.record_issue(entry.path, stage, str(e))
                key = None
            if on_file_hashed:
                on_file_hashed(key is not None)
            return entry, key

        if self.workers > 1 and len(entries) > 1:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(entries))) as pool:
                results = list(pool.map(hash_one, entries))
        else:
            results = [hash_one(entry) for entry in entries]

        groups = defaultdict(list)
        skipped = 0
        for entry, key in results:
            if key is None:
                skipped += 1
                continue
            groups[key].append(entry)

        if skipped:
            logger.debug(f"{stage}: {skipped} of {len(entries)} entries not hashed")

        return self._drop_singles(groups)

    @staticmethod
    def _drop_singles(groups: Dict[Any, List[ScanEntry]]) -> Dict[Any, List[ScanEntry]]:
        """Only buckets with 2+ members can hold duplicates."""
        return {key: group for key, group in groups.items() if len(group) >= 2}
