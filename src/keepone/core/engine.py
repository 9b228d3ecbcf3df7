"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/engine.py
The duplicate scanner: one owned engine object that runs the pipeline

    enumerate → bucket by size → partial hash → full hash → assemble

under a per-run state machine, with cooperative cancellation and monotonic progress.

CONCURRENCY
-----------
• One scan per engine at a time; an overlapping scan() raises ScanInProgressError
• Every scan gets a fresh CancellationToken; cancel() targets the active one only
• Hashing may use a thread pool (FileGrouperImpl.workers); workers share nothing but
  the token and the progress counters
• Cancellation is observed per file and per bucket: a file already being hashed
  finishes first. A cancelled scan returns [] and discards all partial results
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from keepone.core.assembler import GroupAssembler
from keepone.core.config import ScanConfig
from keepone.core.filter import PathFilterImpl
from keepone.core.grouper import FileGrouperImpl
from keepone.core.interfaces import FileGrouper, TreeEnumerator, Trash
from keepone.core.models import DuplicateGroup, ScanEntry, ScanState, ScanStats, ReclaimResult
from keepone.core.progress import CancellationToken, ProgressCallback, ProgressReporter
from keepone.core.reclaimer import EligibilityPredicate, ReclamationExecutor
from keepone.core.scanner import FileScannerImpl

logger = logging.getLogger(__name__)

EnumeratorFactory = Callable[[int], TreeEnumerator]


class ScanInProgressError(RuntimeError):
    """Raised when scan() is called while another scan is running on the same engine."""


class ScanCancelled(Exception):
    """Internal signal used to unwind the pipeline once the token is set."""


class DuplicateScanner:
    """
    Duplicate detection and reclamation engine.

    Collaborators are injected so tests and front ends can swap them:
        enumerator_factory: min_size → TreeEnumerator (default: FileScannerImpl + PathFilterImpl)
        grouper: bucketing and hashing (default: FileGrouperImpl with SHA-256)
        reclaimer: removal executor (default: ReclamationExecutor over send2trash)
    """

    def __init__(
        self,
        enumerator_factory: Optional[EnumeratorFactory] = None,
        grouper: Optional[FileGrouper] = None,
        reclaimer: Optional[ReclamationExecutor] = None,
        file_service: Optional[Trash] = None,
    ):
        self._enumerator_factory = enumerator_factory or self._default_enumerator
        self.grouper = grouper or FileGrouperImpl()
        self.reclaimer = reclaimer or ReclamationExecutor(file_service)
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._token: Optional[CancellationToken] = None
        self._state = ScanState.IDLE
        self.last_stats: Optional[ScanStats] = None

    @staticmethod
    def _default_enumerator(min_size: int) -> TreeEnumerator:
        return FileScannerImpl(path_filter=PathFilterImpl(min_size=min_size))

    # ---------------------------------------------------------------------
    # State and cancellation
    # ---------------------------------------------------------------------

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._run_lock.locked()

    def cancel(self) -> None:
        """Idempotent; a no-op when no scan is running."""
        with self._state_lock:
            token = self._token
        if token is not None and not token.is_cancelled:
            logger.info("Cancellation requested")
            token.cancel()

    def _set_state(self, state: ScanState, stats: ScanStats) -> None:
        self._state = state
        stats.state = state
        logger.debug(f"Scan state → {state.value}")

    @staticmethod
    def _checkpoint(token: CancellationToken) -> None:
        if token.is_cancelled:
            raise ScanCancelled()

    # ---------------------------------------------------------------------
    # Scan
    # ---------------------------------------------------------------------

    def scan(
        self,
        root_path: str,
        min_size: int = ScanConfig.DEFAULT_MIN_SIZE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[DuplicateGroup]:
        """
        Find groups of byte-identical files under `root_path`.

        Args:
            root_path: Directory to scan
            min_size: Files smaller than this are ignored (bytes)
            on_progress: (fraction 0..1, status text); fraction never decreases
        Returns:
            Groups sorted by wasted size, or [] when cancelled
        Raises:
            ScanInProgressError: another scan is running on this engine
        """
        if not self._run_lock.acquire(blocking=False):
            raise ScanInProgressError("A duplicate scan is already in progress")

        token = CancellationToken()
        stats = ScanStats()
        progress = ProgressReporter(on_progress)
        with self._state_lock:
            self._token = token
        self.last_stats = stats
        start_time = time.time()

        try:
            groups = self._run(root_path, min_size, token, stats, progress)
        except ScanCancelled:
            self._set_state(ScanState.CANCELLED, stats)
            progress.report(1.0, "Cancelled")
            logger.info("Scan cancelled; partial results discarded")
            groups = []
        finally:
            stats.total_time = time.time() - start_time
            with self._state_lock:
                self._token = None
            self._run_lock.release()

        return groups

    def _run(
        self,
        root_path: str,
        min_size: int,
        token: CancellationToken,
        stats: ScanStats,
        progress: ProgressReporter,
    ) -> List[DuplicateGroup]:
        self._checkpoint(token)

        entries = self._enumerate(root_path, min_size, token, stats, progress)

        # Size bucketing
        self._set_state(ScanState.BUCKETING, stats)
        stage_start = time.time()
        size_buckets = self.grouper.group_by_size(entries)
        stats.candidates = sum(len(b) for b in size_buckets.values())
        stats.add_stage_time("size", time.time() - stage_start)
        logger.info(f"{len(size_buckets)} size buckets, {stats.candidates} candidates")
        self._checkpoint(token)

        if not size_buckets:
            return self._complete([], stats, progress)

        # Partial hashing, one size bucket at a time
        self._set_state(ScanState.PARTIAL_HASHING, stats)
        partial_buckets = self._hash_phase(
            list(size_buckets.values()), self.grouper.group_by_partial_hash,
            ScanConfig.PARTIAL_HASH_BAND, token, stats, progress, "partial")

        # Full hashing, one partial-hash sub-bucket at a time
        self._set_state(ScanState.FULL_HASHING, stats)
        full_buckets = self._hash_phase(
            [members for _, members in partial_buckets], self.grouper.group_by_full_hash,
            ScanConfig.FULL_HASH_BAND, token, stats, progress, "full")

        self._set_state(ScanState.ASSEMBLING, stats)
        progress.report(ScanConfig.FINALIZING, "Finalizing...")
        stage_start = time.time()
        # Never merge across size buckets, even on equal digests
        by_key: Dict[Tuple[int, str], List[ScanEntry]] = {}
        for content_hash, members in full_buckets:
            by_key.setdefault((members[0].size, content_hash), []).extend(members)
        groups = GroupAssembler.assemble(
            (content_hash, GroupAssembler.refresh_members(members, stats))
            for (_, content_hash), members in by_key.items()
        )
        stats.add_stage_time("assemble", time.time() - stage_start)
        self._checkpoint(token)

        return self._complete(groups, stats, progress)

    def _enumerate(
        self,
        root_path: str,
        min_size: int,
        token: CancellationToken,
        stats: ScanStats,
        progress: ProgressReporter,
    ) -> List[ScanEntry]:
        self._set_state(ScanState.ENUMERATING, stats)
        progress.report(ScanConfig.ENUMERATION_START, "Enumerating files...")
        stage_start = time.time()

        def on_enumerated(count: int) -> None:
            progress.report(ScanConfig.enumeration_fraction(count), f"Found {count} files")

        enumerator = self._enumerator_factory(min_size)
        entries = list(enumerator.enumerate(root_path, token=token, on_progress=on_enumerated, stats=stats))
        self._checkpoint(token)

        stats.files_enumerated = len(entries)
        stats.add_stage_time("enumerate", time.time() - stage_start)
        progress.report(ScanConfig.ENUMERATION_END, f"Found {len(entries)} files")
        logger.info(f"Enumerated {len(entries)} candidate files under {root_path}")
        return entries

    def _hash_phase(
        self,
        buckets: List[List[ScanEntry]],
        group_fn: Callable[..., Dict[str, List[ScanEntry]]],
        band: Tuple[float, float],
        token: CancellationToken,
        stats: ScanStats,
        progress: ProgressReporter,
        stage: str,
    ) -> List[Tuple[str, List[ScanEntry]]]:
        """
        Split every bucket with `group_fn`, keeping (digest, members) sub-buckets of 2+ members.
        Progress advances per processed file inside the phase's band;
        `stats.<stage>_hashed` counts only files whose digest was computed.
        """
        start, end = band
        total = sum(len(b) for b in buckets)
        counter = {"done": 0, "hashed": 0}
        counter_lock = threading.Lock()

        def on_file_hashed(ok: bool) -> None:
            with counter_lock:
                counter["done"] += 1
                counter["hashed"] += int(ok)
                done = counter["done"]
            progress.report_span(start, end, done, total, f"Comparing files {done} of {total}")

        stage_start = time.time()
        result = []
        try:
            for bucket in buckets:
                self._checkpoint(token)
                sub_buckets = group_fn(bucket, token=token, stats=stats, on_file_hashed=on_file_hashed)
                self._checkpoint(token)
                result.extend(sub_buckets.items())
        finally:
            stats.add_stage_time(stage, time.time() - stage_start)
            setattr(stats, f"{stage}_hashed", counter["hashed"])

        progress.report(end, f"Comparing files {total} of {total}")
        logger.info(f"{stage} hashing: {total} files → {len(result)} buckets")
        return result

    def _complete(self, groups: List[DuplicateGroup], stats: ScanStats, progress: ProgressReporter):
        stats.groups_found = len(groups)
        stats.wasted_bytes = sum(g.wasted_size for g in groups)
        self._set_state(ScanState.COMPLETED, stats)
        progress.report(1.0, "Complete")
        logger.info(f"Scan complete: {len(groups)} groups, {stats.wasted_bytes} bytes reclaimable")
        return groups

    # ---------------------------------------------------------------------
    # Reclaim
    # ---------------------------------------------------------------------

    def reclaim(
        self,
        groups: List[DuplicateGroup],
        selection_predicate: Optional[EligibilityPredicate] = None,
    ) -> ReclaimResult:
        """Delegate to the reclamation executor; kept files are always protected."""
        return self.reclaimer.reclaim(groups, selection_predicate)
