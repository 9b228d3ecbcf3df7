"""
Unified command orchestrator for duplicate scanning.
This is the SINGLE source of truth for wiring the engine from ScanParams, used by the CLI
and by library callers alike.
"""
import logging
from typing import List, Optional, Callable, Tuple

from keepone.core.engine import DuplicateScanner
from keepone.core.filter import PathFilterImpl
from keepone.core.grouper import FileGrouperImpl
from keepone.core.hasher import HasherImpl, Sha256AlgorithmImpl, algorithm_by_name
from keepone.core.models import DuplicateGroup, ScanParams, ScanStats, ReclaimResult
from keepone.core.reclaimer import ReclamationExecutor, EligibilityPredicate
from keepone.core.scanner import FileScannerImpl
from keepone.core.interfaces import Trash

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Builds a DuplicateScanner for the given parameters and runs it.

    Usage:
        params = ScanParams(root_dir="~/Downloads", min_size_bytes=1024, workers=4)
        command = ScanCommand()
        groups, stats = command.execute(params, progress_callback=printer)

        # From another thread (e.g. a signal handler):
        command.cancel()
    """

    def __init__(self, file_service: Optional[Trash] = None, use_trash: bool = True):
        self._file_service = file_service
        self._use_trash = use_trash
        self._scanner: Optional[DuplicateScanner] = None

    def build_scanner(self, params: ScanParams) -> DuplicateScanner:
        hasher = HasherImpl(
            partial_algorithm=algorithm_by_name(params.partial_algorithm),
            full_algorithm=Sha256AlgorithmImpl(),
            partial_size=params.partial_hash_size,
            chunk_size=params.chunk_size,
        )

        def enumerator_factory(min_size: int) -> FileScannerImpl:
            return FileScannerImpl(
                path_filter=PathFilterImpl(min_size=min_size, max_size=params.max_size_bytes),
                excluded_dirs=params.excluded_dirs,
            )

        return DuplicateScanner(
            enumerator_factory=enumerator_factory,
            grouper=FileGrouperImpl(hasher, workers=params.workers),
            reclaimer=ReclamationExecutor(self._file_service, use_trash=self._use_trash),
        )

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[Callable[[float, str], None]] = None,
    ) -> Tuple[List[DuplicateGroup], ScanStats]:
        """
        Execute a scan with given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (fraction: float, status: str) -> None

        Returns:
            Tuple of (duplicate_groups, statistics). A cancelled scan returns ([], stats)
            with stats.state == ScanState.CANCELLED.
        """
        self._scanner = self.build_scanner(params)
        logger.debug(f"Executing scan with {params}")
        groups = self._scanner.scan(
            params.root_dir,
            min_size=params.min_size_bytes,
            on_progress=progress_callback,
        )
        return groups, self._scanner.last_stats

    def cancel(self) -> None:
        if self._scanner is not None:
            self._scanner.cancel()

    def reclaim(
            self,
            groups: List[DuplicateGroup],
            selection_predicate: Optional[EligibilityPredicate] = None,
    ) -> ReclaimResult:
        """Reclaim through the last built scanner, or a fresh executor if none ran yet."""
        if self._scanner is not None:
            return self._scanner.reclaim(groups, selection_predicate)
        return ReclamationExecutor(self._file_service, use_trash=self._use_trash).reclaim(
            groups, selection_predicate)
