"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements recursive directory enumeration for the duplicate scanner.
Features:
- Uses os.walk with in-place pruning of hidden, bundle, trash and excluded directories
- Never follows symbolic links (no cycles, no cross-device surprises)
- Delegates per-file decisions to an injected PathFilter
- Catch-and-skip: one unreadable entry or directory never aborts the walk
- Throttled progress and per-entry cancellation checks
"""

import os
import sys
import logging
from pathlib import Path
from typing import List, Optional, Callable, Iterator

from keepone.core.config import ScanConfig
from keepone.core.filter import PathFilterImpl
from keepone.core.interfaces import TreeEnumerator, PathFilter
from keepone.core.models import ScanEntry, ScanStats
from keepone.core.progress import CancellationToken, ProgressThrottle

logger = logging.getLogger(__name__)

STAGE = "enumerate"


class FileScannerImpl(TreeEnumerator):
    """
    Walks a directory tree and yields ScanEntry objects accepted by the path filter.

    Attributes:
        path_filter: Candidate predicate (size range, exclusion tables, readability)
        excluded_dirs: Directories never descended
        progress_interval: Seconds between progress reports
        progress_every_n: Entries between progress reports
    """

    def __init__(
        self,
        path_filter: Optional[PathFilter] = None,
        excluded_dirs: Optional[List[str]] = None,
        progress_interval: float = ScanConfig.PROGRESS_INTERVAL,
        progress_every_n: int = ScanConfig.PROGRESS_EVERY_N_FILES,
    ):
        self.path_filter = path_filter or PathFilterImpl()
        self.excluded_dirs = [str(Path(d).resolve()) for d in excluded_dirs] if excluded_dirs else []
        self.progress_interval = progress_interval
        self.progress_every_n = progress_every_n

    def enumerate(
        self,
        root: str,
        token: Optional[CancellationToken] = None,
        on_progress: Optional[Callable[[int], None]] = None,
        stats: Optional[ScanStats] = None,
    ) -> Iterator[ScanEntry]:
        """
        Yields accepted entries. Stops early, without error, when `token` is cancelled;
        the caller distinguishes "cancelled" from "complete" by checking the token.

        Args:
            root: Directory to walk
            token: Cancellation flag checked once per entry
            on_progress: Receives the number of accepted files, throttled
            stats: Receives ScanIssue records for skipped entries
        """
        root_path = Path(os.path.abspath(root))
        logger.debug(f"Enumerating: {root_path}")

        try:
            usable = root_path.is_dir() and not root_path.is_symlink()
            reason = "root is not a directory" if root_path.exists() else "root does not exist"
        except OSError as e:
            usable = False
            reason = e.strerror or str(e)
        if not usable:
            logger.warning(f"Cannot enumerate {root_path}: {reason}")
            self._record(stats, str(root_path), reason)
            return

        throttle = ProgressThrottle(self.progress_interval, self.progress_every_n)
        accepted = 0

        def on_walk_error(error: OSError) -> None:
            logger.debug(f"Skipping unreadable directory {error.filename}: {error}")
            self._record(stats, str(error.filename or root_path), error.strerror or str(error))

        for dirpath, dirs, files in os.walk(str(root_path), onerror=on_walk_error, followlinks=False):
            if token and token.is_cancelled:
                logger.debug("Enumeration interrupted by cancellation")
                return

            # Prune subdirectories BEFORE os.walk enters them
            dirs[:] = sorted(d for d in dirs if self._prefilter_dirs(Path(dirpath) / d))

            for filename in sorted(files):
                if token and token.is_cancelled:
                    logger.debug("Enumeration interrupted by cancellation")
                    return

                entry = self._process_file(Path(dirpath) / filename, stats)
                if entry is None:
                    continue

                accepted += 1
                yield entry

                if on_progress and throttle.tick():
                    on_progress(accepted)

        if on_progress:
            on_progress(accepted)
        logger.debug(f"Enumeration completed. Accepted {accepted} files.")

    @staticmethod
    def _is_hidden(name: str) -> bool:
        return name.startswith(".")

    @staticmethod
    def _is_package(name: str) -> bool:
        return os.path.splitext(name)[1].lower() in ScanConfig.PACKAGE_EXTENSIONS

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error (better to scan than skip valid data).
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                if "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str:
                    return True
            elif sys.platform == "darwin":
                if "/.Trash/" in path_str or path_str.endswith("/.Trash"):
                    return True
            else:
                if ".local/share/Trash" in path_str or "/.trash/" in path_str.lower():
                    return True

            return False
        except (OSError, ValueError, RuntimeError):
            return False

    def _is_excluded_directory(self, path: Path) -> bool:
        """Check if path is within an excluded directory."""
        try:
            path_str = str(path.resolve(strict=False))
        except (OSError, ValueError, RuntimeError):
            return False
        for excluded_dir in self.excluded_dirs:
            normalized_excluded = os.path.normpath(excluded_dir)
            if path_str.startswith(normalized_excluded + os.sep) or path_str == normalized_excluded:
                return True
        return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Decide whether os.walk may descend into `path`."""
        name = path.name
        if self._is_hidden(name) or name in ScanConfig.SKIP_FILE_NAMES:
            logger.debug(f"Skipping hidden directory: {path}")
            return False

        if self._is_package(name):
            logger.debug(f"Skipping package bundle: {path}")
            return False

        try:
            if path.is_symlink():
                logger.debug(f"Skipping symlinked directory: {path}")
                return False
        except OSError:
            return False

        if self._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        if self.excluded_dirs and self._is_excluded_directory(path):
            logger.debug(f"Skipping excluded directory: {path}")
            return False

        return True

    def _process_file(self, path: Path, stats: Optional[ScanStats]) -> Optional[ScanEntry]:
        """
        Stat a single entry and return a ScanEntry if it passes the filter.
        Args:
            path: Path object pointing to the entry
            stats: Receives an issue when the entry cannot be inspected
        Returns:
            Optional[ScanEntry]: Entry if accepted, else None
        """
        if self._is_hidden(path.name):
            return None

        try:
            stat_result = os.lstat(path)
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            self._record(stats, str(path), e.strerror or str(e))
            return None

        try:
            if not self.path_filter.should_consider(path, stat_result):
                return None
        except OSError as e:
            logger.debug(f"Filter failed for {path}: {e}")
            self._record(stats, str(path), e.strerror or str(e))
            return None

        return ScanEntry(path=str(path), size=stat_result.st_size, modified=stat_result.st_mtime)

    @staticmethod
    def _record(stats: Optional[ScanStats], path: str, reason: str) -> None:
        if stats is not None:
            stats.record_issue(path, STAGE, reason)
