"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/filter.py
Pure predicate deciding whether a filesystem entry is a duplicate candidate.
"""

import os
import stat
from pathlib import Path
from typing import Optional, Iterable

from keepone.core.config import ScanConfig
from keepone.core.interfaces import PathFilter


class PathFilterImpl(PathFilter):
    """
    Accepts readable regular files within the configured size range whose name and
    extension are not on the exclusion tables. Directories and symbolic links are rejected.

    Attributes:
        min_size: Minimum file size in bytes (default 1024)
        max_size: Maximum file size in bytes (optional)
    """

    def __init__(
        self,
        min_size: int = ScanConfig.DEFAULT_MIN_SIZE,
        max_size: Optional[int] = None,
        skip_names: Iterable[str] = ScanConfig.SKIP_FILE_NAMES,
        skip_extensions: Iterable[str] = ScanConfig.SKIP_EXTENSIONS,
    ):
        self.min_size = min_size
        self.max_size = max_size
        self.skip_names = frozenset(skip_names)
        self.skip_extensions = frozenset(ext.lower().lstrip(".") for ext in skip_extensions)

    def should_consider(self, path: Path, stat_result: os.stat_result) -> bool:
        """
        Args:
            path: Entry path
            stat_result: Result of lstat() for the entry (symlinks not followed)
        Returns:
            True if the entry should enter size bucketing
        """
        mode = stat_result.st_mode
        if stat.S_ISLNK(mode) or stat.S_ISDIR(mode) or not stat.S_ISREG(mode):
            return False

        if not self.name_passes(path.name):
            return False

        if not self._size_passes(stat_result.st_size):
            return False

        return os.access(path, os.R_OK)

    def name_passes(self, name: str) -> bool:
        """Check basename and extension against the exclusion tables."""
        if name in self.skip_names:
            return False
        ext = os.path.splitext(name)[1].lower().lstrip(".")
        return ext not in self.skip_extensions

    def _size_passes(self, size: int) -> bool:
        if size < self.min_size:
            return False
        if self.max_size is not None and size > self.max_size:
            return False
        return True
