"""
keepone — duplicate file finder that keeps one copy and reclaims the rest.

Core features:
- Size → partial hash (first 4KB) → full SHA-256 pipeline, no byte read twice without need
- Newest copy of every group is kept; nothing is selected for deletion automatically
- Safe deletion to system trash (via send2trash), kept files are never removed
- Cooperative cancellation and monotonic progress for UI front ends
- CLI interface for headless/server usage
"""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("keepone")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Public API: only what users should import directly
from keepone.commands import ScanCommand
from keepone.core import (
    DuplicateScanner, ScanInProgressError, ScanParams, ScanState, ScanStats,
    DuplicateFile, DuplicateGroup, FileType, ReclaimResult, ReclaimError, ReclaimErrorKind,
    GroupSorter, GroupSortOrder)
from keepone.utils.convert_utils import ConvertUtils
from keepone.services import DuplicateService, FileService

__all__ = [
    "ScanCommand",
    "DuplicateScanner",
    "ScanInProgressError",
    "ScanParams",
    "ScanState",
    "ScanStats",
    "DuplicateFile",
    "DuplicateGroup",
    "FileType",
    "ReclaimResult",
    "ReclaimError",
    "ReclaimErrorKind",
    "GroupSorter",
    "GroupSortOrder",
    "ConvertUtils",
    "DuplicateService",
    "FileService",
    "__version__",
]
