"""
Core duplicate-detection engine: enumerator, hasher, grouper, assembler and reclaimer.

This package contains the performance-critical foundation of keepone:
- FileScannerImpl + PathFilterImpl: recursive traversal with name/size/readability filters
- HasherImpl: SHA-256 (or xxHash64 for the cheap prefix pass) partial and full digests
- FileGrouperImpl: size → partial hash → full hash bucketing, optionally threaded
- GroupAssembler: keep policy and result ordering
- ReclamationExecutor: trash-first removal that never touches the kept file
- DuplicateScanner: the engine tying it together with cancellation and progress

All components are pure Python with no GUI dependencies.
"""

from .models import (
    ScanEntry, DuplicateFile, DuplicateGroup, FileType, ScanState, ScanIssue, ScanStats,
    ScanParams, ReclaimError, ReclaimErrorKind, ReclaimResult)
from .config import ScanConfig
from .progress import CancellationToken, ProgressReporter, ProgressThrottle
from .filter import PathFilterImpl
from .scanner import FileScannerImpl
from .hasher import HasherImpl, Sha256AlgorithmImpl, XXHashAlgorithmImpl, algorithm_by_name
from .grouper import FileGrouperImpl
from .assembler import GroupAssembler
from .reclaimer import ReclamationExecutor, default_eligibility
from .engine import DuplicateScanner, ScanInProgressError
from .sorter import GroupSorter, GroupSortOrder

__all__ = [
    "ScanEntry",
    "DuplicateFile",
    "DuplicateGroup",
    "FileType",
    "ScanState",
    "ScanIssue",
    "ScanStats",
    "ScanParams",
    "ReclaimError",
    "ReclaimErrorKind",
    "ReclaimResult",
    "ScanConfig",
    "CancellationToken",
    "ProgressReporter",
    "ProgressThrottle",
    "PathFilterImpl",
    "FileScannerImpl",
    "HasherImpl",
    "Sha256AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "algorithm_by_name",
    "FileGrouperImpl",
    "GroupAssembler",
    "ReclamationExecutor",
    "default_eligibility",
    "DuplicateScanner",
    "ScanInProgressError",
    "GroupSorter",
    "GroupSortOrder",
]
