"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for duplicate scanning and space reclamation.
"""

import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional, Union

from keepone.utils.convert_utils import ConvertUtils


# =============================
# Enums
# =============================

class ScanState(Enum):
    """
    Lifecycle of a single scan invocation.
    COMPLETED and CANCELLED are terminal.
    """
    IDLE = "idle"
    ENUMERATING = "enumerating"
    BUCKETING = "bucketing"
    PARTIAL_HASHING = "partial-hashing"
    FULL_HASHING = "full-hashing"
    ASSEMBLING = "assembling"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.CANCELLED)

    @property
    def is_running(self) -> bool:
        return not self.is_terminal and self != ScanState.IDLE


class FileType(str, Enum):
    IMAGE = "Images"
    VIDEO = "Videos"
    AUDIO = "Audio"
    DOCUMENT = "Documents"
    ARCHIVE = "Archives"
    OTHER = "Other"

    @classmethod
    def from_extension(cls, ext: str) -> "FileType":
        """Classify an extension (with or without leading dot, any case)."""
        ext = (ext or "").lower().lstrip(".")
        for file_type, extensions in _FILE_TYPE_EXTENSIONS.items():
            if ext in extensions:
                return file_type
        return cls.OTHER


_FILE_TYPE_EXTENSIONS = {
    FileType.IMAGE: {"jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "heic", "heif",
                     "webp", "raw", "cr2", "nef"},
    FileType.VIDEO: {"mp4", "mov", "avi", "mkv", "wmv", "flv", "webm", "m4v", "mpeg", "mpg"},
    FileType.AUDIO: {"mp3", "wav", "aac", "flac", "m4a", "wma", "ogg", "aiff", "alac"},
    FileType.DOCUMENT: {"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "rtf",
                        "pages", "numbers", "key"},
    FileType.ARCHIVE: {"zip", "rar", "7z", "tar", "gz", "dmg", "iso"},
}


class ReclaimErrorKind(Enum):
    MISSING = "missing"
    PERMISSION_DENIED = "permission-denied"
    TRASH_FAILED = "trash-failed"
    KEPT_MISSING = "kept-missing"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class ScanEntry:
    """A regular file accepted by the path filter during enumeration."""
    path: str
    size: int  # in bytes
    modified: Optional[float] = None


@dataclass(eq=False)
class DuplicateFile:
    """
    A confirmed duplicate inside a DuplicateGroup.
    `selected` marks a deletion candidate, `kept` protects the file from deletion.
    Equality is identity: two members may never be confused even if paths repeat.
    """
    path: str
    size: int
    modified: Optional[float] = None
    selected: bool = False
    kept: bool = False

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()

    @property
    def parent_folder(self) -> str:
        return os.path.basename(os.path.dirname(self.path))

    @property
    def is_reclaimable(self) -> bool:
        return self.selected and not self.kept

    def __repr__(self):
        flags = "".join(flag for flag, on in (("K", self.kept), ("S", self.selected)) if on)
        return f"<DuplicateFile path={self.path}, size={self.size}{', ' + flags if flags else ''}>"


@dataclass(eq=False)
class DuplicateGroup:
    """
    Files with identical size and identical full content hash.
    Identity is the hash; list order is a presentation concern.
    """
    hash: str
    files: List[DuplicateFile]

    @property
    def file_size(self) -> int:
        return self.files[0].size if self.files else 0

    @property
    def duplicate_count(self) -> int:
        return len(self.files)

    @property
    def total_size(self) -> int:
        return self.file_size * len(self.files)

    @property
    def wasted_size(self) -> int:
        """Bytes reclaimable if all but one copy were removed."""
        if len(self.files) < 2:
            return 0
        return (len(self.files) - 1) * self.file_size

    @property
    def file_type(self) -> FileType:
        if not self.files:
            return FileType.OTHER
        return FileType.from_extension(self.files[0].extension)

    @property
    def kept_file(self) -> Optional[DuplicateFile]:
        return next((f for f in self.files if f.kept), None)

    @property
    def selected_files(self) -> List[DuplicateFile]:
        return [f for f in self.files if f.is_reclaimable]

    def set_kept(self, file: DuplicateFile) -> None:
        """
        Move the kept flag to `file`.
        The previously kept file becomes selected for deletion; the new one is deselected.
        """
        if not any(f is file for f in self.files):
            raise ValueError(f"{file.path} is not a member of group {self.hash[:12]}")
        for member in self.files:
            if member.kept and member is not file:
                member.kept = False
                member.selected = True
        file.kept = True
        file.selected = False

    def __repr__(self):
        return f"<DuplicateGroup hash={self.hash[:12]}, size={self.file_size}, count={len(self.files)}>"


@dataclass(frozen=True)
class ScanIssue:
    """Something skipped during a scan. Never fatal."""
    path: str
    stage: str
    reason: str


@dataclass(frozen=True)
class ReclaimError:
    path: str
    kind: ReclaimErrorKind
    message: str = ""

    def __str__(self):
        return f"{self.path}: {self.kind.value}{' (' + self.message + ')' if self.message else ''}"


@dataclass
class ReclaimResult:
    deleted_count: int = 0
    freed_bytes: int = 0
    errors: List[ReclaimError] = field(default_factory=list)
    removed_paths: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ScanStats:
    """
    Statistics collected during one scan.
    Issue recording is thread-safe; hashing workers may report concurrently.
    """

    def __init__(self):
        self.state: ScanState = ScanState.IDLE
        self.total_time: float = 0.0
        self.files_enumerated: int = 0
        self.candidates: int = 0
        self.partial_hashed: int = 0
        self.full_hashed: int = 0
        self.groups_found: int = 0
        self.wasted_bytes: int = 0
        self.stage_times: Dict[str, float] = {}
        self.issues: List[ScanIssue] = []
        self._lock = threading.Lock()

    def record_issue(self, path: str, stage: str, reason: str) -> None:
        with self._lock:
            self.issues.append(ScanIssue(path=path, stage=stage, reason=reason))

    def add_stage_time(self, stage: str, duration: float) -> None:
        self.stage_times[stage] = self.stage_times.get(stage, 0.0) + duration

    def as_dict(self) -> Dict[str, Union[int, float, str]]:
        return {
            "state": self.state.value,
            "total_time": round(self.total_time, 3),
            "files_enumerated": self.files_enumerated,
            "candidates": self.candidates,
            "partial_hashed": self.partial_hashed,
            "full_hashed": self.full_hashed,
            "groups_found": self.groups_found,
            "wasted_bytes": self.wasted_bytes,
            "issues": len(self.issues),
        }

    def summary(self) -> str:
        lines = [
            "📊 Scan Statistics:",
            f"State: {self.state.value}",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            f"📁 Files enumerated: {self.files_enumerated}",
            f"📏 Same-size candidates: {self.candidates}",
            f"📄 Partial hashes: {self.partial_hashed}",
            f"🔍 Full hashes: {self.full_hashed}",
            f"🧩 Duplicate groups: {self.groups_found}",
            f"🗑  Wasted space: {ConvertUtils.bytes_to_human(self.wasted_bytes)}",
        ]
        for stage, duration in self.stage_times.items():
            lines.append(f"   {stage}: {duration:.3f}s")
        if self.issues:
            lines.append(f"⚠️ Skipped entries: {len(self.issues)}")
        return "\n".join(lines)


# ======================
#  Parameters
# ======================

@dataclass
class ScanParams:
    """Parameters for a duplicate scan with validation."""
    root_dir: str
    min_size_bytes: int = 1024
    max_size_bytes: Optional[int] = None
    excluded_dirs: List[str] = field(default_factory=list)
    partial_hash_size: int = 4096
    chunk_size: int = 64 * 1024
    workers: int = 1
    partial_algorithm: str = "sha256"

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.max_size_bytes is not None and self.max_size_bytes < self.min_size_bytes:
            raise ValueError("Maximum size cannot be less than minimum size")

        if self.partial_hash_size <= 0:
            raise ValueError("Partial hash size must be positive")

        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

        if self.workers < 1:
            raise ValueError("Workers must be at least 1")

        self.root_dir = os.path.expanduser(self.root_dir)
        self.excluded_dirs = [os.path.expanduser(d) for d in self.excluded_dirs]
        self.partial_algorithm = self.partial_algorithm.strip().lower()

    @staticmethod
    def from_human_readable(
            root_dir: str,
            min_size_str: str = "1K",
            max_size_str: Optional[str] = None,
            excluded_dirs: Optional[List[str]] = None,
            workers: int = 1,
            partial_algorithm: str = "sha256",
    ) -> 'ScanParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing.
        """
        min_size = ConvertUtils.human_to_bytes(min_size_str)
        max_size = ConvertUtils.human_to_bytes(max_size_str) if max_size_str else None

        return ScanParams(
            root_dir=root_dir,
            min_size_bytes=min_size,
            max_size_bytes=max_size,
            excluded_dirs=excluded_dirs or [],
            workers=workers,
            partial_algorithm=partial_algorithm,
        )
