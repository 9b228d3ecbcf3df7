"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate scanner.
These protocols enforce structural typing using Python's `typing.Protocol` so that
collaborators can be injected into the engine and replaced in tests.

Key Components:
---------------
- HashAlgorithm: Factory for incremental hash objects (SHA-256, xxHash64).
- Hasher: Partial (prefix) and full (streamed) file digests with a null-on-failure contract.
- PathFilter: Pure predicate deciding whether an entry is a candidate.
- TreeEnumerator: Walks a directory tree and yields accepted entries.
- FileGrouper: Buckets entries by size, partial hash and full hash.
- Trash: Recoverable (or permanent) removal of a single file.
"""

import os
from pathlib import Path
from typing import Protocol, List, Dict, Optional, Callable, Iterator, Any

from keepone.core.models import ScanEntry, ScanStats
from keepone.core.progress import CancellationToken


class HashObject(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for incremental hash algorithms.

    `cryptographic` tells whether collisions can be treated as practically impossible;
    only such algorithms may prove full-content identity.
    """
    name: str
    cryptographic: bool

    def new(self) -> HashObject:
        """Returns a fresh incremental hash object."""
        ...


class Hasher(Protocol):
    """Interface for hashing a file prefix and a whole file."""
    def partial_hash(self, path: str) -> Optional[str]: ...
    def full_hash(self, path: str) -> Optional[str]: ...
    def compute_partial_hash(self, path: str) -> str: ...
    def compute_full_hash(self, path: str) -> str: ...


class PathFilter(Protocol):
    """Interface for the candidate predicate. Must be side-effect free."""
    def should_consider(self, path: Path, stat_result: os.stat_result) -> bool: ...


class TreeEnumerator(Protocol):
    """
    Interface for walking a directory tree.

    Methods:
        enumerate: Yields accepted entries until the tree is exhausted or the token is cancelled.
    """
    def enumerate(
        self,
        root: str,
        token: Optional[CancellationToken] = None,
        on_progress: Optional[Callable[[int], None]] = None,
        stats: Optional[ScanStats] = None,
    ) -> Iterator[ScanEntry]:
        ...


class FileGrouper(Protocol):
    """
    Interface for grouping entries by size or content digests.
    Every method drops buckets with fewer than two members.
    """
    def group_by_size(self, entries: List[ScanEntry]) -> Dict[int, List[ScanEntry]]: ...

    def group_by_partial_hash(
        self,
        entries: List[ScanEntry],
        token: Optional[CancellationToken] = None,
        stats: Optional[ScanStats] = None,
        on_file_hashed: Optional[Callable[[bool], None]] = None,
    ) -> Dict[str, List[ScanEntry]]: ...

    def group_by_full_hash(
        self,
        entries: List[ScanEntry],
        token: Optional[CancellationToken] = None,
        stats: Optional[ScanStats] = None,
        on_file_hashed: Optional[Callable[[bool], None]] = None,
    ) -> Dict[str, List[ScanEntry]]: ...


class Trash(Protocol):
    """Interface for removing one file. Raises FileNotFoundError or RuntimeError."""
    def move_to_trash(self, file_path: str) -> Any: ...
    def delete_permanently(self, file_path: str) -> Any: ...
    def exists(self, file_path: str) -> bool: ...
