"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements file hashing with pluggable hash algorithms.

HasherImpl provides two digests:
- partial hash: first N bytes of a file (cheap pre-filter)
- full hash: the whole file, streamed in fixed-size chunks (proof of identity)

compute_* methods raise RuntimeError on any read failure; partial_hash/full_hash
wrap them with a null-on-failure contract for callers that only need a yes/no.
"""

import hashlib
import logging
from typing import Optional

import xxhash

from keepone.core.config import ScanConfig
from keepone.core.interfaces import Hasher, HashAlgorithm, HashObject

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class Sha256AlgorithmImpl(HashAlgorithm):
    name = "sha256"
    cryptographic = True

    def new(self) -> HashObject:
        return hashlib.sha256()


class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxh64"
    cryptographic = False

    def new(self) -> HashObject:
        return xxhash.xxh64()


ALGORITHMS = {
    Sha256AlgorithmImpl.name: Sha256AlgorithmImpl,
    XXHashAlgorithmImpl.name: XXHashAlgorithmImpl,
}


def algorithm_by_name(name: str) -> HashAlgorithm:
    try:
        return ALGORITHMS[name.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown hash algorithm: '{name}'. Valid options: {', '.join(ALGORITHMS)}")


class HasherImpl(Hasher):
    """
    Stateless hasher: every call opens, reads and closes its own file handle,
    so instances are safe to share between worker threads.
    """

    def __init__(
        self,
        partial_algorithm: Optional[HashAlgorithm] = None,
        full_algorithm: Optional[HashAlgorithm] = None,
        partial_size: int = ScanConfig.PARTIAL_HASH_SIZE,
        chunk_size: int = ScanConfig.FULL_HASH_CHUNK_SIZE,
    ):
        self.partial_algorithm = partial_algorithm or Sha256AlgorithmImpl()
        self.full_algorithm = full_algorithm or Sha256AlgorithmImpl()
        if not getattr(self.full_algorithm, "cryptographic", False):
            raise ValueError(
                f"Full hash algorithm must be cryptographic, got '{getattr(self.full_algorithm, 'name', '?')}'"
            )
        if partial_size <= 0 or chunk_size <= 0:
            raise ValueError("Read sizes must be positive")
        self.partial_size = partial_size
        self.chunk_size = chunk_size

    def compute_partial_hash(self, path: str) -> str:
        """Digest of the first `partial_size` bytes. Raises RuntimeError on failure or empty read."""
        try:
            with open(path, 'rb') as f:
                data = f.read(self.partial_size)
        except OSError as e:
            raise RuntimeError(f"Error reading {path}: {e.strerror or e}") from e

        if not data:
            raise RuntimeError(f"Empty read from {path}")

        digest = self.partial_algorithm.new()
        digest.update(data)
        return digest.hexdigest()

    def compute_full_hash(self, path: str) -> str:
        """Digest of the whole file read in `chunk_size` pieces. Raises RuntimeError on failure."""
        digest = self.full_algorithm.new()
        total = 0
        try:
            with open(path, 'rb') as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    digest.update(chunk)
                    total += len(chunk)
        except OSError as e:
            raise RuntimeError(f"Error reading full content of {path}: {e.strerror or e}") from e

        if total == 0:
            raise RuntimeError(f"Empty read from {path}")
        return digest.hexdigest()

    def partial_hash(self, path: str) -> Optional[str]:
        try:
            return self.compute_partial_hash(path)
        except RuntimeError as e:
            logger.debug(f"Partial hash skipped: {e}")
            return None

    def full_hash(self, path: str) -> Optional[str]:
        try:
            return self.compute_full_hash(path)
        except RuntimeError as e:
            logger.debug(f"Full hash skipped: {e}")
            return None
