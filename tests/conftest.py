"""
Shared fixtures for duplicate scanner tests.
Creates isolated temporary directory trees with controlled file contents and mtimes.
"""
import os
import pytest
from pathlib import Path
from typing import Dict, Optional


def write_file(path: Path, content: bytes, mtime: Optional[float] = None) -> Path:
    """Create parent dirs, write bytes and optionally pin the modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file():
    return write_file


@pytest.fixture
def test_files(tmp_path) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 3 identical 2KB files of 'A' (one in a subdirectory), distinct mtimes
    - 2 identical 4KB files of 'B'
    - 2 unique files of equal size (same size, different content)
    - 1 small duplicate pair below the 1KB default threshold
    - junk that must be ignored: .tmp file, hidden file, .DS_Store, .git directory
    """
    files = {}

    content_a = b"A" * 2048
    files["a1"] = write_file(tmp_path / "a1.txt", content_a, mtime=1_000_000)
    files["a2"] = write_file(tmp_path / "a2.txt", content_a, mtime=3_000_000)
    files["a3"] = write_file(tmp_path / "sub" / "a3.txt", content_a, mtime=2_000_000)

    content_b = b"B" * 4096
    files["b1"] = write_file(tmp_path / "b1.bin", content_b, mtime=1_000_000)
    files["b2"] = write_file(tmp_path / "b2.bin", content_b, mtime=1_500_000)

    files["u1"] = write_file(tmp_path / "u1.dat", b"C" * 3000)
    files["u2"] = write_file(tmp_path / "u2.dat", b"D" * 3000)

    files["small1"] = write_file(tmp_path / "small1.txt", b"S" * 512)
    files["small2"] = write_file(tmp_path / "small2.txt", b"S" * 512)

    files["tmp"] = write_file(tmp_path / "junk.tmp", content_a)
    files["hidden"] = write_file(tmp_path / ".hidden_copy.txt", content_a)
    files["ds_store"] = write_file(tmp_path / ".DS_Store", content_a)
    files["git"] = write_file(tmp_path / ".git" / "objects" / "copy.txt", content_a)

    return files
