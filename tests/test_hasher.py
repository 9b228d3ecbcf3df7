"""
Tests for partial/full hashing and the algorithm registry.
"""
import hashlib
import pytest
import xxhash

from keepone.core.hasher import HasherImpl, Sha256AlgorithmImpl, XXHashAlgorithmImpl, algorithm_by_name


class TestDigests:

    def test_full_hash_is_sha256_hex(self, tmp_path):
        content = b"hello world" * 10_000
        f = tmp_path / "a.bin"
        f.write_bytes(content)

        digest = HasherImpl().compute_full_hash(str(f))

        assert digest == hashlib.sha256(content).hexdigest()
        assert len(digest) == 64

    def test_full_hash_independent_of_chunk_size(self, tmp_path):
        content = bytes(range(256)) * 1000
        f = tmp_path / "a.bin"
        f.write_bytes(content)
        assert HasherImpl(chunk_size=7).compute_full_hash(str(f)) == HasherImpl().compute_full_hash(str(f))

    def test_partial_hash_reads_only_prefix(self, tmp_path):
        """Files sharing the first 4KB share a partial hash even if they differ later."""
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"P" * 4096 + b"tail-a")
        b.write_bytes(b"P" * 4096 + b"tail-b")

        hasher = HasherImpl()
        assert hasher.compute_partial_hash(str(a)) == hasher.compute_partial_hash(str(b))
        assert hasher.compute_full_hash(str(a)) != hasher.compute_full_hash(str(b))
        assert hasher.compute_partial_hash(str(a)) == hashlib.sha256(b"P" * 4096).hexdigest()

    def test_partial_hash_of_short_file_covers_whole_file(self, tmp_path):
        f = tmp_path / "short.bin"
        f.write_bytes(b"abc")
        assert HasherImpl().compute_partial_hash(str(f)) == hashlib.sha256(b"abc").hexdigest()

    def test_xxh64_partial_algorithm(self, tmp_path):
        f = tmp_path / "a.bin"
        f.write_bytes(b"Z" * 8192)
        hasher = HasherImpl(partial_algorithm=XXHashAlgorithmImpl())
        assert hasher.compute_partial_hash(str(f)) == xxhash.xxh64(b"Z" * 4096).hexdigest()
        assert hasher.compute_full_hash(str(f)) == hashlib.sha256(b"Z" * 8192).hexdigest()


class TestFailures:

    def test_missing_file_raises_runtime_error(self, tmp_path):
        with pytest.raises(RuntimeError, match="Error reading"):
            HasherImpl().compute_full_hash(str(tmp_path / "gone.bin"))

    def test_empty_file_is_a_failure(self, tmp_path):
        f = tmp_path / "empty.bin"
        f.write_bytes(b"")
        with pytest.raises(RuntimeError, match="Empty read"):
            HasherImpl().compute_partial_hash(str(f))
        with pytest.raises(RuntimeError, match="Empty read"):
            HasherImpl().compute_full_hash(str(f))

    def test_null_on_failure_wrappers(self, tmp_path):
        hasher = HasherImpl()
        assert hasher.partial_hash(str(tmp_path / "gone.bin")) is None
        assert hasher.full_hash(str(tmp_path / "gone.bin")) is None

    def test_directory_cannot_be_hashed(self, tmp_path):
        assert HasherImpl().full_hash(str(tmp_path)) is None


class TestConfiguration:

    def test_full_algorithm_must_be_cryptographic(self):
        """CRITICAL: Byte-identity is only claimed on a cryptographic digest."""
        with pytest.raises(ValueError, match="cryptographic"):
            HasherImpl(full_algorithm=XXHashAlgorithmImpl())

    def test_read_sizes_must_be_positive(self):
        with pytest.raises(ValueError):
            HasherImpl(partial_size=0)
        with pytest.raises(ValueError):
            HasherImpl(chunk_size=-1)

    def test_algorithm_by_name(self):
        assert isinstance(algorithm_by_name("sha256"), Sha256AlgorithmImpl)
        assert isinstance(algorithm_by_name(" XXH64 "), XXHashAlgorithmImpl)
        with pytest.raises(ValueError, match="Unknown hash algorithm"):
            algorithm_by_name("md5")
