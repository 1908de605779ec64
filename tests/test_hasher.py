"""
Unit tests for HasherImpl, XXHashAlgorithmImpl and HashWorker.
Verifies streaming xxHash64 fingerprints and per-file failure isolation.
"""
import pytest
import xxhash
from redup.core.gate import ConcurrencyGate
from redup.core.hasher import HasherImpl, HashWorker, XXHashAlgorithmImpl
from redup.core.models import HashOutcome


class TestHasherImpl:
    """Test fingerprint computation with chunk-based reading."""

    def test_same_content_produces_same_fingerprint(self, test_files):
        hasher = HasherImpl(XXHashAlgorithmImpl())
        fp1 = hasher.compute_fingerprint(str(test_files["dup1_a"]))
        fp2 = hasher.compute_fingerprint(str(test_files["dup1_b"]))

        assert fp1 == fp2
        assert isinstance(fp1, int)
        assert 0 <= fp1 < 2 ** 64

    def test_different_content_produces_different_fingerprints(self, tmp_path):
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_bytes(b"hello")
        b.write_bytes(b"world")

        hasher = HasherImpl()
        assert hasher.compute_fingerprint(str(a)) != hasher.compute_fingerprint(str(b))

    def test_single_byte_difference_changes_fingerprint(self, tmp_path):
        content = bytearray(b"X" * 50000)
        a = tmp_path / "a.bin"
        a.write_bytes(bytes(content))
        content[30000] = ord("Y")
        b = tmp_path / "b.bin"
        b.write_bytes(bytes(content))

        hasher = HasherImpl()
        assert hasher.compute_fingerprint(str(a)) != hasher.compute_fingerprint(str(b))

    def test_matches_one_shot_xxh64(self, test_files):
        """Streaming in chunks gives the same value as hashing the whole file at once."""
        path = test_files["dup2_a"]
        expected = xxhash.xxh64(path.read_bytes()).intdigest()

        assert HasherImpl(chunk_size=8192).compute_fingerprint(str(path)) == expected

    @pytest.mark.parametrize("chunk_size", [1, 7, 4096, 8192, 1024 * 1024])
    def test_fingerprint_independent_of_chunk_size(self, test_files, chunk_size):
        path = str(test_files["dup2_a"])
        assert HasherImpl(chunk_size=chunk_size).compute_fingerprint(path) == HasherImpl().compute_fingerprint(path)

    def test_reads_in_fixed_size_chunks(self, test_files, monkeypatch):
        """20KB file with 8KB chunks: three data reads plus the EOF read."""
        reads = []
        real_open = open

        class RecordingFile:
            def __init__(self, f):
                self._f = f

            def read(self, n):
                reads.append(n)
                return self._f.read(n)

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self._f.close()

        monkeypatch.setattr("builtins.open", lambda path, mode="r", *a, **kw: RecordingFile(real_open(path, mode, *a, **kw)))
        HasherImpl(chunk_size=8192).compute_fingerprint(str(test_files["dup2_a"]))

        assert reads == [8192, 8192, 8192, 8192]

    def test_empty_file_has_stable_fingerprint(self, test_files):
        fp = HasherImpl().compute_fingerprint(str(test_files["empty"]))
        assert fp == xxhash.xxh64(b"").intdigest()

    def test_missing_file_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            HasherImpl().compute_fingerprint(str(tmp_path / "missing.txt"))

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            HasherImpl(chunk_size=0)


class FailingMidReadHasher:
    """Raises partway through, like a disk error after some chunks were read."""

    def compute_fingerprint(self, path):
        raise OSError(5, "Input/output error", path)


class TestHashWorker:
    """Test the per-file task boundary: permit release and failure isolation."""

    def test_returns_outcome_and_releases_permit(self, test_files):
        gate = ConcurrencyGate(2)
        gate.acquire()
        worker = HashWorker(HasherImpl(), gate)

        outcome = worker(str(test_files["unique1"]))

        assert isinstance(outcome, HashOutcome)
        assert outcome.path == str(test_files["unique1"])
        assert outcome.fingerprint == HasherImpl().compute_fingerprint(str(test_files["unique1"]))
        assert gate.in_use == 0

    def test_unreadable_file_yields_empty_outcome(self, tmp_path):
        """A vanished file must not raise; the permit is still returned."""
        gate = ConcurrencyGate(1)
        gate.acquire()
        events = []
        worker = HashWorker(HasherImpl(), gate, diagnostic_sink=lambda e, p, d: events.append((e, p)))

        missing = str(tmp_path / "vanished.txt")
        assert worker(missing) is None
        assert gate.in_use == 0
        assert events == [("hash_failed", missing)]

    def test_mid_read_failure_yields_empty_outcome(self, tmp_path):
        gate = ConcurrencyGate(1)
        gate.acquire()
        worker = HashWorker(FailingMidReadHasher(), gate)

        assert worker(str(tmp_path / "any.bin")) is None
        assert gate.in_use == 0

    def test_unexpected_error_still_releases_permit(self, tmp_path):
        class Broken:
            def compute_fingerprint(self, path):
                raise ValueError("bug")

        gate = ConcurrencyGate(1)
        gate.acquire()
        with pytest.raises(ValueError):
            HashWorker(Broken(), gate)(str(tmp_path / "x"))
        assert gate.in_use == 0

    def test_unexpected_error_is_reported_to_sink_before_raising(self, tmp_path):
        class Broken:
            def compute_fingerprint(self, path):
                raise ValueError("bug")

        gate = ConcurrencyGate(1)
        gate.acquire()
        events = []
        worker = HashWorker(Broken(), gate, diagnostic_sink=lambda e, p, d: events.append((e, p, d, gate.in_use)))
        target = str(tmp_path / "x")

        with pytest.raises(ValueError):
            worker(target)
        assert events == [("hash_failed", target, "bug", 0)]

    def test_permit_released_before_outcome_reported(self, test_files):
        """The sink sees the outcome only after the permit is back in the pool."""
        gate = ConcurrencyGate(1)
        gate.acquire()
        seen_in_use = []
        worker = HashWorker(HasherImpl(), gate, diagnostic_sink=lambda e, p, d: seen_in_use.append(gate.in_use))

        worker(str(test_files["unique1"]))
        assert seen_in_use == [0]

    def test_sink_errors_do_not_break_worker(self, test_files):
        def bad_sink(event, path, detail):
            raise RuntimeError("sink broke")

        gate = ConcurrencyGate(1)
        gate.acquire()
        outcome = HashWorker(HasherImpl(), gate, diagnostic_sink=bad_sink)(str(test_files["unique1"]))
        assert outcome is not None
