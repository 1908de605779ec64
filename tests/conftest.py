"""
Shared fixtures for scan pipeline tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 2 identical files (duplicates)
    - 2 more identical files with different content (second duplicate set)
    - 2 unique files (different content)
    - 1 empty file (hashed like any other file)
    - 1 file in a subdirectory duplicating the first set
    """
    files = {}

    # Duplicate set #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate set #2 (20KB of 'B', spans several 8KB chunks)
    content_b = b"B" * 20 * 1024
    files["dup2_a"] = temp_dir / "dup2_a.bin"
    files["dup2_b"] = temp_dir / "dup2_b.bin"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Subdirectory with a duplicate of set #1
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


def membership(result) -> List[frozenset]:
    """Group memberships as order-free sets, for comparisons across runs."""
    return sorted((frozenset(paths) for paths in result.groups.values()), key=sorted)


class StubDiscoverer:
    """Discoverer that feeds a fixed list of paths, for driving the pipeline without a walk."""

    def __init__(self, paths: List[str], fail_with: Optional[BaseException] = None):
        self.paths = list(paths)
        self.fail_with = fail_with

    def validate_roots(self):
        return [Path(p) for p in self.paths]

    def iter_candidates(self, stopped_flag=None):
        for path in self.paths:
            if stopped_flag and stopped_flag():
                return
            yield path

    def run(self, path_queue, stopped_flag=None):
        from redup.core.scanner import DISCOVERY_DONE
        try:
            for path in self.iter_candidates(stopped_flag):
                path_queue.put(path)
            if self.fail_with is not None:
                raise self.fail_with
        finally:
            path_queue.put(DISCOVERY_DONE)
