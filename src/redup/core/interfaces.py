"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the scan pipeline.
These protocols enforce structural typing using Python's `typing.Protocol` so that
discovery, hashing and aggregation can be swapped independently in tests.

Key Components:
---------------
- HashAlgorithm: Streaming fingerprint accumulator (xxHash64 by default).
- Hasher: Computes the fingerprint of one file by streaming its bytes.
- PathDiscoverer: Enumerates regular files under the configured roots.
"""

import queue
from typing import Any, Callable, Iterator, List, Optional, Protocol
from pathlib import Path

from redup.core.models import Fingerprint


class HashAlgorithm(Protocol):
    """
    Interface for streaming, non-cryptographic 64-bit hash algorithms.

    The accumulator returned by `new()` must support `update(bytes)`;
    `finalize()` turns it into the integer fingerprint.
    """

    def new(self) -> Any:
        """Returns a fresh accumulator."""
        ...

    def finalize(self, state: Any) -> Fingerprint:
        """Returns the 64-bit fingerprint of everything fed into `state`."""
        ...


class Hasher(Protocol):
    """Interface for fingerprinting a whole file."""
    def compute_fingerprint(self, path: str) -> Fingerprint: ...


class PathDiscoverer(Protocol):
    """
    Interface for recursive file discovery.

    Methods:
        validate_roots: Fails fast on missing or unreadable roots.
        iter_candidates: Lazily yields absolute file paths.
        run: Pushes candidates into a bounded queue, then a completion sentinel.
    """

    def validate_roots(self) -> List[Path]:
        ...

    def iter_candidates(self, stopped_flag: Optional[Callable[[], bool]] = None) -> Iterator[str]:
        ...

    def run(self, path_queue: "queue.Queue", stopped_flag: Optional[Callable[[], bool]] = None) -> None:
        ...
