"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements streaming file fingerprinting and the per-file hash task.

The fingerprint is xxHash64 over the whole file, fed in fixed-size chunks so
memory use does not depend on file size. It is an equality proxy, not a
cryptographic guarantee: different contents may collide with small probability.
"""

import logging
from typing import Optional

import xxhash

from redup.core.gate import ConcurrencyGate
from redup.core.interfaces import HashAlgorithm, Hasher
from redup.core.models import (
    DiagnosticSink, Event, Fingerprint, HashOutcome, PipelineConfig, notify_sink
)

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other streaming hash algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    def new(self) -> xxhash.xxh64:
        return xxhash.xxh64()

    def finalize(self, state: xxhash.xxh64) -> Fingerprint:
        return state.intdigest()


class HasherImpl(Hasher):
    """
    Computes a fingerprint of a file by streaming it through a HashAlgorithm.
    """

    def __init__(self, algorithm: Optional[HashAlgorithm] = None, chunk_size: int = PipelineConfig.CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.algorithm = algorithm or XXHashAlgorithmImpl()
        self.chunk_size = chunk_size

    def compute_fingerprint(self, path: str) -> Fingerprint:
        """
        Reads the file chunk by chunk and returns its 64-bit fingerprint.
        Raises:
            OSError: If the file cannot be opened or a read fails partway
        """
        state = self.algorithm.new()
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                state.update(chunk)
        return self.algorithm.finalize(state)


class HashWorker:
    """
    Per-file hash task run on the worker pool.

    The caller acquires a permit from `gate` before dispatching; the task
    releases it before reporting its outcome. Per-file failures are turned
    into an empty outcome and never propagate to the driver or sibling tasks.
    Any other error is reported to the sink as a failure and then re-raised.
    """

    def __init__(self, hasher: Hasher, gate: ConcurrencyGate, diagnostic_sink: Optional[DiagnosticSink] = None):
        self.hasher = hasher
        self.gate = gate
        self.diagnostic_sink = diagnostic_sink

    def __call__(self, path: str) -> Optional[HashOutcome]:
        unexpected: Optional[Exception] = None
        try:
            fingerprint = self.hasher.compute_fingerprint(path)
        except OSError as e:
            logger.warning(f"Failed to hash {path}: {e}")
            outcome = None
            failure = str(e)
        except Exception as e:
            logger.error(f"Unexpected error hashing {path}: {e}")
            outcome = None
            failure = str(e)
            unexpected = e
        else:
            outcome = HashOutcome(fingerprint=fingerprint, path=path)
            failure = None
        finally:
            self.gate.release()

        if outcome is None:
            notify_sink(self.diagnostic_sink, Event.HASH_FAILED, path, failure)
            if unexpected is not None:
                raise unexpected
        else:
            logger.debug(f"Hashed {path}: {outcome.fingerprint:016x}")
            notify_sink(self.diagnostic_sink, Event.HASHED, path, f"{outcome.fingerprint:016x}")
        return outcome
