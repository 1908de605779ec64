"""
Core duplicate detection engine — discoverer, gate, hasher, aggregator, and pipeline driver.

This package contains the concurrent foundation of redup:
- PathDiscovererImpl: recursive enumeration of regular files under the roots
- ConcurrencyGate: counting permit pool bounding simultaneous hash operations
- HasherImpl + XXHashAlgorithmImpl: streaming xxHash64 content fingerprints
- HashWorker: per-file task that never lets a file error escape
- Aggregator: single-owner fingerprint -> paths map
- PipelineDriver: bounded-queue, permit-gated orchestration of all of the above
- Models: ScanParams, ScanResult, ScanStats and error types

All components are pure Python with no UI dependencies — suitable for CLI and library usage.
"""

from .scanner import PathDiscovererImpl, DISCOVERY_DONE
from .gate import ConcurrencyGate
from .hasher import HasherImpl, HashWorker, XXHashAlgorithmImpl
from .grouper import Aggregator
from .pipeline import PipelineDriver, find_duplicates
from .models import (
    Event, Fingerprint, HashOutcome, OutputFormat, PipelineConfig, PipelineState,
    RedupError, RootUnavailableError, ScanParams, ScanResult, ScanStats)

__all__ = [
    "PathDiscovererImpl",
    "DISCOVERY_DONE",
    "ConcurrencyGate",
    "HasherImpl",
    "HashWorker",
    "XXHashAlgorithmImpl",
    "Aggregator",
    "PipelineDriver",
    "find_duplicates",
    "Event",
    "Fingerprint",
    "HashOutcome",
    "OutputFormat",
    "PipelineConfig",
    "PipelineState",
    "RedupError",
    "RootUnavailableError",
    "ScanParams",
    "ScanResult",
    "ScanStats",
]
