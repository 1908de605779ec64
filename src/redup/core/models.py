"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models, configuration and error types for the scan-hash-aggregate pipeline.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


# A fingerprint is the 64-bit xxHash of a file's full content.
Fingerprint = int

# (event, path, detail): receives discovery/skip/hash events
DiagnosticSink = Callable[[str, str, Optional[str]], None]


# =============================
# Errors
# =============================

class RedupError(Exception):
    """Base class for all fatal pipeline errors."""


class RootUnavailableError(RedupError):
    """
    A root path is missing or cannot be opened.
    Raised before any hashing starts; no partial result is returned.
    """

    def __init__(self, root: str, cause: BaseException):
        self.root = root
        self.cause = cause
        super().__init__(f"Root unavailable: {root} ({cause})")


# =============================
# Enums
# =============================

class PipelineState(str, Enum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    DRAINING = "draining"
    AGGREGATED = "aggregated"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.AGGREGATED, PipelineState.FAILED)


class Event(str, Enum):
    """Event names delivered to a diagnostic sink."""
    SEARCHING = "searching"
    FOUND = "found"
    SKIPPED = "skipped"
    HASHED = "hashed"
    HASH_FAILED = "hash_failed"


class OutputFormat(Enum):
    TEXT = "txt"
    CSV = "csv"
    SQL = "sql"

    @property
    def display_name(self) -> str:
        """Human-readable name for help text."""
        mapping = {
            OutputFormat.TEXT: "Plain text",
            OutputFormat.CSV: "CSV records",
            OutputFormat.SQL: "SQLite database",
        }
        return mapping.get(self, self.value)


# ======================
#  Configuration
# ======================

class PipelineConfig:
    CONCURRENCY_LIMIT = 100     # simultaneous hash operations (permits)
    QUEUE_CAPACITY = 1000       # discovered paths buffered ahead of hashing
    CHUNK_SIZE = 8 * 1024       # streaming read size
    PERMIT_POLL_INTERVAL = 0.1  # seconds between cancellation checks while blocked


@dataclass
class ScanParams:
    """Parameters for one pipeline run with built-in validation."""
    roots: List[str]
    concurrency: int = PipelineConfig.CONCURRENCY_LIMIT
    queue_capacity: int = PipelineConfig.QUEUE_CAPACITY
    chunk_size: int = PipelineConfig.CHUNK_SIZE

    def __post_init__(self):
        if not self.roots:
            raise ValueError("At least one root path is required")
        if self.concurrency < 1:
            raise ValueError(f"Concurrency limit must be positive, got {self.concurrency}")
        if self.queue_capacity < 1:
            raise ValueError(f"Queue capacity must be positive, got {self.queue_capacity}")
        if self.chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got {self.chunk_size}")


# ======================
#  Core Data Models
# ======================

class HashOutcome(NamedTuple):
    """Successful result of hashing one file."""
    fingerprint: Fingerprint
    path: str


@dataclass
class ScanStats:
    """
    Summary counters collected while draining the pipeline.
    """
    files_hashed: int = 0
    files_failed: int = 0
    unique_fingerprints: int = 0
    duplicate_groups: int = 0
    duplicate_files: int = 0
    total_time: float = 0.0
    aborted: bool = False

    def print_summary(self) -> str:
        lines = [
            "Scan Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"Files hashed: {self.files_hashed}",
            f"Files failed: {self.files_failed}",
            f"Unique fingerprints: {self.unique_fingerprints}",
            f"Duplicate groups: {self.duplicate_groups} ({self.duplicate_files} files)",
        ]
        if self.aborted:
            lines.append("Scan was interrupted: results are partial")
        return "\n".join(lines)


@dataclass(frozen=True)
class ScanResult:
    """
    The finished HashGroup map (fingerprint -> paths in arrival order) plus counters.
    Read-only once produced.
    """
    groups: Mapping[Fingerprint, Tuple[str, ...]]
    stats: ScanStats = field(default_factory=ScanStats)

    @classmethod
    def freeze(cls, groups: Dict[Fingerprint, List[str]], stats: ScanStats) -> "ScanResult":
        frozen = {fp: tuple(paths) for fp, paths in groups.items()}
        return cls(groups=MappingProxyType(frozen), stats=stats)

    @property
    def files_hashed(self) -> int:
        return self.stats.files_hashed

    @property
    def unique_fingerprints(self) -> int:
        return len(self.groups)

    @property
    def duplicate_group_count(self) -> int:
        return sum(1 for paths in self.groups.values() if len(paths) >= 2)

    def duplicate_sets(self) -> Dict[Fingerprint, Tuple[str, ...]]:
        """Only the groups with two or more members."""
        return {fp: paths for fp, paths in self.groups.items() if len(paths) >= 2}

    def __repr__(self):
        return f"<ScanResult files={self.files_hashed}, groups={len(self.groups)}, duplicates={self.duplicate_group_count}>"


def notify_sink(sink: Optional[DiagnosticSink], event: Event, path: str, detail: Optional[str] = None) -> None:
    """Delivers one event to an optional sink. Sink failures never reach the pipeline."""
    if sink is None:
        return
    try:
        sink(event.value, path, detail)
    except Exception as e:
        logger.warning(f"Error in diagnostic sink for {event.value} {path}: {e}")
