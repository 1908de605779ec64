"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Groups hash outcomes by fingerprint into the finished HashGroup map.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from redup.core.models import Fingerprint, HashOutcome, ScanResult, ScanStats

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Single-owner map from fingerprint to paths, in arrival order.

    Only the draining driver calls `add`, one outcome at a time, so the map
    needs no lock. Worker tasks never see it.
    """

    def __init__(self):
        self._groups: Dict[Fingerprint, List[str]] = defaultdict(list)
        self._files_hashed = 0
        self._files_failed = 0
        self._finished: Optional[ScanResult] = None

    def add(self, outcome: Optional[HashOutcome]) -> None:
        """Append a path to its fingerprint's group; an empty outcome counts as a failure."""
        if self._finished is not None:
            raise RuntimeError("Aggregator is already finished")
        if outcome is None:
            self.add_failure()
            return
        self._groups[outcome.fingerprint].append(outcome.path)
        self._files_hashed += 1

    def add_failure(self) -> None:
        if self._finished is not None:
            raise RuntimeError("Aggregator is already finished")
        self._files_failed += 1

    @property
    def files_hashed(self) -> int:
        return self._files_hashed

    @property
    def files_failed(self) -> int:
        return self._files_failed

    def finish(self, total_time: float = 0.0, aborted: bool = False) -> ScanResult:
        """
        Freeze the map and compute summary counters.
        Returns the same result on repeated calls.
        """
        if self._finished is not None:
            return self._finished

        duplicate_sizes = [len(paths) for paths in self._groups.values() if len(paths) >= 2]
        stats = ScanStats(
            files_hashed=self._files_hashed,
            files_failed=self._files_failed,
            unique_fingerprints=len(self._groups),
            duplicate_groups=len(duplicate_sizes),
            duplicate_files=sum(duplicate_sizes),
            total_time=total_time,
            aborted=aborted,
        )
        self._finished = ScanResult.freeze(self._groups, stats)
        logger.debug(
            f"Aggregated {stats.files_hashed} files into {stats.unique_fingerprints} groups "
            f"({stats.duplicate_groups} with duplicates)"
        )
        return self._finished
