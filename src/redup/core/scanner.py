"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements recursive path discovery for the scan pipeline.
Features:
- Uses pathlib.Path for robust, cross-platform path handling
- Accepts both file and directory roots
- Fails fast on missing or unreadable roots
- Skips unreadable entries without aborting the walk
- Feeds a bounded queue so discovery never runs far ahead of hashing
"""

import errno
import os
import queue
from typing import Callable, Iterator, List, Optional, Set
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

# Local imports
from redup.core.models import DiagnosticSink, Event, RootUnavailableError, notify_sink
from redup.core.interfaces import PathDiscoverer

# Put on the queue after the last candidate; the driver stops pulling when it sees it.
DISCOVERY_DONE = object()


class PathDiscovererImpl(PathDiscoverer):
    """
    Enumerates every regular file reachable from the configured roots.

    Attributes:
        roots: Caller-supplied root paths (files or directories)
        diagnostic_sink: Optional callable receiving (event, path, detail)
    """

    def __init__(self, roots: List[str], diagnostic_sink: Optional[DiagnosticSink] = None):
        self.roots = list(roots)
        self.diagnostic_sink = diagnostic_sink
        self._resolved: Optional[List[Path]] = None

    def validate_roots(self) -> List[Path]:
        """
        Resolve every root and make sure it can be opened.
        Raises:
            RootUnavailableError: for the first root that is missing or unreadable
        """
        resolved = []
        for root in self.roots:
            try:
                path = Path(root).expanduser().resolve(strict=True)
                if path.is_dir():
                    with os.scandir(path):
                        pass
                elif path.is_file():
                    with open(path, "rb"):
                        pass
                else:
                    # FIFOs, sockets and devices; opening a FIFO would block
                    raise OSError(errno.EINVAL, "Not a regular file or directory", str(path))
            except OSError as e:
                logger.error(f"Root unavailable: {root}: {e}")
                raise RootUnavailableError(root, e) from e
            resolved.append(path)

        self._resolved = resolved
        return resolved

    def iter_candidates(self, stopped_flag: Optional[Callable[[], bool]] = None) -> Iterator[str]:
        """
        Lazily yield absolute, canonical paths of regular files under every root.
        Each path is yielded at most once, even when roots overlap.
        """
        roots = self._resolved if self._resolved is not None else self.validate_roots()
        seen: Set[str] = set()

        for root in roots:
            if stopped_flag and stopped_flag():
                logger.debug("Discovery interrupted by user")
                return

            if not root.is_dir():
                candidate = self._process_file(root)
                if candidate and candidate not in seen:
                    seen.add(candidate)
                    yield candidate
                continue

            # os.walk does not follow directory symlinks, so it cannot loop
            for dirpath, dirs, files in os.walk(str(root), onerror=self._on_walk_error):
                if stopped_flag and stopped_flag():
                    logger.debug("Discovery interrupted by user")
                    return

                notify_sink(self.diagnostic_sink, Event.SEARCHING, dirpath)

                for filename in files:
                    candidate = self._process_file(Path(dirpath) / filename)
                    if candidate and candidate not in seen:
                        seen.add(candidate)
                        yield candidate

    def run(self, path_queue: "queue.Queue", stopped_flag: Optional[Callable[[], bool]] = None) -> None:
        """
        Push every candidate into `path_queue`, blocking while it is full.
        The completion sentinel is always sent, even if discovery fails.
        """
        discovered = 0
        try:
            for candidate in self.iter_candidates(stopped_flag=stopped_flag):
                path_queue.put(candidate)
                discovered += 1
        finally:
            path_queue.put(DISCOVERY_DONE)
            logger.debug(f"Discovery finished. Found {discovered} files.")

    def _on_walk_error(self, error: OSError) -> None:
        """Called by os.walk for a directory it cannot list; the walk continues."""
        path = error.filename or ""
        logger.warning(f"Skipping unreadable directory {path}: {error.strerror or error}")
        notify_sink(self.diagnostic_sink, Event.SKIPPED, str(path), str(error))

    def _process_file(self, path: Path) -> Optional[str]:
        """
        Canonicalize a single entry and return it if it is a regular file.
        Args:
            path: Path object pointing to the entry
        Returns:
            Optional[str]: Absolute canonical path, or None if skipped
        """
        try:
            resolved = path.resolve(strict=True)
            if not resolved.is_file():
                logger.debug(f"Skipping non-regular file: {path}")
                return None
        except (OSError, RuntimeError) as e:
            # vanished mid-walk, permission denied, or a symlink cycle
            logger.warning(f"Skipping unreadable entry {path}: {e}")
            notify_sink(self.diagnostic_sink, Event.SKIPPED, str(path), str(e))
            return None

        candidate = str(resolved)
        notify_sink(self.diagnostic_sink, Event.FOUND, candidate)
        return candidate
