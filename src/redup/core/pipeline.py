"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pipeline.py
Concurrent scan-hash-aggregate pipeline for redup's duplicate detection engine.

STAGES
------
Discovery   : PathDiscovererImpl walks the roots on its own thread and fills a
              bounded queue (blocks when full, which throttles the walk)
Dispatch    : the driver pulls paths, acquires a ConcurrencyGate permit and
              submits a HashWorker to the thread pool without waiting for it
Draining    : after discovery signals completion and its thread is joined,
              every dispatched future is collected in completion order
Aggregation : the driver alone feeds outcomes into the Aggregator

STATE MACHINE
-------------
IDLE -> DISCOVERING -> DRAINING -> AGGREGATED
IDLE/DISCOVERING -> FAILED on a fatal discovery or dispatch error (no partial result)

CANCELLATION
------------
When stopped_flag returns True the driver stops acquiring permits and
dispatching, lets in-flight tasks finish, drains them, and returns a result
marked as aborted.
"""

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

from redup.core.gate import ConcurrencyGate
from redup.core.grouper import Aggregator
from redup.core.hasher import HashWorker, HasherImpl, XXHashAlgorithmImpl
from redup.core.interfaces import Hasher, PathDiscoverer
from redup.core.models import (
    DiagnosticSink, HashOutcome, PipelineConfig, PipelineState, ScanParams, ScanResult
)
from redup.core.scanner import DISCOVERY_DONE, PathDiscovererImpl

logger = logging.getLogger(__name__)


class PipelineDriver:
    """
    Orchestrates one pipeline run. A driver is single-use.

    Usage:
        params = ScanParams(roots=["/data"], concurrency=100)
        result = PipelineDriver(params).run()
        for fingerprint, paths in result.duplicate_sets().items():
            ...
    """

    def __init__(
        self,
        params: ScanParams,
        diagnostic_sink: Optional[DiagnosticSink] = None,
        discoverer: Optional[PathDiscoverer] = None,
        hasher: Optional[Hasher] = None,
        gate: Optional[ConcurrencyGate] = None
    ):
        self.params = params
        self.diagnostic_sink = diagnostic_sink
        self.discoverer = discoverer or PathDiscovererImpl(params.roots, diagnostic_sink=diagnostic_sink)
        self.hasher = hasher or HasherImpl(XXHashAlgorithmImpl(), chunk_size=params.chunk_size)
        self.gate = gate or ConcurrencyGate(params.concurrency)
        self.state = PipelineState.IDLE
        self._aggregator = Aggregator()

    def run(self, stopped_flag: Optional[Callable[[], bool]] = None) -> ScanResult:
        """
        Run discovery, hashing and aggregation to completion.

        Returns:
            ScanResult with the frozen fingerprint map and summary counters

        Raises:
            RootUnavailableError: If a root is missing or unreadable (nothing is hashed)
            RuntimeError: If the driver has already been run
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already ran (state: {self.state.value})")

        start_time = time.time()
        logger.debug(f"Starting pipeline: roots={self.params.roots}, concurrency={self.params.concurrency}, "
                     f"queue_capacity={self.params.queue_capacity}, chunk_size={self.params.chunk_size}")

        try:
            self.discoverer.validate_roots()
        except Exception:
            self.state = PipelineState.FAILED
            raise

        path_queue: "queue.Queue" = queue.Queue(maxsize=self.params.queue_capacity)
        discovery_errors: List[BaseException] = []
        abandoned = threading.Event()

        def discovery_stopped() -> bool:
            return abandoned.is_set() or bool(stopped_flag and stopped_flag())

        def discover() -> None:
            try:
                self.discoverer.run(path_queue, stopped_flag=discovery_stopped)
            except BaseException as e:
                discovery_errors.append(e)

        discovery_thread = threading.Thread(target=discover, name="redup-discovery", daemon=True)
        worker = HashWorker(self.hasher, self.gate, diagnostic_sink=self.diagnostic_sink)
        pending: List[Future] = []
        aborted = False

        with ThreadPoolExecutor(max_workers=self.params.concurrency, thread_name_prefix="redup-hash") as executor:
            self.state = PipelineState.DISCOVERING
            discovery_thread.start()

            try:
                while True:
                    item = path_queue.get()
                    if item is DISCOVERY_DONE:
                        break
                    if aborted:
                        continue  # keep emptying the queue so discovery can finish
                    if stopped_flag and stopped_flag():
                        logger.debug("Dispatch interrupted by user")
                        aborted = True
                        continue
                    if not self.gate.acquire(stopped_flag=stopped_flag):
                        logger.debug("Dispatch interrupted by user while waiting for a permit")
                        aborted = True
                        continue
                    try:
                        pending.append(executor.submit(worker, item))
                    except BaseException:
                        self.gate.release()
                        raise
            except BaseException:
                self.state = PipelineState.FAILED
                abandoned.set()
                self._abandon_discovery(path_queue, discovery_thread)
                raise

            # Discovery may have seen the stop first and ended the walk early
            if stopped_flag and stopped_flag():
                aborted = True

            discovery_thread.join()
            self.state = PipelineState.DRAINING
            logger.debug(f"Discovery done; draining {len(pending)} hash tasks")

            for future in as_completed(pending):
                self._collect(future)

        if discovery_errors:
            self.state = PipelineState.FAILED
            logger.error(f"Discovery failed: {discovery_errors[0]}")
            raise discovery_errors[0]

        result = self._aggregator.finish(total_time=time.time() - start_time, aborted=aborted)
        self.state = PipelineState.AGGREGATED
        return result

    @staticmethod
    def _abandon_discovery(path_queue: "queue.Queue", discovery_thread: threading.Thread) -> None:
        """Empty the queue until discovery sends its sentinel so its thread is never left blocked on put."""
        while discovery_thread.is_alive():
            try:
                if path_queue.get(timeout=PipelineConfig.PERMIT_POLL_INTERVAL) is DISCOVERY_DONE:
                    break
            except queue.Empty:
                continue
        discovery_thread.join(timeout=PipelineConfig.PERMIT_POLL_INTERVAL)

    def _collect(self, future: Future) -> None:
        """Route one finished task to the aggregator. Task errors never escape."""
        try:
            outcome: Optional[HashOutcome] = future.result()
        except Exception as e:
            logger.error(f"Hash task failed unexpectedly: {e}", exc_info=True)
            self._aggregator.add_failure()
            return
        self._aggregator.add(outcome)


def find_duplicates(
    roots: List[str],
    concurrency: int = PipelineConfig.CONCURRENCY_LIMIT,
    queue_capacity: int = PipelineConfig.QUEUE_CAPACITY,
    chunk_size: int = PipelineConfig.CHUNK_SIZE,
    diagnostic_sink: Optional[DiagnosticSink] = None,
    stopped_flag: Optional[Callable[[], bool]] = None
) -> ScanResult:
    """Run the pipeline once over `roots` with the given limits."""
    params = ScanParams(
        roots=roots,
        concurrency=concurrency,
        queue_capacity=queue_capacity,
        chunk_size=chunk_size,
    )
    return PipelineDriver(params, diagnostic_sink=diagnostic_sink).run(stopped_flag=stopped_flag)
