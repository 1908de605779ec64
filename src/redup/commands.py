"""
Unified command orchestrator for duplicate scanning.
This is the single entry point into the core engine for the CLI and for library users.
"""
import logging
import threading
from typing import Optional

from redup.core.models import DiagnosticSink, PipelineState, ScanParams, ScanResult
from redup.core.pipeline import PipelineDriver

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Runs one pipeline over validated parameters and owns its cancellation signal.

    Usage:
        command = ScanCommand()
        result = command.execute(params, diagnostic_sink=printer)

        # From another thread or a signal handler:
        command.stop()
    """

    def __init__(self):
        self._stopped = threading.Event()
        self._driver: Optional[PipelineDriver] = None

    def stop(self) -> None:
        """Ask the running pipeline to stop dispatching and drain what is in flight."""
        self._stopped.set()

    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def state(self) -> PipelineState:
        return self._driver.state if self._driver else PipelineState.IDLE

    def execute(self, params: ScanParams, diagnostic_sink: Optional[DiagnosticSink] = None) -> ScanResult:
        """
        Execute a scan with given parameters.

        Returns:
            The finished ScanResult (stats.aborted is True if stop() was called)

        Raises:
            RootUnavailableError: If any root is missing or unreadable
        """
        self._driver = PipelineDriver(params, diagnostic_sink=diagnostic_sink)
        result = self._driver.run(stopped_flag=self.is_stopped)

        if result.stats.aborted:
            logger.warning("Scan stopped before completion; results are partial")
        return result
