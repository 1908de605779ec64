"""
Integration tests for ScanCommand — the orchestration layer between the CLI and the core.
Verifies wiring of params -> pipeline with diagnostics and cancellation support.
"""
import pytest
from redup import ScanCommand, ScanParams, RootUnavailableError
from redup.core.models import PipelineState


class TestScanCommand:
    """Test command orchestration logic."""

    def test_execute_returns_result(self, test_files):
        command = ScanCommand()
        result = command.execute(ScanParams(roots=[str(test_files["dup1_a"].parent)]))

        assert result.duplicate_group_count == 2
        assert result.stats.total_time > 0
        assert command.state is PipelineState.AGGREGATED

    def test_execute_invokes_diagnostic_sink(self, test_files):
        events = []

        command = ScanCommand()
        command.execute(
            ScanParams(roots=[str(test_files["dup1_a"].parent)]),
            diagnostic_sink=lambda event, path, detail: events.append(event),
        )

        assert "searching" in events
        assert events.count("found") == len(test_files)
        assert events.count("hashed") == len(test_files)

    def test_stop_before_execute_gives_aborted_result(self, test_files):
        command = ScanCommand()
        assert command.is_stopped() is False
        command.stop()
        assert command.is_stopped() is True

        result = command.execute(ScanParams(roots=[str(test_files["dup1_a"].parent)]))
        assert result.stats.aborted is True

    def test_missing_root_propagates(self, temp_dir):
        command = ScanCommand()
        with pytest.raises(RootUnavailableError):
            command.execute(ScanParams(roots=[str(temp_dir / "missing")]))
        assert command.state is PipelineState.FAILED


class TestScanParams:
    """Validation of pipeline parameters."""

    def test_defaults(self):
        params = ScanParams(roots=["/tmp"])
        assert params.concurrency == 100
        assert params.queue_capacity == 1000
        assert params.chunk_size == 8 * 1024

    @pytest.mark.parametrize("kwargs", [
        {"roots": []},
        {"roots": ["/tmp"], "concurrency": 0},
        {"roots": ["/tmp"], "queue_capacity": 0},
        {"roots": ["/tmp"], "chunk_size": 0},
    ])
    def test_invalid_params_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ScanParams(**kwargs)
