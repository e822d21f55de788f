"""Tests for process memory tracking."""

from unittest.mock import MagicMock, patch

import pytest

from commerceml_stream.shared.config import ParserConfig
from commerceml_stream.streaming import StreamingRuleParser
from commerceml_stream.tokenization.events import element
from commerceml_stream.tools.memory import BYTES_PER_MB, MemorySample, MemoryTracker


def _process_with_rss(*values_mb: float) -> MagicMock:
    process = MagicMock()
    process.memory_info.side_effect = [
        MagicMock(rss=int(value * BYTES_PER_MB)) for value in values_mb
    ]
    return process


class TestMemorySample:
    """Test MemorySample data class."""

    def test_to_dict(self) -> None:
        sample = MemorySample(resident_memory_mb=12.5, events_processed=100)
        data = sample.to_dict()
        assert data["resident_memory_mb"] == 12.5
        assert data["events_processed"] == 100
        assert "timestamp" in data


class TestMemoryTracker:
    """Test RSS sampling through psutil."""

    def test_invalid_interval(self) -> None:
        with pytest.raises(ValueError, match="sample_interval must be > 0"):
            MemoryTracker(sample_interval=0)

    @patch("commerceml_stream.tools.memory.psutil.Process")
    def test_peak_tracking(self, mock_process: MagicMock) -> None:
        mock_process.return_value = _process_with_rss(10.0, 30.0, 20.0)
        tracker = MemoryTracker()

        tracker.sample(1)
        tracker.sample(2)
        tracker.sample(3)

        assert tracker.peak_mb == 30.0
        assert [s.resident_memory_mb for s in tracker.history] == [10.0, 30.0, 20.0]

    @patch("commerceml_stream.tools.memory.psutil.Process")
    def test_maybe_sample_on_interval(self, mock_process: MagicMock) -> None:
        mock_process.return_value = _process_with_rss(5.0, 6.0)
        tracker = MemoryTracker(sample_interval=10)

        for events in range(1, 21):
            tracker.maybe_sample(events)

        assert [s.events_processed for s in tracker.history] == [10, 20]

    @patch("commerceml_stream.tools.memory.psutil.Process")
    def test_history_bounded(self, mock_process: MagicMock) -> None:
        mock_process.return_value = _process_with_rss(*range(1, 6))
        tracker = MemoryTracker(max_history=3)
        for i in range(5):
            tracker.sample(i)
        assert len(tracker.history) == 3
        assert tracker.peak_mb == 5.0
        assert tracker.to_dict()["peak_mb"] == 5.0

    @patch("commerceml_stream.tools.memory.psutil.Process")
    def test_parser_reports_peak_rss(self, mock_process: MagicMock) -> None:
        process = MagicMock()
        process.memory_info.return_value = MagicMock(rss=64 * BYTES_PER_MB)
        mock_process.return_value = process
        config = ParserConfig().override(
            streaming__enable_memory_tracking=True,
            streaming__memory_sample_interval=2,
        )

        parser = StreamingRuleParser(config=config)
        parser.feed(element("A", element("B", "x")))
        metrics = parser.close()

        assert metrics.peak_rss_mb == 64.0
        assert process.memory_info.call_count >= 2

    def test_tracking_disabled_by_default(self) -> None:
        parser = StreamingRuleParser()
        parser.feed(element("A"))
        assert parser.close().peak_rss_mb is None
