"""Unit tests for stage timing."""

import logging

import pytest

from premium_rating.core.performance_monitor import performance_monitor


class TestPerformanceMonitor:
    """Test logging of stage durations."""

    def test_returns_result_and_logs_duration(self, caplog):
        """Test a fast stage is logged at DEBUG."""

        @performance_monitor("fast_stage", max_duration_ms=10_000.0)
        def stage(value: int) -> int:
            return value + 1

        with caplog.at_level(logging.DEBUG, logger="premium_rating"):
            assert stage(1) == 2

        assert "fast_stage completed" in caplog.text

    def test_slow_stage_warns(self, caplog):
        """Test a stage over the threshold is logged as a warning."""

        @performance_monitor("slow_stage", max_duration_ms=0.0)
        def stage() -> None:
            sum(range(1000))

        with caplog.at_level(logging.WARNING, logger="premium_rating"):
            stage()

        assert "PERFORMANCE WARNING: slow_stage" in caplog.text

    def test_failure_logged_at_debug_and_reraised(self, caplog):
        """Test exceptions are logged at DEBUG and propagate unchanged."""

        @performance_monitor("failing_stage")
        def stage() -> None:
            raise RuntimeError("boom")

        with caplog.at_level(logging.DEBUG, logger="premium_rating"):
            with pytest.raises(RuntimeError, match="boom"):
                stage()

        assert "failing_stage failed" in caplog.text
        assert [r.levelno for r in caplog.records if "failing_stage" in r.getMessage()] == [
            logging.DEBUG
        ]

    def test_threshold_read_from_instance(self, caplog):
        """Test a method uses its instance's slow-stage threshold."""

        class Stage:
            def __init__(self, slow_stage_threshold_ms: float) -> None:
                self.slow_stage_threshold_ms = slow_stage_threshold_ms

            @performance_monitor("instance_stage")
            def run(self) -> None:
                sum(range(1000))

        with caplog.at_level(logging.DEBUG, logger="premium_rating"):
            Stage(slow_stage_threshold_ms=0.0).run()
            Stage(slow_stage_threshold_ms=60_000.0).run()

        messages = [r.getMessage() for r in caplog.records if "instance_stage" in r.getMessage()]
        assert messages[0].startswith("PERFORMANCE WARNING: instance_stage")
        assert "instance_stage completed" in messages[1]

    def test_environment_not_consulted(self, monkeypatch):
        """Test a malformed environment does not break a timed stage."""
        monkeypatch.setenv("PREMIUM_RATING_SLOW_STAGE_THRESHOLD_MS", "-5")

        @performance_monitor("plain_stage")
        def stage() -> int:
            return 7

        assert stage() == 7
