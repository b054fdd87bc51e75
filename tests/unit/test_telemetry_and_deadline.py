import asyncio

import pytest

from kgflow.core.exceptions import StageTimeoutError
from kgflow.core.models import StageName
from kgflow.pipeline.deadline import run_with_deadline
from kgflow.telemetry import InMemoryReporter, TelemetryContext

pytestmark = pytest.mark.unit


class TestTelemetryContext:
    def test_disabled_is_noop(self):
        reporter = InMemoryReporter()
        tele = TelemetryContext(reporter, enabled=False)
        with tele("cfp.stage", stage="crawl"):
            tele.count("cfp.stage.failed")
        assert not reporter.timings
        assert not reporter.metrics

    def test_no_reporters_is_noop(self):
        tele = TelemetryContext(enabled=True)
        with tele("scope"):
            pass

    def test_nested_scopes_and_counters(self):
        reporter = InMemoryReporter()
        tele = TelemetryContext(reporter, enabled=True)
        with tele("cfp"), tele("stage", stage="crawl"):
            tele.count("timeout")
            tele.count("timeout", 2)
        assert set(reporter.timings) == {"cfp", "cfp.stage"}
        _, metadata = reporter.timings["cfp.stage"][0]
        assert metadata["parent_scope"] == "cfp"
        assert metadata["stage"] == "crawl"
        assert reporter.total("cfp.stage.timeout") == 3
        assert "cfp.stage.timeout" in reporter.get_report()

    def test_failing_reporter_does_not_break_scope(self):
        class Broken:
            def record_timing(self, scope, duration, **metadata):
                raise RuntimeError("disk full")

            def record_metric(self, scope, value, **metadata):
                raise RuntimeError("disk full")

        good = InMemoryReporter()
        tele = TelemetryContext(Broken(), good, enabled=True)
        with tele("scope"):
            tele.metric("m", 1)
        assert "scope" in good.timings
        assert good.total("scope.m") == 1

    def test_empty_scope_name_rejected(self):
        tele = TelemetryContext(InMemoryReporter(), enabled=True)
        with pytest.raises(ValueError), tele(""):
            pass


class TestRunWithDeadline:
    @pytest.mark.asyncio
    async def test_returns_value_within_budget(self):
        async def work():
            return "done"

        assert await run_with_deadline(StageName.CRAWL, 500, work()) == "done"

    @pytest.mark.asyncio
    async def test_expired_budget_raises_stage_timeout(self):
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(StageTimeoutError) as exc:
            await run_with_deadline(StageName.FINGERPRINT, 20, slow())
        assert str(exc.value) == "timeout: fingerprint exceeded 20ms"
        assert exc.value.stage == "fingerprint"
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_work_timeout_is_not_a_stage_timeout(self):
        async def flaky():
            raise TimeoutError("upstream socket timeout")

        with pytest.raises(TimeoutError) as exc:
            await run_with_deadline(StageName.CRAWL, 500, flaky())
        assert not isinstance(exc.value, StageTimeoutError)

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        async def broken():
            raise ConnectionError("refused")

        with pytest.raises(ConnectionError):
            await run_with_deadline(StageName.CRAWL, 500, broken())

    @pytest.mark.asyncio
    async def test_late_result_after_swallowed_cancellation_discarded(self):
        async def stubborn():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                return "late"
            return "on time"

        with pytest.raises(StageTimeoutError):
            await run_with_deadline(StageName.CRAWL, 20, stubborn())
