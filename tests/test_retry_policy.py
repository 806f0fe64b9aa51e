"""Tests for the per-target retry policy."""

import pytest

from bni_scraper.core.errors import RunInfrastructureFailure
from bni_scraper.orchestration.retry_policy import RetryConfig, RetryPolicy

from fakes import FakePort, FakeSleep, make_targets


def make_policy(port, sleep, **overrides):
    values = dict(
        max_attempts=3,
        load_timeout=0.05,
        render_settle=0.5,
        extract_timeout=1.0,
        inter_attempt_delay=2.0,
    )
    values.update(overrides)
    return RetryPolicy(port, RetryConfig(**values), sleep=sleep)


class TestRetryPolicySuccess:
    """Targets that eventually yield a record."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self, fake_sleep):
        port = FakePort()
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert outcome.succeeded
        assert outcome.attempts == 1
        assert outcome.record.name == "Member 0"
        assert outcome.error is None
        assert port.allocated == [(0, 0)]
        assert port.released == [(0, 0)]
        # Only the render settle delay, no retry delay
        assert fake_sleep.calls == [0.5]

    @pytest.mark.asyncio
    async def test_fail_then_succeed(self, fake_sleep):
        """One failure costs one extra context and one retry delay."""
        port = FakePort(script={0: ["timeout", "ok"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert outcome.succeeded
        assert outcome.attempts == 2
        assert port.allocated == [(0, 0), (0, 1)]
        assert port.released == port.allocated
        assert fake_sleep.calls == [0.5, 2.0, 0.5]

    @pytest.mark.asyncio
    async def test_load_timeout_is_not_a_failure(self, fake_sleep):
        """A page that never finishes loading is still read."""
        port = FakePort(script={0: ["slow_load"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert outcome.succeeded
        assert outcome.attempts == 1
        assert port.released == [(0, 0)]


class TestRetryPolicyFailure:
    """Targets that exhaust their attempt budget."""

    @pytest.mark.asyncio
    async def test_always_timeout(self, fake_sleep):
        port = FakePort(script={0: ["timeout"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert not outcome.succeeded
        assert outcome.attempts == 3
        assert outcome.error_type == "TargetTimeout"
        assert outcome.error == "Timeout waiting for profile data"
        assert len(port.allocated) == 3
        assert port.released == port.allocated
        assert fake_sleep.calls.count(2.0) == 2

    @pytest.mark.asyncio
    async def test_extraction_race_times_out(self, fake_sleep):
        """A hanging extraction loses the race and its page is still released."""
        port = FakePort(script={0: ["hang"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep, extract_timeout=0.05).execute(target)

        assert not outcome.succeeded
        assert outcome.error_type == "TargetTimeout"
        assert len(port.released) == 3
        assert port.open_contexts == 0

    @pytest.mark.asyncio
    async def test_empty_record_is_no_data(self, fake_sleep):
        port = FakePort(script={0: ["empty"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert not outcome.succeeded
        assert outcome.error_type == "TargetNoData"
        assert outcome.error == "No data extracted"

    @pytest.mark.asyncio
    async def test_transport_error(self, fake_sleep):
        port = FakePort(script={0: ["transport"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert not outcome.succeeded
        assert outcome.error_type == "TargetTransportError"
        assert port.released == port.allocated

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_transport_failure(self, fake_sleep):
        port = FakePort(script={0: ["boom"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert not outcome.succeeded
        assert outcome.error_type == "TargetTransportError"
        assert outcome.error == "RuntimeError: unexpected"

    @pytest.mark.asyncio
    async def test_last_reason_wins(self, fake_sleep):
        port = FakePort(script={0: ["timeout", "transport", "empty"]})
        target = make_targets(1)[0]

        outcome = await make_policy(port, fake_sleep).execute(target)

        assert outcome.error_type == "TargetNoData"
        assert outcome.attempts == 3

    @pytest.mark.asyncio
    async def test_single_attempt_budget_never_waits(self):
        sleep = FakeSleep()
        port = FakePort(script={0: ["timeout"]})

        outcome = await make_policy(port, sleep, max_attempts=1).execute(make_targets(1)[0])

        assert outcome.attempts == 1
        assert 2.0 not in sleep.calls


class TestRetryPolicyInfrastructure:
    """Errors that must end the run."""

    @pytest.mark.asyncio
    async def test_infrastructure_failure_propagates(self, fake_sleep):
        port = FakePort(script={0: ["infra"]})
        target = make_targets(1)[0]

        with pytest.raises(RunInfrastructureFailure):
            await make_policy(port, fake_sleep).execute(target)

    def test_rejects_empty_budget(self):
        with pytest.raises(ValueError):
            RetryPolicy(FakePort(), RetryConfig(max_attempts=0))
