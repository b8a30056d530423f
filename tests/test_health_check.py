import asyncio

import pytest

from focusflow.services.health_check import JOB_ID, ConnectionMonitor


@pytest.fixture
def sleeps(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("focusflow.services.health_check.asyncio.sleep", fake_sleep)
    return delays


class Probe:

    def __init__(self, failures=0):
        self.failures = failures
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("database unreachable")


def make_monitor(probe, **kwargs):
    kwargs.setdefault("jitter", lambda: 0.0)
    return ConnectionMonitor(probe, **kwargs)


async def test_healthy_probe(sleeps):
    monitor = make_monitor(Probe())
    assert await monitor.check_health()
    assert monitor.is_healthy
    assert sleeps == []


async def test_gives_up_after_max_retries(sleeps):
    probe = Probe(failures=100)
    monitor = make_monitor(probe, max_retries=3, initial_delay=1.0, max_delay=10.0)

    assert not await monitor.check_health()
    assert not monitor.is_healthy
    assert probe.calls == 4
    assert sleeps == [2.0, 4.0, 8.0]
    assert monitor.last_error == "database unreachable"


async def test_recovers_and_resets_retry_count(sleeps):
    monitor = make_monitor(Probe(failures=2))
    assert await monitor.check_health()
    assert monitor.is_healthy
    assert monitor.retry_count == 0
    assert len(sleeps) == 2


def test_retry_delay_is_capped():
    monitor = ConnectionMonitor(Probe(), initial_delay=1.0, max_delay=10.0, jitter=lambda: 0.5)
    assert monitor.get_retry_delay(1) == 2.5
    assert monitor.get_retry_delay(5) == 10.0


def test_default_jitter_stays_below_one_second():
    monitor = ConnectionMonitor(Probe(), initial_delay=1.0, max_delay=10.0)
    assert 2.0 <= monitor.get_retry_delay(1) < 3.0


async def test_offline_marks_unhealthy_without_probing(sleeps):
    probe = Probe()
    monitor = make_monitor(probe)
    monitor.set_offline()

    assert not monitor.is_healthy
    assert not await monitor.check_connection()
    assert probe.calls == 0

    assert await monitor.set_online()
    assert monitor.is_healthy
    assert probe.calls == 1


async def test_start_schedules_interval_checks(sleeps):
    probe = Probe()
    monitor = make_monitor(probe, interval=30)

    await monitor.start()
    try:
        assert monitor.running
        assert probe.calls == 1
        job = monitor._scheduler.get_job(JOB_ID)
        assert job.trigger.interval.total_seconds() == 30
    finally:
        await monitor.stop()
    assert not monitor.running


async def test_monitor_probes_the_database(context):
    assert await context.monitor.check_connection()


class GatedProbe:
    """Succeeds once the gate opens; tracks how many probes run at once"""

    def __init__(self):
        self.gate = asyncio.Event()
        self.calls = 0
        self.active = 0
        self.peak = 0

    async def __call__(self):
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await self.gate.wait()
        finally:
            self.active -= 1


async def test_scheduled_and_manual_checks_do_not_overlap():
    probe = GatedProbe()
    monitor = make_monitor(probe)

    scheduled = asyncio.ensure_future(monitor.check_health())
    manual = asyncio.ensure_future(monitor.set_online())
    await asyncio.sleep(0.01)

    assert probe.calls == 1
    probe.gate.set()
    assert await scheduled
    assert await manual
    assert probe.calls == 2
    assert probe.peak == 1
