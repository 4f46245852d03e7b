"""
Test Suite for the Release Monitor thread.
"""

# =========================================================================== #
#                         Standard Imports                                    #
# =========================================================================== #
import queue

# =========================================================================== #
#                         Third-Party Imports                                 #
# =========================================================================== #
import pytest

# =========================================================================== #
#                         Internal Imports                                    #
# =========================================================================== #
from turnstile.core.errors import BackendError
from turnstile.launcher import MonitorClosed, MonitorFailed, ReleaseMonitor, ResourceUsed


def _drain(events, timeout=2.0):
    """Collects events up to and including the terminal one."""
    collected = []
    while True:
        event = events.get(timeout=timeout)
        collected.append(event)
        if isinstance(event, (MonitorClosed, MonitorFailed)):
            return collected


@pytest.mark.unit
def test_reports_each_takeover_once_then_closes(run_ctx, fake_backend):
    fake_backend.takeover(1)
    fake_backend.takeover(3)
    events = queue.Queue()
    monitor = ReleaseMonitor(run_ctx, [1, 3], events, interval=0.01)

    monitor.start()
    collected = _drain(events)
    monitor.join(timeout=1.0)

    assert collected == [ResourceUsed(1), ResourceUsed(3), MonitorClosed()]
    assert monitor.tracked == []
    assert not monitor.is_alive()


@pytest.mark.unit
def test_keeps_polling_until_takeover(run_ctx, fake_backend):
    events = queue.Queue()
    monitor = ReleaseMonitor(run_ctx, [0], events, interval=0.01)
    monitor.start()

    with pytest.raises(queue.Empty):
        events.get(timeout=0.05)

    fake_backend.takeover(0)
    collected = _drain(events)

    assert collected == [ResourceUsed(0), MonitorClosed()]


@pytest.mark.unit
def test_backend_error_is_reported_once(run_ctx, fake_backend):
    fake_backend.fail_usage_check = True
    events = queue.Queue()
    monitor = ReleaseMonitor(run_ctx, [0, 1], events, interval=0.01)

    monitor.start()
    collected = _drain(events)
    monitor.join(timeout=1.0)

    assert len(collected) == 1
    assert isinstance(collected[0], MonitorFailed)
    assert isinstance(collected[0].error, BackendError)
    assert events.empty()


@pytest.mark.unit
def test_stop_closes_monitor(run_ctx):
    events = queue.Queue()
    monitor = ReleaseMonitor(run_ctx, [0, 1], events, interval=0.01)

    monitor.start()
    monitor.stop()
    monitor.join(timeout=1.0)

    assert _drain(events) == [MonitorClosed()]
    assert monitor.tracked == [0, 1]


@pytest.mark.unit
def test_cancellation_closes_monitor(run_ctx):
    events = queue.Queue()
    monitor = ReleaseMonitor(run_ctx, [2], events, interval=0.01)

    monitor.start()
    run_ctx.cancel.cancel()
    monitor.join(timeout=1.0)

    assert not monitor.is_alive()
    assert _drain(events) == [MonitorClosed()]


@pytest.mark.unit
def test_empty_tracking_closes_immediately(run_ctx):
    events = queue.Queue()
    monitor = ReleaseMonitor(run_ctx, [], events)

    monitor.run()

    assert events.get_nowait() == MonitorClosed()
