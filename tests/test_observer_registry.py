import threading
from concurrent.futures import Future

import pytest
from unittest.mock import Mock

from MouseBridgeHelper.app.observers import ObserverRegistry
from MouseBridgeHelper.domain.parser import parse_event_line


class InlineExecutor:
    """Runs submitted work on the caller's thread."""

    def __init__(self):
        self.submitted = 0
        self.closed = False

    def submit(self, fn, *args):
        if self.closed:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.submitted += 1
        fut = Future()
        fut.set_result(fn(*args))
        return fut

    def shutdown(self, wait=True):
        self.closed = True


@pytest.fixture
def event():
    return parse_event_line("connection_approved|dev1")


def test_all_callbacks_invoked_in_registration_order(log, event):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    calls = []
    registry.register(lambda e: calls.append(("first", e)))
    registry.register(lambda e: calls.append(("second", e)))

    registry.dispatch(event)

    assert calls == [("first", event), ("second", event)]


def test_dispatch_without_callbacks_submits_nothing(log, event):
    executor = InlineExecutor()
    registry = ObserverRegistry(log, executor=executor)

    registry.dispatch(event)

    assert executor.submitted == 0


def test_handle_unregisters_only_that_registration(log, event):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    cb = Mock()
    first = registry.register(cb)
    registry.register(cb)

    first()
    registry.dispatch(event)

    assert cb.call_count == 1
    assert len(registry) == 1


def test_handle_after_clear_is_noop(log):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    handle = registry.register(Mock())
    registry.clear()

    handle()

    assert len(registry) == 0


def test_clear_removes_all(log, event):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    cb = Mock()
    registry.register(cb)
    registry.register(cb)

    registry.clear()
    registry.dispatch(event)

    cb.assert_not_called()
    assert len(registry) == 0


def test_register_none_rejected(log):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    with pytest.raises(ValueError):
        registry.register(None)


def test_failing_callback_does_not_block_others(log, event):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    after = Mock()
    registry.register(Mock(side_effect=RuntimeError("boom")))
    registry.register(after)

    registry.dispatch(event)

    after.assert_called_once_with(event)
    log.error.assert_called_once()
    assert log.error.call_args[0][:2] == ("observers", "callback_failed")


def test_dispatch_sees_snapshot_taken_at_call(log, event):
    """A callback registered after dispatch() was issued is not part of it."""
    gate = threading.Event()
    registry = ObserverRegistry(log)
    seen = []
    late = Mock()

    def first(e):
        gate.wait(2.0)
        seen.append(e)

    registry.register(first)
    registry.dispatch(event)
    registry.register(late)
    gate.set()
    registry.shutdown(wait=True)

    assert seen == [event]
    late.assert_not_called()


def test_dispatch_does_not_wait_for_slow_callbacks(log, event):
    gate = threading.Event()
    done = threading.Event()
    registry = ObserverRegistry(log)

    def slow(e):
        gate.wait(2.0)
        done.set()

    registry.register(slow)
    registry.dispatch(event)

    # dispatch returned while the callback is still parked.
    assert not done.is_set()
    gate.set()
    assert done.wait(2.0)
    registry.shutdown(wait=True)


def test_events_delivered_in_dispatch_order(log):
    registry = ObserverRegistry(log)
    received = []
    registry.register(lambda e: received.append(e.device_id))

    for i in range(50):
        registry.dispatch(parse_event_line("connection_approved|dev{0}".format(i)))
    registry.shutdown(wait=True)

    assert received == ["dev{0}".format(i) for i in range(50)]


def test_concurrent_register_and_dispatch(log, event):
    registry = ObserverRegistry(log)
    counter = Mock()
    stop = threading.Event()

    def dispatcher():
        while not stop.is_set():
            registry.dispatch(event)

    t = threading.Thread(target=dispatcher)
    t.start()
    for _ in range(200):
        registry.register(counter)
    stop.set()
    t.join(2.0)
    registry.shutdown(wait=True)

    assert len(registry) == 200


def test_dispatch_after_shutdown_is_logged(log, event):
    registry = ObserverRegistry(log, executor=InlineExecutor())
    registry.register(Mock())
    registry.shutdown()

    registry.dispatch(event)

    log.warn.assert_called_once()
