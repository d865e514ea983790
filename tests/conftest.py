import os
import queue
import threading
import time

import pytest
from unittest.mock import Mock

# Must be set before the first QApplication is created.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from MouseBridgeHelper.infrastructure.system.config import ServiceConfig  # noqa: E402


class QueueEventSource:
    """Stands in for EventSourceAdapter; returns None on timeout like the transport."""

    def __init__(self, timeout=0.02):
        self.lines = queue.Queue()
        self.timeout = timeout
        self.reads = 0

    def feed(self, *lines):
        for line in lines:
            self.lines.put(line)

    def next_event_line(self):
        self.reads += 1
        try:
            return self.lines.get(timeout=self.timeout)
        except queue.Empty:
            return None


class BlockingEventSource:
    """Blocks every read until release is set, then returns None."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def next_event_line(self):
        self.entered.set()
        self.release.wait(5.0)
        return None


@pytest.fixture(scope="session")
def qapp():
    """Session-wide QApplication instance."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def log():
    return Mock()


@pytest.fixture
def fake_transport():
    transport = Mock()
    transport.start_multicast.return_value = None
    transport.start_udp.return_value = None
    return transport


@pytest.fixture
def event_source():
    return QueueEventSource()


@pytest.fixture
def service_config():
    return ServiceConfig(
        multicast_port=55555,
        udp_port=55556,
        udp_timeout_seconds=0.5,
        transport_library_path="libmousebridge.so",
    )


@pytest.fixture
def wait_until():
    """Poll a predicate, pumping the Qt event loop if one exists."""

    def _wait(predicate, timeout=2.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            app = QApplication.instance()
            if app is not None:
                app.processEvents()
            if predicate():
                return True
            time.sleep(0.01)
        return bool(predicate())

    return _wait
