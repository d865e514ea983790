import threading

import pytest
from unittest.mock import Mock, PropertyMock

from MouseBridgeHelper.domain.events import ConnectionStatusChanged, MonitoringChanged
from MouseBridgeHelper.infrastructure.system.event_hub import EventHub
from MouseBridgeHelper.ui.status_window import (
    CONNECTED_STATUS,
    NOT_CONNECTED_STATUS,
    SERVICE_RUNNING,
    SERVICE_STOPPED,
    START_SERVICE_BUTTON,
    STOP_SERVICE_BUTTON,
    StatusWindow,
)


@pytest.fixture
def controller():
    controller = Mock()
    type(controller).is_monitoring = PropertyMock(return_value=False)
    type(controller).is_connected = PropertyMock(return_value=False)
    return controller


@pytest.fixture
def hub():
    return EventHub()


@pytest.fixture
def window(qapp, controller, hub):
    window = StatusWindow(controller, hub)
    yield window
    window.deleteLater()


def test_initial_labels(window):
    assert window._status_value.text() == NOT_CONNECTED_STATUS
    assert window._service_value.text() == SERVICE_STOPPED
    assert window._toggle_button.text() == START_SERVICE_BUTTON


def test_hub_events_from_worker_thread_update_labels(window, hub, wait_until):
    def publish():
        hub.publish(MonitoringChanged(is_monitoring=True))
        hub.publish(ConnectionStatusChanged(is_connected=True))

    t = threading.Thread(target=publish)
    t.start()
    t.join(1.0)

    assert wait_until(lambda: window._status_value.text() == CONNECTED_STATUS)
    assert window._service_value.text() == SERVICE_RUNNING
    assert window._toggle_button.text() == STOP_SERVICE_BUTTON


def test_button_toggles_service(window, controller):
    window._toggle_button.click()
    controller.toggle.assert_called_once_with()


def test_close_only_hides(window):
    window.show_window()
    window.close()
    assert window.isVisible() is False
