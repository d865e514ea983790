import pytest
from unittest.mock import Mock

from MouseBridgeHelper.app.connection_handler import ConnectionStateHandler
from MouseBridgeHelper.app.state import ServiceState
from MouseBridgeHelper.domain.parser import parse_event_line


@pytest.fixture
def state():
    state = ServiceState()
    state.begin_monitoring()
    return state


@pytest.fixture
def approval():
    return Mock()


@pytest.fixture
def handler(state, approval, log):
    return ConnectionStateHandler(state, approval, log)


def test_pending_connection_requests_approval(handler, approval, state):
    handler(parse_event_line("new_pending_connection|dev1|Dev1 wants to connect"))

    approval.request.assert_called_once_with("dev1", "Dev1 wants to connect")
    assert state.is_connected is False


def test_approved_sets_connected(handler, state, approval):
    handler(parse_event_line("connection_approved|dev1"))

    assert state.is_connected is True
    approval.request.assert_not_called()


def test_disconnected_clears_connected_and_keeps_monitoring(handler, state):
    handler(parse_event_line("connection_approved|dev1"))
    handler(parse_event_line("connection_disconnected|dev1"))

    assert state.snapshot() == (True, False)


def test_rejected_without_prompt_is_noop(handler, state, approval):
    handler(parse_event_line("connection_rejected|dev1"))

    assert state.snapshot() == (True, False)
    approval.request.assert_not_called()
    approval.reject_connection.assert_not_called()


def test_rejected_does_not_clear_existing_connection(handler, state):
    handler(parse_event_line("connection_approved|dev1"))
    handler(parse_event_line("connection_rejected|dev2"))

    assert state.is_connected is True


def test_unknown_is_reported_only(handler, state, approval, log):
    handler(parse_event_line("totally_unknown|abc"))

    assert state.snapshot() == (True, False)
    approval.request.assert_not_called()
    log.warn.assert_called_once_with(
        "state",
        "unknown_event",
        {"kind": "totally_unknown", "device_id": "abc"},
    )


def test_approved_after_stop_does_not_connect(handler, state):
    state.end_monitoring()

    handler(parse_event_line("connection_approved|dev1"))

    assert state.snapshot() == (False, False)


def test_pending_without_workflow_is_logged(state, log):
    handler = ConnectionStateHandler(state, None, log)

    handler(parse_event_line("new_pending_connection|dev1"))

    log.warn.assert_called_once()
