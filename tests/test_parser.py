import pytest

from MouseBridgeHelper.domain.errors import EventParseError
from MouseBridgeHelper.domain.events import ConnectionEvent, EventKind
from MouseBridgeHelper.domain.parser import parse_event_line


@pytest.mark.parametrize(
    "line, kind",
    [
        ("new_pending_connection|dev1", EventKind.NEW_PENDING_CONNECTION),
        ("connection_approved|dev1", EventKind.CONNECTION_APPROVED),
        ("connection_rejected|dev1", EventKind.CONNECTION_REJECTED),
        ("connection_disconnected|dev1", EventKind.CONNECTION_DISCONNECTED),
    ],
)
def test_known_kinds(line, kind):
    event = parse_event_line(line)
    assert event.kind is kind
    assert event.device_id == "dev1"


def test_two_fields_default_details_to_empty():
    event = parse_event_line("connection_approved|abc")
    assert event == ConnectionEvent(
        kind=EventKind.CONNECTION_APPROVED,
        raw_kind="connection_approved",
        device_id="abc",
        details="",
    )


def test_three_fields_keep_details():
    event = parse_event_line("new_pending_connection|dev1|Dev1 wants to connect")
    assert event.kind is EventKind.NEW_PENDING_CONNECTION
    assert event.device_id == "dev1"
    assert event.details == "Dev1 wants to connect"


def test_details_are_never_split_further():
    event = parse_event_line("new_pending_connection|dev1|a|b||c")
    assert event.device_id == "dev1"
    assert event.details == "a|b||c"


def test_empty_details_field_same_as_missing():
    assert parse_event_line("connection_approved|dev1|").details == ""
    assert parse_event_line("connection_approved|dev1") == parse_event_line("connection_approved|dev1|")


def test_unknown_kind_is_an_event_not_an_error():
    event = parse_event_line("totally_unknown|abc")
    assert event.kind is EventKind.UNKNOWN
    assert event.raw_kind == "totally_unknown"
    assert event.device_id == "abc"


@pytest.mark.parametrize("line", ["", "onlykind", "|emptyid", "connection_approved|", "connection_approved||details"])
def test_malformed_lines_fail(line):
    with pytest.raises(EventParseError):
        parse_event_line(line)


def test_none_fails():
    with pytest.raises(EventParseError):
        parse_event_line(None)


def test_line_terminators_are_kept_verbatim():
    assert parse_event_line("new_pending_connection|dev1\r").device_id == "dev1\r"
    assert parse_event_line("connection_approved|dev1|x\r\n").details == "x\r\n"


def test_newline_only_device_id_is_not_empty():
    assert parse_event_line("connection_approved|\n").device_id == "\n"


def test_empty_kind_fails():
    with pytest.raises(EventParseError) as info:
        parse_event_line("|dev1|x")
    assert info.value.reason == "empty kind"


def test_whitespace_inside_fields_is_preserved():
    event = parse_event_line("connection_approved| dev1 | some details ")
    assert event.device_id == " dev1 "
    assert event.details == " some details "


def test_kind_match_is_case_sensitive():
    assert parse_event_line("Connection_Approved|dev1").kind is EventKind.UNKNOWN


def test_parse_is_deterministic():
    line = "new_pending_connection|dev9|Pixel 9 wants to connect"
    assert parse_event_line(line) == parse_event_line(line)


def test_parse_error_carries_reason_and_line():
    with pytest.raises(EventParseError) as info:
        parse_event_line("onlykind")
    assert info.value.line == "onlykind"
    assert "device id" in info.value.reason


def test_events_are_immutable():
    event = parse_event_line("connection_approved|dev1")
    with pytest.raises(Exception):
        event.device_id = "other"
