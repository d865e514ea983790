from __future__ import annotations

from .errors import EventParseError
from .events import ConnectionEvent, EventKind

FIELD_DELIMITER = "|"

_KINDS = {
    kind.value: kind
    for kind in EventKind
    if kind is not EventKind.UNKNOWN
}


def parse_event_line(line: str) -> ConnectionEvent:
    """
    Parse one line of the transport's event protocol.

    Format:

        <kind>|<deviceID>[|<details>]

    Rules
    -----
    - At most three fields; anything after the second '|' belongs to
      details, '|' included.
    - An unrecognized kind is still a valid event (EventKind.UNKNOWN).
    - A missing details field parses the same as an empty one.
    - The line is taken as-is; no terminator or whitespace is stripped.

    Raises
    ------
    EventParseError
        Empty line, fewer than two fields, empty kind or empty device id.
    """
    if line is None:
        raise EventParseError("", "empty event line")

    if not line:
        raise EventParseError(line, "empty event line")

    fields = line.split(FIELD_DELIMITER, 2)
    if len(fields) < 2:
        raise EventParseError(line, "missing device id field")

    raw_kind, device_id = fields[0], fields[1]
    if not raw_kind:
        raise EventParseError(line, "empty kind")
    if not device_id:
        raise EventParseError(line, "empty device id")

    details = fields[2] if len(fields) > 2 else ""

    return ConnectionEvent(
        kind=_KINDS.get(raw_kind, EventKind.UNKNOWN),
        raw_kind=raw_kind,
        device_id=device_id,
        details=details,
    )
