from __future__ import annotations

import ctypes
from typing import Optional


class EventSourceAdapter:
    """
    Turns the transport's blocking `char *GetConnectionEvent()` into
    Python strings.

    This is the only place transport-owned memory is touched: the buffer
    is copied, then always released, and the caller gets a str it owns.

        None -> the transport returned NULL (no data)
        ""   -> the transport returned an empty string (still a value;
                the parser rejects it downstream)
    """

    def __init__(self, transport, encoding: str = "utf-8"):
        self._transport = transport
        self._encoding = encoding

    def next_event_line(self) -> Optional[str]:
        """Blocks until the transport returns (bounded by its UDP timeout)."""
        ptr = self._transport.get_connection_event()
        if not ptr:
            return None
        try:
            raw = ctypes.string_at(ptr)
        finally:
            self._transport.free(ptr)
        return raw.decode(self._encoding, errors="replace")
