from __future__ import annotations


class MouseBridgeError(RuntimeError):
    """Base class for every error raised by MouseBridgeHelper."""


class EventParseError(MouseBridgeError):
    """A raw event line could not be turned into a ConnectionEvent."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__("{0}: {1!r}".format(reason, line))
        self.line = line
        self.reason = reason


class PermissionDenied(MouseBridgeError):
    """The OS capability required to run the service was not granted."""


class TransportUnavailable(MouseBridgeError):
    """The native transport could not be loaded or brought up."""
