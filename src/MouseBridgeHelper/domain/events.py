from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Wire vocabulary for the kind field of an event line.
NEW_PENDING_CONNECTION = "new_pending_connection"
CONNECTION_APPROVED = "connection_approved"
CONNECTION_REJECTED = "connection_rejected"
CONNECTION_DISCONNECTED = "connection_disconnected"


class EventKind(Enum):
    NEW_PENDING_CONNECTION = NEW_PENDING_CONNECTION
    CONNECTION_APPROVED = CONNECTION_APPROVED
    CONNECTION_REJECTED = CONNECTION_REJECTED
    CONNECTION_DISCONNECTED = CONNECTION_DISCONNECTED
    UNKNOWN = "unknown"


class Decision(Enum):
    APPROVE = "approve"
    REJECT = "reject"


@dataclass(frozen=True)
class ConnectionEvent:
    """
    One parsed line from the transport.

    raw_kind always carries the kind field exactly as received, so an
    UNKNOWN event still says what the transport sent.
    """

    kind: EventKind
    raw_kind: str
    device_id: str
    details: str = ""


# ---------- hub events (consumed by the UI) ----------

@dataclass
class MonitoringChanged:
    is_monitoring: bool


@dataclass
class ConnectionStatusChanged:
    is_connected: bool


@dataclass
class ApprovalDecided:
    device_id: str
    decision: Decision


@dataclass
class ServiceStartFailed:
    reason: str  # 'permission' | 'transport'
    message: str
