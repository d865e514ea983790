from __future__ import annotations

from ..domain.events import ConnectionEvent, EventKind


class ConnectionStateHandler:
    """
    Observer that maps connection events onto ServiceState and the
    approval workflow:

      new_pending_connection  -> ask the operator
      connection_approved     -> connected
      connection_rejected     -> nothing (also when no prompt was shown)
      connection_disconnected -> not connected
      anything else           -> logged for diagnostics
    """

    def __init__(self, state, approval, log):
        self._state = state
        self._approval = approval
        self._log = log

    def __call__(self, event: ConnectionEvent) -> None:
        self.handle(event)

    def handle(self, event: ConnectionEvent) -> None:
        kind = event.kind

        if kind is EventKind.NEW_PENDING_CONNECTION:
            self._log.info(
                "state",
                "pending_connection",
                {"device_id": event.device_id, "details": event.details},
            )
            if self._approval is None:
                self._log.warn("state", "no_approval_workflow", {"device_id": event.device_id})
                return
            self._approval.request(event.device_id, event.details)

        elif kind is EventKind.CONNECTION_APPROVED:
            changed = self._state.set_connected(True)
            self._log.info(
                "state",
                "connection_approved",
                {"device_id": event.device_id, "changed": changed},
            )

        elif kind is EventKind.CONNECTION_REJECTED:
            self._log.info("state", "connection_rejected", {"device_id": event.device_id})

        elif kind is EventKind.CONNECTION_DISCONNECTED:
            changed = self._state.set_connected(False)
            self._log.info(
                "state",
                "connection_disconnected",
                {"device_id": event.device_id, "changed": changed},
            )

        else:
            self._log.warn(
                "state",
                "unknown_event",
                {"kind": event.raw_kind, "device_id": event.device_id},
            )
