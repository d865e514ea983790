from __future__ import annotations

import threading

from ..domain.errors import PermissionDenied, TransportUnavailable
from ..domain.events import ServiceStartFailed
from .connection_handler import ConnectionStateHandler
from .listener import EventListener
from .observers import ObserverRegistry
from .state import ServiceState


class ServiceController:
    """
    Start / stop / toggle for the whole pairing pipeline.

    Responsibilities:
      - Bring the transport up and down (multicast, then UDP).
      - Register the connection-state observer and run the listener.
      - Own ServiceState and the observer registry; the UI reads state
        through this object, never through a global.
    """

    def __init__(
        self,
        transport,
        source,
        config,
        log,
        hub=None,
        approval=None,
        permission=None,
        registry=None,
    ):
        self._transport = transport
        self._config = config
        self._log = log
        self._hub = hub
        self._permission = permission

        self.state = ServiceState(hub)
        self.registry = registry or ObserverRegistry(log)
        self.listener = EventListener(source, self.registry, self.state, log)
        self.handler = ConnectionStateHandler(self.state, approval, log)

        # start/stop/toggle run as one unit each.
        self._lifecycle = threading.RLock()

    # ---------- read-only state ----------

    @property
    def is_monitoring(self) -> bool:
        return self.state.is_monitoring

    @property
    def is_connected(self) -> bool:
        return self.state.is_connected

    # ---------- lifecycle ----------

    def start(self) -> bool:
        """
        Transport first, then the observer, then the listener, so no
        event can arrive before someone is registered to hear it.

        Raises TransportUnavailable; nothing is left running in that case.
        Returns False if already running.
        """
        with self._lifecycle:
            if self.state.is_monitoring:
                return False

            cfg = self._config
            self._call_transport("start_multicast", cfg.multicast_port)
            try:
                self._call_transport(
                    "start_udp",
                    cfg.udp_port,
                    cfg.udp_timeout_seconds,
                    True,
                )
            except TransportUnavailable:
                self._safe_transport_call("stop_multicast")
                raise

            self.registry.register(self.handler)
            self.listener.start()

            self._log.info(
                "service",
                "started",
                {
                    "multicast_port": cfg.multicast_port,
                    "udp_port": cfg.udp_port,
                    "udp_timeout_seconds": cfg.udp_timeout_seconds,
                },
            )
            return True

    def stop(self) -> bool:
        """Idempotent. Returns False if the service was not running."""
        with self._lifecycle:
            if not self.state.is_monitoring:
                return False

            # Flags flip here, before the transport teardown, so readers
            # see "stopped" at once.
            self.listener.stop()
            self._safe_transport_call("stop_multicast")
            self._safe_transport_call("stop_udp")

            self._log.info("service", "stopped", {})
            return True

    def toggle(self) -> bool:
        """
        Stop if running, otherwise check permission and start.
        Start failures are logged and published; returns is_monitoring.
        """
        with self._lifecycle:
            if self.state.is_monitoring:
                self.stop()
                return self.state.is_monitoring

            try:
                self._ensure_permission()
                self.start()
            except PermissionDenied as exc:
                self._report_start_failure("permission", exc)
            except TransportUnavailable as exc:
                self._report_start_failure("transport", exc)

            return self.state.is_monitoring

    def shutdown(self) -> None:
        """App quit: stop and release the dispatch worker."""
        with self._lifecycle:
            self.stop()
            self.registry.shutdown(wait=False)

    # ---------- internals ----------

    def _ensure_permission(self) -> None:
        if self._permission is None:
            return
        if not self._permission.ensure_permission():
            raise PermissionDenied("Accessibility permission not granted.")

    def _call_transport(self, name: str, *args) -> None:
        try:
            getattr(self._transport, name)(*args)
        except TransportUnavailable:
            raise
        except Exception as exc:
            raise TransportUnavailable(
                "{0} failed: {1}".format(name, exc)
            ) from exc

    def _safe_transport_call(self, name: str) -> None:
        try:
            getattr(self._transport, name)()
        except Exception as exc:
            self._log.error(
                "transport",
                "{0}_failed".format(name),
                {"error": repr(exc)},
            )

    def _report_start_failure(self, reason: str, exc: Exception) -> None:
        self._log.error(
            "service",
            "start_failed",
            {"reason": reason, "error": str(exc)},
        )
        if self._hub is not None:
            self._hub.publish(ServiceStartFailed(reason=reason, message=str(exc)))
