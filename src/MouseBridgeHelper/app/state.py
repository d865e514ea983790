from __future__ import annotations

import threading

from ..domain.events import ConnectionStatusChanged, MonitoringChanged


class ServiceState:
    """
    Monitoring / connected flags shared by the GUI thread and the listener.

    States:
      not monitoring
      monitoring, not connected
      monitoring, connected

    is_connected is never True while is_monitoring is False. Changes are
    published to the hub (outside the lock) so the UI can follow along.
    """

    def __init__(self, hub=None) -> None:
        self._hub = hub
        self._lock = threading.Lock()
        self._monitoring = False
        self._connected = False

    @property
    def is_monitoring(self) -> bool:
        with self._lock:
            return self._monitoring

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._connected

    def snapshot(self) -> tuple:
        """(is_monitoring, is_connected) read atomically."""
        with self._lock:
            return self._monitoring, self._connected

    def begin_monitoring(self) -> bool:
        """Set monitoring. Returns False if it was already set."""
        with self._lock:
            if self._monitoring:
                return False
            self._monitoring = True
        self._publish(MonitoringChanged(is_monitoring=True))
        return True

    def end_monitoring(self) -> bool:
        """
        Clear monitoring and force connected off in one step.
        Returns False if monitoring was already off.
        """
        with self._lock:
            if not self._monitoring:
                return False
            was_connected = self._connected
            self._monitoring = False
            self._connected = False

        if was_connected:
            self._publish(ConnectionStatusChanged(is_connected=False))
        self._publish(MonitoringChanged(is_monitoring=False))
        return True

    def set_connected(self, connected: bool) -> bool:
        """
        Returns True if the flag changed. Setting connected while not
        monitoring is refused (a late event from a stopped listener).
        """
        connected = bool(connected)
        with self._lock:
            if connected and not self._monitoring:
                return False
            if self._connected == connected:
                return False
            self._connected = connected
        self._publish(ConnectionStatusChanged(is_connected=connected))
        return True

    def _publish(self, evt) -> None:
        if self._hub is not None:
            self._hub.publish(evt)
