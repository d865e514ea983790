# -*- coding: utf-8 -*-
from __future__ import annotations

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import QWidget, QVBoxLayout, QFormLayout, QLabel, QPushButton

from ..domain.events import ConnectionStatusChanged, MonitoringChanged

APP_NAME = "Air Mouse"

CONNECTED_STATUS = "Connected to Mobile"
NOT_CONNECTED_STATUS = "Not Connected"
SERVICE_RUNNING = "Running"
SERVICE_STOPPED = "Stopped"

STATUS_LABEL = "Status:"
SERVICE_LABEL = "Service:"
START_SERVICE_BUTTON = "Start Service"
STOP_SERVICE_BUTTON = "Stop Service"
WINDOW_DESCRIPTION = (
    "Use the status bar menu to control the service.\n"
    "The app will continue running even when this window is closed."
)

WINDOW_WIDTH = 350
WINDOW_HEIGHT = 250
BUTTON_MIN_WIDTH = 120


def connection_text(is_connected: bool) -> str:
    return CONNECTED_STATUS if is_connected else NOT_CONNECTED_STATUS


def service_text(is_monitoring: bool) -> str:
    return SERVICE_RUNNING if is_monitoring else SERVICE_STOPPED


class StatusWindow(QWidget):
    """
    Small status window: connection status, service status, Start/Stop.

    Hub events may arrive on any thread; they are re-emitted as queued
    signals so the labels only change on the GUI thread. Closing the
    window only hides it.
    """

    _sig_monitoring = Signal(bool)
    _sig_connected = Signal(bool)

    def __init__(self, controller, hub):
        super().__init__(None)
        self._controller = controller

        self.setWindowTitle(APP_NAME)
        self.resize(WINDOW_WIDTH, WINDOW_HEIGHT)

        layout = QVBoxLayout(self)

        form = QFormLayout()
        self._status_value = QLabel(NOT_CONNECTED_STATUS, self)
        self._service_value = QLabel(SERVICE_STOPPED, self)
        form.addRow(STATUS_LABEL, self._status_value)
        form.addRow(SERVICE_LABEL, self._service_value)
        layout.addLayout(form)

        self._toggle_button = QPushButton(START_SERVICE_BUTTON, self)
        self._toggle_button.setMinimumWidth(BUTTON_MIN_WIDTH)
        self._toggle_button.clicked.connect(self._on_toggle_clicked)
        layout.addWidget(self._toggle_button, 0, Qt.AlignHCenter)

        description = QLabel(WINDOW_DESCRIPTION, self)
        description.setWordWrap(True)
        layout.addWidget(description)
        layout.addStretch()

        self._sig_monitoring.connect(self._set_monitoring_impl, Qt.QueuedConnection)
        self._sig_connected.connect(self._set_connected_impl, Qt.QueuedConnection)

        hub.subscribe(MonitoringChanged, lambda e: self._sig_monitoring.emit(e.is_monitoring))
        hub.subscribe(ConnectionStatusChanged, lambda e: self._sig_connected.emit(e.is_connected))

        self.refresh()

    # ---------- public API ----------

    def refresh(self) -> None:
        """GUI thread: re-read state from the controller."""
        self._set_monitoring_impl(self._controller.is_monitoring)
        self._set_connected_impl(self._controller.is_connected)

    def show_window(self) -> None:
        self.refresh()
        self.show()
        self.raise_()
        self.activateWindow()

    # ---------- Qt overrides / slots ----------

    def closeEvent(self, e):
        e.ignore()
        self.hide()

    @Slot()
    def _on_toggle_clicked(self) -> None:
        self._controller.toggle()
        self.refresh()

    @Slot(bool)
    def _set_monitoring_impl(self, is_monitoring: bool) -> None:
        self._service_value.setText(service_text(is_monitoring))
        self._toggle_button.setText(
            STOP_SERVICE_BUTTON if is_monitoring else START_SERVICE_BUTTON
        )

    @Slot(bool)
    def _set_connected_impl(self, is_connected: bool) -> None:
        self._status_value.setText(connection_text(is_connected))
