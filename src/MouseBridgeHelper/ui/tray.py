from __future__ import annotations
from pathlib import Path
from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtWidgets import QSystemTrayIcon, QMenu, QApplication, QStyle
from PySide6.QtGui import QAction, QIcon

from ..domain.events import (
    ConnectionStatusChanged,
    MonitoringChanged,
    ServiceStartFailed,
)
from .status_window import APP_NAME, connection_text, service_text

APP_ICON_DESCRIPTION = "Mouse Menu"
START_MENU_TITLE = "Start"
STOP_MENU_TITLE = "Stop"
SHOW_WINDOW_MENU_TITLE = "Show Window"
QUIT_MENU_TITLE = "Quit"

SERVICE_NOT_STARTED_TITLE = "Service Not Started"


class _HubRelay(QObject):
    """
    Created on the GUI thread. Hub events can fire on the listener or
    dispatch thread; re-emitting them as signals delivers them to the
    tray's slots on the GUI thread (QueuedConnection).
    """

    sig_changed = Signal()
    sig_failed = Signal(str, str)  # reason, message

    def __init__(self, hub):
        QObject.__init__(self)
        hub.subscribe(MonitoringChanged, lambda e: self.sig_changed.emit())
        hub.subscribe(ConnectionStatusChanged, lambda e: self.sig_changed.emit())
        hub.subscribe(ServiceStartFailed, lambda e: self.sig_failed.emit(e.reason, e.message))


class Tray:
    """
    Menu-bar / tray entry point:
      - status line (connected / not connected)
      - service line (running / stopped)
      - Start / Stop
      - Show Window
      - Quit (stops the service first)
    """

    def __init__(self, app: QApplication, controller, window, hub, log):
        self.app = app
        self.controller = controller
        self.window = window
        self.log = log

        # Resolve icon path relative to this file; fall back to a stock icon.
        base_dir = Path(__file__).resolve().parent
        icon_path = base_dir / "resources" / "MouseBridgeHelper.png"
        icon = QIcon(str(icon_path)) if icon_path.is_file() else QIcon()
        if icon.isNull():
            icon = self.app.style().standardIcon(QStyle.SP_ComputerIcon)

        self.tray = QSystemTrayIcon(icon, self.app)
        self.tray.setToolTip(APP_NAME)

        self.menu = QMenu()
        self.menu.setTitle(APP_ICON_DESCRIPTION)

        self.a_status = QAction("", self.menu)
        self.a_status.setEnabled(False)
        self.menu.addAction(self.a_status)

        self.a_service = QAction("", self.menu)
        self.a_service.setEnabled(False)
        self.menu.addAction(self.a_service)

        self.menu.addSeparator()

        self.a_toggle = QAction(START_MENU_TITLE, self.menu)
        self.a_toggle.triggered.connect(self._on_toggle)
        self.menu.addAction(self.a_toggle)

        a_show = QAction(SHOW_WINDOW_MENU_TITLE, self.menu)
        a_show.triggered.connect(self.window.show_window)
        self.menu.addAction(a_show)

        self.menu.addSeparator()

        a_quit = QAction(QUIT_MENU_TITLE, self.menu)
        a_quit.triggered.connect(self._on_quit)
        self.menu.addAction(a_quit)

        self.tray.setContextMenu(self.menu)

        self._relay = _HubRelay(hub)
        self._relay.sig_changed.connect(self.refresh, Qt.QueuedConnection)
        self._relay.sig_failed.connect(self._on_start_failed, Qt.QueuedConnection)

        self.refresh()

        self.tray.setVisible(True)
        self.tray.show()

        # left-click opens the status window
        self.tray.activated.connect(self._on_click)

    @Slot()
    def refresh(self) -> None:
        is_monitoring = self.controller.is_monitoring
        is_connected = self.controller.is_connected
        self.a_status.setText(connection_text(is_connected))
        self.a_service.setText(service_text(is_monitoring))
        self.a_toggle.setText(STOP_MENU_TITLE if is_monitoring else START_MENU_TITLE)
        self.tray.setToolTip("{0} ({1})".format(APP_NAME, connection_text(is_connected)))

    def _on_toggle(self) -> None:
        running = self.controller.toggle()
        self.log.info("ui", "toggle", {"running": running})
        self.refresh()

    @Slot(str, str)
    def _on_start_failed(self, reason: str, message: str) -> None:
        # The permission path already has its own remediation dialog.
        if reason == "permission":
            return
        self.tray.showMessage(
            SERVICE_NOT_STARTED_TITLE,
            message,
            QSystemTrayIcon.Warning,
        )

    def _on_quit(self) -> None:
        # Service teardown runs from QApplication.aboutToQuit.
        self.log.info("ui", "quit", {})
        self.app.quit()

    def _on_click(self, reason: QSystemTrayIcon.ActivationReason):
        if reason == QSystemTrayIcon.Trigger:
            if self.window.isVisible():
                self.window.hide()
            else:
                self.window.show_window()
