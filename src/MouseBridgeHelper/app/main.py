# src/MouseBridgeHelper/app/main.py
from __future__ import annotations

import sys
from PySide6.QtWidgets import QApplication

# ---- infrastructure ----
from ..infrastructure.system.config import load_service_config
from ..infrastructure.system.event_hub import EventHub
from ..infrastructure.system.logger import Logger
from ..infrastructure.system.permissions import PermissionChecker
from ..infrastructure.transport.event_source import EventSourceAdapter
from ..infrastructure.transport.native_transport import LazyNativeTransport

# ---- UI ----
from ..ui.status_window import StatusWindow
from ..ui.tray import Tray

# ---- app ----
from .approval import ApprovalWorkflow
from .service_controller import ServiceController


def _qt_bootstrap(app: QApplication) -> None:
    # Tray-resident: closing the status window must not quit.
    app.setQuitOnLastWindowClosed(False)


def main() -> int:
    # ---- Qt bootstrap ----
    app = QApplication(sys.argv)
    _qt_bootstrap(app)

    # ---- infrastructure ----
    config = load_service_config()
    log = Logger(level=config.log_level)
    hub = EventHub()
    transport = LazyNativeTransport(config.transport_library_path)
    source = EventSourceAdapter(transport)
    permission = PermissionChecker(log, config.permission_alert_delay_seconds)

    log.info(
        "service",
        "config_loaded",
        {
            "multicast_port": config.multicast_port,
            "udp_port": config.udp_port,
            "udp_timeout_seconds": config.udp_timeout_seconds,
            "transport_library_path": config.transport_library_path,
        },
    )

    # ---- approval (constructed on the GUI thread so its slot runs there) ----
    approval = ApprovalWorkflow(transport, log, hub)

    # ---- controller ----
    controller = ServiceController(
        transport,
        source,
        config,
        log,
        hub=hub,
        approval=approval,
        permission=permission,
    )

    # ---- UI ----
    window = StatusWindow(controller, hub)
    tray = Tray(app, controller, window, hub, log)  # noqa: F841 (kept alive for app lifetime)

    app.aboutToQuit.connect(controller.shutdown)

    # ---- run ----
    window.show_window()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
