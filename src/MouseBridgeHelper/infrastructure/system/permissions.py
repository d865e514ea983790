# -*- coding: utf-8 -*-
"""
permissions.py
Accessibility permission precondition for starting the service.

On macOS the app needs Accessibility access to drive the pointer. We ask
AXIsProcessTrustedWithOptions with the prompt option, which makes the
system show its own dialog. If access is not granted we show our own
remediation box a little later, so it doesn't land on top of the system
one. Other platforms have no such gate.
"""

from __future__ import annotations

import ctypes
import sys
from typing import Callable, Optional

from PySide6.QtCore import QTimer, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QMessageBox

ACCESSIBILITY_NEEDED_TITLE = "Accessibility Access Needed"
ACCESSIBILITY_NEEDED_MESSAGE = (
    "This app requires Accessibility access to control your mouse or keyboard.\n"
    "Please enable it in System Settings → Privacy & Security → Accessibility."
)
OPEN_SETTINGS_BUTTON = "Open Settings"
CANCEL_BUTTON = "Cancel"
ACCESSIBILITY_SETTINGS_URL = (
    "x-apple.systempreferences:com.apple.preference.security?Privacy_Accessibility"
)

_APPLICATION_SERVICES = (
    "/System/Library/Frameworks/ApplicationServices.framework/ApplicationServices"
)
_CORE_FOUNDATION = "/System/Library/Frameworks/CoreFoundation.framework/CoreFoundation"


def _macos_is_trusted(prompt: bool) -> bool:
    ax = ctypes.cdll.LoadLibrary(_APPLICATION_SERVICES)

    if not prompt:
        ax.AXIsProcessTrusted.restype = ctypes.c_bool
        return bool(ax.AXIsProcessTrusted())

    cf = ctypes.cdll.LoadLibrary(_CORE_FOUNDATION)
    cf.CFDictionaryCreate.restype = ctypes.c_void_p
    cf.CFDictionaryCreate.argtypes = [
        ctypes.c_void_p,
        ctypes.POINTER(ctypes.c_void_p),
        ctypes.POINTER(ctypes.c_void_p),
        ctypes.c_long,
        ctypes.c_void_p,
        ctypes.c_void_p,
    ]
    cf.CFRelease.argtypes = [ctypes.c_void_p]
    cf.CFRelease.restype = None
    ax.AXIsProcessTrustedWithOptions.argtypes = [ctypes.c_void_p]
    ax.AXIsProcessTrustedWithOptions.restype = ctypes.c_bool

    # Exported CFStringRef / CFBooleanRef globals and callback structs.
    key = ctypes.c_void_p.in_dll(ax, "kAXTrustedCheckOptionPrompt")
    true = ctypes.c_void_p.in_dll(cf, "kCFBooleanTrue")
    key_callbacks = ctypes.c_void_p.in_dll(cf, "kCFTypeDictionaryKeyCallBacks")
    value_callbacks = ctypes.c_void_p.in_dll(cf, "kCFTypeDictionaryValueCallBacks")

    keys = (ctypes.c_void_p * 1)(key.value)
    values = (ctypes.c_void_p * 1)(true.value)
    options = cf.CFDictionaryCreate(
        None,
        keys,
        values,
        1,
        ctypes.addressof(key_callbacks),
        ctypes.addressof(value_callbacks),
    )
    try:
        return bool(ax.AXIsProcessTrustedWithOptions(options))
    finally:
        if options:
            cf.CFRelease(options)


def query_accessibility_permission() -> bool:
    """Ask the OS (showing its prompt if needed). True when granted."""
    if sys.platform != "darwin":
        return True
    return _macos_is_trusted(prompt=True)


def show_remediation_dialog() -> None:
    box = QMessageBox()
    box.setIcon(QMessageBox.Warning)
    box.setWindowTitle(ACCESSIBILITY_NEEDED_TITLE)
    box.setText(ACCESSIBILITY_NEEDED_TITLE)
    box.setInformativeText(ACCESSIBILITY_NEEDED_MESSAGE)
    btn_open = box.addButton(OPEN_SETTINGS_BUTTON, QMessageBox.AcceptRole)
    btn_cancel = box.addButton(CANCEL_BUTTON, QMessageBox.RejectRole)
    box.setEscapeButton(btn_cancel)

    box.exec()

    if box.clickedButton() == btn_open:
        QDesktopServices.openUrl(QUrl(ACCESSIBILITY_SETTINGS_URL))


class PermissionChecker:
    """
    ensure_permission() -> bool, called on the GUI thread before start.

    On denial the remediation dialog is scheduled alert_delay_seconds later
    on the GUI event loop instead of being shown inline.
    """

    def __init__(
        self,
        log,
        alert_delay_seconds: float = 1.0,
        query: Optional[Callable[[], bool]] = None,
        remediation: Optional[Callable[[], None]] = None,
    ):
        self._log = log
        self._alert_delay_ms = int(max(0.0, float(alert_delay_seconds)) * 1000)
        self._query = query or query_accessibility_permission
        self._remediation = remediation or show_remediation_dialog

    def ensure_permission(self, show_alert: bool = True) -> bool:
        try:
            granted = bool(self._query())
        except Exception as exc:
            # Can't confirm the grant; treat as denied so the operator is told.
            self._log.error("permission", "query_failed", {"error": repr(exc)})
            granted = False

        if granted:
            self._log.info("permission", "granted", {})
            return True

        self._log.warn("permission", "denied", {"show_alert": show_alert})
        if show_alert:
            QTimer.singleShot(self._alert_delay_ms, self._show_remediation)
        return False

    def _show_remediation(self) -> None:
        try:
            self._remediation()
        except Exception as exc:
            self._log.error("permission", "remediation_failed", {"error": repr(exc)})
