from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtWidgets import QMessageBox

from ..domain.events import ApprovalDecided, Decision

CONNECTION_REQUEST_TITLE = "New Connection Request"
APPROVE_BUTTON = "Approve"
REJECT_BUTTON = "Reject"

Prompt = Callable[[str, str], Decision]


def prompt_with_message_box(device_id: str, details: str) -> Decision:
    """
    Modal Approve/Reject box. Must run on the GUI thread; blocks it until
    the operator answers. Closing the box counts as Reject.
    """
    box = QMessageBox()
    box.setIcon(QMessageBox.Information)
    box.setWindowTitle(CONNECTION_REQUEST_TITLE)
    box.setText(CONNECTION_REQUEST_TITLE)
    box.setInformativeText(details or "{0} wants to connect.".format(device_id))
    btn_approve = box.addButton(APPROVE_BUTTON, QMessageBox.AcceptRole)
    btn_reject = box.addButton(REJECT_BUTTON, QMessageBox.RejectRole)
    box.setDefaultButton(btn_approve)
    box.setEscapeButton(btn_reject)
    box.setWindowFlag(Qt.WindowStaysOnTopHint, True)

    box.exec()

    if box.clickedButton() == btn_approve:
        return Decision.APPROVE
    return Decision.REJECT


class ApprovalWorkflow(QObject):
    """
    Lives on the GUI thread.

    request() may be called from any thread (normally the dispatch
    worker). It emits sig_request; Qt queues it to the GUI thread where
    present_approval() prompts the operator and tells the transport.
    """

    sig_request = Signal(str, str)  # device_id, details

    def __init__(self, transport, log, hub=None, prompt: Optional[Prompt] = None):
        QObject.__init__(self)
        self._transport = transport
        self._log = log
        self._hub = hub
        self._prompt = prompt or prompt_with_message_box
        self.sig_request.connect(self._on_request, Qt.QueuedConnection)

    # ---------- entry points ----------

    def request(self, device_id: str, details: str = "") -> None:
        if not device_id:
            self._log.warn("approval", "ignored_empty_device_id", {})
            return
        self.sig_request.emit(device_id, details or "")

    @Slot(str, str)
    def _on_request(self, device_id: str, details: str) -> None:
        try:
            self.present_approval(device_id, details)
        except Exception as exc:
            # Slots have nowhere to propagate to; keep the GUI loop alive.
            self._log.error(
                "approval",
                "present_failed",
                {"device_id": device_id, "error": repr(exc)},
            )

    def present_approval(self, device_id: str, details: str) -> Decision:
        """
        GUI thread only. Prompts, then calls ApproveConnection or
        RejectConnection on the transport.
        """
        if not device_id:
            self._log.warn("approval", "rejected_empty_device_id", {})
            return Decision.REJECT

        self._log.info("approval", "prompt_shown", {"device_id": device_id})
        try:
            decision = self._prompt(device_id, details)
        except Exception as exc:
            self._log.error(
                "approval",
                "prompt_failed",
                {"device_id": device_id, "error": repr(exc)},
            )
            decision = Decision.REJECT

        if decision is not Decision.APPROVE:
            decision = Decision.REJECT

        if decision is Decision.APPROVE:
            self.approve_connection(device_id)
        else:
            self.reject_connection(device_id)

        self._log.info(
            "approval",
            "decided",
            {"device_id": device_id, "decision": decision.value},
        )
        if self._hub is not None:
            self._hub.publish(ApprovalDecided(device_id=device_id, decision=decision))
        return decision

    # ---------- transport calls ----------

    def approve_connection(self, device_id: str) -> None:
        if not device_id:
            return
        self._transport.approve_connection(device_id)

    def reject_connection(self, device_id: str) -> None:
        if not device_id:
            return
        self._transport.reject_connection(device_id)
