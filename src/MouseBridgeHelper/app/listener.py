from __future__ import annotations

import threading
from typing import Optional

from ..domain.errors import EventParseError
from ..domain.parser import parse_event_line

LISTENER_THREAD_NAME = "ConnectionEventListener"

# Pause after an unexpected source failure so a broken transport
# doesn't spin the CPU.
SOURCE_ERROR_BACKOFF_SECONDS = 0.5


class EventListener:
    """
    Background drain of the transport's event stream.

    - Owns one daemon thread per monitoring session.
    - Each iteration: one blocking next_event_line(), parse, dispatch.
    - Stop is cooperative: the cancel flag is only seen between blocking
      reads, so shutdown waits for the transport's own receive timeout.
    """

    def __init__(self, source, registry, state, log):
        self._source = source
        self._registry = registry
        self._state = state
        self._log = log

        self._lock = threading.Lock()
        self._t: Optional[threading.Thread] = None
        self._cancel: Optional[threading.Event] = None

    # ---------- lifecycle ----------

    @property
    def is_running(self) -> bool:
        return self._state.is_monitoring

    def start(self) -> bool:
        """Returns False if already running."""
        with self._lock:
            # Flag first: anyone checking is_monitoring after this point
            # sees a running listener, even before the thread exists.
            if not self._state.begin_monitoring():
                return False

            cancel = threading.Event()
            t = threading.Thread(
                target=self._run,
                args=(cancel,),
                name=LISTENER_THREAD_NAME,
                daemon=True,
            )
            self._cancel = cancel
            self._t = t
            t.start()

        self._log.info("listener", "started", {})
        return True

    def stop(self, join_timeout: Optional[float] = None) -> bool:
        """
        Returns False if already stopped. Never blocks unless join_timeout
        is given; the old thread exits once its current read returns.
        """
        with self._lock:
            if not self._state.end_monitoring():
                return False
            cancel, t = self._cancel, self._t
            self._cancel = None
            self._t = None
            if cancel is not None:
                cancel.set()
            self._registry.clear()

        if join_timeout is not None and t is not None and t is not threading.current_thread():
            t.join(timeout=join_timeout)

        self._log.info(
            "listener",
            "stopped",
            {"thread_alive": bool(t is not None and t.is_alive())},
        )
        return True

    # ---------- internals ----------

    def _run(self, cancel: threading.Event) -> None:
        while not cancel.is_set() and self._state.is_monitoring:
            try:
                line = self._source.next_event_line()
            except Exception as e:
                self._log.error("listener", "source_error", {"error": repr(e)})
                cancel.wait(SOURCE_ERROR_BACKOFF_SECONDS)
                continue

            # A read that was in flight when stop() ran belongs to the
            # old session; drop it.
            if cancel.is_set():
                break

            if not line:
                continue

            try:
                event = parse_event_line(line)
            except EventParseError as e:
                self._log.warn(
                    "listener",
                    "parse_failed",
                    {"reason": e.reason, "line": e.line},
                )
                continue

            self._log.debug(
                "listener",
                "event",
                {"kind": event.raw_kind, "device_id": event.device_id},
            )
            self._registry.dispatch(event)

        self._log.debug("listener", "loop_exited", {})
