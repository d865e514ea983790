from __future__ import annotations

import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from ..domain.events import ConnectionEvent

ConnectionEventCallback = Callable[[ConnectionEvent], None]


class ObserverRegistry:
    """
    Fan-out of parsed connection events to registered callbacks.

    Concurrency:
      - register / unregister / clear are writers; they are serialized by
        a lock and swap in a new tuple (copy-on-write).
      - dispatch reads the current tuple once, so it sees exactly the
        callbacks registered before it was called.
      - Invocation happens on a single-worker executor: callbacks run in
        registration order, events arrive in dispatch order, and the
        listener thread never waits on a slow callback.
    """

    def __init__(self, log, executor: Optional[Executor] = None) -> None:
        self._log = log
        self._lock = threading.Lock()
        self._callbacks: Tuple[ConnectionEventCallback, ...] = ()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="ConnectionEventDispatch",
        )

    def __len__(self) -> int:
        return len(self._callbacks)

    def register(self, callback: ConnectionEventCallback) -> Callable[[], None]:
        """
        Add a callback. Returns a handle; calling it removes this
        registration (no-op if already cleared).
        """
        if callback is None:
            raise ValueError("callback must not be None.")

        # Wrap so the same callable registered twice gets two handles.
        entry = _Registration(callback)
        with self._lock:
            self._callbacks = self._callbacks + (entry,)

        def _unregister() -> None:
            with self._lock:
                self._callbacks = tuple(c for c in self._callbacks if c is not entry)

        return _unregister

    def clear(self) -> None:
        with self._lock:
            self._callbacks = ()

    def dispatch(self, event: ConnectionEvent) -> None:
        snapshot = self._callbacks
        if not snapshot:
            return
        try:
            self._executor.submit(self._invoke_all, snapshot, event)
        except RuntimeError:
            # Executor already shut down (app quitting).
            self._log.warn(
                "observers",
                "dispatch_after_shutdown",
                {"kind": event.raw_kind, "device_id": event.device_id},
            )

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

    # ---------- internals ----------

    def _invoke_all(self, callbacks, event: ConnectionEvent) -> None:
        for callback in callbacks:
            try:
                callback(event)
            except Exception as exc:
                # One bad observer must not starve the others.
                self._log.error(
                    "observers",
                    "callback_failed",
                    {"kind": event.raw_kind, "error": repr(exc)},
                )


class _Registration:
    __slots__ = ("callback",)

    def __init__(self, callback: ConnectionEventCallback) -> None:
        self.callback = callback

    def __call__(self, event: ConnectionEvent) -> None:
        self.callback(event)
