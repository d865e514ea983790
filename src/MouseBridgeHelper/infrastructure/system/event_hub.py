import threading
from collections import defaultdict
from typing import Callable, Type, Dict, List, Any


class EventHub:
    """
    Type-keyed publish/subscribe for UI-facing notifications.

    publish() runs handlers on the calling thread; handlers that touch Qt
    widgets must marshal to the GUI thread themselves.
    """

    def __init__(self):
        self._subs: Dict[Type, List[Callable]] = defaultdict(list)
        self._lock = threading.Lock()

    def publish(self, evt: Any) -> None:
        with self._lock:
            handlers = list(self._subs[type(evt)])
        for handler in handlers:
            handler(evt)

    def subscribe(self, evt_type: Type, handler: Callable):
        with self._lock:
            self._subs[evt_type].append(handler)

        def _unsubscribe():
            with self._lock:
                if handler in self._subs[evt_type]:
                    self._subs[evt_type].remove(handler)

        return _unsubscribe
