import datetime as _dt
import json
import sys
import threading

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


class Logger:
    """
    JSON-lines logger shared by the GUI thread, the listener thread and the
    dispatch worker. One object per line, written under a lock so lines
    from different threads never interleave.
    """

    def __init__(self, level="INFO", stream=None):
        self._min = _LEVELS.get(str(level).upper(), _LEVELS["INFO"])
        self._stream = stream
        self._lock = threading.Lock()

    def _emit(self, level, event, message, ctx):
        if _LEVELS[level] < self._min:
            return
        ts = _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")
        line = {
            "ts": ts,
            "level": level,
            "event": event,
            "msg": message,
            "thread": threading.current_thread().name,
            "ctx": ctx or {},
        }
        text = json.dumps(line, default=str)
        stream = self._stream or sys.stdout
        with self._lock:
            stream.write(text + "\n")
            stream.flush()

    def info(self, event, message, ctx=None):
        self._emit("INFO", event, message, ctx)

    def debug(self, event, message, ctx=None):
        self._emit("DEBUG", event, message, ctx)

    def warn(self, event, message, ctx=None):
        self._emit("WARN", event, message, ctx)

    def error(self, event, message, ctx=None):
        self._emit("ERROR", event, message, ctx)
