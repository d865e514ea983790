# -*- coding: utf-8 -*-
"""
native_transport.py
ctypes binding for the native pairing transport (multicast discovery, UDP
session, pairing handshake).

Exported C API:

    int   StartMulticast(int port);
    int   StartUDP(int port, double timeoutSeconds, bool flag);
    void  StopMulticast(void);
    void  StopUDP(void);
    char *GetConnectionEvent(void);      // blocking, caller frees
    void  ApproveConnection(char *deviceID);
    void  RejectConnection(char *deviceID);
    void  FreeString(char *s);           // optional

Start functions return 0 on success.

Usage:
    transport = NativeTransport.load("/usr/local/lib/libmousebridge.dylib")
    transport.start_multicast(55555)
    transport.start_udp(55555, 1.0, True)
"""

from __future__ import annotations

import ctypes
import ctypes.util
import sys
import threading
from typing import Optional

from ...domain.errors import TransportUnavailable


def _load_c_runtime():
    if sys.platform == "win32":
        return ctypes.cdll.msvcrt
    name = ctypes.util.find_library("c")
    return ctypes.CDLL(name)


class NativeTransport:
    """
    Thin typed wrapper over the native library. Knows nothing about event
    parsing or threads; every method maps to one C call.
    """

    def __init__(self, lib, libc=None):
        self._lib = lib
        try:
            self._bind()
        except AttributeError as exc:
            raise TransportUnavailable(
                "Transport library is missing a required symbol: {0}".format(exc)
            ) from exc

        # Prefer the library's own deallocator so allocator families match.
        free = getattr(lib, "FreeString", None)
        if free is None:
            free = (libc or _load_c_runtime()).free
        free.argtypes = [ctypes.c_void_p]
        free.restype = None
        self._free = free

    @classmethod
    def load(cls, path: str) -> "NativeTransport":
        try:
            lib = ctypes.CDLL(path)
        except OSError as exc:
            raise TransportUnavailable(
                "Cannot load transport library {0}: {1}".format(path, exc)
            ) from exc
        return cls(lib)

    def _bind(self) -> None:
        lib = self._lib

        lib.StartMulticast.argtypes = [ctypes.c_int]
        lib.StartMulticast.restype = ctypes.c_int

        lib.StartUDP.argtypes = [ctypes.c_int, ctypes.c_double, ctypes.c_bool]
        lib.StartUDP.restype = ctypes.c_int

        lib.StopMulticast.argtypes = []
        lib.StopMulticast.restype = None

        lib.StopUDP.argtypes = []
        lib.StopUDP.restype = None

        # c_void_p, not c_char_p: we need the raw pointer back to free it.
        lib.GetConnectionEvent.argtypes = []
        lib.GetConnectionEvent.restype = ctypes.c_void_p

        lib.ApproveConnection.argtypes = [ctypes.c_char_p]
        lib.ApproveConnection.restype = None

        lib.RejectConnection.argtypes = [ctypes.c_char_p]
        lib.RejectConnection.restype = None

    # ---------- lifecycle ----------

    def start_multicast(self, port: int) -> None:
        rc = self._lib.StartMulticast(int(port))
        if rc:
            raise TransportUnavailable(
                "StartMulticast({0}) failed with code {1}".format(port, rc)
            )

    def start_udp(self, port: int, timeout_seconds: float, flag: bool = True) -> None:
        rc = self._lib.StartUDP(int(port), float(timeout_seconds), bool(flag))
        if rc:
            raise TransportUnavailable(
                "StartUDP({0}) failed with code {1}".format(port, rc)
            )

    def stop_multicast(self) -> None:
        self._lib.StopMulticast()

    def stop_udp(self) -> None:
        self._lib.StopUDP()

    # ---------- events ----------

    def get_connection_event(self) -> Optional[int]:
        """Blocking. Returns a transport-owned char* address, or None."""
        return self._lib.GetConnectionEvent()

    def free(self, ptr: int) -> None:
        self._free(ptr)

    # ---------- decisions ----------

    def approve_connection(self, device_id: str) -> None:
        # create_string_buffer is NUL-terminated and lives for this call only.
        buf = ctypes.create_string_buffer(device_id.encode("utf-8"))
        self._lib.ApproveConnection(buf)

    def reject_connection(self, device_id: str) -> None:
        buf = ctypes.create_string_buffer(device_id.encode("utf-8"))
        self._lib.RejectConnection(buf)


class LazyNativeTransport:
    """
    Defers loading the library until first use, so the tray comes up even
    when the library is missing and Start reports TransportUnavailable.
    A failed load is retried on the next call.
    """

    def __init__(self, path: str):
        self._path = path
        self._impl: Optional[NativeTransport] = None
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def _get(self) -> NativeTransport:
        with self._lock:
            if self._impl is None:
                self._impl = NativeTransport.load(self._path)
            return self._impl

    def __getattr__(self, name):
        return getattr(self._get(), name)
