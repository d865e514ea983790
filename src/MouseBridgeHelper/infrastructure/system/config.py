from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

# Layout:
#   ProjectRoot/
#     src/
#       MouseBridgeHelper/
#         settings.json        <-- expected here
#         infrastructure/
#           system/
#             config.py        <-- this file

_PACKAGE_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SETTINGS_PATH = _PACKAGE_ROOT / "settings.json"
SETTINGS_PATH_ENV = "MOUSEBRIDGE_SETTINGS"

# Network configuration handed to the native transport at start.
DEFAULT_MULTICAST_PORT = 55555
DEFAULT_UDP_PORT = 55555
DEFAULT_UDP_TIMEOUT_SECONDS = 1.0
MIN_UDP_TIMEOUT_SECONDS = 0.1

DEFAULT_PERMISSION_ALERT_DELAY_SECONDS = 1.0
DEFAULT_LOG_LEVEL = "INFO"
_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def default_transport_library_name() -> str:
    if sys.platform == "darwin":
        return "libmousebridge.dylib"
    if sys.platform == "win32":
        return "mousebridge.dll"
    return "libmousebridge.so"


@dataclass(frozen=True)
class ServiceConfig:
    multicast_port: int = DEFAULT_MULTICAST_PORT
    udp_port: int = DEFAULT_UDP_PORT
    udp_timeout_seconds: float = DEFAULT_UDP_TIMEOUT_SECONDS
    transport_library_path: str = ""
    permission_alert_delay_seconds: float = DEFAULT_PERMISSION_ALERT_DELAY_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL


def get_settings_path() -> Path:
    """
    settings.json location: $MOUSEBRIDGE_SETTINGS if set, otherwise
    DEFAULT_SETTINGS_PATH beside the package.
    """
    override = os.environ.get(SETTINGS_PATH_ENV)
    if override:
        return Path(override)
    return DEFAULT_SETTINGS_PATH


def load_settings(settings_path: Path | None = None) -> Dict[str, Any]:
    """
    Load the MouseBridgeHelper settings.json.

    Every key is optional:

        {
          "multicastPort": 55555,
          "udpPort": 55555,
          "udpTimeoutSeconds": 1,
          "transportLibraryPath": "/usr/local/lib/libmousebridge.dylib",
          "permissionAlertDelaySeconds": 1,
          "logLevel": "INFO"
        }
    """
    path = settings_path or get_settings_path()

    if not path.is_file():
        raise RuntimeError(
            "MouseBridgeHelper settings.json not found at: {0}".format(path)
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise RuntimeError(
            "Invalid JSON in MouseBridgeHelper settings file: {0}".format(path)
        ) from exc

    if not isinstance(data, dict):
        raise RuntimeError(
            "Root of MouseBridgeHelper settings.json must be an object/dict."
        )

    return data


def _get_port(settings: Dict[str, Any], key: str, default: int) -> int:
    raw = settings.get(key, default)
    # bool is an int subclass; true/false is never a port.
    if isinstance(raw, bool):
        return default
    try:
        port = int(raw)
    except (TypeError, ValueError):
        return default
    if port < 1 or port > 65535:
        return default
    return port


def get_multicast_port(settings: Dict[str, Any]) -> int:
    return _get_port(settings, "multicastPort", DEFAULT_MULTICAST_PORT)


def get_udp_port(settings: Dict[str, Any]) -> int:
    return _get_port(settings, "udpPort", DEFAULT_UDP_PORT)


def get_udp_timeout_seconds(settings: Dict[str, Any]) -> float:
    """
    Timeout the transport uses for each blocking receive.

    This also bounds how long stop() can take to be observed by the
    listener thread, so it is floored at MIN_UDP_TIMEOUT_SECONDS.
    """
    raw = settings.get("udpTimeoutSeconds", DEFAULT_UDP_TIMEOUT_SECONDS)
    if isinstance(raw, bool):
        return DEFAULT_UDP_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_UDP_TIMEOUT_SECONDS
    if timeout != timeout or timeout <= 0:  # NaN or non-positive
        return DEFAULT_UDP_TIMEOUT_SECONDS
    return max(timeout, MIN_UDP_TIMEOUT_SECONDS)


def get_transport_library_path(settings: Dict[str, Any]) -> str:
    """
    Path (or bare name, resolved by the dynamic loader) of the native
    transport library. Relative paths resolve against the project root.
    """
    raw = settings.get("transportLibraryPath")
    if not isinstance(raw, str) or not raw.strip():
        return default_transport_library_name()

    path = Path(raw.strip())
    if path.is_absolute() or len(path.parts) == 1:
        return str(path)

    project_root = DEFAULT_SETTINGS_PATH.parent.parent.parent
    return str(project_root / path)


def get_permission_alert_delay_seconds(settings: Dict[str, Any]) -> float:
    raw = settings.get(
        "permissionAlertDelaySeconds",
        DEFAULT_PERMISSION_ALERT_DELAY_SECONDS,
    )
    try:
        delay = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_PERMISSION_ALERT_DELAY_SECONDS
    if delay != delay or delay < 0:
        return DEFAULT_PERMISSION_ALERT_DELAY_SECONDS
    return delay


def get_log_level(settings: Dict[str, Any]) -> str:
    raw = settings.get("logLevel", DEFAULT_LOG_LEVEL)
    if not isinstance(raw, str):
        return DEFAULT_LOG_LEVEL
    level = raw.strip().upper()
    if level == "WARNING":
        level = "WARN"
    if level not in _LOG_LEVELS:
        return DEFAULT_LOG_LEVEL
    return level


def load_service_config(
    settings: Optional[Dict[str, Any]] = None
) -> ServiceConfig:
    """
    Build the normalized ServiceConfig.

    If settings is None, settings.json is loaded; a missing or invalid
    file falls back to defaults so the tray still comes up and the
    operator can fix the file and retry.
    """
    if settings is None:
        try:
            settings = load_settings()
        except RuntimeError:
            settings = {}

    return ServiceConfig(
        multicast_port=get_multicast_port(settings),
        udp_port=get_udp_port(settings),
        udp_timeout_seconds=get_udp_timeout_seconds(settings),
        transport_library_path=get_transport_library_path(settings),
        permission_alert_delay_seconds=get_permission_alert_delay_seconds(settings),
        log_level=get_log_level(settings),
    )
