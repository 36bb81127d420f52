"""
Configuration settings for WiFi Connect.

Settings can be overridden via environment variables prefixed with
WIFICONNECT_, e.g. WIFICONNECT_WIFI_INTERFACE=en1.
"""

from __future__ import annotations

import os
from pathlib import Path

# Application version
VERSION = "1.2.0"


def _get_env(key: str, default: str) -> str:
    """Get environment variable with WIFICONNECT_ prefix."""
    return os.environ.get(f'WIFICONNECT_{key}', default)


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    try:
        return int(_get_env(key, str(default)))
    except ValueError:
        return default


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    try:
        return float(_get_env(key, str(default)))
    except ValueError:
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    val = _get_env(key, str(default)).lower()
    return val in ('true', '1', 'yes', 'on')


# Server settings
HOST = _get_env('HOST', '127.0.0.1')
PORT = _get_env_int('PORT', 5055)
DEBUG = _get_env_bool('DEBUG', False)

# Logging
LOG_LEVEL = _get_env('LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# WiFi interface used by networksetup
WIFI_INTERFACE = _get_env('WIFI_INTERFACE', 'en0')

# Scan limits
SCAN_TIMEOUT = _get_env_float('SCAN_TIMEOUT', 15.0)
SCAN_MAX_OUTPUT_BYTES = _get_env_int('SCAN_MAX_OUTPUT_BYTES', 20 * 1024 * 1024)

# Connect limits
CONNECT_TIMEOUT = _get_env_float('CONNECT_TIMEOUT', 10.0)

# Scan cache freshness window (seconds)
CACHE_TTL_SECONDS = _get_env_float('CACHE_TTL_SECONDS', 5.0)

# Application brought back to the foreground after a Keychain prompt
FOCUS_APP = _get_env('FOCUS_APP', 'Terminal')

# Database location
DB_DIR = Path(_get_env('DB_DIR', str(Path(__file__).parent / 'instance')))
