"""
WiFi network discovery and connection for macOS.

Scans with system_profiler, caches the parsed snapshot briefly, and joins
networks with networksetup, trying the Keychain password before asking for
one.
"""

from .cache import MemoryStore, NetworkCache, SettingsStore
from .connector import NetworkSetupConnector, build_connect_command, escape_shell_value
from .constants import CACHE_TTL_SECONDS, CACHE_VERSION, DEFAULT_WIFI_INTERFACE
from .controller import (
    ConnectionController,
    create_wifi_controller,
    get_wifi_controller,
    reset_wifi_controller,
)
from .errors import (
    AuthenticationFailed,
    ConnectFailure,
    CredentialNotFound,
    NetworkUnavailable,
    ParseAnomaly,
    ScanUnavailable,
    UnknownConnectFailure,
    WiFiError,
    classify_connect_error,
)
from .keychain import KeychainCredentialStore
from .models import (
    CacheEntry,
    ConnectionAttempt,
    ConnectionOutcome,
    ConnectionState,
    NetworkRecord,
    ScanSnapshot,
    SharePayload,
    is_open_security,
)
from .parsers import parse_system_profiler
from .scanner import WiFiScanner, run_system_profiler

__all__ = [
    # Cache
    'NetworkCache',
    'SettingsStore',
    'MemoryStore',
    'CACHE_TTL_SECONDS',
    'CACHE_VERSION',
    # Connect primitive
    'NetworkSetupConnector',
    'build_connect_command',
    'escape_shell_value',
    'DEFAULT_WIFI_INTERFACE',
    # Controller
    'ConnectionController',
    'create_wifi_controller',
    'get_wifi_controller',
    'reset_wifi_controller',
    # Errors
    'WiFiError',
    'ParseAnomaly',
    'ScanUnavailable',
    'CredentialNotFound',
    'ConnectFailure',
    'AuthenticationFailed',
    'NetworkUnavailable',
    'UnknownConnectFailure',
    'classify_connect_error',
    # Credentials
    'KeychainCredentialStore',
    # Models
    'NetworkRecord',
    'ScanSnapshot',
    'CacheEntry',
    'ConnectionAttempt',
    'ConnectionOutcome',
    'ConnectionState',
    'SharePayload',
    'is_open_security',
    # Scanning
    'parse_system_profiler',
    'WiFiScanner',
    'run_system_profiler',
]
