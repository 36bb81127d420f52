"""
WiFi error types and connect-failure classification.

networksetup only reports failures as free text, so classification is done
by substring sniffing in classify_connect_error(). Swap that function to
support a different connect tool.
"""

from __future__ import annotations

from .constants import (
    MESSAGE_AUTH_FAILED,
    MESSAGE_NETWORK_UNAVAILABLE,
)


class WiFiError(Exception):
    """Base class for WiFi errors."""


class ParseAnomaly(WiFiError):
    """Report text did not have the expected shape."""


class ScanUnavailable(WiFiError):
    """The scan command failed, timed out or produced unusable output."""


class CredentialNotFound(WiFiError):
    """No saved password exists for the requested SSID."""

    def __init__(self, ssid: str, message: str | None = None):
        self.ssid = ssid
        super().__init__(message or f"No saved password for '{ssid}'")


class ConnectFailure(WiFiError):
    """The OS connect command reported a failure."""

    kind = 'unknown'

    def __init__(self, message: str, raw: str = ''):
        self.message = message
        self.raw = raw
        super().__init__(message)


class AuthenticationFailed(ConnectFailure):
    kind = 'authentication_failed'


class NetworkUnavailable(ConnectFailure):
    kind = 'network_unavailable'


class UnknownConnectFailure(ConnectFailure):
    kind = 'unknown'


def classify_connect_error(raw: str) -> ConnectFailure:
    """
    Map raw connect diagnostics to a ConnectFailure.

    Args:
        raw: stderr/stdout text from the connect command.

    Returns:
        AuthenticationFailed, NetworkUnavailable or UnknownConnectFailure.
    """
    text = (raw or '').strip()
    lowered = text.lower()

    if 'password' in lowered or 'authentication' in lowered:
        return AuthenticationFailed(MESSAGE_AUTH_FAILED, raw=text)

    if 'network' in lowered or 'not found' in lowered:
        return NetworkUnavailable(MESSAGE_NETWORK_UNAVAILABLE, raw=text)

    return UnknownConnectFailure(text or 'Connection failed', raw=text)
