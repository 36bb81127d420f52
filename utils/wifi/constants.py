"""
WiFi-specific constants for scanning, caching and connecting.
"""

from __future__ import annotations

# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

SYSTEM_PROFILER_PATH = '/usr/sbin/system_profiler'
SYSTEM_PROFILER_DATA_TYPE = 'SPAirPortDataType'
NETWORKSETUP_PATH = '/usr/sbin/networksetup'
SECURITY_PATH = '/usr/bin/security'

# Default WiFi interface for networksetup
DEFAULT_WIFI_INTERFACE = 'en0'

# =============================================================================
# TIMEOUTS AND LIMITS
# =============================================================================

# system_profiler can take several seconds on a busy radio
DEFAULT_SCAN_TIMEOUT = 15.0

# Cap on captured scan output (bytes)
DEFAULT_SCAN_MAX_OUTPUT = 20 * 1024 * 1024

# Bytes per read from the scan pipe
SCAN_READ_CHUNK = 4096

DEFAULT_CONNECT_TIMEOUT = 10.0

# =============================================================================
# REPORT SECTIONS
# =============================================================================

SECTION_CURRENT_NETWORK = 'Current Network Information:'
SECTION_OTHER_NETWORKS = 'Other Local Wi-Fi Networks:'

PROPERTY_SECURITY = 'Security'
PROPERTY_CHANNEL = 'Channel'
PROPERTY_SIGNAL_NOISE = 'Signal / Noise'
PROPERTY_BSSID = 'BSSID'
PROPERTY_MAC_ADDRESS = 'MAC Address'

# =============================================================================
# RECORD DEFAULTS
# =============================================================================

DEFAULT_RSSI = -70

SECURITY_OPEN = 'Open'
SECURITY_NONE = 'None'
SECURITY_WEP = 'WEP'
SECURITY_UNKNOWN = 'Unknown'

# Labels that mean no password is needed (compared case-insensitively)
OPEN_SECURITY_LABELS = {'open', 'none'}

# =============================================================================
# SIGNAL BANDS
# =============================================================================

SIGNAL_STRONG = 'strong'          # >= -50 dBm
SIGNAL_MEDIUM = 'medium'          # -60 to -50 dBm
SIGNAL_WEAK = 'weak'              # -70 to -60 dBm
SIGNAL_VERY_WEAK = 'very_weak'    # < -70 dBm

RSSI_STRONG = -50
RSSI_MEDIUM = -60
RSSI_WEAK = -70


def get_signal_band(rssi: int) -> str:
    """Get signal band label from RSSI value."""
    if rssi >= RSSI_STRONG:
        return SIGNAL_STRONG
    elif rssi >= RSSI_MEDIUM:
        return SIGNAL_MEDIUM
    elif rssi >= RSSI_WEAK:
        return SIGNAL_WEAK
    return SIGNAL_VERY_WEAK


SIGNAL_BARS = {
    SIGNAL_STRONG: '▂▄▆█',
    SIGNAL_MEDIUM: '▂▄▆',
    SIGNAL_WEAK: '▂▄',
    SIGNAL_VERY_WEAK: '▂',
}


def get_signal_bars(rssi: int) -> str:
    """Get a block-character bar graph for an RSSI value."""
    return SIGNAL_BARS[get_signal_band(rssi)]


# =============================================================================
# CACHE
# =============================================================================

CACHE_KEY = 'wifi.networks'

# Bump when the cached snapshot layout changes
CACHE_VERSION = 3

CACHE_TTL_SECONDS = 5.0

# =============================================================================
# CONNECTION
# =============================================================================

MESSAGE_PASSWORD_REQUIRED = 'Password required for this network'
MESSAGE_SAVED_PASSWORD_REJECTED = "saved password didn't work"
MESSAGE_AUTH_FAILED = 'incorrect password or authentication failed'
MESSAGE_NETWORK_UNAVAILABLE = 'network not available'
MESSAGE_SHARE_NO_PASSWORD = (
    'Password not found in Keychain. '
    'Connect to the network first to save it in Keychain.'
)

# networksetup may exit 0 and still report a failure on stdout
NETWORKSETUP_FAILURE_MARKERS = (
    'Failed to join network',
    'Could not find network',
    'Error:',
)

# Characters escaped inside a double-quoted shell argument
SHELL_ESCAPE_CHARS = ('\\', '"', '$', '`')

# =============================================================================
# QR SHARING
# =============================================================================

QR_SECURITY_WPA = 'WPA'
QR_SECURITY_WEP = 'WEP'
QR_SECURITY_NOPASS = 'nopass'

# Characters escaped in a WIFI: payload field
QR_ESCAPE_CHARS = ('\\', ';', ',', '"', ':', '.')

# =============================================================================
# EVENTS
# =============================================================================

EVENT_QUEUE_SIZE = 1000

EVENT_SCAN_COMPLETE = 'scan_complete'
EVENT_SCAN_ERROR = 'scan_error'
EVENT_CONNECT_STARTED = 'connect_started'
EVENT_CONNECT_SUCCEEDED = 'connect_succeeded'
EVENT_CONNECT_FAILED = 'connect_failed'
EVENT_PASSWORD_REQUIRED = 'password_required'
