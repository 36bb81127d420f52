"""
WiFi data models for scanning, caching and connecting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .constants import (
    DEFAULT_RSSI,
    OPEN_SECURITY_LABELS,
    QR_ESCAPE_CHARS,
    QR_SECURITY_NOPASS,
    QR_SECURITY_WEP,
    QR_SECURITY_WPA,
    SECURITY_UNKNOWN,
    get_signal_band,
    get_signal_bars,
)


def is_open_security(security: Optional[str]) -> bool:
    """Check if a security label means no password is needed."""
    return (security or '').strip().lower() in OPEN_SECURITY_LABELS


@dataclass
class NetworkRecord:
    """A single network seen in one scan."""

    ssid: str
    channel: str
    signal_strength: int = DEFAULT_RSSI
    security: str = SECURITY_UNKNOWN
    station_id: str = ''
    is_current: bool = False

    @property
    def key(self) -> tuple[str, str]:
        """Identity within a snapshot."""
        return (self.ssid, self.channel)

    @property
    def is_open(self) -> bool:
        return is_open_security(self.security)

    @property
    def is_hidden(self) -> bool:
        return not self.ssid

    @property
    def signal_band(self) -> str:
        return get_signal_band(self.signal_strength)

    @property
    def signal_bars(self) -> str:
        return get_signal_bars(self.signal_strength)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'ssid': self.ssid,
            'channel': self.channel,
            'signal_strength': self.signal_strength,
            'security': self.security,
            'station_id': self.station_id,
            'is_current': self.is_current,
            'is_open': self.is_open,
            'signal_band': self.signal_band,
            'signal_bars': self.signal_bars,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'NetworkRecord':
        return cls(
            ssid=str(data['ssid']),
            channel=str(data['channel']),
            signal_strength=int(data.get('signal_strength', DEFAULT_RSSI)),
            security=str(data.get('security', SECURITY_UNKNOWN)),
            station_id=str(data.get('station_id', '')),
            is_current=bool(data.get('is_current', False)),
        )


@dataclass
class ScanSnapshot:
    """Result of parsing one network report."""

    current_ssid: str = ''
    records: list[NetworkRecord] = field(default_factory=list)

    # Metadata, not part of equality
    warnings: list[str] = field(default_factory=list, compare=False)
    from_cache: bool = field(default=False, compare=False)

    @property
    def network_count(self) -> int:
        return len(self.records)

    @property
    def current_network(self) -> Optional[NetworkRecord]:
        """The record marked as currently associated, if any."""
        for record in self.records:
            if record.is_current:
                return record
        return None

    def find(self, ssid: str, channel: Optional[str] = None) -> Optional[NetworkRecord]:
        """
        Find a record by SSID, optionally narrowed to a channel.

        Without a channel the strongest sighting wins, since records are
        sorted by signal.
        """
        for record in self.records:
            if record.ssid != ssid:
                continue
            if channel is None or record.channel == channel:
                return record
        return None

    def get(self, station_id: str) -> Optional[NetworkRecord]:
        """Find a record by station id."""
        for record in self.records:
            if record.station_id == station_id:
                return record
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'current_ssid': self.current_ssid,
            'networks': [r.to_dict() for r in self.records],
            'network_count': self.network_count,
            'warnings': self.warnings,
            'from_cache': self.from_cache,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ScanSnapshot':
        return cls(
            current_ssid=str(data.get('current_ssid', '')),
            records=[NetworkRecord.from_dict(r) for r in data.get('networks', [])],
        )


@dataclass
class CacheEntry:
    """A snapshot stamped with the code version and capture time."""

    snapshot: ScanSnapshot
    version: int
    captured_at: float

    def age(self, now: float) -> float:
        """Seconds since capture."""
        return now - self.captured_at

    def to_dict(self) -> dict:
        return {
            'version': self.version,
            'captured_at': self.captured_at,
            'current_ssid': self.snapshot.current_ssid,
            'networks': [r.to_dict() for r in self.snapshot.records],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CacheEntry':
        return cls(
            snapshot=ScanSnapshot.from_dict(data),
            version=int(data['version']),
            captured_at=float(data['captured_at']),
        )


class ConnectionState(str, Enum):
    IDLE = 'idle'
    AWAITING_CREDENTIAL = 'awaiting_credential'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    FAILED = 'failed'


class ConnectionOutcome(str, Enum):
    SUCCESS = 'success'
    PASSWORD_REQUIRED = 'password_required'
    FAILED = 'failed'


@dataclass
class ConnectionAttempt:
    """One run of the connection controller."""

    network: NetworkRecord
    supplied_password: Optional[str] = field(default=None, repr=False)
    used_saved_credential: bool = False
    outcome: Optional[ConnectionOutcome] = None
    message: str = ''
    failure: Optional[str] = None
    state: ConnectionState = ConnectionState.IDLE

    @property
    def success(self) -> bool:
        return self.outcome == ConnectionOutcome.SUCCESS

    @property
    def requires_password(self) -> bool:
        return self.outcome == ConnectionOutcome.PASSWORD_REQUIRED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (password omitted)."""
        return {
            'ssid': self.network.ssid,
            'channel': self.network.channel,
            'success': self.success,
            'requires_password': self.requires_password,
            'outcome': self.outcome.value if self.outcome else None,
            'message': self.message,
            'failure': self.failure,
            'state': self.state.value,
            'used_saved_credential': self.used_saved_credential,
            'password_supplied': self.supplied_password is not None,
        }


def get_qr_security_type(security: str) -> str:
    """Get the WIFI: payload T field for a security label."""
    upper = (security or '').upper()
    if 'WPA' in upper or 'PSK' in upper:
        return QR_SECURITY_WPA
    elif 'WEP' in upper:
        return QR_SECURITY_WEP
    elif is_open_security(security):
        return QR_SECURITY_NOPASS
    # Unrecognized secured networks are assumed to be WPA
    return QR_SECURITY_WPA


def escape_qr_value(value: str) -> str:
    """Backslash-escape the WIFI: payload special characters."""
    for char in QR_ESCAPE_CHARS:
        value = value.replace(char, '\\' + char)
    return value


@dataclass
class SharePayload:
    """Credentials for sharing a network, e.g. as a QR code."""

    network: NetworkRecord
    password: str = field(default='', repr=False)

    @property
    def qr_security(self) -> str:
        return get_qr_security_type(self.network.security)

    @property
    def qr_string(self) -> str:
        """Standard WIFI: payload understood by phone cameras."""
        return (
            f'WIFI:T:{self.qr_security};'
            f'S:{escape_qr_value(self.network.ssid)};'
            f'P:{escape_qr_value(self.password)};'
            'H:false;;'
        )

    def to_dict(self) -> dict:
        return {
            'ssid': self.network.ssid,
            'security': self.network.security,
            'channel': self.network.channel,
            'signal_strength': self.network.signal_strength,
            'station_id': self.network.station_id,
            'password': self.password,
            'qr_security': self.qr_security,
            'qr_string': self.qr_string,
        }
