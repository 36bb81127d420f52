"""
Parser for macOS 'system_profiler SPAirPortDataType' output.

The report is indentation based and its layout drifts between macOS
releases. Relevant shape:

          Current Network Information:
            HomeNet:
              Channel: 149 (5GHz, 80MHz)
              Security: WPA2 Personal
              Signal / Noise: -55 dBm / -92 dBm
          Other Local Wi-Fi Networks:
            CafeWifi:
              Channel: 6 (2GHz, 20MHz)
              Security: None
              Signal / Noise: -67 dBm / -90 dBm
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from utils.logging import get_logger

from ..constants import (
    DEFAULT_RSSI,
    PROPERTY_BSSID,
    PROPERTY_CHANNEL,
    PROPERTY_MAC_ADDRESS,
    PROPERTY_SECURITY,
    PROPERTY_SIGNAL_NOISE,
    SECTION_CURRENT_NETWORK,
    SECTION_OTHER_NETWORKS,
    SECURITY_UNKNOWN,
)
from ..errors import ParseAnomaly
from ..models import NetworkRecord, ScanSnapshot

logger = get_logger('wificonnect.wifi.parsers.system_profiler')

SSID_LINE_RE = re.compile(r'^[A-Za-z0-9\-_]')
INTEGER_RE = re.compile(r'-?\d+')


class ParserState(str, Enum):
    SEEKING = 'seeking'
    IN_CURRENT_SECTION = 'in_current_section'
    IN_NETWORKS_SECTION = 'in_networks_section'
    DONE = 'done'


@dataclass
class PendingRecord:
    """Network being accumulated from property lines."""

    ssid: str
    channel: Optional[str] = None
    signal_strength: Optional[int] = None
    security: Optional[str] = None
    station_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.ssid) and bool(self.channel)

    def to_record(self) -> NetworkRecord:
        return NetworkRecord(
            ssid=self.ssid,
            channel=self.channel,
            signal_strength=DEFAULT_RSSI if self.signal_strength is None else self.signal_strength,
            security=self.security or SECURITY_UNKNOWN,
            station_id=self.station_id or f'{self.ssid}-{self.channel}',
        )


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _split_property(trimmed: str) -> Optional[tuple[str, str]]:
    """Split 'key: value', or return None if the line is not exactly that."""
    parts = trimmed.split(': ')
    if len(parts) != 2:
        return None
    return parts[0], parts[1].strip()


class SystemProfilerParser:
    """
    Line-fed state machine over a system_profiler report.

    Feed every line through feed(), then call finish() for the snapshot.
    """

    def __init__(self):
        self.state = ParserState.SEEKING
        self.current_ssid = ''
        self.network_indent: Optional[int] = None
        self.pending: Optional[PendingRecord] = None
        self.records: list[NetworkRecord] = []

        self._current_header_indent = 0
        self._current_done = False
        self._networks_done = False

    # =========================================================================
    # Line handling
    # =========================================================================

    def feed(self, line: str) -> None:
        """
        Consume one line of the report.

        Raises:
            ParseAnomaly: The line is not text.
        """
        if not isinstance(line, str):
            raise ParseAnomaly(f"Expected a report line, got {type(line).__name__}")

        line = line.rstrip('\r\n')
        trimmed = line.strip()

        if self.state == ParserState.IN_CURRENT_SECTION:
            self._feed_current(line, trimmed)
            return

        if self.state == ParserState.IN_NETWORKS_SECTION:
            self._feed_networks(line, trimmed)
            return

        if self.state == ParserState.SEEKING:
            if SECTION_CURRENT_NETWORK in trimmed and not self._current_done:
                self.state = ParserState.IN_CURRENT_SECTION
                self._current_header_indent = _indent_of(line)
            elif SECTION_OTHER_NETWORKS in trimmed and not self._networks_done:
                self.state = ParserState.IN_NETWORKS_SECTION

    def _feed_current(self, line: str, trimmed: str) -> None:
        if not trimmed:
            return

        # Another section started before any SSID line: not associated
        if ':' in trimmed and _indent_of(line) <= self._current_header_indent:
            self._end_current_section()
            # The line that ended the section may open the networks section
            self.feed(line)
            return

        # Only the first line under the header names the network
        if SSID_LINE_RE.match(trimmed):
            self.current_ssid = re.sub(r':$', '', trimmed)
        self._end_current_section()

    def _end_current_section(self) -> None:
        self._current_done = True
        self.state = ParserState.SEEKING

    def _feed_networks(self, line: str, trimmed: str) -> None:
        """Properties only attach when indented deeper than the network names."""
        # A new top-level section ends the network list
        if line and not line[0].isspace() and ':' in line:
            self._end_networks_section()
            return

        if not trimmed:
            return

        indent = _indent_of(line)
        prop = _split_property(trimmed)

        if prop is None:
            if self.network_indent is None:
                self.network_indent = indent

            if indent == self.network_indent:
                self._flush()
                self.pending = PendingRecord(ssid=re.sub(r':$', '', trimmed))
            elif indent < self.network_indent:
                # Sibling block (e.g. another interface): stop attaching
                self._flush()
            else:
                logger.debug(f"Ignoring nested line in network list: {trimmed!r}")
            return

        if self.pending is None:
            return

        if self.network_indent is not None and indent <= self.network_indent:
            return

        self._apply_property(trimmed, prop[1])

    def _apply_property(self, trimmed: str, value: str) -> None:
        pending = self.pending
        if trimmed.startswith(f'{PROPERTY_SECURITY}:'):
            pending.security = value or SECURITY_UNKNOWN
        elif trimmed.startswith(f'{PROPERTY_CHANNEL}:'):
            tokens = value.split()
            pending.channel = tokens[0] if tokens else ''
        elif f'{PROPERTY_SIGNAL_NOISE}:' in trimmed:
            match = INTEGER_RE.search(trimmed)
            pending.signal_strength = int(match.group(0)) if match else DEFAULT_RSSI
        elif trimmed.startswith(f'{PROPERTY_BSSID}:') or trimmed.startswith(f'{PROPERTY_MAC_ADDRESS}:'):
            pending.station_id = value

    def _flush(self) -> None:
        """Emit the pending record if it is complete, then clear it."""
        if self.pending is not None:
            if self.pending.is_complete:
                self.records.append(self.pending.to_record())
            else:
                logger.debug(f"Dropping incomplete network entry {self.pending.ssid!r}")
        self.pending = None

    def _end_networks_section(self) -> None:
        self._flush()
        self._networks_done = True
        self.state = ParserState.SEEKING

    # =========================================================================
    # Result
    # =========================================================================

    def finish(self) -> ScanSnapshot:
        """Flush the last record and build the snapshot."""
        self._flush()
        self.state = ParserState.DONE

        seen: set[tuple[str, str]] = set()
        unique: list[NetworkRecord] = []
        for record in self.records:
            if record.key in seen:
                continue
            seen.add(record.key)
            unique.append(record)

        if self.current_ssid:
            for record in unique:
                record.is_current = record.ssid == self.current_ssid

        unique.sort(key=lambda r: r.signal_strength, reverse=True)

        return ScanSnapshot(current_ssid=self.current_ssid, records=unique)


def parse_system_profiler(output: str) -> ScanSnapshot:
    """
    Parse system_profiler SPAirPortDataType output.

    Args:
        output: Raw report text.

    Returns:
        ScanSnapshot sorted strongest first. Unrecognized input yields an
        empty snapshot; this function does not raise.
    """
    if not output or not isinstance(output, str):
        return ScanSnapshot()

    parser = SystemProfilerParser()
    try:
        for line in output.splitlines():
            parser.feed(line)
    except ParseAnomaly as e:
        logger.warning(f"Unparseable system_profiler report: {e}")
        return ScanSnapshot()

    return parser.finish()
