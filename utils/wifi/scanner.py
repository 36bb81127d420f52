"""
WiFi network scanner.

Runs system_profiler, parses the report and keeps the result in a short-lived
cache. Scans only happen on explicit load or refresh; there is no polling.
"""

from __future__ import annotations

import os
import select
import subprocess
import time
from typing import Callable, Optional

from utils.logging import get_logger

from .cache import NetworkCache
from .constants import (
    DEFAULT_SCAN_MAX_OUTPUT,
    DEFAULT_SCAN_TIMEOUT,
    EVENT_SCAN_COMPLETE,
    EVENT_SCAN_ERROR,
    SCAN_READ_CHUNK,
    SYSTEM_PROFILER_DATA_TYPE,
    SYSTEM_PROFILER_PATH,
)
from .errors import ScanUnavailable
from .models import ScanSnapshot
from .parsers.system_profiler import parse_system_profiler

logger = get_logger('wificonnect.wifi.scanner')


def _kill(process: subprocess.Popen) -> None:
    process.kill()
    process.wait()


def _read_bounded(process: subprocess.Popen, timeout: float, max_output: int) -> bytes:
    """
    Read stdout until EOF and wait for exit, buffering at most max_output bytes.

    The process is killed as soon as the timeout passes or the limit is
    exceeded.
    """
    deadline = time.monotonic() + timeout
    fd = process.stdout.fileno()
    chunks: list[bytes] = []
    total = 0

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            _kill(process)
            raise ScanUnavailable(f"system_profiler timed out after {timeout}s")

        ready, _, _ = select.select([fd], [], [], min(remaining, 1.0))
        if not ready:
            continue

        chunk = os.read(fd, SCAN_READ_CHUNK)
        if not chunk:
            break

        total += len(chunk)
        if total > max_output:
            _kill(process)
            raise ScanUnavailable(f"system_profiler output exceeded {max_output} bytes")
        chunks.append(chunk)

    try:
        process.wait(timeout=max(deadline - time.monotonic(), 0.1))
    except subprocess.TimeoutExpired:
        _kill(process)
        raise ScanUnavailable(f"system_profiler timed out after {timeout}s")

    return b''.join(chunks)


def run_system_profiler(
    timeout: float = DEFAULT_SCAN_TIMEOUT,
    max_output: int = DEFAULT_SCAN_MAX_OUTPUT,
    command: Optional[list[str]] = None,
) -> str:
    """
    Run system_profiler and return its stdout.

    Args:
        timeout: Seconds before the process is killed.
        max_output: Maximum stdout size in bytes.
        command: Override for the command line.

    Raises:
        ScanUnavailable: Missing tool, non-zero exit, timeout or output
            larger than max_output bytes.
    """
    try:
        process = subprocess.Popen(
            command or [SYSTEM_PROFILER_PATH, SYSTEM_PROFILER_DATA_TYPE],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except (FileNotFoundError, OSError) as e:
        raise ScanUnavailable(f"system_profiler not available: {e}")

    try:
        stdout = _read_bounded(process, timeout, max_output)
    finally:
        process.stdout.close()

    if process.returncode != 0:
        raise ScanUnavailable(f"system_profiler returned code {process.returncode}")

    return stdout.decode('utf-8', errors='replace')


class WiFiScanner:
    """
    Scanner with cache-first loading.

    Args:
        cache: Snapshot cache shared with the connection controller.
        timeout: Scan timeout in seconds.
        max_output: Maximum report size in bytes.
        run_command: Callable returning the raw report. Defaults to
            run_system_profiler.
        on_event: Optional callback for scan events.
    """

    def __init__(
        self,
        cache: NetworkCache,
        timeout: float = DEFAULT_SCAN_TIMEOUT,
        max_output: int = DEFAULT_SCAN_MAX_OUTPUT,
        run_command: Optional[Callable[..., str]] = None,
        on_event: Optional[Callable[[dict], None]] = None,
    ):
        self.cache = cache
        self.timeout = timeout
        self.max_output = max_output
        self._run_command = run_command or run_system_profiler
        self._on_event = on_event
        self._last_snapshot: Optional[ScanSnapshot] = None

    @property
    def last_snapshot(self) -> Optional[ScanSnapshot]:
        """Most recent snapshot returned by load or scan."""
        return self._last_snapshot

    def scan(self) -> ScanSnapshot:
        """
        Run a fresh scan, bypassing the cache.

        A failed scan yields an empty snapshot carrying a warning and is not
        cached.
        """
        try:
            output = self._run_command(timeout=self.timeout, max_output=self.max_output)
        except ScanUnavailable as e:
            logger.warning(f"Scan unavailable: {e}")
            snapshot = ScanSnapshot(warnings=[str(e)])
            self._last_snapshot = snapshot
            self._emit({'type': EVENT_SCAN_ERROR, 'message': str(e)})
            return snapshot

        snapshot = parse_system_profiler(output)
        self.cache.write(snapshot)
        self._last_snapshot = snapshot

        logger.info(
            f"Scan complete: {snapshot.network_count} networks, "
            f"current={snapshot.current_ssid or '-'}"
        )
        self._emit({
            'type': EVENT_SCAN_COMPLETE,
            'network_count': snapshot.network_count,
            'current_ssid': snapshot.current_ssid,
        })
        return snapshot

    def load_networks(self, force: bool = False) -> ScanSnapshot:
        """
        Return the cached snapshot if fresh, otherwise scan.

        Args:
            force: Drop the cached entry and always scan.
        """
        if force:
            self.cache.invalidate()
        else:
            cached = self.cache.read()
            if cached is not None:
                self._last_snapshot = cached
                return cached

        return self.scan()

    def refresh(self) -> ScanSnapshot:
        """Forced rescan."""
        return self.load_networks(force=True)

    def _emit(self, event: dict) -> None:
        if self._on_event is not None:
            self._on_event(event)
