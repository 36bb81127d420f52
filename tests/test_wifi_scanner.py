"""Tests for system_profiler execution and the cache-first scanner."""

from __future__ import annotations

import os
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from utils.wifi.constants import EVENT_SCAN_COMPLETE, EVENT_SCAN_ERROR, SCAN_READ_CHUNK
from utils.wifi.errors import ScanUnavailable
from utils.wifi.scanner import WiFiScanner, run_system_profiler


def _python(code: str) -> list[str]:
    """Command line running a small Python producer in a child process."""
    return [sys.executable, '-c', code]


class TestRunSystemProfiler:
    """Tests for running the report command against real child processes."""

    def test_default_command(self):
        with patch('utils.wifi.scanner.subprocess.Popen', side_effect=FileNotFoundError()) as mock_popen:
            with pytest.raises(ScanUnavailable, match='not available'):
                run_system_profiler()

        assert mock_popen.call_args[0][0] == ['/usr/sbin/system_profiler', 'SPAirPortDataType']

    def test_returns_decoded_output(self):
        code = "import sys; sys.stdout.buffer.write('Wi-Fi:\\n  Caf\\u00e9:\\n'.encode())"
        assert run_system_profiler(timeout=10.0, command=_python(code)) == 'Wi-Fi:\n  Café:\n'

    def test_invalid_utf8_replaced(self):
        code = "import sys; sys.stdout.buffer.write(b'ab\\xffcd')"
        assert run_system_profiler(timeout=10.0, command=_python(code)) == 'ab\ufffdcd'

    def test_output_larger_than_one_chunk(self):
        code = f"import sys; sys.stdout.buffer.write(b'x' * {SCAN_READ_CHUNK * 10})"
        output = run_system_profiler(timeout=10.0, command=_python(code))
        assert len(output) == SCAN_READ_CHUNK * 10

    def test_missing_tool(self):
        with pytest.raises(ScanUnavailable, match='not available'):
            run_system_profiler(command=['/nonexistent/system_profiler'])

    def test_nonzero_exit(self):
        with pytest.raises(ScanUnavailable, match='code 3'):
            run_system_profiler(timeout=10.0, command=_python('import sys; sys.exit(3)'))

    def test_timeout_kills_process(self):
        with pytest.raises(ScanUnavailable, match='timed out'):
            run_system_profiler(timeout=0.5, command=_python('import time; time.sleep(30)'))

    def test_silent_process_exits_late(self):
        """Closed stdout but still running past the deadline."""
        code = 'import os, time; os.close(1); time.sleep(30)'
        with pytest.raises(ScanUnavailable, match='timed out'):
            run_system_profiler(timeout=0.5, command=_python(code))

    def test_oversize_output_bounded_while_reading(self):
        """A runaway producer is killed once the limit is passed."""
        code = "import sys; sys.stdout.buffer.write(b'x' * 5000000)"
        read_sizes = []
        real_read = os.read

        def counting_read(fd, size):
            data = real_read(fd, size)
            read_sizes.append(len(data))
            return data

        with patch('utils.wifi.scanner.os.read', side_effect=counting_read):
            with pytest.raises(ScanUnavailable, match='exceeded 1024 bytes'):
                run_system_profiler(timeout=10.0, max_output=1024, command=_python(code))

        assert sum(read_sizes) <= 1024 + SCAN_READ_CHUNK

    def test_oversize_process_is_killed(self):
        code = "import sys\nwhile True: sys.stdout.buffer.write(b'x' * 65536)"
        processes = []
        real_popen = subprocess.Popen

        def tracking_popen(*args, **kwargs):
            process = real_popen(*args, **kwargs)
            processes.append(process)
            return process

        with patch('utils.wifi.scanner.subprocess.Popen', side_effect=tracking_popen):
            with pytest.raises(ScanUnavailable, match='exceeded'):
                run_system_profiler(timeout=10.0, max_output=100000, command=_python(code))

        assert processes[0].returncode is not None
        assert processes[0].returncode != 0


class TestWiFiScanner:
    """Tests for cache-first loading."""

    @pytest.fixture
    def run_command(self, sample_report):
        return MagicMock(return_value=sample_report)

    @pytest.fixture
    def scanner(self, cache, run_command):
        return WiFiScanner(cache, timeout=7.0, max_output=1024 * 1024, run_command=run_command)

    def test_scan_parses_and_caches(self, scanner, cache, run_command):
        snapshot = scanner.scan()

        assert snapshot.current_ssid == 'HomeNet'
        assert snapshot.network_count == 4
        assert cache.read() == snapshot
        run_command.assert_called_once_with(timeout=7.0, max_output=1024 * 1024)

    def test_load_uses_fresh_cache(self, scanner, run_command):
        scanner.load_networks()
        cached = scanner.load_networks()

        assert run_command.call_count == 1
        assert cached.from_cache is True
        assert scanner.last_snapshot is cached

    def test_load_rescans_after_ttl(self, scanner, clock, run_command):
        scanner.load_networks()
        clock.advance(5.0)
        snapshot = scanner.load_networks()

        assert run_command.call_count == 2
        assert snapshot.from_cache is False

    def test_refresh_bypasses_cache(self, scanner, run_command):
        scanner.load_networks()
        scanner.refresh()

        assert run_command.call_count == 2

    def test_failed_scan_not_cached(self, cache):
        run_command = MagicMock(side_effect=ScanUnavailable('system_profiler timed out after 15.0s'))
        scanner = WiFiScanner(cache, run_command=run_command)

        snapshot = scanner.load_networks()

        assert snapshot.records == []
        assert snapshot.current_ssid == ''
        assert snapshot.warnings == ['system_profiler timed out after 15.0s']
        assert cache.read() is None

    def test_failed_scan_retried_next_load(self, cache, sample_report):
        run_command = MagicMock(side_effect=[ScanUnavailable('busy'), sample_report])
        scanner = WiFiScanner(cache, run_command=run_command)

        assert scanner.load_networks().records == []
        assert scanner.load_networks().network_count == 4

    def test_garbage_output_gives_empty_snapshot(self, cache):
        scanner = WiFiScanner(cache, run_command=MagicMock(return_value='nothing useful'))
        snapshot = scanner.scan()

        assert snapshot.records == []

    def test_events(self, cache, sample_report):
        events = []
        scanner = WiFiScanner(
            cache,
            run_command=MagicMock(side_effect=[sample_report, ScanUnavailable('gone')]),
            on_event=events.append,
        )

        scanner.scan()
        scanner.scan()

        assert events[0]['type'] == EVENT_SCAN_COMPLETE
        assert events[0]['network_count'] == 4
        assert events[1] == {'type': EVENT_SCAN_ERROR, 'message': 'gone'}
