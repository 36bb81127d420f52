"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from utils.wifi.cache import MemoryStore, NetworkCache
from utils.wifi.controller import ConnectionController
from utils.wifi.scanner import WiFiScanner


SAMPLE_REPORT = """\
Wi-Fi:

      Software Versions:
          CoreWLAN: 16.0 (1657)
          CoreWLANKit: 16.0 (1657)
      Interfaces:
        en0:
          Card Type: Wi-Fi  (0x14E4, 0x4387)
          Firmware Version: wl0: Oct  3 2023 15:26:38 version 20.10.1022.1.8.7.160
          MAC Address: 3c:22:fb:00:11:22
          Locale: FCC
          Country Code: US
          Status: Connected
          Current Network Information:
            HomeNet:
              PHY Mode: 802.11ax
              Channel: 149 (5GHz, 80MHz)
              Country Code: US
              Network Type: Infrastructure
              Security: WPA2 Personal
              Signal / Noise: -48 dBm / -92 dBm
              Transmit Rate: 864
              MCS Index: 9
          Other Local Wi-Fi Networks:
            CafeWifi:
              PHY Mode: 802.11n
              Channel: 6 (2GHz, 20MHz)
              Network Type: Infrastructure
              Security: None
              Signal / Noise: -67 dBm / -90 dBm
            HomeNet:
              PHY Mode: 802.11ax
              Channel: 149 (5GHz, 80MHz)
              Network Type: Infrastructure
              Security: WPA2 Personal
              Signal / Noise: -48 dBm / -92 dBm
            HomeNet:
              PHY Mode: 802.11ax
              Channel: 11 (2GHz, 20MHz)
              Network Type: Infrastructure
              Security: WPA2 Personal
              Signal / Noise: -61 dBm / -92 dBm
            Office-5G:
              PHY Mode: 802.11ac
              Channel: 44 (5GHz, 80MHz)
              Network Type: Infrastructure
              Security: WPA3 Personal
              BSSID: a4:5e:60:aa:bb:cc
              Signal / Noise: -55 dBm / -91 dBm
            NoChannelNet:
              PHY Mode: 802.11n
              Security: WPA2 Personal
              Signal / Noise: -40 dBm / -90 dBm
        awdl0:
          MAC Address: 9e:1a:00:11:22:33
          Supported PHY Modes: 802.11 a/b/g/n/ac/ax
          Status: Inactive
"""


@pytest.fixture
def sample_report():
    """A representative system_profiler SPAirPortDataType report."""
    return SAMPLE_REPORT


@pytest.fixture
def temp_db():
    """Use a temporary database for the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        test_db_path = Path(tmpdir) / 'test_wificonnect.db'
        test_db_dir = Path(tmpdir)

        with patch('utils.database.DB_PATH', test_db_path), \
             patch('utils.database.DB_DIR', test_db_dir):
            from utils.database import init_db, close_db

            close_db()
            init_db()
            yield test_db_path
            close_db()


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """In-memory cache driven by the fake clock."""
    return NetworkCache(store=MemoryStore(), clock=clock)


@pytest.fixture
def credentials():
    store = MagicMock()
    store.get_password.return_value = None
    return store


@pytest.fixture
def connector():
    conn = MagicMock()
    conn.interface = 'en0'
    conn.connect.return_value = None
    return conn


@pytest.fixture
def controller(cache, credentials, connector, sample_report):
    """Controller wired to fakes, with a scanner returning the sample report."""
    ctrl = ConnectionController(cache=cache, credentials=credentials, connector=connector)
    ctrl.scanner = WiFiScanner(
        cache,
        run_command=lambda **kwargs: sample_report,
        on_event=ctrl._queue_event,
    )
    return ctrl


@pytest.fixture
def app():
    """Create application for testing."""
    import app as app_module
    from routes import register_blueprints

    app_module.app.config['TESTING'] = True

    if 'wifi' not in app_module.app.blueprints:
        register_blueprints(app_module.app)

    return app_module.app


@pytest.fixture
def client(app, controller):
    """Test client with the global controller replaced by the fake-wired one."""
    with patch('routes.wifi.get_wifi_controller', return_value=controller), \
         patch('utils.wifi.get_wifi_controller', return_value=controller):
        yield app.test_client()
