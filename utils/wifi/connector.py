"""
OS connect primitive: associate the interface with a network via networksetup.
"""

from __future__ import annotations

import shlex
import subprocess
from typing import Optional

from utils.logging import get_logger

from .constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_WIFI_INTERFACE,
    NETWORKSETUP_FAILURE_MARKERS,
    NETWORKSETUP_PATH,
    SHELL_ESCAPE_CHARS,
)
from .errors import classify_connect_error

logger = get_logger('wificonnect.wifi.connector')


def escape_shell_value(value: str) -> str:
    """Escape a value for use inside a double-quoted shell argument."""
    for char in SHELL_ESCAPE_CHARS:
        value = value.replace(char, '\\' + char)
    return value


def build_connect_command(interface: str, ssid: str, password: Optional[str] = None) -> str:
    """
    Build the networksetup command line.

    SSID and password are double-quoted with their shell metacharacters
    escaped; the interface name is shell-quoted.
    """
    command = (
        f'{NETWORKSETUP_PATH} -setairportnetwork {shlex.quote(interface)} '
        f'"{escape_shell_value(ssid)}"'
    )
    if password is not None:
        command += f' "{escape_shell_value(password)}"'
    return command


class NetworkSetupConnector:
    """
    Runs 'networksetup -setairportnetwork'.

    Args:
        interface: WiFi interface name (e.g. 'en0').
        timeout: Seconds before the command is killed.
    """

    def __init__(
        self,
        interface: str = DEFAULT_WIFI_INTERFACE,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.interface = interface
        self.timeout = timeout

    def connect(self, ssid: str, password: Optional[str] = None) -> None:
        """
        Join a network.

        Raises:
            ConnectFailure: Classified failure from the command output.
        """
        command = build_connect_command(self.interface, ssid, password)
        logger.info(f"Joining {ssid!r} on {self.interface}")

        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise classify_connect_error(f"Connection timed out after {self.timeout}s")
        except OSError as e:
            raise classify_connect_error(str(e))

        output = '\n'.join(
            part.strip() for part in (result.stderr, result.stdout) if part and part.strip()
        )

        if result.returncode != 0:
            logger.warning(f"networksetup exited with code {result.returncode}: {output}")
            raise classify_connect_error(output or f"Connect command exited with code {result.returncode}")

        if any(marker in output for marker in NETWORKSETUP_FAILURE_MARKERS):
            logger.warning(f"networksetup reported failure: {output}")
            raise classify_connect_error(output)
