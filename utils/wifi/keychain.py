"""
Saved WiFi passwords from the macOS Keychain.

Lookups go through the 'security' tool and may trigger a system
authentication prompt, which steals focus. After every lookup the calling
application is brought back to the foreground on a best-effort basis.
"""

from __future__ import annotations

import subprocess
from typing import Optional

from utils.logging import get_logger

from .constants import SECURITY_PATH

logger = get_logger('wificonnect.wifi.keychain')


class KeychainCredentialStore:
    """
    Read-only view of saved WiFi passwords, keyed by SSID.

    Args:
        focus_app: Application to re-activate after a lookup. None skips
            focus restoration.
    """

    def __init__(self, focus_app: Optional[str] = None):
        self.focus_app = focus_app

    def get_password(self, ssid: str) -> Optional[str]:
        """
        Fetch the saved password for an SSID.

        Blocks while the user answers any Keychain prompt.

        Returns:
            The password, or None if not saved or access was denied.
        """
        try:
            result = subprocess.run(
                [SECURITY_PATH, 'find-generic-password', '-wa', ssid],
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, OSError) as e:
            logger.warning(f"Keychain lookup unavailable: {e}")
            return None
        finally:
            self.restore_focus()

        if result.returncode != 0:
            logger.debug(f"No Keychain password for {ssid!r} (code {result.returncode})")
            return None

        password = result.stdout.strip()
        return password or None

    def restore_focus(self) -> None:
        """Bring focus_app back to the front. Failures are logged only."""
        if not self.focus_app:
            return

        try:
            result = subprocess.run(
                ['open', '-a', self.focus_app],
                capture_output=True,
                text=True,
            )
            if result.returncode == 0:
                return
            logger.debug(f"open -a {self.focus_app} failed: {result.stderr.strip()}")
        except (FileNotFoundError, OSError) as e:
            logger.debug(f"open -a {self.focus_app} failed: {e}")

        script = (
            'tell application "System Events" to set frontmost of process '
            f'"{self.focus_app}" to true'
        )
        try:
            subprocess.run(
                ['osascript', '-e', script],
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, OSError) as e:
            logger.debug(f"osascript focus fallback failed: {e}")
