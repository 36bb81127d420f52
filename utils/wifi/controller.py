"""
Connection controller.

Drives a connection attempt: open networks connect directly, an explicit
password is used as given, otherwise the saved Keychain password is tried
once before handing back to the caller for a password.

States: IDLE -> AWAITING_CREDENTIAL -> CONNECTING -> CONNECTED | FAILED,
then back to IDLE once the attempt is reported.
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, Generator, Optional, Protocol

import config
from utils.logging import get_logger

from .cache import NetworkCache
from .connector import NetworkSetupConnector
from .constants import (
    EVENT_CONNECT_FAILED,
    EVENT_CONNECT_STARTED,
    EVENT_CONNECT_SUCCEEDED,
    EVENT_PASSWORD_REQUIRED,
    EVENT_QUEUE_SIZE,
    MESSAGE_PASSWORD_REQUIRED,
    MESSAGE_SAVED_PASSWORD_REJECTED,
    MESSAGE_SHARE_NO_PASSWORD,
)
from .errors import ConnectFailure, CredentialNotFound
from .keychain import KeychainCredentialStore
from .models import (
    ConnectionAttempt,
    ConnectionOutcome,
    ConnectionState,
    NetworkRecord,
    SharePayload,
)
from .scanner import WiFiScanner

logger = get_logger('wificonnect.wifi.controller')

# Global controller instance
_controller_instance: Optional['ConnectionController'] = None
_controller_lock = threading.Lock()


class CredentialStore(Protocol):
    def get_password(self, ssid: str) -> Optional[str]: ...


class Connector(Protocol):
    def connect(self, ssid: str, password: Optional[str] = None) -> None: ...


class ConnectionController:
    """
    Orchestrates connection attempts and credential sharing.

    Args:
        cache: Scan cache, invalidated after every connect command.
        credentials: Saved-password lookup by SSID.
        connector: OS connect primitive.
        scanner: Optional scanner used to resolve networks by SSID.
        on_status: Optional callback receiving status events.
    """

    def __init__(
        self,
        cache: NetworkCache,
        credentials: CredentialStore,
        connector: Connector,
        scanner: Optional[WiFiScanner] = None,
        on_status: Optional[Callable[[dict], None]] = None,
    ):
        self.cache = cache
        self.credentials = credentials
        self.connector = connector
        self.scanner = scanner
        self._on_status = on_status

        self._state = ConnectionState.IDLE
        self._last_attempt: Optional[ConnectionAttempt] = None

        # Event queue for SSE streaming
        self._event_queue: queue.Queue = queue.Queue(maxsize=EVENT_QUEUE_SIZE)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def last_attempt(self) -> Optional[ConnectionAttempt]:
        return self._last_attempt

    # =========================================================================
    # Connect
    # =========================================================================

    def connect(
        self,
        network: NetworkRecord,
        explicit_password: Optional[str] = None,
    ) -> ConnectionAttempt:
        """
        Attempt to join a network.

        Args:
            network: Target network.
            explicit_password: Password the caller already collected.

        Returns:
            ConnectionAttempt with outcome SUCCESS, PASSWORD_REQUIRED or FAILED.
        """
        attempt = ConnectionAttempt(network=network, supplied_password=explicit_password)
        self._announce(EVENT_CONNECT_STARTED, attempt)

        if network.is_open:
            self._run_connect(attempt, None)
            return self._finish(attempt)

        if explicit_password:
            self._run_connect(attempt, explicit_password)
            return self._finish(attempt)

        self._set_state(ConnectionState.AWAITING_CREDENTIAL)
        saved = self.credentials.get_password(network.ssid)

        if saved is None:
            attempt.outcome = ConnectionOutcome.PASSWORD_REQUIRED
            attempt.message = MESSAGE_PASSWORD_REQUIRED
            attempt.state = ConnectionState.AWAITING_CREDENTIAL
            return self._finish(attempt)

        attempt.used_saved_credential = True
        self._run_connect(attempt, saved)

        if attempt.outcome == ConnectionOutcome.FAILED:
            # No automatic retry; the caller re-prompts for a password
            attempt.outcome = ConnectionOutcome.PASSWORD_REQUIRED
            attempt.message = MESSAGE_SAVED_PASSWORD_REJECTED
            attempt.state = ConnectionState.AWAITING_CREDENTIAL

        return self._finish(attempt)

    def _run_connect(self, attempt: ConnectionAttempt, password: Optional[str]) -> None:
        """Invoke the connect primitive and record the result on the attempt."""
        ssid = attempt.network.ssid
        self._set_state(ConnectionState.CONNECTING)

        try:
            self.connector.connect(ssid, password)
        except ConnectFailure as e:
            attempt.outcome = ConnectionOutcome.FAILED
            attempt.message = e.message
            attempt.failure = e.kind
            attempt.state = ConnectionState.FAILED
            logger.warning(f"Connection to {ssid!r} failed ({e.kind}): {e.raw or e.message}")
        else:
            attempt.outcome = ConnectionOutcome.SUCCESS
            attempt.message = f"Connected to {ssid}"
            attempt.state = ConnectionState.CONNECTED
            logger.info(f"Connected to {ssid!r}")
        finally:
            # Association may have changed either way
            self.cache.invalidate()

        self._set_state(attempt.state)

    def _finish(self, attempt: ConnectionAttempt) -> ConnectionAttempt:
        self._last_attempt = attempt

        if attempt.outcome == ConnectionOutcome.SUCCESS:
            self._announce(EVENT_CONNECT_SUCCEEDED, attempt)
        elif attempt.outcome == ConnectionOutcome.PASSWORD_REQUIRED:
            self._announce(EVENT_PASSWORD_REQUIRED, attempt)
        else:
            self._announce(EVENT_CONNECT_FAILED, attempt)

        self._set_state(ConnectionState.IDLE)
        return attempt

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.debug(f"Controller state {self._state.value} -> {state.value}")
        self._state = state

    # =========================================================================
    # Share
    # =========================================================================

    def share(self, network: NetworkRecord) -> SharePayload:
        """
        Build share credentials from the saved password.

        Only a saved password is ever shared, never one typed for a single
        attempt.

        Raises:
            CredentialNotFound: Secured network without a saved password.
        """
        if network.is_open:
            return SharePayload(network=network, password='')

        password = self.credentials.get_password(network.ssid)
        if not password:
            raise CredentialNotFound(network.ssid, MESSAGE_SHARE_NO_PASSWORD)

        return SharePayload(network=network, password=password)

    # =========================================================================
    # Network lookup
    # =========================================================================

    def find_network(self, ssid: str, channel: Optional[str] = None) -> Optional[NetworkRecord]:
        """Resolve a network from the latest (or a fresh) scan."""
        if self.scanner is None:
            return None

        snapshot = self.scanner.last_snapshot
        if snapshot is not None:
            record = snapshot.find(ssid, channel)
            if record is not None:
                return record

        return self.scanner.load_networks().find(ssid, channel)

    # =========================================================================
    # Event Streaming
    # =========================================================================

    def _announce(self, event_type: str, attempt: ConnectionAttempt) -> None:
        event = {'type': event_type, **attempt.to_dict()}
        if self._on_status is not None:
            try:
                self._on_status(event)
            except Exception as e:
                logger.debug(f"Status callback failed: {e}")
        self._queue_event(event)

    def _queue_event(self, event: dict) -> None:
        """Add event to the SSE queue."""
        try:
            self._event_queue.put_nowait(event)
        except queue.Full:
            # Drop oldest event
            try:
                self._event_queue.get_nowait()
                self._event_queue.put_nowait(event)
            except (queue.Empty, queue.Full):
                pass

    def get_event_stream(self) -> Generator[dict, None, None]:
        """Generate events for SSE streaming."""
        while True:
            try:
                yield self._event_queue.get(timeout=1.0)
            except queue.Empty:
                yield {'type': 'keepalive'}


# =============================================================================
# Module-level functions
# =============================================================================

def create_wifi_controller(
    interface: Optional[str] = None,
    cache: Optional[NetworkCache] = None,
) -> ConnectionController:
    """Wire a controller, scanner and cache from configuration."""
    cache = cache or NetworkCache(ttl=config.CACHE_TTL_SECONDS)
    controller = ConnectionController(
        cache=cache,
        credentials=KeychainCredentialStore(focus_app=config.FOCUS_APP),
        connector=NetworkSetupConnector(
            interface=interface or config.WIFI_INTERFACE,
            timeout=config.CONNECT_TIMEOUT,
        ),
    )
    controller.scanner = WiFiScanner(
        cache,
        timeout=config.SCAN_TIMEOUT,
        max_output=config.SCAN_MAX_OUTPUT_BYTES,
        on_event=controller._queue_event,
    )
    return controller


def get_wifi_controller() -> ConnectionController:
    """Get or create the global controller instance."""
    global _controller_instance

    with _controller_lock:
        if _controller_instance is None:
            _controller_instance = create_wifi_controller()
        return _controller_instance


def reset_wifi_controller() -> None:
    """Reset the global controller instance."""
    global _controller_instance

    with _controller_lock:
        _controller_instance = None
