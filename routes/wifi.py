"""
WiFi API routes.

Network listing with a short-lived cache, connection with saved-password
fallback, credential sharing, and an SSE stream of connection status.
"""

from __future__ import annotations

from typing import Generator

from flask import Blueprint, Response, jsonify, request

from utils.logging import get_logger
from utils.sse import format_sse
from utils.wifi import CredentialNotFound, get_wifi_controller

logger = get_logger('wificonnect.wifi')

wifi_bp = Blueprint('wifi', __name__, url_prefix='/wifi')


def _is_true(value: str | None) -> bool:
    return (value or '').lower() in ('1', 'true', 'yes')


# =============================================================================
# Networks
# =============================================================================

@wifi_bp.route('/networks', methods=['GET'])
def get_networks() -> Response:
    """
    List nearby networks, strongest first.

    Query params:
        refresh: 'true' to bypass the cache and rescan.
    """
    controller = get_wifi_controller()
    snapshot = controller.scanner.load_networks(force=_is_true(request.args.get('refresh')))
    return jsonify(snapshot.to_dict())


@wifi_bp.route('/refresh', methods=['POST'])
def refresh_networks() -> Response:
    """Drop the cached scan and rescan."""
    controller = get_wifi_controller()
    snapshot = controller.scanner.refresh()
    return jsonify(snapshot.to_dict())


@wifi_bp.route('/networks/<path:station_id>', methods=['GET'])
def get_network(station_id: str) -> Response:
    """Get a network from the latest scan by station id."""
    controller = get_wifi_controller()
    snapshot = controller.scanner.last_snapshot or controller.scanner.load_networks()
    record = snapshot.get(station_id)

    if record is None:
        return jsonify({'status': 'error', 'message': 'Network not found'}), 404
    return jsonify(record.to_dict())


# =============================================================================
# Connect / Share
# =============================================================================

def _resolve_network(data: dict):
    ssid = data.get('ssid')
    if ssid is None or not isinstance(ssid, str):
        return None, (jsonify({'status': 'error', 'message': 'ssid is required'}), 400)

    channel = data.get('channel')
    if channel is not None:
        channel = str(channel)

    controller = get_wifi_controller()
    record = controller.find_network(ssid, channel)
    if record is None:
        return None, (jsonify({'status': 'error', 'message': f"Network '{ssid}' not found"}), 404)
    return record, None


@wifi_bp.route('/connect', methods=['POST'])
def connect() -> Response:
    """
    Connect to a network from the latest scan.

    Request body:
        ssid: Network SSID (required)
        channel: Optional channel to pick one sighting
        password: Optional password; omitted means try the saved one
    """
    data = request.get_json(silent=True) or {}
    record, error = _resolve_network(data)
    if error:
        return error

    password = data.get('password')
    if password is not None and not isinstance(password, str):
        return jsonify({'status': 'error', 'message': 'password must be a string'}), 400

    attempt = get_wifi_controller().connect(record, password)
    return jsonify(attempt.to_dict())


@wifi_bp.route('/share', methods=['POST'])
def share() -> Response:
    """
    Get share credentials (WIFI: QR payload) for a network.

    Request body:
        ssid: Network SSID (required)
        channel: Optional channel
    """
    data = request.get_json(silent=True) or {}
    record, error = _resolve_network(data)
    if error:
        return error

    try:
        payload = get_wifi_controller().share(record)
    except CredentialNotFound as e:
        return jsonify({'status': 'error', 'message': str(e)}), 404

    return jsonify(payload.to_dict())


# =============================================================================
# Status
# =============================================================================

@wifi_bp.route('/status', methods=['GET'])
def get_status() -> Response:
    """Controller state and the last attempt."""
    controller = get_wifi_controller()
    last = controller.last_attempt
    return jsonify({
        'state': controller.state.value,
        'interface': controller.connector.interface,
        'last_attempt': last.to_dict() if last else None,
    })


@wifi_bp.route('/stream', methods=['GET'])
def event_stream() -> Response:
    """
    Server-Sent Events stream of connection status.

    Events:
        - connect_started, connect_succeeded, connect_failed, password_required
        - scan_complete, scan_error
        - keepalive: Periodic keepalive
    """
    def generate() -> Generator[str, None, None]:
        controller = get_wifi_controller()
        for event in controller.get_event_stream():
            yield format_sse(event)

    response = Response(generate(), mimetype='text/event-stream')
    response.headers['Cache-Control'] = 'no-cache'
    response.headers['X-Accel-Buffering'] = 'no'
    return response
