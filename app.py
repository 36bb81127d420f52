#!/usr/bin/env python3
"""
WiFi Connect - scan and join WiFi networks on macOS over a local HTTP API.
"""

from __future__ import annotations

import time

from flask import Flask, Response, jsonify

import config
from utils.logging import configure_logging, get_logger

logger = get_logger('wificonnect.app')

app = Flask(__name__)

_start_time = time.time()


@app.route('/health')
def health_check() -> Response:
    """Health check endpoint."""
    from utils.wifi import get_wifi_controller

    controller = get_wifi_controller()
    return jsonify({
        'status': 'healthy',
        'version': config.VERSION,
        'uptime_seconds': round(time.time() - _start_time, 2),
        'interface': controller.connector.interface,
        'state': controller.state.value,
    })


def main() -> None:
    """Configure logging, initialize the database and run the server."""
    from routes import register_blueprints
    from utils.database import init_db

    configure_logging()
    init_db()

    if 'wifi' not in app.blueprints:
        register_blueprints(app)

    logger.info(f"WiFi Connect v{config.VERSION} on http://{config.HOST}:{config.PORT}")
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG, threaded=True)


if __name__ == '__main__':
    main()
