"""Logging helpers."""

from __future__ import annotations

import logging
import sys

import config

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Attach a single stream handler to the root 'wificonnect' logger."""
    global _configured

    root = logging.getLogger('wificonnect')
    root.setLevel(level or config.LOG_LEVEL)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the 'wificonnect' hierarchy."""
    if not name.startswith('wificonnect'):
        name = f'wificonnect.{name}'
    return logging.getLogger(name)
