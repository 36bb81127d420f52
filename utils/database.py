"""
SQLite persistence for WiFi Connect.

Only a small key-value settings table is kept here. The network scan cache
stores its versioned blob in it.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

import config
from utils.logging import get_logger

logger = get_logger('wificonnect.database')

DB_DIR = Path(config.DB_DIR)
DB_PATH = DB_DIR / 'wificonnect.db'

# One connection per thread
_local = threading.local()


def _get_connection() -> sqlite3.Connection:
    """Get the thread-local database connection, opening it if needed."""
    conn = getattr(_local, 'connection', None)
    if conn is None:
        DB_DIR.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(DB_PATH), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        _local.connection = conn
    return conn


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a connection, committing on success and rolling back on error."""
    conn = _get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db() -> None:
    """Create tables if they don't exist."""
    logger.info(f"Initializing database at {DB_PATH}")
    with get_db() as conn:
        conn.execute('''
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')


def close_db() -> None:
    """Close the thread-local connection."""
    conn = getattr(_local, 'connection', None)
    if conn is not None:
        conn.close()
        _local.connection = None


# =============================================================================
# Settings
# =============================================================================

def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value, decoded from JSON."""
    with get_db() as conn:
        row = conn.execute(
            'SELECT value FROM settings WHERE key = ?', (key,)
        ).fetchone()

    if row is None:
        return default

    try:
        return json.loads(row['value'])
    except (json.JSONDecodeError, TypeError):
        return row['value']


def set_setting(key: str, value: Any) -> None:
    """Store a setting value as JSON, replacing any existing value."""
    with get_db() as conn:
        conn.execute('''
            INSERT INTO settings (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = CURRENT_TIMESTAMP
        ''', (key, json.dumps(value)))


def delete_setting(key: str) -> bool:
    """Delete a setting. Returns True if a row was removed."""
    with get_db() as conn:
        cursor = conn.execute('DELETE FROM settings WHERE key = ?', (key,))
        return cursor.rowcount > 0


def get_all_settings() -> dict[str, Any]:
    """Get all settings as a dict."""
    with get_db() as conn:
        rows = conn.execute('SELECT key, value FROM settings').fetchall()

    settings = {}
    for row in rows:
        try:
            settings[row['key']] = json.loads(row['value'])
        except (json.JSONDecodeError, TypeError):
            settings[row['key']] = row['value']
    return settings
