"""Server-Sent Events helpers."""

from __future__ import annotations

import json
from typing import Any


def format_sse(data: dict[str, Any] | str, event: str | None = None) -> str:
    """Format a payload as a single SSE message."""
    if not isinstance(data, str):
        data = json.dumps(data)

    lines = []
    if event:
        lines.append(f'event: {event}')
    for chunk in data.splitlines() or ['']:
        lines.append(f'data: {chunk}')
    return '\n'.join(lines) + '\n\n'
