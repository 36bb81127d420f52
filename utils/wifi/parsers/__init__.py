"""Parsers for WiFi tool output."""

from .system_profiler import (
    ParserState,
    SystemProfilerParser,
    parse_system_profiler,
)

__all__ = [
    'ParserState',
    'SystemProfilerParser',
    'parse_system_profiler',
]
