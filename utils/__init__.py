"""Shared utilities for WiFi Connect."""
