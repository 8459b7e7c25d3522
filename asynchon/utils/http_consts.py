"""Shared HTTP header constants used across asynchon.

Keeping the strings in **one** place guarantees future version bumps (e.g.
app version update) only need a single change.
"""

ACCEPT_HEADER: str = "application/json"
"""Default *Accept:* value used by all requests."""

USER_AGENT: str = "hOn/2.6.5 (Android)"
"""User-agent string mimicking the official mobile application."""

CONTENT_TYPE_JSON: str = "application/json; charset=utf-8"
"""Content-Type for JSON bodies (POST)."""
