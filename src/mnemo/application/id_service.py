"""Stable identifiers for cards and sessions."""

from ulid import ULID


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"card_{ULID()}"


def generate_session_id() -> str:
    return f"session_{ULID()}"
