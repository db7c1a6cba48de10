"""
Shared column helpers.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Python-side timestamp so ordering keeps sub-second precision on every backend."""
    return datetime.now(timezone.utc)
