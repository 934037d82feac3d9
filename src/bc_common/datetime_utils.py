"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Whole seconds since epoch; used as the liquidity deposit deadline."""
    return int(utc_now().timestamp())
