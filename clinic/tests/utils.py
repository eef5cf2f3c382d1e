from datetime import datetime, timezone as dt_timezone


def at(hour, minute=0, day=1):
    """Aware UTC datetime on 2030-01-<day>."""
    return datetime(2030, 1, day, hour, minute, tzinfo=dt_timezone.utc)
