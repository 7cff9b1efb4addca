"""
Common utilities for the AlcoZero application
"""
from datetime import datetime, timezone, timedelta


def utcnow():
    """
    Current UTC time as a naive datetime, the form stored in every table.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(dt_val=None):
    """
    Midnight (UTC) of the given datetime, or of today.
    """
    dt_val = dt_val or utcnow()
    return dt_val.replace(hour=0, minute=0, second=0, microsecond=0)


def days_ago(days):
    return utcnow() - timedelta(days=days)


def epoch_millis(dt_val=None):
    """
    Milliseconds since the epoch for a naive UTC datetime (now when omitted).

    Args:
        dt_val: naive UTC datetime

    Returns:
        int: epoch milliseconds
    """
    dt_val = dt_val or utcnow()
    return int(dt_val.replace(tzinfo=timezone.utc).timestamp() * 1000)


def parse_timestamp(value):
    """
    Accept epoch milliseconds, an ISO string or a datetime and return a naive
    UTC datetime. None stays None.

    Raises:
        TypeError: If value is not a supported type
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)

    if isinstance(value, str):
        return parse_timestamp(datetime.fromisoformat(value.replace("Z", "+00:00")))

    raise TypeError(f"Unsupported type for parse_timestamp: {type(value)}")
