"""Time utility functions."""

from __future__ import annotations

from datetime import datetime, timezone

__all__ = ["utc_now"]


def utc_now() -> datetime:
    """
    Return current UTC time with timezone awareness.

    Used to timestamp attribute changes.

    Returns
    -------
    datetime
        Current UTC timestamp with tzinfo=timezone.utc

    Examples
    --------
    >>> from datetime import timezone
    >>> now = utc_now()
    >>> now.tzinfo == timezone.utc
    True
    """
    return datetime.now(tz=timezone.utc)
