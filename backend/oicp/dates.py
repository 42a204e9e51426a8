"""
Date helpers shared by the threshold resolver and the timing rules.

OCDS dates are ISO-8601 strings, usually with a time and offset
(``2024-03-04T09:30:00-05:00``). Only the calendar date matters here.
"""
from datetime import date, datetime
from typing import Optional

import numpy as np


def parse_date(value) -> Optional[date]:
    """Return the calendar date of ``value``, or None if it is missing or unparseable."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def business_days(start: Optional[date], end: Optional[date]) -> Optional[int]:
    """
    Weekdays from ``start`` to ``end``, both inclusive.

    No holiday calendar is applied. Returns None when either endpoint is
    missing and 0 when ``end`` precedes ``start``.
    """
    if start is None or end is None:
        return None
    if end < start:
        return 0
    first = np.datetime64(start, 'D')
    last = np.datetime64(end, 'D') + np.timedelta64(1, 'D')
    return int(np.busday_count(first, last))
