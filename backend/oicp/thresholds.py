"""
Threshold resolver: which regime and ínfima cuantía ceiling apply on a date.

    >>> resolve_threshold('2024-05-06').infima_threshold
    6658.78
    >>> resolve_regime('2025-10-07')
    'LOSNCP_REFORMADA'
"""
from bisect import bisect_right
from datetime import date
from functools import lru_cache
from typing import List, Optional

from .config.thresholds import THRESHOLD_SCHEDULE, ThresholdEntry
from .dates import parse_date
from .models import Regime, YearThresholds

_SCHEDULE: List[ThresholdEntry] = sorted(THRESHOLD_SCHEDULE, key=lambda e: e.effective_from)
_STARTS: List[date] = [e.effective_from for e in _SCHEDULE]


@lru_cache(maxsize=None)
def _to_model(entry: ThresholdEntry) -> YearThresholds:
    return YearThresholds(
        regime=entry.regime,
        infima_threshold=entry.infima_threshold,
        reference_index=entry.reference_index,
        minor_amount_ceiling=entry.minor_amount_ceiling,
        effective_from=entry.effective_from,
    )


def _entry_for(day: Optional[date]) -> ThresholdEntry:
    if day is None:
        return _SCHEDULE[-1]
    idx = bisect_right(_STARTS, day)
    if idx == 0:
        # Before the schedule starts
        return _SCHEDULE[-1]
    return _SCHEDULE[idx - 1]


def resolve_threshold(when=None) -> YearThresholds:
    """
    Thresholds in force on ``when``.

    Args:
        when: date, datetime, ISO-8601 string or None. Missing or
            unparseable values resolve to the newest schedule entry.
    """
    return _to_model(_entry_for(parse_date(when)))


def resolve_regime(when=None) -> Regime:
    """Regime in force on ``when``."""
    return resolve_threshold(when).regime


def infima_threshold(when=None) -> float:
    """Ínfima cuantía ceiling in force on ``when``."""
    return resolve_threshold(when).infima_threshold


def threshold_for_year(year: Optional[int]) -> YearThresholds:
    """
    First entry of a calendar year; unknown years get the newest entry.

    Prefer resolve_threshold() for records: a year can span two regimes.
    """
    if year is not None:
        for entry in _SCHEDULE:
            if entry.effective_from.year == year:
                return _to_model(entry)
    return _to_model(_SCHEDULE[-1])
