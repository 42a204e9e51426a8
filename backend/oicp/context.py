"""
Concentration context builder.

Aggregates a corpus slice into the read-only snapshot the concentration
rules consult. This is a batch step: it must see the whole fiscal year
before any concentration flag for that year is evaluated, and it must be
rebuilt after records for that year are inserted or modified.

Policy: counts and shares are full-year totals, so every qualifying record
of a buyer/supplier pair is flagged, not only those after the fifth.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import pandas as pd
import structlog

from .config.constants import (
    CONSORTIUM_WINDOW_YEARS,
    PERMANENT_SUPPLIER_WINDOW_YEARS,
    SPLITTING_WINDOW_DAYS,
)
from .models import BucketEntry, ConcentrationContext, ProcedureData, pair_key
from .normalizer import is_small_value, normalize

logger = structlog.get_logger("oicp.context")

_PAIR_COLUMNS = ['record_id', 'buyer_id', 'supplier_key', 'year', 'award_value', 'is_infima']


def _pair_frame(records: List[ProcedureData]) -> pd.DataFrame:
    """One row per (record, distinct supplier key) with a buyer and a fiscal year."""
    rows = []
    for proc in records:
        if not proc.buyer_id or proc.fiscal_year is None:
            continue
        infima = is_small_value(proc.procurement_method_details)
        # One supplier id may come with several names across awards
        for key in dict.fromkeys(s.key for s in proc.suppliers if s.key):
            rows.append((
                proc.id, proc.buyer_id, key, proc.fiscal_year,
                proc.award_amount or 0.0, infima,
            ))
    return pd.DataFrame(rows, columns=_PAIR_COLUMNS)


def _infima_stats(current: pd.DataFrame):
    counts: Dict[str, int] = {}
    totals: Dict[str, float] = {}
    if current.empty:
        return counts, totals
    infimas = current[current['is_infima'].astype(bool)]
    if infimas.empty:
        return counts, totals
    grouped = infimas.groupby(['buyer_id', 'supplier_key']).agg(
        count=('record_id', 'nunique'),
        total=('award_value', 'sum'),
    )
    for (buyer, supplier), row in grouped.iterrows():
        key = pair_key(buyer, supplier)
        counts[key] = int(row['count'])
        totals[key] = float(row['total'])
    return counts, totals


def _buyer_shares(current: pd.DataFrame) -> Dict[str, float]:
    if current.empty:
        return {}
    pair_totals = current.groupby(['buyer_id', 'supplier_key'])['award_value'].sum()
    buyer_totals = pair_totals.groupby(level='buyer_id').sum()
    buyer_totals = buyer_totals[buyer_totals > 0]
    shares = pair_totals.div(buyer_totals, level='buyer_id').dropna() * 100
    return {pair_key(b, s): float(v) for (b, s), v in shares.items()}


def _pair_years(frame: pd.DataFrame, year: int) -> Dict[str, frozenset]:
    first_year = year - PERMANENT_SUPPLIER_WINDOW_YEARS + 1
    window = frame[(frame['year'] >= first_year) & (frame['year'] <= year)]
    if window.empty:
        return {}
    years = window.groupby(['buyer_id', 'supplier_key'])['year'].unique()
    return {pair_key(b, s): frozenset(int(y) for y in ys) for (b, s), ys in years.items()}


def _consortium_counts(records: List[ProcedureData], year: int) -> Dict[str, int]:
    """Distinct consortia (member sets) each supplier joined in the trailing window."""
    first_year = year - CONSORTIUM_WINDOW_YEARS + 1
    consortia = defaultdict(set)
    for proc in records:
        if proc.fiscal_year is None or not first_year <= proc.fiscal_year <= year:
            continue
        members = frozenset(s.key for s in proc.suppliers if s.key)
        if len(members) < 2:
            continue
        for member in members:
            consortia[member].add(members)
    return {member: len(sets) for member, sets in consortia.items()}


def _classification_buckets(records: List[ProcedureData], year: int) -> Dict[str, List[BucketEntry]]:
    start = date(year, 1, 1) - timedelta(days=SPLITTING_WINDOW_DAYS)
    end = date(year, 12, 31) + timedelta(days=SPLITTING_WINDOW_DAYS)
    buckets = defaultdict(list)
    for proc in records:
        day = proc.reference_date
        value = proc.effective_value
        prefix = proc.classification_prefix
        if not proc.buyer_id or not prefix or day is None or value is None:
            continue
        if not start <= day <= end:
            continue
        buckets[pair_key(proc.buyer_id, prefix)].append(BucketEntry(
            record_id=proc.id,
            date=day,
            value=value,
            supplier_id=proc.suppliers[0].key if proc.suppliers else None,
        ))
    return {key: sorted(entries, key=lambda e: (e.date, e.record_id)) for key, entries in buckets.items()}


def build_context(records: Iterable, year: Optional[int] = None) -> ConcentrationContext:
    """
    Build the concentration snapshot for one fiscal year.

    Args:
        records: Raw releases or ProcedureData; the corpus slice should
            cover the trailing years the historical rules look back on.
        year: Fiscal year to aggregate. Defaults to the latest year present.
    """
    procs = [normalize(r) for r in records]
    if year is None:
        years = [p.fiscal_year for p in procs if p.fiscal_year is not None]
        year = max(years) if years else date.today().year

    frame = _pair_frame(procs)
    current = frame[frame['year'] == year]
    counts, totals = _infima_stats(current)

    ctx = ConcentrationContext(
        year=year,
        infima_counts=counts,
        infima_totals=totals,
        buyer_shares=_buyer_shares(current),
        pair_years=_pair_years(frame, year),
        classification_buckets=_classification_buckets(procs, year),
        consortium_counts=_consortium_counts(procs, year),
    )
    logger.info(
        "concentration_context_built",
        year=year,
        records=len(procs),
        pairs=len(ctx.buyer_shares),
        infima_pairs=len(counts),
        buckets=len(ctx.classification_buckets),
    )
    return ctx


def build_contexts_by_year(records: Iterable) -> Dict[int, ConcentrationContext]:
    """One snapshot per fiscal year present in ``records``."""
    procs = [normalize(r) for r in records]
    years = sorted({p.fiscal_year for p in procs if p.fiscal_year is not None})
    return {year: build_context(procs, year) for year in years}
