"""
Concentration flag rules: evaluated against a ConcentrationContext snapshot.

Supplier-scoped rules run once per supplier on the procedure; when several
suppliers trip the same rule only the first flag is kept. The context is
never modified.
"""
from collections.abc import Mapping
from typing import List

from pydantic import ValidationError

from ..config.constants import (
    CONSORTIUM_MIN_COUNT,
    CONSORTIUM_WINDOW_YEARS,
    DOMINANT_SUPPLIER_SHARE_PCT,
    PERMANENT_SUPPLIER_MIN_YEARS,
    PERMANENT_SUPPLIER_WINDOW_YEARS,
    RECURRING_INFIMA_MIN_COUNT,
    SPLITTING_MIN_CONTRACTS,
    SPLITTING_WINDOW_DAYS,
)
from ..errors import InvalidContextError
from ..models import ConcentrationContext, Flag, ProcedureData, pair_key
from ..normalizer import is_small_value
from ..thresholds import infima_threshold
from .catalog import dedupe_flags, make_flag
from .individual import money


def ensure_context(ctx) -> ConcentrationContext:
    """
    Validate a context handed in by a caller.

    Raises:
        InvalidContextError: ``ctx`` is not a context or lacks a required map.
    """
    if isinstance(ctx, ConcentrationContext):
        return ctx
    if isinstance(ctx, Mapping):
        try:
            return ConcentrationContext.model_validate(ctx)
        except ValidationError as exc:
            raise InvalidContextError(
                "Concentration context is structurally invalid",
                {"errors": exc.errors(include_url=False)},
            ) from exc
    raise InvalidContextError(
        "Expected a ConcentrationContext",
        {"type": type(ctx).__name__},
    )


def _supplier_flags(proc: ProcedureData, ctx: ConcentrationContext) -> List[Flag]:
    flags = []
    infima = is_small_value(proc.procurement_method_details)
    consortium = len({s.key for s in proc.suppliers if s.key}) >= 2

    for supplier in proc.suppliers:
        key = pair_key(proc.buyer_id, supplier.key)
        label = supplier.name or supplier.id

        # CC-01: recurring supplier in ínfima cuantía
        count = ctx.infima_counts.get(key, 0)
        if infima and count >= RECURRING_INFIMA_MIN_COUNT:
            flags.append(make_flag(
                'CC-01', f"{label} tiene {count} ínfimas con este comprador en {ctx.year}"))

        # CC-02: dominant supplier
        share = ctx.buyer_shares.get(key, 0.0)
        if share > DOMINANT_SUPPLIER_SHARE_PCT:
            flags.append(make_flag(
                'CC-02', f"{label} representa {share:.1f}% del gasto de este comprador"))

        # CC-03: historically permanent supplier
        years = ctx.pair_years.get(key, frozenset())
        if len(years) >= PERMANENT_SUPPLIER_MIN_YEARS:
            flags.append(make_flag(
                'CC-03',
                f"{label} presente en {len(years)} de los últimos {PERMANENT_SUPPLIER_WINDOW_YEARS} años"))

        # CC-04: recurring consortium member
        consortia = ctx.consortium_counts.get(supplier.key, 0)
        if consortium and consortia >= CONSORTIUM_MIN_COUNT:
            flags.append(make_flag(
                'CC-04',
                f"{label} integra {consortia} consorcios en {CONSORTIUM_WINDOW_YEARS} años"))
    return flags


def _splitting_flag(proc: ProcedureData, ctx: ConcentrationContext) -> List[Flag]:
    """CC-05: 3+ contracts, same buyer and CPC prefix, within ±90 days, sum above the ceiling."""
    day = proc.reference_date
    prefix = proc.classification_prefix
    if not proc.buyer_id or not prefix or day is None:
        return []
    bucket = ctx.classification_buckets.get(pair_key(proc.buyer_id, prefix), [])
    window = [e for e in bucket if abs((e.date - day).days) <= SPLITTING_WINDOW_DAYS]
    if len(window) < SPLITTING_MIN_CONTRACTS:
        return []
    total = sum(e.value for e in window)
    threshold = infima_threshold(day)
    if total <= threshold:
        return []
    return [make_flag(
        'CC-05',
        f"{len(window)} contratos CPC {prefix} en {SPLITTING_WINDOW_DAYS} días = {money(total)} "
        f"(umbral: {money(threshold)})",
    )]


def evaluate_concentration(proc: ProcedureData, ctx) -> List[Flag]:
    """
    Evaluate the concentration rules for one procedure.

    Raises:
        InvalidContextError: ``ctx`` is not a valid ConcentrationContext.
    """
    ctx = ensure_context(ctx)
    flags = []
    if proc.buyer_id:
        flags.extend(_supplier_flags(proc, ctx))
    flags.extend(_splitting_flag(proc, ctx))
    return dedupe_flags(flags)
