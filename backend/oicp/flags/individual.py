"""
Individual flag rules: evaluated on one procedure, no external state.

Rules are listed in INDIVIDUAL_RULES as (code, check) pairs. A check
receives the procedure plus its resolved thresholds and yields one evidence
string per firing; it yields nothing when the rule does not apply or when a
field it needs is missing.
"""
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from ..config.constants import (
    AMENDMENT_INCREASE_RATIO,
    DIRECT_METHOD,
    GENERIC_DESCRIPTION_LENGTH,
    LIGHTNING_AWARD_DAYS,
    NEAR_THRESHOLD_RATIO,
    PRICE_DIVERGENCE_RATIO,
    PUBLICATION_PERIOD_DEFAULT_DAYS,
    PUBLICATION_PERIOD_FLOOR,
    PUBLICATION_PERIOD_TIERS,
)
from ..dates import business_days
from ..models import Flag, ProcedureData, YearThresholds
from ..normalizer import is_competitive, is_small_value, is_special_regime
from ..thresholds import resolve_threshold
from .catalog import dedupe_flags, make_flag


def money(value: float) -> str:
    return f"${value:,.2f}"


@dataclass(frozen=True)
class RuleInput:
    """A procedure with the values every rule needs precomputed."""
    proc: ProcedureData
    thresholds: YearThresholds
    value: Optional[float]

    @property
    def threshold(self) -> float:
        return self.thresholds.infima_threshold


def _single_bidder(ri: RuleInput) -> Iterator[str]:
    proc = ri.proc
    if is_competitive(proc.procurement_method_details) and proc.number_of_tenderers == 1:
        yield f"Solo 1 oferente en {proc.procurement_method_details}"


def _high_value_no_competition(ri: RuleInput) -> Iterator[str]:
    if ri.value is None or ri.value <= ri.threshold:
        return
    if is_small_value(ri.proc.procurement_method_details):
        yield f"Valor {money(ri.value)} supera umbral ínfima {money(ri.threshold)}"
    if ri.proc.procurement_method == DIRECT_METHOD:
        yield f"Adjudicación directa {money(ri.value)} > umbral {money(ri.threshold)}"


def minimum_publication_days(value: float) -> int:
    """Legal minimum publication period (business days) for a contract value."""
    for floor, days in PUBLICATION_PERIOD_TIERS:
        if value > floor:
            return days
    return PUBLICATION_PERIOD_DEFAULT_DAYS


def _insufficient_publication(ri: RuleInput) -> Iterator[str]:
    if ri.value is None or ri.value <= PUBLICATION_PERIOD_FLOOR:
        return
    days = business_days(ri.proc.published_date, ri.proc.submission_deadline)
    if days is None:
        return
    min_days = minimum_publication_days(ri.value)
    if days < min_days:
        yield f"{days} días hábiles (mínimo: {min_days} para {money(ri.value)})"


def _lightning_award(ri: RuleInput) -> Iterator[str]:
    # Ínfimas are expected to be awarded fast
    if is_small_value(ri.proc.procurement_method_details):
        return
    days = business_days(ri.proc.published_date, ri.proc.award_date)
    if days is not None and days < LIGHTNING_AWARD_DAYS:
        yield f"Adjudicado en {days} días hábiles desde publicación"


def _value_near_threshold(ri: RuleInput) -> Iterator[str]:
    value, threshold = ri.value, ri.threshold
    if value is None or value <= 0:
        return
    if threshold * NEAR_THRESHOLD_RATIO <= value <= threshold:
        pct = value / threshold * 100
        yield f"Valor {money(value)} = {pct:.1f}% del umbral {money(threshold)}"


def _budget_award_divergence(ri: RuleInput) -> Iterator[str]:
    budget, award = ri.proc.budget_amount, ri.proc.award_amount
    if not budget or not award or budget <= 0:
        return
    diff = abs(award - budget) / budget
    if diff > PRICE_DIVERGENCE_RATIO:
        yield (f"Diferencia {diff * 100:.1f}% entre presupuesto ({money(budget)}) "
               f"y adjudicación ({money(award)})")


def _contract_amendment(ri: RuleInput) -> Iterator[str]:
    proc = ri.proc
    award = proc.award_amount
    if not proc.has_amendments or not award or award <= 0:
        return
    if proc.contract_amount:
        increase = (proc.contract_amount - award) / award
        if increase > AMENDMENT_INCREASE_RATIO:
            yield f"Contrato incrementado {increase * 100:.1f}% por enmiendas"
    if proc.final_amount:
        increase = (proc.final_amount - award) / award
        if increase > AMENDMENT_INCREASE_RATIO:
            yield f"Valor final {increase * 100:.1f}% mayor al adjudicado"


def _missing_fields(ri: RuleInput) -> Iterator[str]:
    proc = ri.proc
    missing = []
    if not proc.buyer_id:
        missing.append('comprador')
    if not ri.value:
        missing.append('valor')
    if not proc.suppliers:
        missing.append('proveedor')
    if not proc.procurement_method and not proc.procurement_method_details:
        missing.append('método')
    if missing:
        yield f"Faltan: {', '.join(missing)}"


def _generic_description(ri: RuleInput) -> Iterator[str]:
    desc = ri.proc.description or ri.proc.title or ''
    if 0 < len(desc) < GENERIC_DESCRIPTION_LENGTH:
        yield f"Descripción de solo {len(desc)} caracteres"


def _special_regime(ri: RuleInput) -> Iterator[str]:
    # SERCOP's OCDS feed never publishes procurementMethodRationale
    details = ri.proc.procurement_method_details
    if is_special_regime(details):
        yield f"Régimen especial ({details}) sin justificación en datos OCDS"


INDIVIDUAL_RULES: List[Tuple[str, Callable[[RuleInput], Iterator[str]]]] = [
    ('IC-01', _single_bidder),
    ('IC-02', _high_value_no_competition),
    ('IT-01', _insufficient_publication),
    ('IT-02', _lightning_award),
    ('IP-01', _value_near_threshold),
    ('IP-02', _budget_award_divergence),
    ('IP-03', _contract_amendment),
    ('TR-01', _missing_fields),
    ('TR-02', _generic_description),
    ('TR-03', _special_regime),
]


def evaluate_individual(proc: ProcedureData) -> List[Flag]:
    """Evaluate every single-record rule; one flag per code, first firing wins."""
    ri = RuleInput(
        proc=proc,
        thresholds=resolve_threshold(proc.reference_date),
        value=proc.effective_value,
    )
    flags = [
        make_flag(code, detail)
        for code, check in INDIVIDUAL_RULES
        for detail in check(ri)
    ]
    return dedupe_flags(flags)
