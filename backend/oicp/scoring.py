"""
Score and risk-level calculation.

Each active flag adds the points of its severity. Flags are taken from the
most to the least severe (catalog order breaks ties); a flag whose
correlated primary flag was already counted is dampened, so one underlying
fact is not counted twice. The total is capped at 100.
"""
import math
from typing import Dict, List

from .config.constants import CORRELATED_FLAGS, MAX_SCORE, RISK_BANDS, SEVERITY_WEIGHTS, TOP_RISK_LEVEL
from .flags.catalog import CATALOG_ORDER
from .models import Flag, RiskLevel


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_breakdown(flags: List[Flag]) -> Dict[str, int]:
    """Points each active flag contributes, keyed by code, before the cap."""
    active = [f for f in flags if f.active]
    ordered = sorted(active, key=lambda f: (-f.severity, CATALOG_ORDER.get(f.code, len(CATALOG_ORDER))))

    counted = set()
    contributions: Dict[str, int] = {}
    for flag in ordered:
        weight = SEVERITY_WEIGHTS[flag.severity]
        for primary, dependent, factor in CORRELATED_FLAGS:
            if flag.code == dependent and primary in counted:
                weight = _round_half_up(weight * factor)
        contributions[flag.code] = contributions.get(flag.code, 0) + weight
        counted.add(flag.code)
    return contributions


def compute_score(flags: List[Flag]) -> int:
    """Integer score in [0, 100]."""
    return min(MAX_SCORE, sum(score_breakdown(flags).values()))


def classify_risk(score: int) -> RiskLevel:
    """
    Risk band for a score.

    Bands (upper bound inclusive):
    - 0-10: low
    - 11-30: moderate
    - 31-60: high
    - 61-100: critical
    """
    for level, upper in RISK_BANDS:
        if score <= upper:
            return level
    return TOP_RISK_LEVEL
