"""
OICP flags: red-flag catalog and rule evaluators.

- catalog: the 15 indicators (codes, categories, severities)
- individual: single-record rules
- concentration: rules that need a ConcentrationContext
"""
from .catalog import FLAG_CATALOG, dedupe_flags, make_flag
from .concentration import ensure_context, evaluate_concentration
from .individual import INDIVIDUAL_RULES, evaluate_individual

__all__ = [
    "FLAG_CATALOG",
    "INDIVIDUAL_RULES",
    "dedupe_flags",
    "make_flag",
    "ensure_context",
    "evaluate_concentration",
    "evaluate_individual",
]
