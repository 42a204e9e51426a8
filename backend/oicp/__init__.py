"""
OICP: Observatorio de Integridad de Contratación Pública

Red-flag engine for Ecuadorian public procurement (SERCOP OCDS data).
Computes reproducible integrity-risk signals; it does not assert that
any procedure is corrupt.

Components:
- thresholds: legal regime and ínfima cuantía ceiling by date
- normalizer: OCDS release -> ProcedureData
- flags: individual and concentration red-flag rules
- context: corpus-wide concentration snapshot (pandas)
- scoring: weighted score with correlation dampening, risk bands
- engine: evaluate one record or a batch
"""

__version__ = "1.0.0"

from .context import build_context, build_contexts_by_year
from .engine import evaluate, evaluate_batch, summarize
from .flags import FLAG_CATALOG, evaluate_concentration, evaluate_individual
from .models import ConcentrationContext, EvaluationResult, Flag, ProcedureData, Supplier, YearThresholds
from .normalizer import normalize
from .scoring import classify_risk, compute_score
from .thresholds import resolve_regime, resolve_threshold

__all__ = [
    "FLAG_CATALOG",
    "ConcentrationContext",
    "EvaluationResult",
    "Flag",
    "ProcedureData",
    "Supplier",
    "YearThresholds",
    "build_context",
    "build_contexts_by_year",
    "classify_risk",
    "compute_score",
    "evaluate",
    "evaluate_batch",
    "evaluate_concentration",
    "evaluate_individual",
    "normalize",
    "resolve_regime",
    "resolve_threshold",
    "summarize",
]
