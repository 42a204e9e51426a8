"""
Evaluation orchestrator.

Composes normalization, the individual and concentration rules and the
scoring into one call. Evaluation is a pure function of (record, context):
no hidden state and no randomness, so batches can run on worker threads
without synchronization.
"""
import concurrent.futures
from collections import Counter
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Union

import structlog

from .flags.concentration import evaluate_concentration
from .flags.individual import evaluate_individual
from .models import ConcentrationContext, EvaluationResult, ProcedureData
from .normalizer import normalize
from .scoring import classify_risk, compute_score, score_breakdown
from .thresholds import resolve_threshold

logger = structlog.get_logger("oicp.engine")

Contexts = Union[ConcentrationContext, Dict[int, ConcentrationContext], None]


def evaluate(record, ctx=None) -> EvaluationResult:
    """
    Evaluate one procedure.

    Args:
        record: Raw OCDS release/record or ProcedureData.
        ctx: Optional ConcentrationContext. Without one only the individual
            rules run (ad hoc or streaming evaluation).

    Returns:
        EvaluationResult with individual flags first, then concentration
        flags whose code was not already raised.
    """
    proc = normalize(record)
    flags = evaluate_individual(proc)
    if ctx is not None:
        codes = {f.code for f in flags}
        for flag in evaluate_concentration(proc, ctx):
            if flag.code not in codes:
                flags.append(flag)
                codes.add(flag.code)

    weights = score_breakdown(flags)
    score = compute_score(flags)
    thresholds = resolve_threshold(proc.reference_date)
    return EvaluationResult(
        record_id=proc.id,
        flags=[f.model_copy(update={'weight': weights.get(f.code, 0)}) for f in flags],
        score=score,
        risk_level=classify_risk(score),
        regime=thresholds.regime,
        threshold=thresholds.infima_threshold,
    )


def _context_for(proc: ProcedureData, contexts: Contexts) -> Optional[ConcentrationContext]:
    if contexts is None or isinstance(contexts, ConcentrationContext):
        return contexts
    if isinstance(contexts, Mapping) and all(isinstance(k, int) for k in contexts):
        return contexts.get(proc.fiscal_year)
    # A single context passed as a raw mapping; evaluate_concentration validates it
    return contexts


def evaluate_batch(
    records: Iterable,
    contexts: Contexts = None,
    max_workers: Optional[int] = None,
) -> List[EvaluationResult]:
    """
    Evaluate many procedures concurrently.

    Args:
        records: Raw releases or ProcedureData.
        contexts: One snapshot for every record, or {fiscal_year: snapshot};
            records whose year has no snapshot get individual flags only.
        max_workers: Thread pool size (executor default when None).

    Returns:
        Results in input order.
    """
    procs = [normalize(r) for r in records]
    if not procs:
        return []

    def _run(proc: ProcedureData) -> EvaluationResult:
        return evaluate(proc, _context_for(proc, contexts))

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(_run, procs))

    summary = summarize(results)
    logger.info("batch_evaluated", records=len(results), risk_levels=summary['risk_levels'])
    return results


def summarize(results: Iterable[EvaluationResult]) -> dict:
    """Counts per risk level and per flag code."""
    levels = Counter()
    codes = Counter()
    total = 0
    for result in results:
        total += 1
        levels[result.risk_level] += 1
        codes.update(result.codes)
    return {
        'total': total,
        'risk_levels': {level: levels.get(level, 0) for level in ('low', 'moderate', 'high', 'critical')},
        'flags': dict(sorted(codes.items())),
    }
