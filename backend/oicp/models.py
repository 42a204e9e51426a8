"""
Pydantic models for the OICP flag engine.

ProcedureData is the canonical flat record every rule reads. Monetary and
date fields are independently optional: a rule that needs a missing field
does not fire, it never assumes zero or an earliest date.
"""
from datetime import date
from typing import Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config.constants import CLASSIFICATION_PREFIX_LENGTH, SEVERITY_WEIGHTS

Regime = Literal['LOSNCP_COEFICIENTES', 'LOSNCP_REFORMADA']
FlagCategory = Literal['competition', 'timing', 'price', 'concentration', 'transparency']
RiskLevel = Literal['low', 'moderate', 'high', 'critical']


class YearThresholds(BaseModel):
    """Regime and ínfima cuantía ceiling in force on a given date."""
    model_config = ConfigDict(frozen=True)

    regime: Regime
    infima_threshold: float = Field(gt=0, description="Small-value ceiling (USD)")
    reference_index: float = Field(description="State general budget (PIE) the ceiling derives from")
    minor_amount_ceiling: Optional[float] = None
    effective_from: Optional[date] = None


class Supplier(BaseModel):
    """Awarded supplier; id or name may be empty, not both."""
    model_config = ConfigDict(frozen=True)

    id: str = ''
    name: str = ''

    @property
    def key(self) -> str:
        """Identity used for buyer/supplier aggregation."""
        return self.id or self.name


class ProcedureData(BaseModel):
    """Canonical normalized procurement procedure."""
    model_config = ConfigDict(frozen=True)

    id: str
    ocid: Optional[str] = None
    status: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None

    # Classification
    procurement_method: Optional[str] = None
    procurement_method_details: Optional[str] = None
    items_classification: Optional[str] = None

    # Buyer
    buyer_id: Optional[str] = None
    buyer_name: Optional[str] = None

    # Amounts
    budget_amount: Optional[float] = None
    award_amount: Optional[float] = None
    contract_amount: Optional[float] = None
    final_amount: Optional[float] = None

    # Dates
    published_date: Optional[date] = None
    submission_deadline: Optional[date] = None
    award_date: Optional[date] = None
    contract_date: Optional[date] = None

    number_of_tenderers: Optional[int] = Field(None, ge=0)
    amendment_count: int = Field(0, ge=0)
    suppliers: List[Supplier] = Field(default_factory=list)

    @property
    def has_amendments(self) -> bool:
        return self.amendment_count > 0

    @property
    def effective_value(self) -> Optional[float]:
        """Award amount if present, else budget amount."""
        return self.award_amount or self.budget_amount or None

    @property
    def reference_date(self) -> Optional[date]:
        """Date used for threshold resolution and fiscal year."""
        return self.published_date or self.award_date

    @property
    def fiscal_year(self) -> Optional[int]:
        ref = self.reference_date
        return ref.year if ref else None

    @property
    def classification_prefix(self) -> Optional[str]:
        if not self.items_classification:
            return None
        return self.items_classification[:CLASSIFICATION_PREFIX_LENGTH]

    @property
    def data_coverage(self) -> float:
        """Share (0-1) of the fields the rule catalog depends on that are present."""
        present = [
            bool(self.buyer_id),
            self.effective_value is not None,
            bool(self.suppliers),
            bool(self.procurement_method or self.procurement_method_details),
            self.published_date is not None,
            self.submission_deadline is not None,
            self.award_date is not None,
            self.number_of_tenderers is not None,
            bool(self.items_classification),
            bool(self.description or self.title),
        ]
        return round(sum(present) / len(present), 2)


class Flag(BaseModel):
    """A red flag raised on a procedure."""
    model_config = ConfigDict(frozen=True)

    code: str
    category: FlagCategory
    name: str
    name_es: str
    description_es: str
    severity: int = Field(ge=0, le=3)
    ocp_ref: Optional[str] = None
    active: bool = True
    detail: Optional[str] = None
    weight: Optional[int] = Field(None, description="Points contributed to the score, after dampening")

    @property
    def base_weight(self) -> int:
        return SEVERITY_WEIGHTS[self.severity]


class EvaluationResult(BaseModel):
    """Flags, score and risk level for one procedure."""
    model_config = ConfigDict(frozen=True)

    record_id: Optional[str] = None
    flags: List[Flag] = Field(default_factory=list)
    score: int = Field(0, ge=0, le=100)
    risk_level: RiskLevel = 'low'
    regime: Optional[Regime] = None
    threshold: Optional[float] = None

    @property
    def codes(self) -> List[str]:
        return [f.code for f in self.flags]


class BucketEntry(BaseModel):
    """One contract in a (buyer, classification prefix) bucket."""
    model_config = ConfigDict(frozen=True)

    record_id: str
    date: date
    value: float
    supplier_id: Optional[str] = None


class ConcentrationContext(BaseModel):
    """
    Read-only aggregate snapshot over one fiscal year of the corpus.

    Pair maps are keyed "buyer|supplier" and bucket maps "buyer|prefix"
    (see pair_key). Build it with oicp.context.build_context, or validate
    the storage layer's aggregate with ConcentrationContext.model_validate.
    """
    model_config = ConfigDict(frozen=True)

    year: int
    infima_counts: Dict[str, int]
    infima_totals: Dict[str, float]
    buyer_shares: Dict[str, float] = Field(description="Pair share of the buyer's annual award value (%)")
    pair_years: Dict[str, FrozenSet[int]]
    classification_buckets: Dict[str, List[BucketEntry]]
    consortium_counts: Dict[str, int] = Field(default_factory=dict)


def pair_key(left: Optional[str], right: Optional[str]) -> str:
    return f"{left or ''}|{right or ''}"
