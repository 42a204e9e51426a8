"""
Legal thresholds for Ecuadorian public procurement.

The ínfima cuantía ceiling is a step function of date. Until the reformed
LOSNCP (R.O. CS No. 140, 7 Oct 2025) it was a coefficient of the yearly
state budget (PIE); from the cut-over onwards it is a fixed USD 10,000.

Entries are ordered by ``effective_from``. A date resolves to the latest
entry that is already in force; anything the schedule does not cover
resolves to the newest entry. Bump THRESHOLD_SCHEDULE_VERSION whenever an
entry is added or corrected so stored evaluations can be traced back.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

THRESHOLD_SCHEDULE_VERSION = '2026.1'

REGIME_COEFFICIENTS = 'LOSNCP_COEFICIENTES'
REGIME_REFORMED = 'LOSNCP_REFORMADA'

REFORM_CUTOVER = date(2025, 10, 7)


@dataclass(frozen=True)
class ThresholdEntry:
    """A threshold regime in force from a given date."""
    effective_from: date
    regime: str
    infima_threshold: float
    reference_index: float  # PIE, state general budget (USD)
    minor_amount_ceiling: Optional[float] = None
    source: Optional[str] = None


THRESHOLD_SCHEDULE: List[ThresholdEntry] = [
    ThresholdEntry(date(2019, 1, 1), REGIME_COEFFICIENTS, 7_105.88, 35_529_394_461.72, 71_058.79, 'SERCOP 2019'),
    ThresholdEntry(date(2020, 1, 1), REGIME_COEFFICIENTS, 7_099.68, 35_498_420_637.20, 70_996.84, 'SERCOP 2020'),
    ThresholdEntry(date(2021, 1, 1), REGIME_COEFFICIENTS, 6_416.07, 32_080_363_387.48, 64_160.73, 'SERCOP 2021'),
    ThresholdEntry(date(2022, 1, 1), REGIME_COEFFICIENTS, 6_779.95, 33_899_734_759.85, 67_799.47, 'SERCOP 2022'),
    ThresholdEntry(date(2023, 1, 1), REGIME_COEFFICIENTS, 6_300.57, 31_502_865_593.76, 63_005.73, 'SERCOP 2023'),
    ThresholdEntry(date(2024, 1, 1), REGIME_COEFFICIENTS, 6_658.78, 33_293_903_424.91, 66_587.81, 'SERCOP 2024'),
    ThresholdEntry(date(2025, 1, 1), REGIME_COEFFICIENTS, 10_000.00, 36_063_017_083.08, None, 'SERCOP 2025'),
    ThresholdEntry(REFORM_CUTOVER, REGIME_REFORMED, 10_000.00, 36_063_017_083.08, None, 'LOSNCP reformada'),
    ThresholdEntry(date(2026, 1, 1), REGIME_REFORMED, 10_000.00, 46_255_572_824.33, None, 'PIE 2026'),
]
