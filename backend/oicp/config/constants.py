"""
Centralized constants for the OICP flag engine.

Rule parameters, score weights and risk bands are kept here so that every
evaluator reads the same values. Import from here instead of redefining.
"""

# Severity (0..3) -> score points
SEVERITY_WEIGHTS = {0: 3, 1: 8, 2: 18, 3: 30}

MAX_SCORE = 100

# (primary_code, dependent_code, factor): the dependent flag is dampened
# when the primary one was already counted
CORRELATED_FLAGS = [
    ('IC-01', 'IC-02', 0.5),  # single bidder restates lack of competition
    ('CC-01', 'CC-05', 0.5),  # recurring ínfima supplier restates splitting
    ('IP-01', 'CC-05', 0.5),  # near-threshold value restates splitting
]

# Upper bound (inclusive) of each risk band, evaluated in order
RISK_BANDS = [
    ('low', 10),
    ('moderate', 30),
    ('high', 60),
]
TOP_RISK_LEVEL = 'critical'

# Individual rules
NEAR_THRESHOLD_RATIO = 0.85          # IP-01 lower bound
PRICE_DIVERGENCE_RATIO = 0.15        # IP-02
AMENDMENT_INCREASE_RATIO = 0.15      # IP-03
LIGHTNING_AWARD_DAYS = 3             # IT-02, business days
GENERIC_DESCRIPTION_LENGTH = 30      # TR-02

# IT-01: minimum business days between publication and bid deadline
PUBLICATION_PERIOD_FLOOR = 10_000    # below this value the rule is skipped
PUBLICATION_PERIOD_TIERS = [
    (500_000, 17),
    (100_000, 13),
]
PUBLICATION_PERIOD_DEFAULT_DAYS = 9

# Concentration rules
RECURRING_INFIMA_MIN_COUNT = 5       # CC-01
DOMINANT_SUPPLIER_SHARE_PCT = 30.0   # CC-02
PERMANENT_SUPPLIER_WINDOW_YEARS = 7  # CC-03
PERMANENT_SUPPLIER_MIN_YEARS = 5
CONSORTIUM_WINDOW_YEARS = 3          # CC-04
CONSORTIUM_MIN_COUNT = 8
SPLITTING_WINDOW_DAYS = 90           # CC-05
SPLITTING_MIN_CONTRACTS = 3
CLASSIFICATION_PREFIX_LENGTH = 2

# Procurement method keywords, matched against accent-folded lowercase text
INFIMA_KEYWORDS = ('infima',)
COMPETITIVE_KEYWORDS = ('licitac', 'subasta', 'cotizac', 'concurso', 'menor cuantia')
SPECIAL_REGIME_KEYWORDS = ('especial', 'emergen')
CATALOG_KEYWORDS = ('catalogo',)

# OCDS procurementMethod assigned when only the details text is published
METHOD_FOR_INFIMA = 'limited'
METHOD_FOR_SPECIAL_REGIME = 'selective'
METHOD_FOR_CATALOG = 'direct'
METHOD_DEFAULT = 'open'
DIRECT_METHOD = 'direct'
