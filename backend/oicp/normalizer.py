"""
OICP Normalizer: OCDS release -> ProcedureData

Flattens a loosely-structured OCDS release (as published by SERCOP) into
the canonical record the flag rules read:
- Latest award and latest contract win when several are published
- Suppliers are collected across all awards, deduplicated by (id, name)
- Amendments are summed across all contracts
- procurementMethod is inferred from the details text when absent

Every lookup degrades to None/empty; a missing sub-object never raises.
"""
from collections.abc import Mapping
from typing import Any, List, Optional

import structlog
from unidecode import unidecode

from .config.constants import (
    CATALOG_KEYWORDS,
    COMPETITIVE_KEYWORDS,
    INFIMA_KEYWORDS,
    METHOD_DEFAULT,
    METHOD_FOR_CATALOG,
    METHOD_FOR_INFIMA,
    METHOD_FOR_SPECIAL_REGIME,
    SPECIAL_REGIME_KEYWORDS,
)
from .dates import parse_date
from .errors import InvalidReleaseError
from .models import ProcedureData, Supplier

logger = structlog.get_logger("oicp.normalizer")

# Keys that only appear in raw OCDS documents, never in a ProcedureData dump
_OCDS_KEYS = {'tender', 'awards', 'contracts', 'buyer', 'planning', 'bids', 'tag', 'releases', 'date'}

# Release tags in precedence order
_STATUS_TAGS = ('contract', 'award', 'tender', 'planning')


# =============================================================================
# METHOD KEYWORDS
# =============================================================================

def fold(text: Optional[str]) -> str:
    """Lowercase, accent-free form used for keyword matching."""
    if not text:
        return ''
    return unidecode(text).lower()


def _contains_any(text: Optional[str], keywords) -> bool:
    folded = fold(text)
    return bool(folded) and any(k in folded for k in keywords)


def is_small_value(method_details: Optional[str]) -> bool:
    """Ínfima cuantía procedure."""
    return _contains_any(method_details, INFIMA_KEYWORDS)


def is_competitive(method_details: Optional[str]) -> bool:
    """Open or competitive procedure (licitación, subasta, cotización, ...)."""
    return _contains_any(method_details, COMPETITIVE_KEYWORDS)


def is_special_regime(method_details: Optional[str]) -> bool:
    """Régimen especial or emergency procedure."""
    return _contains_any(method_details, SPECIAL_REGIME_KEYWORDS)


def is_catalog(method_details: Optional[str]) -> bool:
    """Catálogo electrónico purchase."""
    return _contains_any(method_details, CATALOG_KEYWORDS)


def classify_method(method_details: Optional[str]) -> Optional[str]:
    """Map SERCOP method wording to an OCDS procurementMethod."""
    if not method_details:
        return None
    if is_small_value(method_details):
        return METHOD_FOR_INFIMA
    if is_special_regime(method_details):
        return METHOD_FOR_SPECIAL_REGIME
    if is_catalog(method_details):
        return METHOD_FOR_CATALOG
    return METHOD_DEFAULT


# =============================================================================
# SAFE LOOKUPS
# =============================================================================

def _get(obj: Any, *path: str) -> Any:
    """Nested dict lookup that returns None on any missing or non-dict step."""
    for key in path:
        if not isinstance(obj, Mapping):
            return None
        obj = obj.get(key)
    return obj


def _list(obj: Any) -> list:
    return obj if isinstance(obj, list) else []


def _dict(obj: Any) -> dict:
    return obj if isinstance(obj, Mapping) else {}


def _amount(value: Any) -> Optional[float]:
    """OCDS Value.amount as float; missing, zero or garbage -> None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount or None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _date(value: Any, field: str, release_id: Optional[str]):
    parsed = parse_date(value)
    if parsed is None and value not in (None, ''):
        logger.debug("unparseable_date", field=field, value=str(value), release=release_id)
    return parsed


# =============================================================================
# NORMALIZATION
# =============================================================================

def latest_release(record: Mapping) -> Optional[dict]:
    """Last release of an OCDS record; releases are appended chronologically."""
    releases = [r for r in _list(record.get('releases')) if isinstance(r, Mapping)]
    return releases[-1] if releases else None


def _suppliers(awards: List[dict]) -> List[Supplier]:
    suppliers: List[Supplier] = []
    seen = set()
    for award in awards:
        for sup in _list(_dict(award).get('suppliers')):
            sup = _dict(sup)
            sid = _text(sup.get('id')) or _text(_get(sup, 'identifier', 'id')) or ''
            name = _text(sup.get('name')) or ''
            if not (sid or name) or (sid, name) in seen:
                continue
            seen.add((sid, name))
            suppliers.append(Supplier(id=sid, name=name))
    return suppliers


def _status(tags: Any) -> Optional[str]:
    tags = tags if isinstance(tags, list) else [tags] if tags else []
    for status in _STATUS_TAGS:
        if status in tags:
            return status
    return None


def _whole_number(value: Any) -> Optional[int]:
    """Integral JSON number as int; bools, fractions, inf and NaN -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _number_of_tenderers(release: Mapping, tender: Mapping) -> Optional[int]:
    count = _whole_number(tender.get('numberOfTenderers'))
    if count is not None and count > 0:
        return count
    details = _get(release, 'bids', 'details')
    if isinstance(details, list):
        return len(details)
    if count == 0:
        return 0
    return None


def parse_release(release: Mapping) -> ProcedureData:
    """Normalize one raw OCDS release."""
    tender = _dict(release.get('tender'))
    awards = [_dict(a) for a in _list(release.get('awards'))]
    contracts = [_dict(c) for c in _list(release.get('contracts'))]
    buyer = _dict(release.get('buyer')) or _dict(tender.get('procuringEntity'))

    award = awards[-1] if awards else {}
    contract = contracts[-1] if contracts else {}
    release_id = _text(release.get('ocid')) or _text(release.get('id'))

    method_details = _text(tender.get('procurementMethodDetails'))
    method = _text(tender.get('procurementMethod')) or classify_method(method_details)

    amendment_count = sum(len(_list(c.get('amendments'))) for c in contracts)

    items = _list(tender.get('items'))
    classification = _text(_get(items[0], 'classification', 'id')) if items else None

    title = _text(tender.get('title'))
    description = _text(tender.get('description')) or title

    return ProcedureData(
        id=release_id or '',
        ocid=_text(release.get('ocid')),
        status=_status(release.get('tag')),
        title=title or description,
        description=description,
        procurement_method=method,
        procurement_method_details=method_details,
        items_classification=classification,
        buyer_id=_text(buyer.get('id')) or _text(_get(buyer, 'identifier', 'id')),
        buyer_name=_text(buyer.get('name')),
        budget_amount=(_amount(_get(tender, 'value', 'amount'))
                       or _amount(_get(release, 'planning', 'budget', 'amount', 'amount'))),
        award_amount=_amount(_get(award, 'value', 'amount')),
        contract_amount=_amount(_get(contract, 'value', 'amount')),
        final_amount=_amount(_get(contract, 'implementation', 'finalValue', 'amount')),
        published_date=_date(_get(tender, 'tenderPeriod', 'startDate') or release.get('date'),
                             'published_date', release_id),
        submission_deadline=_date(_get(tender, 'tenderPeriod', 'endDate'), 'submission_deadline', release_id),
        award_date=_date(award.get('date'), 'award_date', release_id),
        contract_date=_date(contract.get('dateSigned'), 'contract_date', release_id),
        number_of_tenderers=_number_of_tenderers(release, tender),
        amendment_count=amendment_count,
        suppliers=_suppliers(awards),
    )


def _is_canonical(data: Mapping) -> bool:
    return 'id' in data and not (_OCDS_KEYS & set(data)) and set(data) <= set(ProcedureData.model_fields)


def normalize(release: Any) -> ProcedureData:
    """
    Normalize a raw release into a ProcedureData.

    Accepts an OCDS release, an OCDS record (its latest release is used),
    a ProcedureData, or a ProcedureData dump. Canonical input is returned
    as-is (re-validated when it is a mapping), so normalizing twice is a
    no-op.

    Raises:
        InvalidReleaseError: input is not a mapping or ProcedureData.
    """
    if isinstance(release, ProcedureData):
        return release
    if not isinstance(release, Mapping):
        raise InvalidReleaseError(
            "Cannot normalize non-mapping input",
            {"type": type(release).__name__},
        )
    if _is_canonical(release):
        return ProcedureData.model_validate(dict(release))
    if 'releases' in release and 'tender' not in release:
        latest = latest_release(release)
        if latest is None:
            return ProcedureData(id=_text(release.get('ocid')) or '', ocid=_text(release.get('ocid')))
        if not latest.get('ocid') and release.get('ocid'):
            latest = {**latest, 'ocid': release.get('ocid')}
        return parse_release(latest)
    return parse_release(release)
