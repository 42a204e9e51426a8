"""
Pytest fixtures for the OICP flag engine tests.

No database or network: records are built in memory.
"""
from datetime import date

import pytest

from oicp.models import ProcedureData, Supplier

# A complete competitive procedure that raises no flag
BASE_PROCEDURE = {
    'id': 'ocds-5wno2w-LICO-GADMQ-2024-001',
    'ocid': 'ocds-5wno2w-LICO-GADMQ-2024-001',
    'title': 'Adquisición de equipos informáticos para oficinas municipales',
    'description': 'Adquisición de equipos informáticos para oficinas municipales',
    'procurement_method': 'open',
    'procurement_method_details': 'Licitación',
    'items_classification': '45210',
    'buyer_id': 'B1',
    'buyer_name': 'GAD Municipal de Quito',
    'budget_amount': 50_000.0,
    'award_amount': 48_000.0,
    'published_date': date(2024, 3, 4),       # Monday
    'submission_deadline': date(2024, 3, 20),  # 13 business days later, inclusive
    'award_date': date(2024, 4, 15),
    'number_of_tenderers': 3,
    'suppliers': [Supplier(id='S1', name='Tecnología Andina S.A.')],
}


def build_procedure(**overrides) -> ProcedureData:
    return ProcedureData(**{**BASE_PROCEDURE, **overrides})


def infima(record_id: str, day: date, value: float = 3_000.0, buyer: str = 'B1',
           supplier: str = 'S1', **overrides) -> ProcedureData:
    """Small-value (ínfima cuantía) procedure."""
    fields = {
        'id': record_id,
        'ocid': record_id,
        'procurement_method': 'limited',
        'procurement_method_details': 'Ínfima Cuantía',
        'items_classification': None,
        'buyer_id': buyer,
        'budget_amount': value,
        'award_amount': value,
        'published_date': day,
        'submission_deadline': None,
        'award_date': day,
        'number_of_tenderers': None,
        'suppliers': [Supplier(id=supplier, name=f'Proveedor {supplier}')],
    }
    fields.update(overrides)
    return build_procedure(**fields)


@pytest.fixture
def make_procedure():
    """Factory for procedures derived from the flag-free baseline."""
    return build_procedure


@pytest.fixture
def make_infima():
    """Factory for ínfima cuantía procedures."""
    return infima


@pytest.fixture
def raw_release():
    """An OCDS release as published by SERCOP, with two awards and two contracts."""
    return {
        'ocid': 'ocds-5wno2w-LICO-GADMQ-2024-002',
        'id': 'ocds-5wno2w-LICO-GADMQ-2024-002-1',
        'date': '2024-03-01T08:00:00-05:00',
        'tag': ['tender', 'award', 'contract'],
        'buyer': {'id': 'EC-RUC-1760003410001', 'name': 'GAD Municipal de Quito'},
        'tender': {
            'title': 'Adquisición de equipos informáticos para oficinas municipales',
            'description': 'Adquisición de 150 computadores de escritorio y 20 impresoras',
            'procurementMethod': 'open',
            'procurementMethodDetails': 'Licitación',
            'value': {'amount': 120_000.0, 'currency': 'USD'},
            'tenderPeriod': {
                'startDate': '2024-03-04T09:00:00-05:00',
                'endDate': '2024-03-22T17:00:00-05:00',
            },
            'numberOfTenderers': 2,
            'items': [{'id': '1', 'classification': {'scheme': 'CPC', 'id': '45210'}}],
        },
        'awards': [
            {
                'id': 'a-1',
                'date': '2024-04-01T10:00:00-05:00',
                'value': {'amount': 110_000.0},
                'suppliers': [{'id': 'EC-RUC-1790012345001', 'name': 'Tecnología Andina S.A.'}],
            },
            {
                'id': 'a-2',
                'date': '2024-04-10T10:00:00-05:00',
                'value': {'amount': 115_000.0},
                'suppliers': [
                    {'id': 'EC-RUC-1790012345001', 'name': 'Tecnología Andina S.A.'},
                    {'identifier': {'id': 'EC-RUC-0990054321001'}, 'name': 'Redes del Pacífico Cía. Ltda.'},
                    {'id': '', 'name': ''},
                ],
            },
        ],
        'contracts': [
            {
                'id': 'c-1',
                'dateSigned': '2024-04-20T12:00:00-05:00',
                'value': {'amount': 115_000.0},
                'amendments': [{'id': 'am-1'}],
            },
            {
                'id': 'c-2',
                'dateSigned': '2024-05-02T12:00:00-05:00',
                'value': {'amount': 140_000.0},
                'implementation': {'finalValue': {'amount': 150_000.0}},
                'amendments': [{'id': 'am-2'}, {'id': 'am-3'}],
            },
        ],
    }
