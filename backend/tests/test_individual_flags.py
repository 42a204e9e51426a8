"""
Individual Flag Tests

Single-record rules IC-01 .. TR-03. The baseline procedure from conftest
raises no flag; each test changes only what its rule looks at.
"""
from datetime import date

import pytest

from oicp.dates import business_days
from oicp.flags.catalog import FLAG_CATALOG
from oicp.flags.individual import INDIVIDUAL_RULES, evaluate_individual, minimum_publication_days
from oicp.models import ProcedureData

THRESHOLD_2024 = 6_658.78


def codes(proc):
    return [f.code for f in evaluate_individual(proc)]


class TestBaseline:
    """The reference procedure is clean."""

    def test_no_flags(self, make_procedure):
        """Complete competitive procedure with 3 bidders raises nothing."""
        assert codes(make_procedure()) == []

    def test_rule_table_matches_catalog(self):
        """Every individual rule has a catalog entry."""
        for code, _ in INDIVIDUAL_RULES:
            assert code in FLAG_CATALOG
        assert len(FLAG_CATALOG) == 15


class TestBusinessDays:
    """Weekday counting, both endpoints inclusive."""

    def test_same_weekday(self):
        assert business_days(date(2024, 3, 4), date(2024, 3, 4)) == 1

    def test_skips_weekend(self):
        """Friday to Monday is two business days."""
        assert business_days(date(2024, 3, 8), date(2024, 3, 11)) == 2

    def test_two_weeks(self):
        assert business_days(date(2024, 3, 4), date(2024, 3, 20)) == 13

    def test_reversed_and_missing(self):
        """End before start -> 0; a missing endpoint -> None."""
        assert business_days(date(2024, 3, 20), date(2024, 3, 4)) == 0
        assert business_days(None, date(2024, 3, 4)) is None


class TestCompetition:
    """IC-01 and IC-02."""

    def test_single_bidder(self, make_procedure):
        """One tenderer in a licitación."""
        assert codes(make_procedure(number_of_tenderers=1)) == ['IC-01']

    def test_single_bidder_needs_tenderer_count(self, make_procedure):
        """Unknown tenderer count cannot trigger IC-01."""
        assert codes(make_procedure(number_of_tenderers=None)) == []

    def test_single_bidder_only_in_competitive_methods(self, make_procedure):
        """A catalog purchase with one tenderer is not IC-01."""
        proc = make_procedure(number_of_tenderers=1, procurement_method_details='Catálogo Electrónico')
        assert 'IC-01' not in codes(proc)

    def test_infima_above_threshold(self, make_infima):
        """Ínfima cuantía above the ceiling."""
        proc = make_infima('r1', date(2024, 5, 6), value=8_000.0)
        assert codes(proc) == ['IC-02']

    def test_direct_award_above_threshold(self, make_procedure):
        """Direct award above the ceiling."""
        proc = make_procedure(procurement_method='direct', procurement_method_details='Catálogo Electrónico')
        assert codes(proc) == ['IC-02']

    def test_high_value_reported_once(self, make_infima):
        """Ínfima and direct conditions both true -> one IC-02, first detail kept."""
        proc = make_infima('r1', date(2024, 5, 6), value=8_000.0, procurement_method='direct')
        flags = evaluate_individual(proc)
        assert [f.code for f in flags] == ['IC-02']
        assert 'ínfima' in flags[0].detail

    def test_value_equal_to_threshold(self, make_infima):
        """Exactly at the ceiling: near-threshold yes, high-value no."""
        proc = make_infima('r1', date(2024, 5, 6), value=THRESHOLD_2024)
        assert codes(proc) == ['IP-01']


class TestTiming:
    """IT-01 and IT-02."""

    @pytest.mark.parametrize("value,expected", [
        (50_000, 9), (100_000, 9), (100_001, 13), (500_000, 13), (500_001, 17),
    ])
    def test_minimum_publication_tiers(self, value, expected):
        assert minimum_publication_days(value) == expected

    def test_short_publication(self, make_procedure):
        """7 business days for a USD 48,000 procedure (minimum 9)."""
        flags = evaluate_individual(make_procedure(submission_deadline=date(2024, 3, 12)))
        assert [f.code for f in flags] == ['IT-01']
        assert flags[0].detail.startswith('7 días hábiles (mínimo: 9')

    def test_tier_boundaries(self, make_procedure):
        """USD 200,000 needs 13 business days."""
        ok = make_procedure(budget_amount=200_000.0, award_amount=200_000.0)
        short = make_procedure(budget_amount=200_000.0, award_amount=200_000.0,
                               submission_deadline=date(2024, 3, 19))
        assert 'IT-01' not in codes(ok)
        assert 'IT-01' in codes(short)

    def test_publication_rule_skips_small_values(self, make_procedure):
        """Values up to USD 10,000 are not checked."""
        proc = make_procedure(budget_amount=9_000.0, award_amount=9_000.0,
                              submission_deadline=date(2024, 3, 5))
        assert 'IT-01' not in codes(proc)

    def test_publication_rule_skips_missing_deadline(self, make_procedure):
        assert codes(make_procedure(submission_deadline=None)) == []

    def test_lightning_award(self, make_procedure):
        """Awarded the next day."""
        assert codes(make_procedure(award_date=date(2024, 3, 5))) == ['IT-02']

    def test_lightning_award_over_weekend(self, make_procedure):
        """Published Friday, awarded Monday: 2 business days."""
        proc = make_procedure(published_date=date(2024, 3, 8), submission_deadline=None,
                              award_date=date(2024, 3, 11))
        assert codes(proc) == ['IT-02']

    def test_lightning_award_not_for_infima(self, make_infima):
        """Ínfimas are awarded the same day by design of the procedure."""
        assert 'IT-02' not in codes(make_infima('r1', date(2024, 5, 6)))

    def test_lightning_award_needs_both_dates(self, make_procedure):
        assert codes(make_procedure(award_date=None)) == []


class TestPrice:
    """IP-01, IP-02 and IP-03."""

    def test_near_threshold(self, make_infima):
        """90% of the 2024 ceiling."""
        flags = evaluate_individual(make_infima('r1', date(2024, 5, 6), value=5_992.90))
        assert [f.code for f in flags] == ['IP-01']
        assert '90.0%' in flags[0].detail

    def test_below_near_threshold_band(self, make_infima):
        assert codes(make_infima('r1', date(2024, 5, 6), value=5_000.0)) == []

    def test_near_threshold_uses_regime_of_date(self, make_infima):
        """USD 9,000 is near the 10,000 ceiling after the reform, above the 2024 one."""
        assert codes(make_infima('r1', date(2025, 11, 3), value=9_000.0)) == ['IP-01']
        assert codes(make_infima('r2', date(2024, 5, 6), value=9_000.0)) == ['IC-02']

    def test_budget_award_divergence(self, make_procedure):
        """30% over budget."""
        proc = make_procedure(budget_amount=100_000.0, award_amount=130_000.0)
        assert codes(proc) == ['IP-02']

    def test_divergence_within_tolerance(self, make_procedure):
        proc = make_procedure(budget_amount=100_000.0, award_amount=114_000.0)
        assert codes(proc) == []

    def test_divergence_needs_budget(self, make_procedure):
        assert codes(make_procedure(budget_amount=None)) == []

    def test_amendment_increase(self, make_procedure):
        """Contract 25% above award after amendments; final value also above -> one flag."""
        proc = make_procedure(amendment_count=2, contract_amount=60_000.0, final_amount=70_000.0)
        flags = evaluate_individual(proc)
        assert [f.code for f in flags] == ['IP-03']
        assert flags[0].detail.startswith('Contrato incrementado')

    def test_amendment_final_value_only(self, make_procedure):
        proc = make_procedure(amendment_count=1, final_amount=60_000.0)
        flags = evaluate_individual(proc)
        assert [f.code for f in flags] == ['IP-03']
        assert flags[0].detail.startswith('Valor final')

    def test_increase_without_amendments(self, make_procedure):
        """Without amendments the increase is not attributed to them."""
        assert codes(make_procedure(contract_amount=60_000.0)) == []


class TestTransparency:
    """TR-01, TR-02 and TR-03."""

    def test_empty_procedure(self):
        """Nothing published: only missing-fields fires."""
        flags = evaluate_individual(ProcedureData(id='x'))
        assert [f.code for f in flags] == ['TR-01']
        assert flags[0].detail == 'Faltan: comprador, valor, proveedor, método'

    def test_missing_buyer(self, make_procedure):
        flags = evaluate_individual(make_procedure(buyer_id=None))
        assert [f.code for f in flags] == ['TR-01']
        assert flags[0].detail == 'Faltan: comprador'

    def test_method_details_alone_is_enough(self, make_procedure):
        assert codes(make_procedure(procurement_method=None)) == []

    def test_generic_description(self, make_procedure):
        flags = evaluate_individual(make_procedure(description='Compra de papel', title=None))
        assert [f.code for f in flags] == ['TR-02']
        assert flags[0].severity == 0

    def test_description_falls_back_to_title(self, make_procedure):
        assert codes(make_procedure(description=None, title='Papel')) == ['TR-02']

    def test_special_regime(self, make_procedure):
        proc = make_procedure(procurement_method='selective', procurement_method_details='Régimen Especial')
        assert codes(proc) == ['TR-03']

    def test_emergency(self, make_procedure):
        proc = make_procedure(procurement_method='selective',
                              procurement_method_details='Contratación por Emergencia')
        assert codes(proc) == ['TR-03']


class TestDeterminism:
    """Evaluation is pure."""

    def test_same_input_same_flags(self, make_procedure):
        proc = make_procedure(number_of_tenderers=1, award_date=date(2024, 3, 5))
        assert evaluate_individual(proc) == evaluate_individual(proc)

    def test_codes_unique(self, make_infima):
        proc = make_infima('r1', date(2024, 5, 6), value=8_000.0, procurement_method='direct',
                           amendment_count=1, contract_amount=20_000.0, final_amount=30_000.0)
        found = codes(proc)
        assert len(found) == len(set(found))
