"""Tests for refinance comparison and the existing-loan position."""

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.amortization_calculator import balance_after, build_schedule, monthly_payment
from calc.refinance_calculator import (
    MINIMUM_OFFERED_RATE,
    analyze_mortgage,
    analyze_refinance,
    current_loan_baseline,
    standard_refinance_options,
)
from model.AmortizationData import MortgageInputs, RefinanceOption


@pytest.fixture
def existing_loan():
    """300,000 at 6.5% over 30 years, 24 payments made."""
    original = build_schedule(300000, 6.5, 30)
    return current_loan_baseline(original, 24)


class TestCurrentLoanBaseline:
    def test_position_after_payments(self, existing_loan):
        original = build_schedule(300000, 6.5, 30)
        assert existing_loan.balance == pytest.approx(balance_after(original, 24))
        assert existing_loan.payment == pytest.approx(original.periodic_payment)
        assert existing_loan.remaining_periods == 336
        assert existing_loan.remaining_cost == pytest.approx(original.periodic_payment * 336)

    def test_override_rate_reamortizes(self):
        original = build_schedule(300000, 6.5, 30)
        reset = current_loan_baseline(original, 24, override_rate=7.5)
        balance = balance_after(original, 24)
        assert reset.payment == pytest.approx(monthly_payment(balance, 7.5, 28))
        assert reset.payment > original.periodic_payment

    def test_months_paid_beyond_term(self):
        original = build_schedule(100000, 5, 10)
        position = current_loan_baseline(original, 500)
        assert position.remaining_periods == 0
        assert position.balance == 0
        assert position.remaining_cost == 0


class TestAnalyzeRefinance:
    def test_lower_rate_is_viable(self, existing_loan):
        option = RefinanceOption(term_years=30, rate=5.5, closing_costs=5000)
        scenario = analyze_refinance(existing_loan.balance, existing_loan.payment,
                                     existing_loan.remaining_cost, [option])[0]
        new_loan = build_schedule(existing_loan.balance, 5.5, 30)

        assert scenario.loan_amount == pytest.approx(existing_loan.balance)
        assert scenario.new_payment == pytest.approx(new_loan.periodic_payment)
        assert scenario.monthly_savings == pytest.approx(existing_loan.payment - new_loan.periodic_payment)
        assert scenario.break_even_months == pytest.approx(5000 / scenario.monthly_savings)
        assert scenario.lifetime_savings == pytest.approx(existing_loan.remaining_cost - new_loan.total_paid - 5000)
        assert scenario.is_viable

    def test_higher_payment_never_breaks_even(self, existing_loan):
        option = RefinanceOption(term_years=30, rate=8.0, closing_costs=3000)
        scenario = analyze_refinance(existing_loan.balance, existing_loan.payment,
                                     existing_loan.remaining_cost, [option])[0]
        assert scenario.monthly_savings < 0
        assert math.isinf(scenario.break_even_months)
        assert not scenario.is_viable

    def test_lower_payment_but_longer_term_is_not_viable(self):
        # Ten years left on the old loan; stretching it to thirty costs more overall
        original = build_schedule(100000, 6.5, 10)
        position = current_loan_baseline(original, 0)
        option = RefinanceOption(term_years=30, rate=5.5)
        scenario = analyze_refinance(position.balance, position.payment, position.remaining_cost, [option])[0]
        assert scenario.monthly_savings > 0
        assert scenario.break_even_months == 0
        assert scenario.lifetime_savings < 0
        assert not scenario.is_viable

    def test_rolled_in_costs(self, existing_loan):
        option = RefinanceOption(term_years=30, rate=5.5, closing_costs=5000, roll_in_costs=True)
        rolled = analyze_refinance(existing_loan.balance, existing_loan.payment,
                                   existing_loan.remaining_cost, [option])[0]
        new_loan = build_schedule(existing_loan.balance + 5000, 5.5, 30)

        assert rolled.loan_amount == pytest.approx(existing_loan.balance + 5000)
        assert rolled.new_payment == pytest.approx(new_loan.periodic_payment)
        # Break-even still measures the full closing costs
        assert rolled.break_even_months == pytest.approx(5000 / rolled.monthly_savings)
        # Nothing is paid upfront
        assert rolled.lifetime_savings == pytest.approx(existing_loan.remaining_cost - new_loan.total_paid)

    def test_no_candidates(self, existing_loan):
        assert analyze_refinance(existing_loan.balance, existing_loan.payment,
                                 existing_loan.remaining_cost, []) == []


def test_standard_options():
    options = standard_refinance_options(5.5, closing_costs=4000)
    assert [option.term_years for option in options] == [30, 20, 15]
    assert [option.rate for option in options] == [5.5, 5.25, 5.0]
    assert all(option.closing_costs == 4000 for option in options)


def test_standard_options_never_below_minimum_rate():
    options = standard_refinance_options(2.2)
    assert min(option.rate for option in options) == MINIMUM_OFFERED_RATE


class TestAnalyzeMortgage:
    def test_full_analysis(self):
        analysis = analyze_mortgage(MortgageInputs(
            principal=300000, annual_rate=6.5, term_years=30, months_paid=24,
            extra_payment=200, refinance_rate=5.5, closing_costs=5000
        ))
        assert analysis.baseline.payoff_period == 360
        assert analysis.accelerated.payoff_period < 360
        assert analysis.savings.interest_saved > 0
        assert analysis.current.remaining_periods == 336
        assert len(analysis.refinance) == 3
        assert all(scenario.monthly_savings > 0 for scenario in analysis.refinance)

    def test_no_refinance_without_rate(self):
        analysis = analyze_mortgage(MortgageInputs())
        assert analysis.refinance == []
        assert analysis.savings.interest_saved == 0

    def test_override_equal_to_rate_is_ignored(self):
        plain = analyze_mortgage(MortgageInputs(months_paid=12))
        same = analyze_mortgage(MortgageInputs(months_paid=12, current_rate_override=6.5))
        assert same.current == plain.current
