import math
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.amortization_calculator import (
    balance_after,
    build_schedule,
    extra_payment_savings,
    monthly_payment,
    periodic_rate,
    total_periods,
)


def closed_form_balance(principal, annual_rate, term_years, periods):
    r = annual_rate / 100 / 12
    payment = monthly_payment(principal, annual_rate, term_years)
    growth = (1 + r) ** periods
    return principal * growth - payment * (growth - 1) / r


def test_monthly_payment_thirty_year_loan():
    assert monthly_payment(300000, 6.5, 30) == pytest.approx(1896.20, abs=0.05)


def test_monthly_payment_zero_rate():
    assert monthly_payment(120000, 0, 10) == pytest.approx(1000)


def test_negative_rate_is_treated_as_zero():
    assert periodic_rate(-3) == 0
    assert monthly_payment(120000, -3, 10) == pytest.approx(1000)


def test_total_periods_is_at_least_one():
    assert total_periods(30) == 360
    assert total_periods(0) == 1


class TestSchedule:
    def setup_method(self):
        self.result = build_schedule(300000, 6.5, 30)

    def test_pays_off_over_the_term(self):
        assert self.result.payoff_period == 360
        assert len(self.result.schedule) == 360
        assert self.result.schedule[-1].remaining_balance == 0

    def test_principal_sums_to_loan_amount(self):
        paid = sum(entry.principal_paid for entry in self.result.schedule)
        assert paid == pytest.approx(300000, abs=1e-6)

    def test_totals_are_consistent(self):
        last = self.result.schedule[-1]
        assert self.result.total_interest == pytest.approx(last.cumulative_interest)
        assert self.result.total_paid == pytest.approx(last.cumulative_paid)
        assert self.result.total_paid == pytest.approx(300000 + self.result.total_interest)
        assert self.result.total_interest == pytest.approx(1896.20 * 360 - 300000, rel=1e-3)

    def test_each_payment_splits_into_principal_and_interest(self):
        for entry in self.result.schedule:
            assert entry.payment == pytest.approx(entry.principal_paid + entry.interest_paid)

    def test_first_period_interest(self):
        first = self.result.schedule[0]
        assert first.interest_paid == pytest.approx(300000 * 0.065 / 12)

    def test_balance_is_non_increasing(self):
        balances = [entry.remaining_balance for entry in self.result.schedule]
        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))

    def test_balance_after_matches_closed_form(self):
        assert balance_after(self.result, 0) == 300000
        assert balance_after(self.result, 24) == pytest.approx(closed_form_balance(300000, 6.5, 30, 24), rel=1e-9)
        assert balance_after(self.result, 24) == pytest.approx(292112, rel=0.005)
        assert balance_after(self.result, 1000) == 0


def test_zero_principal():
    result = build_schedule(0, 6.5, 30)
    assert result.payoff_period == 0
    assert result.schedule == []
    assert result.total_interest == 0


def test_zero_rate_schedule():
    result = build_schedule(120000, 0, 10)
    assert result.payoff_period == 120
    assert result.total_interest == 0
    assert result.total_paid == pytest.approx(120000)


class TestExtraPayments:
    def test_extra_payments_shorten_the_loan(self):
        baseline = build_schedule(300000, 6.5, 30)
        accelerated = build_schedule(300000, 6.5, 30, extra_payment=200)
        assert accelerated.payoff_period < baseline.payoff_period
        assert accelerated.total_interest < baseline.total_interest
        assert accelerated.schedule[-1].remaining_balance == 0

        savings = extra_payment_savings(baseline, accelerated)
        assert savings.interest_saved > 0
        assert savings.periods_saved == baseline.payoff_period - accelerated.payoff_period
        assert savings.total_paid_saved == pytest.approx(savings.interest_saved)

    @pytest.mark.parametrize("extra", [0, 1, 50, 500, 5000])
    def test_extra_payments_never_cost_more(self, extra):
        baseline = build_schedule(250000, 5, 25)
        accelerated = build_schedule(250000, 5, 25, extra_payment=extra)
        assert accelerated.total_interest <= baseline.total_interest + 1e-6
        assert accelerated.payoff_period <= baseline.payoff_period

    def test_extra_payments_start_later(self):
        baseline = build_schedule(300000, 6.5, 30)
        accelerated = build_schedule(300000, 6.5, 30, extra_payment=200, extra_payment_start_period=24)
        for before, after in zip(baseline.schedule[:24], accelerated.schedule[:24]):
            assert after.principal_paid == pytest.approx(before.principal_paid)
        assert accelerated.schedule[24].principal_paid == pytest.approx(baseline.schedule[24].principal_paid + 200)

    def test_huge_extra_payment_pays_off_in_one_period(self):
        result = build_schedule(10000, 5, 5, extra_payment=20000)
        assert result.payoff_period == 1
        assert result.schedule[0].principal_paid == pytest.approx(10000)
        assert not math.isnan(result.total_paid)
