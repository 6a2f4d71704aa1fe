import math
import os
import sys
import unittest

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.goal_solver import (
    analyze_goal,
    annuity_factor,
    corpus_target,
    future_value,
    required_contribution,
    required_return,
)
from calc.retirement_simulator import simulate


class TestAnnuityFactor(unittest.TestCase):
    def test_zero_rate_is_year_count(self):
        self.assertEqual(annuity_factor(0.0, 10), 10.0)

    def test_zero_years(self):
        self.assertEqual(annuity_factor(0.07, 0), 0.0)

    def test_positive_rate(self):
        self.assertTrue(math.isclose(annuity_factor(0.05, 3), 1 + 1.05 + 1.05 ** 2))

    def test_total_loss_keeps_last_payment(self):
        self.assertEqual(annuity_factor(-1.5, 5), 1.0)


class TestRequiredContribution:
    @pytest.mark.parametrize("target,balance,rate,years", [
        (1000000, 50000, 7, 30),
        (250000, 0, 5, 15),
        (80000, 10000, 0, 10),
        (500000, 100000, -2, 20),
    ])
    def test_simulating_the_contribution_reaches_the_target(self, target, balance, rate, years):
        monthly = required_contribution(target, balance, rate, years)
        outcome = simulate(balance, monthly * 12, rate, 0, years)
        assert outcome.points[-1].nominal_balance == pytest.approx(target, rel=0.005)

    def test_nothing_needed_when_balance_suffices(self):
        assert required_contribution(100000, 100000, 5, 10) == 0

    def test_no_time_left(self):
        assert required_contribution(1000000, 0, 7, 0) == 0

    def test_zero_rate(self):
        assert required_contribution(120000, 0, 0, 10) == pytest.approx(1000)


class TestRequiredReturn:
    def test_recovers_the_rate_used(self):
        target = future_value(10000, 500, 6, 20)
        assert required_return(target, 10000, 500, 20) == pytest.approx(6, abs=1e-4)

    def test_negative_rate_solution(self):
        target = future_value(100000, 0, -3, 10)
        assert required_return(target, 100000, 0, 10) == pytest.approx(-3, abs=1e-4)

    def test_target_already_met(self):
        assert required_return(0, 10000, 500, 20) is None

    def test_unreachable_target(self):
        assert required_return(1e12, 1000, 10, 10) is None

    def test_no_years(self):
        assert required_return(50000, 1000, 100, 0) is None


def test_future_value_matches_simulator():
    outcome = simulate(15000, 4800, 6.5, 0, 12)
    assert future_value(15000, 400, 6.5, 12) == pytest.approx(outcome.points[-1].nominal_balance)


def test_corpus_target():
    assert corpus_target(60000, 24000, 4) == pytest.approx(900000)
    assert corpus_target(20000, 24000, 4) == 0
    assert corpus_target(60000, 0, 0) == 0
    assert corpus_target(60000, 24000, 4, tax_rate=20) == pytest.approx(1125000)
    assert corpus_target(60000, 0, 4, tax_rate=100) == 0


class TestAnalyzeGoal:
    def test_targets(self):
        goal = analyze_goal(5000, 0, 0, 7, 25, inflation_rate=3, withdrawal_rate=4)
        assert goal.target_real == pytest.approx(1500000)
        assert goal.target_nominal == pytest.approx(1500000 * 1.03 ** 25)
        assert goal.projected_nominal == 0
        assert goal.shortfall_nominal == pytest.approx(goal.target_nominal)
        assert not goal.is_on_track

    def test_solutions_close_the_gap(self):
        goal = analyze_goal(4000, 50000, 1000, 6, 30)
        assert future_value(50000, goal.required_monthly_contribution, 6, 30) == pytest.approx(goal.target_nominal)
        assert future_value(50000, 1000, goal.required_return, 30) == pytest.approx(goal.target_nominal, rel=1e-6)

    def test_external_income_reduces_target(self):
        without = analyze_goal(5000, 0, 500, 7, 20)
        with_pension = analyze_goal(5000, 0, 500, 7, 20, external_income_monthly=2000)
        assert with_pension.target_real == pytest.approx(without.target_real * 0.6)

    def test_on_track(self):
        goal = analyze_goal(1000, 500000, 2000, 7, 20)
        assert goal.is_on_track
        assert goal.shortfall_nominal == 0
        assert goal.required_monthly_contribution == 0
