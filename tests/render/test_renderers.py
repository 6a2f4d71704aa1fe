"""Tests for the terminal renderers."""

import math
import os
import sys

import pytest

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from calc.education_calculator import project_education
from calc.fire_calculator import project_fire
from calc.goal_solver import analyze_goal
from calc.refinance_calculator import analyze_mortgage
from calc.retirement_simulator import run_retirement_simulation
from model.AmortizationData import MortgageInputs
from model.EducationData import EducationInputs
from model.ProjectionData import FireInputs, RetirementInputs
from model.TaxResult import ItemizedDeductionInputs, TaxInputs
from render import format_months
from render.renderers import (
    AmortizationRenderer,
    BaseRenderer,
    EducationRenderer,
    FireRenderer,
    GoalRenderer,
    RefinanceRenderer,
    RetirementRenderer,
    TaxRenderer,
    RENDERER_REGISTRY,
)
from tax.TaxRegime import compute_tax


def test_registry_covers_every_mode():
    assert set(RENDERER_REGISTRY) == {'Tax', 'Amortization', 'Refinance', 'Retirement', 'Goal', 'Education', 'Fire'}
    for renderer_class in RENDERER_REGISTRY.values():
        assert issubclass(renderer_class, BaseRenderer)


def test_format_months():
    assert format_months(math.inf) == "never"
    assert format_months(None) == "never"
    assert format_months(18.25) == "18.2"


class TestTaxRenderer:
    def test_summary(self, capsys):
        itemized = ItemizedDeductionInputs(mortgage_interest=20000)
        TaxRenderer().render(compute_tax("US", TaxInputs(wages=95000, itemized=itemized)))
        output = capsys.readouterr().out
        assert "TAX SUMMARY (US, single)" in output
        assert "NET PAY" in output
        assert "itemized" in output
        assert "and up" not in output

    def test_top_bracket_label(self, capsys):
        TaxRenderer().render(compute_tax("UK", TaxInputs(wages=400000)))
        assert "and up" in capsys.readouterr().out


class TestMortgageRenderers:
    def setup_method(self):
        self.analysis = analyze_mortgage(MortgageInputs(months_paid=24, extra_payment=200,
                                                        refinance_rate=5.5, closing_costs=5000))

    def test_amortization_prints_yearly_rows(self, capsys):
        AmortizationRenderer().render(self.analysis.baseline)
        output = capsys.readouterr().out
        assert "AMORTIZATION SCHEDULE" in output
        rows = [line for line in output.splitlines() if line.strip().split(' ')[0].isdigit()]
        assert len(rows) == 30

    def test_amortization_period_step(self, capsys):
        AmortizationRenderer(period_step=120).render(self.analysis.baseline)
        rows = [line for line in capsys.readouterr().out.splitlines() if line.strip().split(' ')[0].isdigit()]
        assert len(rows) == 3

    def test_refinance_table(self, capsys):
        RefinanceRenderer().render(self.analysis)
        output = capsys.readouterr().out
        assert "CURRENT LOAN" in output
        assert "REFINANCE OPTIONS" in output
        assert "yes" in output

    def test_refinance_never_breaks_even(self, capsys):
        analysis = analyze_mortgage(MortgageInputs(months_paid=24, refinance_rate=9.0))
        RefinanceRenderer().render(analysis)
        assert "never" in capsys.readouterr().out

    def test_refinance_section_skipped_without_rate(self, capsys):
        RefinanceRenderer().render(analyze_mortgage(MortgageInputs()))
        assert "REFINANCE OPTIONS" not in capsys.readouterr().out


class TestRetirementRenderer:
    def test_valid_plan(self, capsys):
        RetirementRenderer().render(run_retirement_simulation(RetirementInputs()))
        output = capsys.readouterr().out
        assert "RETIREMENT PROJECTION" in output
        assert "On Track" in output

    def test_invalid_plan(self, capsys):
        RetirementRenderer().render(run_retirement_simulation(RetirementInputs(current_age=70)))
        assert "Invalid plan" in capsys.readouterr().out


def test_goal_renderer_unreachable(capsys):
    GoalRenderer().render(analyze_goal(1000000, 0, 10, 7, 5))
    assert "not achievable" in capsys.readouterr().out


def test_goal_renderer_required_return(capsys):
    GoalRenderer().render(analyze_goal(4000, 50000, 1000, 6, 30))
    output = capsys.readouterr().out
    assert "SAVINGS GOAL" in output
    assert "not achievable" not in output


def test_education_renderer(capsys):
    EducationRenderer().render(project_education(EducationInputs(monthly_contribution=2000)))
    output = capsys.readouterr().out
    assert "529 PLAN PROJECTION" in output
    assert "Warning" in output
    assert "Strategy: Aggressive Growth" in output


def test_education_renderer_grants(capsys):
    EducationRenderer().render(project_education(EducationInputs(country="CA")))
    assert "Government Grants" in capsys.readouterr().out


@pytest.mark.parametrize("withdrawal_rate,expected", [(4, "FIRE Age"), (0, "unreachable")])
def test_fire_renderer(capsys, withdrawal_rate, expected):
    FireRenderer().render(project_fire(FireInputs(withdrawal_rate=withdrawal_rate)))
    assert expected in capsys.readouterr().out
