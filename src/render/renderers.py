"""Renderer classes for displaying engine results in the terminal.

Each renderer takes the result record of one calculator and prints a
fixed-width report. Amounts are printed as plain numbers in the scenario's
currency; the engine itself never formats or rounds.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from model.AmortizationData import AmortizationResult, MortgageAnalysis
from model.EducationData import EducationProjection
from model.ProjectionData import FireProjection, GoalAnalysis, ProjectionPoint, SimulationResult
from model.TaxResult import TaxResult

WIDTH = 60


def format_months(months: float) -> str:
    """Break-even style month count; 'never' for the infinite sentinel."""
    if months is None or math.isinf(months):
        return "never"
    return f"{months:,.1f}"


def format_optional_age(age: Optional[int]) -> str:
    return "never" if age is None else str(age)


def print_section(title: str) -> None:
    print()
    print("-" * WIDTH)
    print(title)
    print("-" * WIDTH)


def print_title(title: str, width: int = WIDTH) -> None:
    print()
    print("=" * width)
    print(f"{title:^{width}}")
    print("=" * width)


def print_row(label: str, value: float) -> None:
    print(f"  {label + ':':<40} {value:>16,.2f}")


def print_projection_table(points: List[ProjectionPoint], show_cost: bool = False) -> None:
    header = f"  {'Age':<6} {'Nominal':>16} {'Real':>16} {'Contributed':>16} {'Withdrawn':>14}"
    if show_cost:
        header += f" {'Cost':>12}"
    print(header)
    print("  " + "-" * (len(header) - 2))
    for point in points:
        line = (f"  {point.age:<6} {point.nominal_balance:>16,.2f} {point.real_balance:>16,.2f}"
                f" {point.contributed_total:>16,.2f} {point.withdrawal_nominal:>14,.2f}")
        if show_cost:
            line += f" {point.yearly_cost:>12,.2f}"
        print(line)


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data: Any) -> None:
        """Render the data to output.

        Args:
            data: The result record produced by the matching calculator
        """
        pass


class TaxRenderer(BaseRenderer):
    """Renderer for a single tax computation."""

    def render(self, data: TaxResult) -> None:
        print_title(f"TAX SUMMARY ({data.jurisdiction}, {data.filing_status})")

        print_section("INCOME")
        print_row("Total Income", data.total_income)
        print_row("Adjusted Gross Income", data.adjusted_gross_income)

        print_section("DEDUCTIONS")
        standard_marker = "  <- used" if data.deduction_used == data.standard_deduction else ""
        itemized_marker = "  <- used" if not standard_marker and data.deduction_used == data.itemized_deduction else ""
        print(f"  {'Standard Deduction:':<40} {data.standard_deduction:>16,.2f}{standard_marker}")
        print(f"  {'Itemized Deduction:':<40} {data.itemized_deduction:>16,.2f}{itemized_marker}")
        print(f"  {'Recommended Method:':<40} {data.recommended_deduction_method:>16}")
        print_row("Taxable Ordinary Income", data.taxable_income)
        print_row("Taxable Long-Term Gains", data.taxable_preferential_income)

        print_section("INCOME TAX BY BRACKET")
        for bracket in data.brackets_breakdown:
            upper = "and up" if math.isinf(bracket.upper_bound) else f"{bracket.upper_bound:,.0f}"
            label = f"{bracket.rate:.2%} ({bracket.lower_bound:,.0f} - {upper})"
            print(f"  {label:<40} {bracket.tax:>16,.2f}")
        print(f"  {'-' * 40}")
        print_row("Ordinary Income Tax", data.ordinary_tax)
        print_row("Long-Term Gains Tax", data.preferential_tax)

        print_section("PAYROLL CONTRIBUTIONS")
        print_row("Primary", data.payroll.primary)
        print_row("Secondary", data.payroll.secondary)
        print_row("Surtax", data.payroll.surtax)
        print(f"  {'-' * 40}")
        print_row("Total Payroll", data.payroll_contributions)

        print_title("SUMMARY")
        print_row("TOTAL TAX", data.total_tax)
        print(f"  {'Effective Rate:':<40} {data.effective_rate:>16.2%}")
        print(f"  {'Effective Income Tax Rate:':<40} {data.income_tax_effective_rate:>16.2%}")
        print(f"  {'Marginal Rate:':<40} {data.marginal_rate:>16.2%}")
        print()
        print("=" * WIDTH)
        print(f"{'NET PAY:':^42} {data.net_pay:>16,.2f}")
        print("=" * WIDTH)
        print()


class AmortizationRenderer(BaseRenderer):
    """Renderer for a loan payoff schedule, one row per year by default."""

    def __init__(self, period_step: int = 12):
        """
        period_step: print every period_step-th period (plus the payoff period)
        """
        self.period_step = max(1, period_step)

    def render(self, data: AmortizationResult) -> None:
        print_title("AMORTIZATION SCHEDULE", 90)
        print(f"  {'Monthly Payment:':<40} {data.periodic_payment:>16,.2f}")
        print()
        print(f"  {'Period':<8} {'Principal':>14} {'Interest':>14} {'Balance':>16} {'Total Interest':>16} {'Total Paid':>16}")
        print(f"  {'-' * 8} {'-' * 14} {'-' * 14} {'-' * 16} {'-' * 16} {'-' * 16}")
        for entry in data.schedule:
            if entry.period % self.period_step and entry.period != data.payoff_period:
                continue
            print(f"  {entry.period:<8} {entry.principal_paid:>14,.2f} {entry.interest_paid:>14,.2f}"
                  f" {entry.remaining_balance:>16,.2f} {entry.cumulative_interest:>16,.2f} {entry.cumulative_paid:>16,.2f}")
        print()
        print_row("Total Interest", data.total_interest)
        print_row("Total Paid", data.total_paid)
        print(f"  {'Payoff Period:':<40} {data.payoff_period:>16}")
        print()


class RefinanceRenderer(BaseRenderer):
    """Renderer for the existing-loan position and refinance comparison."""

    def render(self, data: MortgageAnalysis) -> None:
        print_title("CURRENT LOAN", 90)
        print_row("Remaining Balance", data.current.balance)
        print_row("Monthly Payment", data.current.payment)
        print(f"  {'Remaining Periods:':<40} {data.current.remaining_periods:>16}")
        print_row("Remaining Cost", data.current.remaining_cost)

        print_section("EXTRA PAYMENTS")
        print_row("Interest Saved", data.savings.interest_saved)
        print(f"  {'Months Saved:':<40} {data.savings.periods_saved:>16}")
        print(f"  {'New Payoff Period:':<40} {data.accelerated.payoff_period:>16}")

        if not data.refinance:
            print()
            return

        print_title("REFINANCE OPTIONS", 90)
        print(f"  {'Term':<6} {'Rate':>7} {'Payment':>12} {'Monthly Saving':>15} {'Break-even':>12} {'Lifetime Saving':>16} {'Viable':>8}")
        print(f"  {'-' * 6} {'-' * 7} {'-' * 12} {'-' * 15} {'-' * 12} {'-' * 16} {'-' * 8}")
        for scenario in data.refinance:
            option = scenario.option
            print(f"  {option.term_years:<6g} {option.rate:>6.2f}% {scenario.new_payment:>12,.2f}"
                  f" {scenario.monthly_savings:>15,.2f} {format_months(scenario.break_even_months):>12}"
                  f" {scenario.lifetime_savings:>16,.2f} {'yes' if scenario.is_viable else 'no':>8}")
        print()


class RetirementRenderer(BaseRenderer):
    """Renderer for the retirement plan summary and yearly projection."""

    def render(self, data: SimulationResult) -> None:
        if not data.is_valid:
            print(f"Invalid plan: {data.validation_error}")
            return

        print_title("RETIREMENT PROJECTION", 80)
        print_projection_table(data.projections)

        print_title("SUMMARY", 80)
        print(f"  {'Expected Return:':<40} {data.nominal_return_rate:>15.2f}%")
        print_row("Target Income (today's money)", data.target_income_real)
        print_row("Projected Income (today's money)", data.projected_income_real)
        print_row("Income Gap (today's money)", data.gap_real)
        print_row("Target Portfolio (nominal)", data.target_corpus_nominal)
        print_row("Projected Portfolio (nominal)", data.projected_nominal)
        print_row("Projected After Tax (nominal)", data.projected_after_tax_nominal)
        print_row("Required Monthly Contribution", data.required_monthly_contribution)
        print(f"  {'Money Runs Out At Age:':<40} {format_optional_age(data.solvency_age):>16}")
        print(f"  {'On Track:':<40} {'yes' if data.is_on_track else 'no':>16}")
        print()


class GoalRenderer(BaseRenderer):
    """Renderer for the goal solver."""

    def render(self, data: GoalAnalysis) -> None:
        print_title("SAVINGS GOAL")
        print(f"  {'Years to Goal:':<40} {data.years:>16}")
        print_row("Target (today's money)", data.target_real)
        print_row("Target (nominal)", data.target_nominal)
        print_row("Projected (nominal)", data.projected_nominal)
        print_row("Shortfall (nominal)", data.shortfall_nominal)
        print_row("Required Monthly Contribution", data.required_monthly_contribution)
        if data.required_return is None:
            print(f"  {'Required Return:':<40} {'not achievable':>16}")
        else:
            print(f"  {'Required Return:':<40} {data.required_return:>15.2f}%")
        print(f"  {'On Track:':<40} {'yes' if data.is_on_track else 'no':>16}")
        print()


class EducationRenderer(BaseRenderer):
    """Renderer for an education savings projection."""

    def render(self, data: EducationProjection) -> None:
        print_title(f"{data.account_name.upper()} PROJECTION", 96)
        print_projection_table(data.points, show_cost=True)

        print_title("SUMMARY", 96)
        print(f"  {'Years Until College:':<40} {data.years_until_college:>16}")
        print_row("Projected Total Cost", data.projected_total_cost)
        print_row("Total Contributed", data.total_contributed)
        if data.total_grants > 0:
            print_row("Government Grants", data.total_grants)
        print_row("Balance at Graduation", data.final_balance)
        print_row("Shortfall", data.shortfall)
        print_row("Required Monthly Contribution", data.required_monthly_contribution)
        if data.annual_tax_savings > 0:
            print_row("Annual State Tax Savings", data.annual_tax_savings)
        if data.is_over_limit:
            print(f"  Warning: contributions exceed the {data.limit_description} "
                  f"({data.annual_contribution_limit:,.2f} a year)")
        print()
        print(f"  Strategy: {data.strategy_title}")
        print(f"  {data.strategy_tip}")
        print()


class FireRenderer(BaseRenderer):
    """Renderer for the financial independence projection."""

    def render(self, data: FireProjection) -> None:
        print_title("FINANCIAL INDEPENDENCE", 80)
        print_row("Annual Savings", data.annual_savings)
        print(f"  {'Savings Rate:':<40} {data.savings_rate:>16.2%}")
        if math.isinf(data.fire_number):
            print(f"  {'FIRE Number:':<40} {'unreachable':>16}")
        else:
            print_row("FIRE Number", data.fire_number)
        print(f"  {'FIRE Age:':<40} {format_optional_age(data.fire_age):>16}")
        if data.years_to_fire is not None:
            print(f"  {'Years to FIRE:':<40} {data.years_to_fire:>16}")
        print()
        print_projection_table(data.points)
        print()


# Registry mapping mode names to renderer classes
RENDERER_REGISTRY = {
    'Tax': TaxRenderer,
    'Amortization': AmortizationRenderer,
    'Refinance': RefinanceRenderer,
    'Retirement': RetirementRenderer,
    'Goal': GoalRenderer,
    'Education': EducationRenderer,
    'Fire': FireRenderer,
}
