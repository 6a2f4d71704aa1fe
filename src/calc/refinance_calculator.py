import logging
import math
from typing import Iterable, List, Optional

from calc.amortization_calculator import balance_after, build_schedule, extra_payment_savings, periodic_rate
from calc.numeric import safe_amount, safe_non_negative
from model.AmortizationData import (
    AmortizationResult,
    LoanBaseline,
    MortgageAnalysis,
    MortgageInputs,
    RefinanceOption,
    RefinanceScenario,
)

logger = logging.getLogger(__name__)

# Shorter terms are offered at a small discount to the quoted rate
STANDARD_TERM_DISCOUNTS = ((30, 0.0), (20, 0.25), (15, 0.5))
MINIMUM_OFFERED_RATE = 2.0


def analyze_refinance(current_balance: float, current_payment: float, current_remaining_cost: float,
                      candidates: Iterable[RefinanceOption]) -> List[RefinanceScenario]:
    """
    Compare the remaining cost of an existing loan against refinance candidates.

    Each candidate re-amortizes current_balance (plus closing costs when they are
    rolled into the loan) over its own term. Break-even is measured against the
    full closing costs whether they are paid upfront or rolled in.

    Args:
        current_balance: Outstanding principal on the existing loan
        current_payment: Monthly principal + interest on the existing loan
        current_remaining_cost: Total still to be paid on the existing loan
        candidates: Refinance options to evaluate

    Returns:
        One RefinanceScenario per candidate, in the order given
    """
    current_balance = safe_non_negative(current_balance)
    current_payment = safe_non_negative(current_payment)
    current_remaining_cost = safe_non_negative(current_remaining_cost)

    scenarios = []
    for option in candidates:
        closing_costs = safe_non_negative(option.closing_costs)
        loan_amount = current_balance + closing_costs if option.roll_in_costs else current_balance
        upfront_cost = 0.0 if option.roll_in_costs else closing_costs

        new_loan = build_schedule(loan_amount, option.rate, option.term_years)
        monthly_savings = current_payment - new_loan.periodic_payment

        if monthly_savings > 0:
            break_even_months = closing_costs / monthly_savings
        else:
            break_even_months = math.inf

        lifetime_savings = current_remaining_cost - (new_loan.total_paid + upfront_cost)

        scenarios.append(RefinanceScenario(
            option=option,
            loan_amount=loan_amount,
            new_payment=new_loan.periodic_payment,
            monthly_savings=monthly_savings,
            break_even_months=break_even_months,
            lifetime_savings=lifetime_savings,
            # A lower payment alone is not enough: longer terms can cost more overall
            is_viable=lifetime_savings > 0
        ))

    logger.debug("Analyzed %d refinance candidates for balance %.2f", len(scenarios), current_balance)
    return scenarios


def standard_refinance_options(rate: float, closing_costs: float = 0.0,
                               roll_in_costs: bool = False) -> List[RefinanceOption]:
    """30, 20 and 15 year candidates around a quoted rate, never below 2%."""
    rate = safe_amount(rate)
    return [
        RefinanceOption(
            term_years=term,
            rate=max(MINIMUM_OFFERED_RATE, rate - discount),
            closing_costs=safe_non_negative(closing_costs),
            roll_in_costs=roll_in_costs
        )
        for term, discount in STANDARD_TERM_DISCOUNTS
    ]


def current_loan_baseline(original: AmortizationResult, months_paid: int,
                          override_rate: Optional[float] = None) -> LoanBaseline:
    """
    Where an existing loan stands after months_paid payments.

    When override_rate is given the remaining balance is re-amortized at that
    rate over the remaining periods (e.g. an adjustable loan that has reset).
    """
    months_paid = min(int(safe_non_negative(months_paid)), original.payoff_period)
    remaining_periods = original.payoff_period - months_paid
    balance = balance_after(original, months_paid)
    payment = original.periodic_payment

    if override_rate is not None and remaining_periods > 0:
        rate = periodic_rate(override_rate)
        if rate == 0:
            payment = balance / remaining_periods
        else:
            payment = balance * rate / (1 - (1 + rate) ** -remaining_periods)

    return LoanBaseline(
        balance=balance,
        payment=payment,
        remaining_periods=remaining_periods,
        remaining_cost=payment * remaining_periods
    )


def analyze_mortgage(inputs: MortgageInputs) -> MortgageAnalysis:
    """
    The full existing-loan picture: the contractual schedule, the schedule
    with extra payments starting now, where the loan stands today and how
    the standard refinance candidates compare with the rest of the loan.
    """
    baseline = build_schedule(inputs.principal, inputs.annual_rate, inputs.term_years)
    months_paid = int(safe_non_negative(inputs.months_paid))
    accelerated = build_schedule(inputs.principal, inputs.annual_rate, inputs.term_years,
                                 extra_payment=inputs.extra_payment, extra_payment_start_period=months_paid)
    override = inputs.current_rate_override
    if override is not None and override == inputs.annual_rate:
        override = None
    current = current_loan_baseline(baseline, months_paid, override)

    refinance: List[RefinanceScenario] = []
    if inputs.refinance_rate is not None:
        options = standard_refinance_options(inputs.refinance_rate, inputs.closing_costs, inputs.roll_in_costs)
        refinance = analyze_refinance(current.balance, current.payment, current.remaining_cost, options)

    return MortgageAnalysis(
        baseline=baseline,
        accelerated=accelerated,
        savings=extra_payment_savings(baseline, accelerated),
        current=current,
        refinance=refinance
    )
