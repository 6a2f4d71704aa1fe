"""Inverse solves for savings goals.

Both solvers use the closed form of the simulator's annual step: the balance
grows by (1 + r) and then receives twelve monthly contributions, so

    future_value = B * (1 + r) ** n + 12 * c * annuity_factor(r, n)

A contribution solved here reproduces the simulator's own projection for the
same inputs.
"""

import logging
from typing import Optional

from calc.numeric import growth_factor, percent_to_fraction, safe_amount, safe_non_negative, safe_ratio
from model.ProjectionData import GoalAnalysis

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12

# Below this rate the annuity factor is treated as the plain year count
ANNUITY_EPSILON = 1e-12

# Bisection domain and stopping rules for required_return (fractions)
MIN_RATE = -0.5
MAX_RATE = 0.5
RATE_TOLERANCE = 1e-9
MAX_ITERATIONS = 200


def annuity_factor(rate: float, years: int) -> float:
    """Future value of 1 paid at the end of each of `years` years at fractional rate."""
    years = int(safe_non_negative(years))
    if years == 0:
        return 0.0
    if abs(rate) < ANNUITY_EPSILON:
        return float(years)
    if 1.0 + rate <= 0:
        # Balances are wiped out every year; only the last payment survives
        return 1.0
    return (growth_factor(rate, years) - 1.0) / rate


def _future_value(balance: float, monthly_contribution: float, rate: float, years: int) -> float:
    return (balance * growth_factor(rate, years)
            + MONTHS_PER_YEAR * monthly_contribution * annuity_factor(rate, years))


def future_value(current_balance: float, monthly_contribution: float, annual_rate: float, years: int) -> float:
    """Nominal balance after `years` years of growth and monthly contributions.

    annual_rate is a percentage (7 means 7%).
    """
    return _future_value(
        safe_non_negative(current_balance),
        safe_non_negative(monthly_contribution),
        percent_to_fraction(annual_rate),
        int(safe_non_negative(years))
    )


def required_contribution(target_nominal: float, current_balance: float, annual_rate: float, years: int) -> float:
    """
    Monthly contribution needed to reach target_nominal.

    Args:
        target_nominal: Balance wanted after `years` years
        current_balance: Balance today
        annual_rate: Expected annual return as a percentage
        years: Whole years until the target date

    Returns:
        The monthly contribution (0 when the current balance already gets there,
        or when there is no time left to contribute)
    """
    target_nominal = safe_amount(target_nominal)
    current_balance = safe_non_negative(current_balance)
    rate = percent_to_fraction(annual_rate)
    years = int(safe_non_negative(years))

    if years == 0:
        return 0.0

    shortfall = target_nominal - current_balance * growth_factor(rate, years)
    if shortfall <= 0:
        return 0.0
    return safe_ratio(shortfall, MONTHS_PER_YEAR * annuity_factor(rate, years))


def required_return(target_nominal: float, current_balance: float, monthly_contribution: float,
                    years: int) -> Optional[float]:
    """
    Average annual return (as a percentage) needed to reach target_nominal.

    Bisects over [-50%, +50%]. Returns None when even +50% falls short, or
    when the target is already met at -50% (no positive return is required).
    """
    target_nominal = safe_amount(target_nominal)
    current_balance = safe_non_negative(current_balance)
    monthly_contribution = safe_non_negative(monthly_contribution)
    years = int(safe_non_negative(years))

    def shortfall(rate: float) -> float:
        return target_nominal - _future_value(current_balance, monthly_contribution, rate, years)

    if shortfall(MIN_RATE) <= 0:
        logger.debug("Target %.2f already met at the lowest rate searched", target_nominal)
        return None
    if shortfall(MAX_RATE) > 0:
        logger.debug("Target %.2f unreachable below %.0f%%", target_nominal, MAX_RATE * 100)
        return None

    low, high = MIN_RATE, MAX_RATE
    for _ in range(MAX_ITERATIONS):
        mid = (low + high) / 2
        if shortfall(mid) > 0:
            low = mid
        else:
            high = mid
        if high - low < RATE_TOLERANCE:
            break

    return high * 100


def corpus_target(annual_income_real: float, external_income_real: float, withdrawal_rate: float,
                  tax_rate: float = 0.0) -> float:
    """Portfolio (today's money) that funds the income not covered by external income.

    tax_rate grosses the target up so that withdrawals taxed at that rate still
    cover the income. Returns 0 when the withdrawal rate is not positive or the
    tax rate takes everything.
    """
    needed = max(0.0, safe_amount(annual_income_real) - safe_non_negative(external_income_real))
    kept = 1.0 - min(1.0, percent_to_fraction(tax_rate, minimum=0.0))
    return safe_ratio(needed, percent_to_fraction(withdrawal_rate) * kept)


def analyze_goal(desired_monthly_income: float, current_balance: float, monthly_contribution: float,
                 annual_return: float, years: int, inflation_rate: float = 3.0,
                 withdrawal_rate: float = 4.0, external_income_monthly: float = 0.0) -> GoalAnalysis:
    """
    Turn a desired retirement income (today's money) into a nominal portfolio
    target and solve for both the contribution and the return that reach it.
    """
    years = int(safe_non_negative(years))
    target_real = corpus_target(safe_non_negative(desired_monthly_income) * MONTHS_PER_YEAR,
                                safe_non_negative(external_income_monthly) * MONTHS_PER_YEAR,
                                withdrawal_rate)
    target_nominal = target_real * growth_factor(percent_to_fraction(inflation_rate), years)
    projected = future_value(current_balance, monthly_contribution, annual_return, years)

    return GoalAnalysis(
        years=years,
        target_real=target_real,
        target_nominal=target_nominal,
        projected_nominal=projected,
        shortfall_nominal=max(0.0, target_nominal - projected),
        required_monthly_contribution=required_contribution(target_nominal, current_balance, annual_return, years),
        required_return=required_return(target_nominal, current_balance, monthly_contribution, years),
        is_on_track=projected >= target_nominal
    )
