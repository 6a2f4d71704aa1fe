"""Financial independence (FIRE) projection.

Savings are whatever after-tax income is not spent; the FIRE number is the
portfolio whose safe withdrawal covers current spending. Net worth is
projected with the savings simulator until MAX_AGE.
"""

import math

from calc.numeric import percent_to_fraction, safe_non_negative, safe_ratio
from calc.retirement_simulator import simulate
from model.ProjectionData import FireInputs, FireProjection

MAX_AGE = 90


def fire_number(annual_spending: float, withdrawal_rate: float) -> float:
    """Portfolio needed to fund annual_spending; math.inf for a non-positive withdrawal rate."""
    rate = percent_to_fraction(withdrawal_rate)
    if rate <= 0:
        return math.inf
    return safe_non_negative(annual_spending) / rate


def project_fire(inputs: FireInputs) -> FireProjection:
    current_age = int(safe_non_negative(inputs.current_age))
    income = safe_non_negative(inputs.annual_income)
    annual_savings = max(0.0, income - safe_non_negative(inputs.annual_spending))
    target = fire_number(inputs.annual_spending, inputs.withdrawal_rate)

    outcome = simulate(
        current_balance=inputs.net_worth,
        contributions=annual_savings,
        growth_rate=inputs.growth_rate,
        inflation_rate=inputs.inflation_rate,
        horizon_years=max(0, MAX_AGE - current_age),
        start_age=current_age
    )

    fire_age = next((point.age for point in outcome.points if point.nominal_balance >= target), None)

    return FireProjection(
        annual_savings=annual_savings,
        savings_rate=safe_ratio(annual_savings, income),
        fire_number=target,
        fire_age=fire_age,
        years_to_fire=fire_age - current_age if fire_age is not None else None,
        points=outcome.points
    )
