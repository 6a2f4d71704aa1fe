"""Education savings projection (529 plan, Junior ISA, RESP).

Each year from the child's current age until graduation the balance grows,
receives the year's contributions (plus any government grant) and, during
study years, pays that year's cost inflated at the education inflation rate.
The balance is allowed to go negative: that is the amount that would have to
be borrowed or paid from elsewhere.
"""

import logging
from itertools import accumulate
from typing import NamedTuple, Tuple

from calc.goal_solver import MONTHS_PER_YEAR, required_contribution
from calc.numeric import growth_factor, percent_to_fraction, safe_non_negative, safe_ratio
from calc.planning_assumptions import education_settings
from model.EducationData import EducationInputs, EducationProjection
from model.ProjectionData import ProjectionPoint

logger = logging.getLogger(__name__)

DEFAULT_STATE_TAX_RATE = 4.5

# (minimum years until college, title, tip), checked in order
STRATEGY_TIPS = (
    (13, "Aggressive Growth",
     "The child is young. A mostly equity allocation maximizes growth and volatility is acceptable at this stage."),
    (6, "Balanced Growth",
     "As high school approaches, shift new contributions to a 60/40 stock/bond mix to protect gains while still growing."),
    (0, "Capital Preservation",
     "Enrollment is close. Favor stable value funds, cash equivalents or short-term bonds so tuition money is safe."),
)


class _EducationYear(NamedTuple):
    year: int
    balance: float
    contributed: float
    grants: float
    cost: float


def strategy_tip(years_until_college: int) -> Tuple[str, str]:
    """Allocation tip (title, text) for the time left before study starts."""
    for minimum_years, title, text in STRATEGY_TIPS:
        if years_until_college >= minimum_years:
            return title, text
    return STRATEGY_TIPS[-1][1], STRATEGY_TIPS[-1][2]


def project_education(inputs: EducationInputs) -> EducationProjection:
    """
    Project an education savings account through the end of study.

    The required monthly contribution is the level monthly saving that leaves
    a zero balance at graduation: the current contribution plus the
    contribution that grows to the shortfall over the same years.
    """
    settings = education_settings(inputs.country)
    study_years = int(settings["studyYears"])
    child_age = int(safe_non_negative(inputs.child_age))
    college_start_age = max(child_age, int(safe_non_negative(inputs.college_start_age)))
    end_age = college_start_age + study_years
    years = end_age - child_age

    annual_cost = settings["defaultAnnualCost"] if inputs.annual_cost is None else inputs.annual_cost
    annual_cost = safe_non_negative(annual_cost)
    cost_inflation = percent_to_fraction(inputs.education_inflation)
    growth = growth_factor(percent_to_fraction(inputs.investment_return), 1)
    monthly = safe_non_negative(inputs.monthly_contribution)
    annual_contribution = monthly * MONTHS_PER_YEAR

    grant_rate = settings.get("grantRatePercent", 0) / 100.0
    grant_eligible = settings.get("grantEligibleContribution", 0)
    grant_cap = settings.get("grantLifetimeCap", 0)

    def step(previous: _EducationYear, year: int) -> _EducationYear:
        start_age = child_age + year - 1
        in_study = college_start_age <= start_age < end_age
        cost = annual_cost * growth_factor(cost_inflation, year - 1) if in_study else 0.0
        grant = min(min(annual_contribution, grant_eligible) * grant_rate, max(0.0, grant_cap - previous.grants))
        return _EducationYear(
            year=year,
            balance=previous.balance * growth + annual_contribution + grant - cost,
            contributed=previous.contributed + annual_contribution,
            grants=previous.grants + grant,
            cost=cost
        )

    savings = safe_non_negative(inputs.current_savings)
    initial = _EducationYear(year=0, balance=savings, contributed=savings, grants=0.0, cost=0.0)
    history = list(accumulate(range(1, years + 1), step, initial=initial))
    final = history[-1]

    shortfall = max(0.0, -final.balance)
    required_monthly = monthly
    if shortfall > 0:
        required_monthly += required_contribution(shortfall, 0.0, inputs.investment_return, years)
        logger.debug("Education shortfall %.2f needs %.2f a month", shortfall, required_monthly)

    limit = settings.get("annualContributionLimit")
    state_tax_rate = inputs.state_tax_rate
    if state_tax_rate is None:
        state_tax_rate = DEFAULT_STATE_TAX_RATE if settings.get("stateTaxDeduction") else 0.0
    tax_savings = 0.0
    if settings.get("stateTaxDeduction"):
        tax_savings = annual_contribution * percent_to_fraction(state_tax_rate, minimum=0.0)

    years_until_college = college_start_age - child_age
    title, tip = strategy_tip(years_until_college)

    return EducationProjection(
        country=inputs.country.upper(),
        account_name=settings["accountName"],
        years_until_college=years_until_college,
        study_years=study_years,
        final_balance=final.balance,
        projected_total_cost=sum(year.cost for year in history),
        total_contributed=final.contributed,
        total_grants=final.grants,
        shortfall=shortfall,
        required_monthly_contribution=required_monthly,
        annual_tax_savings=tax_savings,
        annual_contribution_limit=limit,
        limit_description=settings.get("limitDescription", ""),
        is_over_limit=limit is not None and annual_contribution > limit,
        strategy_title=title,
        strategy_tip=tip,
        points=[
            ProjectionPoint(
                year=year.year,
                age=child_age + year.year,
                nominal_balance=year.balance,
                real_balance=safe_ratio(year.balance, growth_factor(cost_inflation, year.year)),
                contributed_total=year.contributed,
                yearly_cost=year.cost
            )
            for year in history
        ]
    )
