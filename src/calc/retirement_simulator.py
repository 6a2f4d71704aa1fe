"""Year-by-year savings and drawdown simulation.

The simulation is a fold of advance_year over the simulated years: every
year's SimulationState is derived from the previous one and nothing is
mutated. Balances are tracked per tax treatment (pre-tax, tax-free and
taxable with a cost basis) so that retirement withdrawals can be grossed up
for tax; growth itself is the same for every bucket.

Accumulation years apply growth first and then the year's contributions
(end-of-year crediting). Drawdown years apply growth and then withdraw the
year's spending need, given in today's money and inflated to the simulated
year, from pre-tax, then taxable, then tax-free balances.
"""

import logging
from dataclasses import replace
from itertools import accumulate
from numbers import Number
from typing import List, Optional, Sequence, Tuple, Union

from calc.goal_solver import MONTHS_PER_YEAR, corpus_target, required_contribution
from calc.numeric import growth_factor, percent_to_fraction, safe_amount, safe_non_negative, safe_ratio
from calc.planning_assumptions import strategy_settings
from model.ProjectionData import (
    BucketAmounts,
    InvestmentStrategy,
    ProjectionPoint,
    RetirementInputs,
    SimulationOutcome,
    SimulationParams,
    SimulationResult,
    SimulationState,
    TargetType,
    WithdrawalPhase,
)

logger = logging.getLogger(__name__)

# Unfunded spending below one cent does not count as running out of money
SHORTFALL_TOLERANCE = 0.01

# Projected income within a cent of the target counts as on track
ON_TRACK_TOLERANCE = 0.01


def real_value(value: float, inflation_rate: float, years: float) -> float:
    """Deflate a future nominal value to today's money. inflation_rate is a percentage."""
    factor = growth_factor(percent_to_fraction(inflation_rate), safe_non_negative(years))
    return safe_ratio(safe_amount(value), factor)


def nominal_value(value: float, inflation_rate: float, years: float) -> float:
    """Inflate a value in today's money to its nominal amount `years` from now."""
    return safe_amount(value) * growth_factor(percent_to_fraction(inflation_rate), safe_non_negative(years))


def nominal_return_rate(strategy: Union[InvestmentStrategy, str], custom_rate: float = 7.0) -> float:
    """Annual return (percentage) implied by a strategy, or custom_rate for Custom."""
    strategy = InvestmentStrategy(strategy)
    if strategy == InvestmentStrategy.CUSTOM:
        return safe_amount(custom_rate)
    return float(strategy_settings(strategy.value)["rate"])


def _withdraw(balance: float, cash_needed: float, taxed_share: float,
              tax_rate: float) -> Tuple[float, float, float]:
    """Take enough from balance to net cash_needed after tax.

    Returns (balance left, cash raised, gross amount withdrawn).
    """
    net_per_unit = 1.0 - tax_rate * taxed_share
    if cash_needed <= 0 or balance <= 0 or net_per_unit <= 0:
        return balance, 0.0, 0.0
    gross = min(balance, cash_needed / net_per_unit)
    return balance - gross, gross * net_per_unit, gross


def _gain_share(taxable: float, basis: float) -> float:
    """Fraction of a taxable-account withdrawal that is gain."""
    if taxable <= 0:
        return 0.0
    return min(1.0, max(0.0, 1.0 - basis / taxable))


def _contribution_for(params: SimulationParams, year_index: int) -> BucketAmounts:
    if 0 < year_index <= len(params.contributions):
        return params.contributions[year_index - 1]
    return BucketAmounts()


def advance_year(state: SimulationState, year_index: int, params: SimulationParams) -> SimulationState:
    """Return the state at the end of simulated year `year_index` (1-based)."""
    age = params.start_age + year_index
    factor = growth_factor(params.growth_rate, 1)
    pre_tax = state.pre_tax * factor
    tax_free = state.tax_free * factor
    taxable = state.taxable * factor
    growth = (pre_tax + tax_free + taxable) - state.total

    retired = params.retirement_age is not None and age > params.retirement_age
    if not retired:
        contribution = _contribution_for(params, year_index)
        return replace(
            state,
            year=year_index,
            age=age,
            pre_tax=pre_tax + contribution.pre_tax,
            tax_free=tax_free + contribution.tax_free,
            taxable=taxable + contribution.taxable,
            taxable_basis=state.taxable_basis + contribution.taxable,
            contributed_total=state.contributed_total + contribution.total,
            growth_nominal=growth,
            withdrawal_nominal=0.0,
            spending_nominal=0.0
        )

    spending = params.annual_withdrawal_real * growth_factor(params.inflation_rate, year_index)
    tax_rate = params.withdrawal_tax_rate

    pre_tax, cash, gross_pre_tax = _withdraw(pre_tax, spending, 1.0, tax_rate)
    remaining = spending - cash

    gain_share = _gain_share(taxable, state.taxable_basis)
    taxable_left, cash, gross_taxable = _withdraw(taxable, remaining, gain_share, tax_rate)
    basis = state.taxable_basis * safe_ratio(taxable_left, taxable) if taxable > 0 else 0.0
    remaining -= cash

    tax_free, cash, gross_tax_free = _withdraw(tax_free, remaining, 0.0, tax_rate)
    remaining -= cash

    total_left = pre_tax + taxable_left + tax_free
    solvency_age = state.solvency_age
    if solvency_age is None and spending > 0 and (total_left <= 0 or remaining > SHORTFALL_TOLERANCE):
        solvency_age = age
        logger.debug("Portfolio exhausted at age %d (unfunded %.2f)", age, remaining)

    return replace(
        state,
        year=year_index,
        age=age,
        pre_tax=pre_tax,
        tax_free=tax_free,
        taxable=taxable_left,
        taxable_basis=basis,
        growth_nominal=growth,
        withdrawal_nominal=gross_pre_tax + gross_taxable + gross_tax_free,
        spending_nominal=spending,
        solvency_age=solvency_age
    )


def run_states(initial: SimulationState, params: SimulationParams, horizon_years: int) -> List[SimulationState]:
    """The initial state followed by one state per simulated year."""
    return list(accumulate(
        range(1, horizon_years + 1),
        lambda state, year_index: advance_year(state, year_index, params),
        initial=initial
    ))


def to_point(state: SimulationState, params: SimulationParams) -> ProjectionPoint:
    total = state.total
    return ProjectionPoint(
        year=state.year,
        age=state.age,
        nominal_balance=total,
        real_balance=safe_ratio(total, growth_factor(params.inflation_rate, state.year)),
        contributed_total=state.contributed_total,
        growth_nominal=state.growth_nominal,
        withdrawal_nominal=state.withdrawal_nominal,
        yearly_cost=state.spending_nominal
    )


def _annual_contributions(contributions: Union[float, Sequence[float]], horizon_years: int) -> Tuple[BucketAmounts, ...]:
    if contributions is None or isinstance(contributions, (Number, str)):
        level = safe_non_negative(contributions)
        return tuple(BucketAmounts(pre_tax=level) for _ in range(horizon_years))
    return tuple(BucketAmounts(pre_tax=safe_non_negative(amount)) for amount in contributions)


def simulate(current_balance: float, contributions: Union[float, Sequence[float]], growth_rate: float,
             inflation_rate: float, horizon_years: int, withdrawal_phase: Optional[WithdrawalPhase] = None,
             start_age: int = 0) -> SimulationOutcome:
    """
    Project a single balance year by year.

    Args:
        current_balance: Balance today
        contributions: Annual contribution, either one level amount or one amount per year
        growth_rate: Annual return as a percentage
        inflation_rate: Annual inflation as a percentage
        horizon_years: Number of years to simulate
        withdrawal_phase: Optional drawdown after the retirement age
        start_age: Age at the start of the simulation (year 0)

    Returns:
        SimulationOutcome with horizon_years + 1 points, starting with year 0
    """
    horizon = int(safe_non_negative(horizon_years))
    start_age = int(safe_non_negative(start_age))
    balance = safe_non_negative(current_balance)

    params = SimulationParams(
        start_age=start_age,
        growth_rate=percent_to_fraction(growth_rate),
        inflation_rate=percent_to_fraction(inflation_rate),
        contributions=_annual_contributions(contributions, horizon),
        retirement_age=withdrawal_phase.retirement_age if withdrawal_phase else None,
        annual_withdrawal_real=safe_non_negative(withdrawal_phase.annual_withdrawal_real) if withdrawal_phase else 0.0
    )
    initial = SimulationState(year=0, age=start_age, pre_tax=balance, contributed_total=balance)
    states = run_states(initial, params, horizon)
    points = [to_point(state, params) for state in states]

    projected_income_real = 0.0
    if withdrawal_phase is not None:
        retirement_index = min(max(0, withdrawal_phase.retirement_age - start_age), horizon)
        withdrawal_rate = percent_to_fraction(withdrawal_phase.withdrawal_rate, minimum=0.0)
        projected_income_real = points[retirement_index].real_balance * withdrawal_rate

    return SimulationOutcome(
        points=points,
        solvency_age=states[-1].solvency_age,
        projected_income_real=projected_income_real,
        states=states
    )


def run_retirement_simulation(inputs: RetirementInputs) -> SimulationResult:
    """
    Full retirement plan: accumulate per-bucket balances until retirement, then
    draw down the income the external sources do not cover until life expectancy.

    Returns an invalid (zeroed) result instead of raising when the retirement
    age is not after the current age.
    """
    current_age = int(safe_non_negative(inputs.current_age))
    retirement_age = int(safe_non_negative(inputs.retirement_age))
    life_expectancy = int(safe_non_negative(inputs.life_expectancy))

    years_to_retirement = retirement_age - current_age
    if years_to_retirement <= 0:
        logger.debug("Rejected plan: retirement age %d is not after current age %d", retirement_age, current_age)
        return SimulationResult(is_valid=False, validation_error="Retirement age must be greater than current age.")
    years_in_retirement = max(0, life_expectancy - retirement_age)

    return_rate = nominal_return_rate(inputs.strategy, inputs.custom_return_rate)
    inflation = percent_to_fraction(inputs.inflation_rate)
    tax_rate = min(1.0, percent_to_fraction(inputs.retirement_tax_rate, minimum=0.0))
    withdrawal_rate = percent_to_fraction(inputs.withdrawal_rate, minimum=0.0)
    external_income_real = safe_non_negative(inputs.external_income_monthly) * MONTHS_PER_YEAR
    inflation_to_retirement = growth_factor(inflation, years_to_retirement)

    if TargetType(inputs.target_type) == TargetType.CORPUS:
        target_corpus_nominal = safe_non_negative(inputs.target_value)
        target_corpus_real = safe_ratio(target_corpus_nominal, inflation_to_retirement)
        # Income such a portfolio would pay, assuming it is all pre-tax
        target_income_real = target_corpus_real * withdrawal_rate * (1 - tax_rate) + external_income_real
    else:
        target_income_real = safe_non_negative(inputs.target_value)
        target_corpus_real = corpus_target(target_income_real, external_income_real, inputs.withdrawal_rate,
                                           inputs.retirement_tax_rate)
        target_corpus_nominal = target_corpus_real * inflation_to_retirement

    balances = inputs.balances
    taxable = safe_non_negative(balances.taxable)
    if inputs.taxable_basis is None:
        basis = taxable
    else:
        basis = min(taxable, safe_non_negative(inputs.taxable_basis))
    monthly = inputs.monthly_contributions
    annual = BucketAmounts(
        pre_tax=safe_non_negative(monthly.pre_tax) * MONTHS_PER_YEAR,
        tax_free=safe_non_negative(monthly.tax_free) * MONTHS_PER_YEAR,
        taxable=safe_non_negative(monthly.taxable) * MONTHS_PER_YEAR
    )

    params = SimulationParams(
        start_age=current_age,
        growth_rate=percent_to_fraction(return_rate),
        inflation_rate=inflation,
        contributions=(annual,) * years_to_retirement,
        retirement_age=retirement_age,
        annual_withdrawal_real=max(0.0, target_income_real - external_income_real),
        withdrawal_tax_rate=tax_rate
    )
    initial = SimulationState(
        year=0,
        age=current_age,
        pre_tax=safe_non_negative(balances.pre_tax),
        tax_free=safe_non_negative(balances.tax_free),
        taxable=taxable,
        taxable_basis=basis
    )
    initial = replace(initial, contributed_total=initial.total)
    states = run_states(initial, params, years_to_retirement + years_in_retirement)

    at_retirement = states[years_to_retirement]
    gain_share = _gain_share(at_retirement.taxable, at_retirement.taxable_basis)
    after_tax_nominal = (at_retirement.pre_tax * (1 - tax_rate)
                         + at_retirement.tax_free
                         + at_retirement.taxable * (1 - tax_rate * gain_share))
    portfolio_income_nominal = after_tax_nominal * withdrawal_rate
    projected_income_real = safe_ratio(portfolio_income_nominal, inflation_to_retirement) + external_income_real
    solvency_age = states[-1].solvency_age
    gap_real = projected_income_real - target_income_real

    return SimulationResult(
        is_valid=True,
        years_to_retirement=years_to_retirement,
        years_in_retirement=years_in_retirement,
        nominal_return_rate=return_rate,
        target_income_real=target_income_real,
        target_income_nominal=target_income_real * inflation_to_retirement,
        target_corpus_real=target_corpus_real,
        target_corpus_nominal=target_corpus_nominal,
        projected_nominal=at_retirement.total,
        projected_real=safe_ratio(at_retirement.total, inflation_to_retirement),
        projected_after_tax_nominal=after_tax_nominal,
        projected_after_tax_real=safe_ratio(after_tax_nominal, inflation_to_retirement),
        projected_income_nominal=portfolio_income_nominal + external_income_real * inflation_to_retirement,
        projected_income_real=projected_income_real,
        gap_real=gap_real,
        required_monthly_contribution=required_contribution(
            target_corpus_nominal, initial.total, return_rate, years_to_retirement),
        solvency_age=solvency_age,
        is_on_track=solvency_age is None and gap_real >= -ON_TRACK_TOLERANCE,
        projections=[to_point(state, params) for state in states]
    )
