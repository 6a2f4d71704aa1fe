"""Records for the savings simulator, retirement planner and goal solver.

Inputs are immutable value objects; results are plain dataclasses the
renderers and the MCP tools read field by field. Percent-valued inputs are
whole numbers (7 means 7%).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class InvestmentStrategy(str, Enum):
    CONSERVATIVE = "Conservative"
    BALANCED = "Balanced"
    AGGRESSIVE = "Aggressive"
    CUSTOM = "Custom"


class TargetType(str, Enum):
    INCOME = "income"    # desired annual after-tax income in today's money
    CORPUS = "corpus"    # desired portfolio value at retirement, nominal


@dataclass
class ProjectionPoint:
    """Balance snapshot at the end of one simulated year."""
    year: int
    age: int
    nominal_balance: float
    real_balance: float
    contributed_total: float = 0.0    # starting balance plus contributions so far
    growth_nominal: float = 0.0       # growth earned during this year
    withdrawal_nominal: float = 0.0   # gross amount withdrawn during this year
    yearly_cost: float = 0.0          # spending need funded this year (education)


@dataclass(frozen=True)
class WithdrawalPhase:
    """Drawdown configuration: spend annual_withdrawal_real (today's money) every year after retirement_age."""
    retirement_age: int
    annual_withdrawal_real: float
    withdrawal_rate: float = 4.0


@dataclass(frozen=True)
class BucketAmounts:
    """An amount split by tax treatment."""
    pre_tax: float = 0.0     # tax-deferred; every withdrawn unit is taxed
    tax_free: float = 0.0    # already taxed; withdrawals are tax free
    taxable: float = 0.0     # brokerage; only the gain share of a withdrawal is taxed

    @property
    def total(self) -> float:
        return self.pre_tax + self.tax_free + self.taxable


@dataclass(frozen=True)
class SimulationParams:
    """Everything advance_year needs besides the state. Rates are fractions."""
    start_age: int
    growth_rate: float
    inflation_rate: float
    contributions: Tuple[BucketAmounts, ...] = ()   # annual amounts, one per simulated year
    retirement_age: Optional[int] = None
    annual_withdrawal_real: float = 0.0
    withdrawal_tax_rate: float = 0.0


@dataclass(frozen=True)
class SimulationState:
    year: int
    age: int
    pre_tax: float = 0.0
    tax_free: float = 0.0
    taxable: float = 0.0
    taxable_basis: float = 0.0
    contributed_total: float = 0.0
    growth_nominal: float = 0.0
    withdrawal_nominal: float = 0.0
    spending_nominal: float = 0.0
    solvency_age: Optional[int] = None

    @property
    def total(self) -> float:
        return self.pre_tax + self.tax_free + self.taxable


@dataclass
class SimulationOutcome:
    points: List[ProjectionPoint]
    solvency_age: Optional[int]
    projected_income_real: float
    states: List[SimulationState] = field(default_factory=list, repr=False)


@dataclass(frozen=True)
class RetirementInputs:
    """A retirement plan. Monthly contributions, annual targets and income."""
    current_age: int = 35
    retirement_age: int = 65
    life_expectancy: int = 90
    balances: BucketAmounts = BucketAmounts(pre_tax=50000.0)
    taxable_basis: Optional[float] = None            # defaults to the taxable balance
    monthly_contributions: BucketAmounts = BucketAmounts(pre_tax=1000.0)
    strategy: InvestmentStrategy = InvestmentStrategy.BALANCED
    custom_return_rate: float = 7.0
    inflation_rate: float = 3.0
    withdrawal_rate: float = 4.0
    retirement_tax_rate: float = 15.0
    external_income_monthly: float = 2000.0           # pensions, social security (today's money)
    target_type: TargetType = TargetType.INCOME
    target_value: float = 60000.0


@dataclass
class SimulationResult:
    is_valid: bool
    validation_error: Optional[str] = None
    years_to_retirement: int = 0
    years_in_retirement: int = 0
    nominal_return_rate: float = 0.0
    target_income_real: float = 0.0
    target_income_nominal: float = 0.0
    target_corpus_real: float = 0.0
    target_corpus_nominal: float = 0.0
    projected_nominal: float = 0.0
    projected_real: float = 0.0
    projected_after_tax_nominal: float = 0.0
    projected_after_tax_real: float = 0.0
    projected_income_nominal: float = 0.0
    projected_income_real: float = 0.0
    gap_real: float = 0.0
    required_monthly_contribution: float = 0.0
    solvency_age: Optional[int] = None
    is_on_track: bool = False
    projections: List[ProjectionPoint] = field(default_factory=list)


@dataclass
class GoalAnalysis:
    """Both inverse solves for one savings goal."""
    years: int
    target_real: float
    target_nominal: float
    projected_nominal: float
    shortfall_nominal: float
    required_monthly_contribution: float
    required_return: Optional[float]     # percent; None when no realistic rate reaches the target
    is_on_track: bool


@dataclass(frozen=True)
class FireInputs:
    current_age: int = 30
    net_worth: float = 100000.0
    annual_income: float = 80000.0       # after tax
    annual_spending: float = 50000.0
    growth_rate: float = 7.0
    withdrawal_rate: float = 4.0
    inflation_rate: float = 0.0


@dataclass
class FireProjection:
    annual_savings: float
    savings_rate: float                  # fraction of income saved
    fire_number: float                   # math.inf when the withdrawal rate is not positive
    fire_age: Optional[int]
    years_to_fire: Optional[int]
    points: List[ProjectionPoint] = field(default_factory=list)
