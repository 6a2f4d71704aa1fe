from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AmortizationScheduleEntry:
    """One monthly payment period of a loan."""
    period: int
    payment: float              # principal_paid + interest_paid
    principal_paid: float       # includes any extra principal
    interest_paid: float
    remaining_balance: float
    cumulative_interest: float
    cumulative_paid: float


@dataclass
class AmortizationResult:
    principal: float
    periodic_payment: float
    total_paid: float
    total_interest: float
    payoff_period: int
    schedule: List[AmortizationScheduleEntry] = field(default_factory=list)


@dataclass
class ExtraPaymentSavings:
    interest_saved: float
    periods_saved: int
    total_paid_saved: float


@dataclass(frozen=True)
class RefinanceOption:
    """A refinance candidate. rate is an annual percentage (5.5 means 5.5%)."""
    term_years: float
    rate: float
    closing_costs: float = 0.0
    roll_in_costs: bool = False


@dataclass
class RefinanceScenario:
    option: RefinanceOption
    loan_amount: float
    new_payment: float
    monthly_savings: float
    break_even_months: float    # math.inf when the new payment saves nothing
    lifetime_savings: float
    is_viable: bool


@dataclass
class LoanBaseline:
    """Where an existing loan stands after some payments have been made."""
    balance: float
    payment: float
    remaining_periods: int
    remaining_cost: float


@dataclass(frozen=True)
class MortgageInputs:
    """An existing (or new, months_paid=0) mortgage and the refinance quote to compare it with."""
    principal: float = 300000.0
    annual_rate: float = 6.5
    term_years: float = 30
    months_paid: int = 0
    extra_payment: float = 0.0
    current_rate_override: Optional[float] = None
    refinance_rate: Optional[float] = None
    closing_costs: float = 0.0
    roll_in_costs: bool = False


@dataclass
class MortgageAnalysis:
    baseline: AmortizationResult
    accelerated: AmortizationResult
    savings: ExtraPaymentSavings
    current: LoanBaseline
    refinance: List[RefinanceScenario] = field(default_factory=list)
