from dataclasses import dataclass, field
from typing import List, Optional

from model.ProjectionData import ProjectionPoint


@dataclass(frozen=True)
class EducationInputs:
    """Savings plan for one child's education.

    annual_cost is in today's money; None uses the country's default cost.
    state_tax_rate only matters where contributions are deductible (US 529);
    None uses a typical 4.5% there and 0 elsewhere.
    """
    country: str = "US"
    child_age: int = 2
    college_start_age: int = 18
    current_savings: float = 10000.0
    monthly_contribution: float = 500.0
    annual_cost: Optional[float] = None
    education_inflation: float = 5.0
    investment_return: float = 7.0
    state_tax_rate: Optional[float] = None


@dataclass
class EducationProjection:
    country: str
    account_name: str
    years_until_college: int
    study_years: int
    final_balance: float                  # negative when savings run out before graduation
    projected_total_cost: float
    total_contributed: float
    total_grants: float
    shortfall: float
    required_monthly_contribution: float  # total monthly saving that leaves a zero final balance
    annual_tax_savings: float
    annual_contribution_limit: Optional[float]
    limit_description: str
    is_over_limit: bool
    strategy_title: str
    strategy_tip: str
    points: List[ProjectionPoint] = field(default_factory=list)

    @property
    def is_shortfall(self) -> bool:
        return self.shortfall > 0
