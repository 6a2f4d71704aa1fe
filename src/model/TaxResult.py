from dataclasses import dataclass, field
from enum import Enum
from typing import List


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    HEAD_OF_HOUSEHOLD = "head_of_household"


class DeductionMethod(str, Enum):
    STANDARD = "standard"
    ITEMIZED = "itemized"


@dataclass(frozen=True)
class ItemizedDeductionInputs:
    """Raw itemized deduction amounts before caps and floors are applied."""
    state_local_taxes: float = 0.0
    mortgage_interest: float = 0.0
    charitable: float = 0.0
    medical: float = 0.0
    other: float = 0.0


@dataclass(frozen=True)
class TaxInputs:
    """Income components and deduction choices for a single tax computation.

    wages are subject to payroll contributions; other_income is ordinary income
    that is not (interest, short-term gains); long_term_gains are taxed at the
    preferential rates.
    """
    wages: float = 0.0
    other_income: float = 0.0
    long_term_gains: float = 0.0
    pretax_deductions: float = 0.0
    filing_status: FilingStatus = FilingStatus.SINGLE
    deduction_method: DeductionMethod = DeductionMethod.STANDARD
    itemized: ItemizedDeductionInputs = field(default_factory=ItemizedDeductionInputs)


@dataclass
class BracketTax:
    rate: float
    lower_bound: float
    upper_bound: float
    taxable_amount: float
    tax: float


@dataclass
class PayrollBreakdown:
    primary: float = 0.0      # capped contribution (Social Security, NI main rate, CPP)
    secondary: float = 0.0    # base-rate contribution (Medicare, EI)
    surtax: float = 0.0       # contribution above a status threshold
    total: float = 0.0


@dataclass
class TaxResult:
    jurisdiction: str
    filing_status: str
    total_income: float
    adjusted_gross_income: float
    taxable_income: float
    taxable_preferential_income: float
    ordinary_tax: float
    preferential_tax: float
    payroll_contributions: float
    total_tax: float
    net_pay: float
    effective_rate: float
    marginal_rate: float
    deduction_used: float
    standard_deduction: float
    itemized_deduction: float
    recommended_deduction_method: str
    # Income tax alone over total income; payroll is left out
    income_tax_effective_rate: float = 0.0
    payroll: PayrollBreakdown = field(default_factory=PayrollBreakdown)
    brackets_breakdown: List[BracketTax] = field(default_factory=list)

    @property
    def income_tax(self) -> float:
        return self.ordinary_tax + self.preferential_tax
