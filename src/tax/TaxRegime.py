"""Per-jurisdiction tax regimes behind a single compute_tax capability.

Each regime bundles a jurisdiction's reference tables (JurisdictionDetails)
with the few rules that genuinely differ between countries: how long-term
gains are taxed and how the standard amount is derived. Callers pick a regime
from TAX_REGIME_REGISTRY instead of branching on a country flag.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from functools import lru_cache
from typing import Dict, Optional, Type

from calc.numeric import safe_non_negative, safe_ratio
from model.TaxResult import DeductionMethod, FilingStatus, TaxInputs, TaxResult
from tax.JurisdictionDetails import FilingProfile, JurisdictionDetails

logger = logging.getLogger(__name__)


class Jurisdiction(str, Enum):
    US = "US"
    UK = "UK"
    CA = "CA"


class TaxRegime(ABC):
    """Computes income tax, payroll contributions and net pay for one jurisdiction."""

    jurisdiction: Jurisdiction

    def __init__(self, details: Optional[JurisdictionDetails] = None, tax_year: Optional[int] = None):
        """
        details: pre-loaded reference tables (loaded from tax/reference when omitted)
        tax_year: reference year to load; the latest available year by default
        """
        self.details = details or JurisdictionDetails(self.jurisdiction.value, tax_year)

    @property
    def tax_year(self) -> int:
        return self.details.tax_year

    def standard_deduction(self, filing_status: FilingStatus, adjusted_gross_income: float) -> float:
        return self.details.standard_deduction(filing_status, adjusted_gross_income)

    @abstractmethod
    def preferential_tax(self, profile: FilingProfile, taxable_ordinary: float,
                         taxable_preferential: float) -> float:
        """Tax on long-term gains stacked on top of ordinary taxable income."""

    def compute_tax(self, inputs: TaxInputs) -> TaxResult:
        filing_status = FilingStatus(inputs.filing_status)
        deduction_method = DeductionMethod(inputs.deduction_method)
        profile = self.details.profile(filing_status)

        wages = safe_non_negative(inputs.wages)
        other_income = safe_non_negative(inputs.other_income)
        long_term_gains = safe_non_negative(inputs.long_term_gains)
        pretax_deductions = safe_non_negative(inputs.pretax_deductions)

        ordinary_income = wages + other_income
        total_income = ordinary_income + long_term_gains

        # Pre-tax deductions and the deduction itself come off ordinary income
        # first; whatever is left over reduces the preferential base.
        adjusted_gross_income = max(0.0, total_income - pretax_deductions)
        ordinary_agi = max(0.0, ordinary_income - pretax_deductions)

        standard_amount = self.standard_deduction(filing_status, adjusted_gross_income)
        itemized_amount = self.details.itemized_rules.total(inputs.itemized, adjusted_gross_income)
        if deduction_method == DeductionMethod.ITEMIZED:
            deduction_used = itemized_amount
        else:
            deduction_used = standard_amount

        taxable_ordinary = max(0.0, ordinary_agi - deduction_used)
        taxable_total = max(0.0, adjusted_gross_income - deduction_used)
        taxable_preferential = max(0.0, taxable_total - taxable_ordinary)

        ordinary_tax, marginal_rate, breakdown = profile.brackets.tax_on(taxable_ordinary)
        preferential_tax = self.preferential_tax(profile, taxable_ordinary, taxable_preferential)

        # Payroll contributions are charged on gross wages
        payroll = self.details.payroll.total_contribution(wages, filing_status)

        total_tax = ordinary_tax + preferential_tax + payroll.total
        if itemized_amount > standard_amount:
            recommended = DeductionMethod.ITEMIZED
        else:
            recommended = DeductionMethod.STANDARD

        logger.debug("%s %s: taxable %.2f, total tax %.2f", self.jurisdiction.value,
                     filing_status.value, taxable_ordinary, total_tax)

        return TaxResult(
            jurisdiction=self.jurisdiction.value,
            filing_status=filing_status.value,
            total_income=total_income,
            adjusted_gross_income=adjusted_gross_income,
            taxable_income=taxable_ordinary,
            taxable_preferential_income=taxable_preferential,
            ordinary_tax=ordinary_tax,
            preferential_tax=preferential_tax,
            payroll_contributions=payroll.total,
            total_tax=total_tax,
            net_pay=total_income - total_tax - pretax_deductions,
            effective_rate=safe_ratio(total_tax, total_income),
            income_tax_effective_rate=safe_ratio(ordinary_tax + preferential_tax, total_income),
            marginal_rate=marginal_rate,
            deduction_used=deduction_used,
            standard_deduction=standard_amount,
            itemized_deduction=itemized_amount,
            recommended_deduction_method=recommended.value,
            payroll=payroll,
            brackets_breakdown=breakdown
        )


class USTaxRegime(TaxRegime):
    """US federal income tax with 0/15/20% long-term gains and FICA."""

    jurisdiction = Jurisdiction.US

    def preferential_tax(self, profile: FilingProfile, taxable_ordinary: float,
                         taxable_preferential: float) -> float:
        return profile.preferential_brackets.stacked_tax(taxable_ordinary, taxable_preferential)


class UKTaxRegime(TaxRegime):
    """UK income tax with a tapered personal allowance, CGT bands and Class 1 NI.

    Filing status has no effect; every status shares the default table.
    """

    jurisdiction = Jurisdiction.UK

    def preferential_tax(self, profile: FilingProfile, taxable_ordinary: float,
                         taxable_preferential: float) -> float:
        exempt = self.details.capital_gains.get("annualExemptAmount", 0)
        chargeable = max(0.0, taxable_preferential - exempt)
        # Gains use whatever is left of the basic rate band at 18%, then 24%
        return profile.preferential_brackets.stacked_tax(taxable_ordinary, chargeable)


class CanadaTaxRegime(TaxRegime):
    """Canadian federal tax; capital gains are taxed through an inclusion rate."""

    jurisdiction = Jurisdiction.CA

    @property
    def inclusion_rate(self) -> float:
        return self.details.capital_gains.get("inclusionRatePercent", 100) / 100.0

    def preferential_tax(self, profile: FilingProfile, taxable_ordinary: float,
                         taxable_preferential: float) -> float:
        included = taxable_preferential * self.inclusion_rate
        return profile.brackets.stacked_tax(taxable_ordinary, included)


TAX_REGIME_REGISTRY: Dict[Jurisdiction, Type[TaxRegime]] = {
    Jurisdiction.US: USTaxRegime,
    Jurisdiction.UK: UKTaxRegime,
    Jurisdiction.CA: CanadaTaxRegime,
}


@lru_cache(maxsize=None)
def _load_regime(jurisdiction: Jurisdiction, tax_year: Optional[int]) -> TaxRegime:
    return TAX_REGIME_REGISTRY[jurisdiction](tax_year=tax_year)


def get_tax_regime(jurisdiction, tax_year: Optional[int] = None) -> TaxRegime:
    """Return the (shared, read-only) regime for a jurisdiction code such as "US".

    Raises:
        ValueError: if the jurisdiction is not one of the modelled regimes
    """
    if not isinstance(jurisdiction, Jurisdiction):
        jurisdiction = Jurisdiction(str(jurisdiction).upper())
    return _load_regime(jurisdiction, tax_year)


def compute_tax(jurisdiction, inputs: TaxInputs, tax_year: Optional[int] = None) -> TaxResult:
    """Compute a TaxResult for inputs under the given jurisdiction's regime."""
    return get_tax_regime(jurisdiction, tax_year).compute_tax(inputs)
