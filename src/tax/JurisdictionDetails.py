import json
import os
from dataclasses import dataclass
from typing import Dict, Optional

from model.TaxResult import FilingStatus
from tax.BracketTable import BracketTable
from tax.DeductionDetails import ItemizedDeductionRules, StandardDeductionPhaseOut
from tax.PayrollDetails import PayrollDetails

REFERENCE_DIR = os.path.join(os.path.dirname(__file__), 'reference')


@dataclass(frozen=True)
class FilingProfile:
    """Tables selected by a filing status within one jurisdiction and tax year."""
    filing_status: FilingStatus
    standard_deduction: float
    brackets: BracketTable
    preferential_brackets: Optional[BracketTable]
    payroll_surtax_threshold: float


class JurisdictionDetails:
    """Loads one jurisdiction's statutory tables from its reference file.

    Reference files live in tax/reference/<code>-tax-details.json and hold a
    "taxYears" array; the latest year is used unless tax_year is given. A
    filing status missing from "filingStatuses" falls back to the "default"
    entry, which is how jurisdictions that tax individuals share one table.
    """

    def __init__(self, code: str, tax_year: Optional[int] = None, reference_dir: str = REFERENCE_DIR):
        self.code = code.upper()
        self.reference_path = os.path.join(reference_dir, f'{self.code.lower()}-tax-details.json')
        self.profiles: Dict[FilingStatus, FilingProfile] = {}
        self._load(tax_year)

    def _load(self, tax_year: Optional[int]) -> None:
        if not os.path.exists(self.reference_path):
            raise ValueError(f"No reference data for jurisdiction {self.code}: {self.reference_path}")
        with open(self.reference_path, 'r') as f:
            data = json.load(f)

        tax_years = data.get("taxYears", [])
        if not tax_years:
            raise ValueError(f"{os.path.basename(self.reference_path)} must contain a 'taxYears' array with at least one entry")

        # Sort tax years to ensure they're in order
        tax_years = sorted(tax_years, key=lambda x: x["year"])
        self.available_years = [y["year"] for y in tax_years]
        if tax_year is None:
            year_data = tax_years[-1]
        else:
            matches = [y for y in tax_years if y["year"] == tax_year]
            if not matches:
                raise ValueError(f"No {self.code} tax data available for year {tax_year}")
            year_data = matches[0]

        self.name = data.get("name", self.code)
        self.currency = data.get("currency", "")
        self.tax_year = year_data["year"]
        self.itemized_rules = ItemizedDeductionRules.from_reference(year_data.get("itemized"))
        self.standard_deduction_phase_out = StandardDeductionPhaseOut.from_reference(
            year_data.get("standardDeductionPhaseOut"))
        self.capital_gains = dict(year_data.get("capitalGains", {}))

        statuses = year_data.get("filingStatuses", {})
        for status in FilingStatus:
            entry = statuses.get(status.value, statuses.get("default"))
            if entry is None:
                raise ValueError(f"{self.code} {self.tax_year} has no table for filing status {status.value}")
            preferential = entry.get("preferentialBrackets")
            self.profiles[status] = FilingProfile(
                filing_status=status,
                standard_deduction=entry.get("standardDeduction", 0),
                brackets=BracketTable.from_reference(entry["brackets"]),
                preferential_brackets=BracketTable.from_reference(preferential) if preferential else None,
                payroll_surtax_threshold=entry.get("payrollSurtaxThreshold", 0)
            )

        self.payroll = PayrollDetails.from_reference(
            year_data.get("payroll", {}),
            {status: profile.payroll_surtax_threshold for status, profile in self.profiles.items()}
        )

    def profile(self, filing_status: FilingStatus) -> FilingProfile:
        return self.profiles[FilingStatus(filing_status)]

    def standard_deduction(self, filing_status: FilingStatus, income: float) -> float:
        """Standard amount for the status, after any income phase-out."""
        amount = self.profile(filing_status).standard_deduction
        if self.standard_deduction_phase_out is not None:
            amount = self.standard_deduction_phase_out.apply(amount, income)
        return amount
