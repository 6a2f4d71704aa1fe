import math
from typing import Dict, Optional

from model.TaxResult import FilingStatus, PayrollBreakdown


class PayrollDetails:
    """Holds payroll/social contribution statutory details and computes contributions.

    Every jurisdiction follows the same three-tier shape:
      - a primary rate on wages between a floor and a wage base cap
        (US Social Security, UK National Insurance main rate, Canada CPP)
      - a secondary rate, uncapped unless a secondary wage base is given
        (US Medicare, Canada EI)
      - a surtax rate on wages above a filing-status threshold, optionally
        stopping at a ceiling (US Additional Medicare, UK NI upper rate, Canada CPP2)
    """

    def __init__(self, primary_rate: float, wage_base: float, secondary_rate: float,
                 surtax_rate: float, surtax_thresholds: Dict[FilingStatus, float],
                 primary_floor: float = 0.0, secondary_wage_base: Optional[float] = None,
                 surtax_ceiling: Optional[float] = None):
        """Initialize with statutory details.

        Args:
            primary_rate: Rate applied to wages between primary_floor and wage_base (fraction).
            wage_base: Maximum wages subject to the primary rate.
            secondary_rate: Rate applied to all wages, or up to secondary_wage_base (fraction).
            surtax_rate: Rate applied to wages above the filing-status threshold (fraction).
            surtax_thresholds: Surtax threshold for each filing status.
            primary_floor: Wages below this amount are exempt from the primary rate.
            secondary_wage_base: Optional cap for the secondary rate.
            surtax_ceiling: Optional wage level where the surtax stops.
        """
        self.primary_rate = primary_rate
        self.wage_base = wage_base
        self.primary_floor = primary_floor
        self.secondary_rate = secondary_rate
        self.secondary_wage_base = secondary_wage_base
        self.surtax_rate = surtax_rate
        self.surtax_thresholds = dict(surtax_thresholds)
        self.surtax_ceiling = surtax_ceiling

    @classmethod
    def from_reference(cls, payroll: dict, surtax_thresholds: Dict[FilingStatus, float]) -> "PayrollDetails":
        """Build from the "payroll" block of a jurisdiction reference file (rates in percent)."""
        return cls(
            primary_rate=payroll.get("primaryRate", 0) / 100.0,
            wage_base=payroll.get("wageBase", 0),
            primary_floor=payroll.get("primaryFloor", 0),
            secondary_rate=payroll.get("secondaryRate", 0) / 100.0,
            secondary_wage_base=payroll.get("secondaryWageBase"),
            surtax_rate=payroll.get("surtaxRate", 0) / 100.0,
            surtax_thresholds=surtax_thresholds,
            surtax_ceiling=payroll.get("surtaxCeiling")
        )

    def primary_contribution(self, wages: float) -> float:
        """Capped primary contribution on wages between the floor and the wage base."""
        subject = min(wages, self.wage_base) - self.primary_floor
        return max(0.0, subject) * self.primary_rate

    def secondary_contribution(self, wages: float) -> float:
        cap = math.inf if self.secondary_wage_base is None else self.secondary_wage_base
        return max(0.0, min(wages, cap)) * self.secondary_rate

    def surtax_threshold(self, filing_status: FilingStatus) -> float:
        if filing_status not in self.surtax_thresholds:
            raise ValueError(f"No payroll surtax threshold for filing status {filing_status.value}")
        return self.surtax_thresholds[filing_status]

    def surtax(self, wages: float, filing_status: FilingStatus) -> float:
        """Surtax on wages above the filing-status threshold (0 if below)."""
        threshold = self.surtax_threshold(filing_status)
        ceiling = math.inf if self.surtax_ceiling is None else self.surtax_ceiling
        subject = min(wages, ceiling) - threshold
        if subject > 0:
            return subject * self.surtax_rate
        return 0.0

    def total_contribution(self, wages: float, filing_status: FilingStatus) -> PayrollBreakdown:
        """Calculate all three payroll tiers for a year's wages."""
        primary = self.primary_contribution(wages)
        secondary = self.secondary_contribution(wages)
        surtax = self.surtax(wages, filing_status)
        return PayrollBreakdown(
            primary=primary,
            secondary=secondary,
            surtax=surtax,
            total=primary + secondary + surtax
        )
