from typing import Optional

from calc.numeric import safe_non_negative
from model.TaxResult import ItemizedDeductionInputs


class ItemizedDeductionRules:
    """Caps and floors applied to itemized deductions before they are totalled."""

    def __init__(self, state_local_tax_cap: Optional[float] = None, medical_floor_fraction: float = 0.0):
        """
        state_local_tax_cap: ceiling on the state/local tax deduction (None = uncapped)
        medical_floor_fraction: medical expenses only count above agi * this fraction
        """
        self.state_local_tax_cap = state_local_tax_cap
        self.medical_floor_fraction = medical_floor_fraction

    @classmethod
    def from_reference(cls, itemized: Optional[dict]) -> "ItemizedDeductionRules":
        itemized = itemized or {}
        return cls(
            state_local_tax_cap=itemized.get("stateLocalTaxCap"),
            medical_floor_fraction=itemized.get("medicalFloorPercent", 0) / 100.0
        )

    def state_local_deductible(self, state_local_taxes: float) -> float:
        amount = safe_non_negative(state_local_taxes)
        if self.state_local_tax_cap is None:
            return amount
        return min(amount, self.state_local_tax_cap)

    def medical_deductible(self, medical: float, agi: float) -> float:
        """Medical expenses above the percentage-of-income floor."""
        floor = max(0.0, agi) * self.medical_floor_fraction
        return max(0.0, safe_non_negative(medical) - floor)

    def total(self, itemized: ItemizedDeductionInputs, agi: float) -> float:
        return (
            self.state_local_deductible(itemized.state_local_taxes)
            + safe_non_negative(itemized.mortgage_interest)
            + safe_non_negative(itemized.charitable)
            + self.medical_deductible(itemized.medical, agi)
            + safe_non_negative(itemized.other)
        )


class StandardDeductionPhaseOut:
    """Linear reduction of a standard amount as income rises.

    The full amount applies up to start; it falls linearly to floor at end and
    stays there. The UK personal allowance (lose 1 for every 2 over 100,000)
    and the Canadian basic personal amount both fit this shape.
    """

    def __init__(self, start: float, end: float, floor: float = 0.0):
        if end <= start:
            raise ValueError(f"Phase-out end ({end}) must be above its start ({start})")
        self.start = start
        self.end = end
        self.floor = floor

    @classmethod
    def from_reference(cls, phase_out: Optional[dict]) -> Optional["StandardDeductionPhaseOut"]:
        if not phase_out:
            return None
        return cls(phase_out["start"], phase_out["end"], phase_out.get("floor", 0.0))

    def apply(self, amount: float, income: float) -> float:
        if income <= self.start:
            return amount
        if income >= self.end:
            return min(amount, self.floor)
        fraction = (income - self.start) / (self.end - self.start)
        return amount - (amount - self.floor) * fraction
