import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from model.TaxResult import BracketTax


@dataclass(frozen=True)
class TaxBracket:
    rate: float            # fraction, e.g. 0.22
    lower_bound: float
    upper_bound: float     # math.inf for the top bracket


class BracketTable:
    """An ordered, gap-free set of progressive brackets covering [0, inf).

    The table is validated when it is built; a malformed table is a data
    error and raises ValueError instead of producing a wrong tax figure later.
    """

    def __init__(self, brackets: Sequence[TaxBracket]):
        self.brackets = tuple(brackets)
        self._validate()

    @classmethod
    def from_reference(cls, entries: List[dict]) -> "BracketTable":
        """Build a table from reference-file entries.

        Each entry has a whole-number percentage "rate" and the bracket's
        "maxIncome"; the lower bound is the previous entry's maxIncome (0 for
        the first). A null maxIncome marks the unbounded top bracket.
        """
        brackets = []
        lower_bound = 0.0
        for entry in entries:
            max_income = entry.get("maxIncome")
            upper_bound = math.inf if max_income is None else float(max_income)
            brackets.append(TaxBracket(
                rate=float(entry["rate"]) / 100.0,
                lower_bound=lower_bound,
                upper_bound=upper_bound
            ))
            lower_bound = upper_bound
        return cls(brackets)

    def _validate(self) -> None:
        if not self.brackets:
            raise ValueError("A bracket table needs at least one bracket")
        if self.brackets[0].lower_bound != 0:
            raise ValueError(f"First bracket must start at 0, not {self.brackets[0].lower_bound}")
        for b in self.brackets:
            if not 0.0 <= b.rate <= 1.0:
                raise ValueError(f"Bracket rate {b.rate} is outside [0, 1]")
            if not b.upper_bound > b.lower_bound:
                raise ValueError(f"Bracket [{b.lower_bound}, {b.upper_bound}) is empty or inverted")
        for previous, current in zip(self.brackets, self.brackets[1:]):
            if current.lower_bound > previous.upper_bound:
                raise ValueError(f"Gap between {previous.upper_bound} and {current.lower_bound}")
            if current.lower_bound < previous.upper_bound:
                raise ValueError(f"Overlap between {current.lower_bound} and {previous.upper_bound}")
        if not math.isinf(self.brackets[-1].upper_bound):
            raise ValueError("Top bracket must be unbounded")

    @property
    def lowest_rate(self) -> float:
        return self.brackets[0].rate

    @property
    def top_rate(self) -> float:
        return self.brackets[-1].rate

    def tax_on(self, income: float) -> Tuple[float, float, List[BracketTax]]:
        """Progressive tax on income.

        Returns:
            (total tax, marginal rate, per-bracket breakdown). The marginal rate
            is the rate of the highest bracket the income reaches; income at or
            below zero reports the lowest bracket's rate.
        """
        total_tax = 0.0
        marginal_rate = self.lowest_rate
        breakdown: List[BracketTax] = []
        for b in self.brackets:
            if income <= b.lower_bound:
                break
            taxable_in_bracket = min(income, b.upper_bound) - b.lower_bound
            tax_in_bracket = taxable_in_bracket * b.rate
            total_tax += tax_in_bracket
            marginal_rate = b.rate
            breakdown.append(BracketTax(
                rate=b.rate,
                lower_bound=b.lower_bound,
                upper_bound=b.upper_bound,
                taxable_amount=taxable_in_bracket,
                tax=tax_in_bracket
            ))
        return total_tax, marginal_rate, breakdown

    def tax(self, income: float) -> float:
        return self.tax_on(income)[0]

    def stacked_tax(self, base: float, amount: float) -> float:
        """Tax on amount when it is stacked on top of base.

        base (ordinary taxable income) fills the bottom of the table first;
        amount then takes whatever room is left in each bracket above it, so
        it only reaches the lower-rate brackets that base has not already used.
        """
        if amount <= 0:
            return 0.0
        floor = max(0.0, base)
        top = floor + amount
        stacked = 0.0
        for b in self.brackets:
            if b.upper_bound <= floor:
                continue
            if b.lower_bound >= top:
                break
            start = max(floor, b.lower_bound)
            end = min(top, b.upper_bound)
            stacked += (end - start) * b.rate
        return stacked
