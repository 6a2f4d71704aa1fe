"""Fixed-payment loan amortization.

Rates are annual percentages (6.5 means 6.5%) and are converted to monthly
decimal rates; schedules always have one entry per month.
"""

from typing import List

from calc.numeric import percent_to_fraction, safe_non_negative
from model.AmortizationData import AmortizationResult, AmortizationScheduleEntry, ExtraPaymentSavings

PERIODS_PER_YEAR = 12

# A remaining balance below one cent is paid off in the current period
PAYOFF_TOLERANCE = 0.01

# Safety cap on schedule length beyond the nominal term
EXTRA_TERM_PERIODS = 120


def periodic_rate(annual_rate: float) -> float:
    """Monthly decimal rate for an annual percentage; negative rates count as 0."""
    return percent_to_fraction(annual_rate, minimum=0.0) / PERIODS_PER_YEAR


def total_periods(term_years: float) -> int:
    """Number of monthly periods in a term (at least one)."""
    return max(1, int(round(safe_non_negative(term_years) * PERIODS_PER_YEAR)))


def monthly_payment(principal: float, annual_rate: float, term_years: float) -> float:
    """Standard fixed payment that retires principal over the term.

    Args:
        principal: Amount borrowed
        annual_rate: Annual interest rate as a percentage
        term_years: Loan term in years

    Returns:
        The monthly principal + interest payment
    """
    principal = safe_non_negative(principal)
    periods = total_periods(term_years)
    rate = periodic_rate(annual_rate)
    if rate == 0:
        return principal / periods
    return principal * rate / (1 - (1 + rate) ** -periods)


def build_schedule(principal: float, annual_rate: float, term_years: float,
                   extra_payment: float = 0.0, extra_payment_start_period: int = 0) -> AmortizationResult:
    """Generate the full payoff schedule, optionally with extra principal payments.

    Each period charges interest on the remaining balance, applies the rest of
    the fixed payment (plus the extra payment once the period's zero-based
    index reaches extra_payment_start_period) to principal, and stops as soon
    as the balance is retired.

    Args:
        principal: Amount borrowed
        annual_rate: Annual interest rate as a percentage
        term_years: Loan term in years
        extra_payment: Additional principal paid each period
        extra_payment_start_period: Zero-based period index where extra payments
            begin; equivalently the number of periods already paid

    Returns:
        AmortizationResult with one entry per period actually paid
    """
    principal = safe_non_negative(principal)
    extra = safe_non_negative(extra_payment)
    start = int(safe_non_negative(extra_payment_start_period))
    rate = periodic_rate(annual_rate)
    payment = monthly_payment(principal, annual_rate, term_years)
    max_periods = total_periods(term_years) + EXTRA_TERM_PERIODS

    schedule: List[AmortizationScheduleEntry] = []
    balance = principal
    cumulative_interest = 0.0
    cumulative_paid = 0.0
    period = 0

    while balance > 0 and period < max_periods:
        interest = balance * rate
        principal_portion = payment - interest
        if period >= start:
            principal_portion += extra
        period += 1

        # Final period: pay exactly what is left
        if principal_portion >= balance - PAYOFF_TOLERANCE:
            principal_portion = balance

        balance -= principal_portion
        cumulative_interest += interest
        cumulative_paid += principal_portion + interest

        schedule.append(AmortizationScheduleEntry(
            period=period,
            payment=principal_portion + interest,
            principal_paid=principal_portion,
            interest_paid=interest,
            remaining_balance=max(0.0, balance),
            cumulative_interest=cumulative_interest,
            cumulative_paid=cumulative_paid
        ))

    return AmortizationResult(
        principal=principal,
        periodic_payment=payment,
        total_paid=cumulative_paid,
        total_interest=cumulative_interest,
        payoff_period=period,
        schedule=schedule
    )


def balance_after(result: AmortizationResult, periods: int) -> float:
    """Remaining balance once the given number of payments has been made."""
    periods = int(safe_non_negative(periods))
    if periods == 0 or not result.schedule:
        return result.principal if periods == 0 else 0.0
    if periods >= len(result.schedule):
        return result.schedule[-1].remaining_balance
    return result.schedule[periods - 1].remaining_balance


def extra_payment_savings(baseline: AmortizationResult, accelerated: AmortizationResult) -> ExtraPaymentSavings:
    """Interest and time saved by an accelerated schedule relative to the baseline."""
    return ExtraPaymentSavings(
        interest_saved=baseline.total_interest - accelerated.total_interest,
        periods_saved=baseline.payoff_period - accelerated.payoff_period,
        total_paid_saved=baseline.total_paid - accelerated.total_paid
    )
