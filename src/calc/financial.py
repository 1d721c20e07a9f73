"""Loan, mortgage and investment formulas.

All rates are annual percentages (5 means 5%) compounded monthly, and all
terms are in years.
"""

import math
from dataclasses import dataclass, field
from typing import Any, List

from calc.errors import ValidationError


FINANCIAL_KINDS = ('loan', 'mortgage', 'investment')


@dataclass
class AmortizationRow:
    """One monthly payment of an amortization schedule."""
    payment_index: int
    payment_amount: float
    principal_portion: float
    interest_portion: float
    remaining_balance: float


@dataclass
class FinancialResult:
    """Result of a loan, mortgage or investment calculation."""
    kind: str
    principal: float
    annual_rate_percent: float
    years: float
    result: float
    schedule: List[AmortizationRow] = field(default_factory=list)

    @property
    def total_paid(self) -> float:
        """Sum of all scheduled payments (loan/mortgage only)."""
        return sum(row.payment_amount for row in self.schedule)

    @property
    def total_interest(self) -> float:
        """Interest paid over the schedule, or growth for an investment."""
        if self.kind == 'investment':
            return self.result - self.principal
        return sum(row.interest_portion for row in self.schedule)


def _positive(name: str, value: Any) -> float:
    """Coerce ``value`` to a positive finite float.

    Raises:
        ValidationError: If the value is non-numeric, non-finite or <= 0
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number: {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number")
    if number <= 0:
        raise ValidationError(f"{name} must be positive")
    return number


def _monthly_terms(annual_rate_percent: float, years: float) -> tuple:
    return annual_rate_percent / 12 / 100, years * 12


def monthly_payment(principal: Any, annual_rate_percent: Any, years: Any) -> float:
    """Equal monthly installment for an amortizing loan.

    ``payment = P * r * (1 + r)^n / ((1 + r)^n - 1)`` with ``r`` the monthly
    rate and ``n`` the number of monthly payments.

    Args:
        principal: Amount borrowed
        annual_rate_percent: Annual interest rate in percent
        years: Loan term in years

    Returns:
        The monthly payment
    """
    principal = _positive("Principal", principal)
    rate = _positive("Interest rate", annual_rate_percent)
    term = _positive("Term", years)
    r, n = _monthly_terms(rate, term)
    growth = math.pow(1 + r, n)
    return principal * r * growth / (growth - 1)


def future_value(principal: Any, annual_rate_percent: Any, years: Any) -> float:
    """Compound growth of a single deposit: ``P * (1 + r)^n``."""
    principal = _positive("Principal", principal)
    rate = _positive("Interest rate", annual_rate_percent)
    term = _positive("Term", years)
    r, n = _monthly_terms(rate, term)
    return principal * math.pow(1 + r, n)


def build_schedule(principal: Any, annual_rate_percent: Any, years: Any,
                   payment: Any) -> List[AmortizationRow]:
    """Month-by-month amortization schedule.

    Each month charges ``balance * r`` interest and applies the rest of the
    payment to principal. The balance is clamped to zero and the schedule
    stops as soon as it reaches zero, or after ``years * 12`` rows.

    Args:
        principal: Amount borrowed
        annual_rate_percent: Annual interest rate in percent
        years: Loan term in years
        payment: Monthly payment, normally ``monthly_payment(...)``

    Returns:
        List of AmortizationRow, at most ``floor(years * 12)`` long
    """
    balance = _positive("Principal", principal)
    rate = _positive("Interest rate", annual_rate_percent)
    term = _positive("Term", years)
    payment = _positive("Payment", payment)
    r, n = _monthly_terms(rate, term)

    schedule: List[AmortizationRow] = []
    for index in range(1, math.floor(n) + 1):
        interest = balance * r
        principal_part = payment - interest
        balance -= principal_part
        schedule.append(AmortizationRow(
            payment_index=index,
            payment_amount=payment,
            principal_portion=principal_part,
            interest_portion=interest,
            remaining_balance=max(0.0, balance),
        ))
        if balance <= 0:
            break
    return schedule


def calculate_financial(kind: str, principal: Any, annual_rate_percent: Any,
                        years: Any) -> FinancialResult:
    """Run a loan, mortgage or investment calculation.

    Loans and mortgages return the monthly payment plus the schedule;
    investments return the future value.
    """
    kind = (kind or '').lower()
    if kind not in FINANCIAL_KINDS:
        raise ValidationError(f"Calculation type must be one of {', '.join(FINANCIAL_KINDS)}")

    if kind == 'investment':
        value = future_value(principal, annual_rate_percent, years)
        return FinancialResult(kind, float(principal), float(annual_rate_percent), float(years), value)

    payment = monthly_payment(principal, annual_rate_percent, years)
    schedule = build_schedule(principal, annual_rate_percent, years, payment)
    return FinancialResult(kind, float(principal), float(annual_rate_percent), float(years),
                           payment, schedule)
