"""Level-payment amortization for weekly, biweekly and monthly installment loans"""

import math
from typing import List
from dealdesk.domain.models import Amortization, PaymentFrequency, ScheduleRow, WEEKS_PER_MONTH


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def period_count(term_weeks: float, frequency: PaymentFrequency) -> int:
    """
    Convert a term in weeks to a number of payment periods.

    - monthly:  round(term_weeks / 4.345), halves up
    - biweekly: round(term_weeks / 2), halves up
    - weekly:   term_weeks as-is

    Never less than 1.
    """
    if frequency == PaymentFrequency.MONTHLY:
        periods = _round_half_up(term_weeks / WEEKS_PER_MONTH)
    elif frequency == PaymentFrequency.BIWEEKLY:
        periods = _round_half_up(term_weeks / 2)
    else:
        periods = int(term_weeks)
    return max(1, periods)


def weeks_from_months(term_months: float) -> int:
    """Quote a term given in months in weeks (23 months -> 100 weeks)"""
    return _round_half_up(term_months * WEEKS_PER_MONTH)


def rate_per_period(apr: float, frequency: PaymentFrequency) -> float:
    """Periodic rate from an annual percentage rate (24.99 -> 0.2499 / periods per year)"""
    return apr / 100 / frequency.periods_per_year


def level_payment(principal: float, rate: float, periods: int) -> float:
    """Annuity payment that retires `principal` in `periods` equal installments"""
    if rate == 0:
        return principal / periods
    return principal * rate / (1 - (1 + rate) ** -periods)


def max_principal_for_payment(payment: float, rate: float, periods: int) -> float:
    """Inverse of level_payment: largest principal a given payment can carry"""
    if rate == 0:
        return payment * periods
    return payment * (1 - (1 + rate) ** -periods) / rate


def build_schedule(principal: float, rate: float, periods: int, payment: float) -> List[ScheduleRow]:
    """
    Walk the loan period by period.

    Rows are computed at full float precision with no per-row rounding and no
    terminal true-up; only the balance is floored at zero.
    """
    balance = principal
    rows = []
    for period in range(1, periods + 1):
        interest = balance * rate
        principal_paid = payment - interest
        balance = max(0.0, balance - principal_paid)
        rows.append(ScheduleRow(period=period, interest=interest, principal=principal_paid, balance=balance))
    return rows


def amortize(
    principal: float,
    apr: float,
    term_weeks: float,
    frequency: PaymentFrequency = PaymentFrequency.WEEKLY,
) -> Amortization:
    """
    Compute the level payment and full schedule for a loan.

    Inputs are trusted: validation lives at the edge of the core
    (see dealdesk.domain.validation). A non-positive principal is a cash
    deal and yields a zero payment with an empty schedule.

    Example:
        $10,000 at 0% over 100 weekly periods -> payment $100.00
    """
    frequency = PaymentFrequency(frequency)
    periods = period_count(term_weeks, frequency)
    rate = rate_per_period(apr, frequency)

    if principal <= 0:
        return Amortization(principal=principal, periods=0, rate_per_period=rate, payment=0.0, total_interest=0.0)

    payment = level_payment(principal, rate, periods)
    schedule = build_schedule(principal, rate, periods, payment)

    return Amortization(
        principal=principal,
        periods=periods,
        rate_per_period=rate,
        payment=payment,
        total_interest=sum(row.interest for row in schedule),
        schedule=tuple(schedule),
    )
