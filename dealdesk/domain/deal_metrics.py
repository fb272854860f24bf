"""Deal metrics - cost basis, profit, break-even, PTI and LTV for a proposed structure"""

from typing import Optional, Sequence
from dealdesk.domain.amortization import amortize
from dealdesk.domain.models import (
    DealRequest,
    DealResult,
    PaymentFrequency,
    ScheduleRow,
    WEEKS_PER_MONTH,
)


def weekly_equivalent(payment: float, frequency: PaymentFrequency) -> float:
    """Express a periodic payment per week (monthly / 4.345, biweekly / 2)"""
    return payment / PaymentFrequency(frequency).weeks_per_period


def monthly_equivalent(weekly_payment: float) -> float:
    return weekly_payment * WEEKS_PER_MONTH


def payment_to_income(weekly_payment: float, monthly_income: float) -> Optional[float]:
    """Monthly-equivalent payment over gross monthly income; None without income"""
    if monthly_income <= 0:
        return None
    return monthly_equivalent(weekly_payment) / monthly_income


def loan_to_value(amount_financed: float, total_cost: float) -> Optional[float]:
    """Amount financed over dealer cost basis; may exceed 1.0"""
    if total_cost <= 0:
        return None
    return amount_financed / total_cost


def break_even_period(schedule: Sequence[ScheduleRow], total_cost: float) -> int:
    """
    First period by which cumulative principal collected covers the cost basis.

    Falls back to the last period when never reached, and 0 for an empty
    schedule (cash deal).
    """
    if not schedule:
        return 0

    collected = 0.0
    for row in schedule:
        collected += row.principal
        if collected >= total_cost:
            return row.period
    return schedule[-1].period


def calculate_deal(request: DealRequest) -> DealResult:
    """
    Main entry point: amortize the deal and derive its metrics.

    totalProfit = (salePrice - totalCost) + totalInterest
    """
    total_cost = request.vehicle_cost + request.recon_cost
    amount_financed = request.sale_price - request.down_payment

    loan = amortize(amount_financed, request.apr, request.term_weeks, request.payment_frequency)
    weekly_payment = weekly_equivalent(loan.payment, request.payment_frequency)

    return DealResult(
        total_cost=total_cost,
        amount_financed=amount_financed,
        payment_per_period=loan.payment,
        weekly_payment=weekly_payment,
        total_interest=loan.total_interest,
        total_profit=(request.sale_price - total_cost) + loan.total_interest,
        break_even_period=break_even_period(loan.schedule, total_cost),
        periods=loan.periods,
        rate_per_period=loan.rate_per_period,
        pti=payment_to_income(weekly_payment, request.monthly_income),
        ltv=loan_to_value(amount_financed, total_cost),
        schedule=loan.schedule,
    )
