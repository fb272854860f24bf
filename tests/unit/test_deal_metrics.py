"""Unit tests for deal metrics"""

import pytest
from dataclasses import replace
from dealdesk.domain.deal_metrics import (
    break_even_period,
    calculate_deal,
    loan_to_value,
    payment_to_income,
    weekly_equivalent,
)
from dealdesk.domain.models import DealRequest, PaymentFrequency, ScheduleRow, WEEKS_PER_MONTH


def test_scenario_a_metrics(scenario_a: DealRequest):
    """Monthly deal: 23 payments, PTI from the single 4.345 constant"""
    result = calculate_deal(scenario_a)

    assert result.total_cost == 7000
    assert result.amount_financed == 10800
    assert result.periods == 23
    assert result.payment_per_period == pytest.approx(595.75, abs=0.05)
    assert result.weekly_payment == pytest.approx(result.payment_per_period / WEEKS_PER_MONTH)
    # weekly * 4.345 brings a monthly payment back to itself
    assert result.pti == pytest.approx(result.payment_per_period / 2400)
    assert result.ltv == pytest.approx(10800 / 7000)
    assert result.total_profit == pytest.approx(11800 - 7000 + result.total_interest)


def test_cash_deal_when_down_covers_price():
    """Down payment >= sale price: no payment, no schedule, break-even 0"""
    request = DealRequest(
        vehicle_cost=4000,
        recon_cost=500,
        sale_price=6000,
        down_payment=6000,
        apr=24.99,
        term_weeks=104,
        monthly_income=2500,
    )
    result = calculate_deal(request)

    assert result.payment_per_period == 0
    assert result.weekly_payment == 0
    assert result.schedule == ()
    assert result.break_even_period == 0
    assert result.total_profit == 6000 - 4500
    assert result.total_interest == 0


def test_overpaid_down_payment_is_still_cash_deal():
    request = DealRequest(vehicle_cost=4000, sale_price=6000, down_payment=6500, apr=20, term_weeks=52)
    result = calculate_deal(request)

    assert result.payment_per_period == 0
    assert result.amount_financed == -500
    assert result.total_profit == 2000


def test_weekly_equivalent_by_frequency():
    assert weekly_equivalent(434.5, PaymentFrequency.MONTHLY) == pytest.approx(100)
    assert weekly_equivalent(200, PaymentFrequency.BIWEEKLY) == 100
    assert weekly_equivalent(100, PaymentFrequency.WEEKLY) == 100


def test_payment_to_income_uses_one_constant():
    """Same weekly-equivalent payment gives the same PTI whatever the frequency"""
    assert payment_to_income(100, 2000) == pytest.approx(434.5 / 2000)
    assert payment_to_income(100, 0) is None
    assert payment_to_income(100, -10) is None


def test_pti_consistent_across_frequencies():
    base = DealRequest(
        vehicle_cost=5000, sale_price=9000, down_payment=1000, apr=0, term_weeks=104, monthly_income=3000
    )
    weekly = calculate_deal(base)
    biweekly = calculate_deal(replace(base, payment_frequency=PaymentFrequency.BIWEEKLY))

    # 0% APR, 104 weeks = 52 biweekly periods, so weekly-equivalents match
    assert weekly.weekly_payment == pytest.approx(biweekly.weekly_payment)
    assert weekly.pti == pytest.approx(biweekly.pti)


def test_loan_to_value_can_exceed_one():
    assert loan_to_value(10500, 6000) == pytest.approx(1.75)
    assert loan_to_value(1000, 0) is None


def test_break_even_first_period_covering_cost():
    """10,000 at 0% over 100 weeks pays $100 principal a week"""
    request = DealRequest(vehicle_cost=5000, sale_price=11000, down_payment=1000, apr=0, term_weeks=100)
    result = calculate_deal(request)

    assert result.break_even_period == 50


def test_break_even_defaults_to_last_period():
    """Cost basis above the amount financed is never recovered from principal alone"""
    rows = [ScheduleRow(period=p, interest=0, principal=100, balance=300 - 100 * p) for p in range(1, 4)]

    assert break_even_period(rows, 1000) == 3
    assert break_even_period([], 1000) == 0


def test_zero_income_leaves_pti_unset():
    request = DealRequest(vehicle_cost=5000, sale_price=9000, down_payment=1000, apr=20, term_weeks=52)

    assert calculate_deal(request).pti is None
