"""Underwriting engine - deterministic policy rules producing APPROVE / COUNTER / DECLINE"""

from typing import List, Optional
from dealdesk.domain.models import (
    Adjustments,
    DealerPolicy,
    DealRequest,
    DealResult,
    UnderwritingResult,
    Verdict,
)
from dealdesk.utils.money import floor_to_cents, round_to_increment

# Ratio points above the policy limit that turn a counter into a decline
PTI_DECLINE_MARGIN = 0.05
LTV_DECLINE_MARGIN = 0.15

PROFIT_FLOOR = 1500.0
SHORT_TENURE_MONTHS = 3
MAX_REPOS = 2
DOWN_PAYMENT_STEP = 50.0

APPROVAL_REASON = "Deal meets policy for PTI, LTV, down payment, term, profit, job time, and repo history."


def _pct(ratio: float) -> str:
    return f"{ratio * 100:.1f}%"


def evaluate_deal(request: DealRequest, result: DealResult, policy: DealerPolicy) -> UnderwritingResult:
    """
    Evaluate a computed deal against dealer policy.

    Rules run in a fixed order and can only escalate the verdict
    (APPROVE -> COUNTER -> DECLINE):

    1. PTI over max -> COUNTER; more than 5 points over -> DECLINE
    2. LTV over max -> COUNTER; more than 15 points over -> DECLINE
    3. Down payment under policy minimum -> COUNTER
    4. Total profit under $1,500 -> COUNTER
    5. Term over policy max -> COUNTER
    6. Under 3 months on the job -> COUNTER
    7. Two or more repos -> DECLINE

    Policy violations are returned as verdicts, never raised.
    """
    verdict = Verdict.APPROVE
    reasons: List[str] = []

    # 1. Payment to income
    if result.pti is None:
        reasons.append("Income not provided. PTI cannot be calculated.")
    elif result.pti > policy.max_pti + PTI_DECLINE_MARGIN:
        verdict = verdict.escalate(Verdict.DECLINE)
        reasons.append(
            f"Payment to income is {_pct(result.pti)}, more than five points above max {_pct(policy.max_pti)}."
        )
    elif result.pti > policy.max_pti:
        verdict = verdict.escalate(Verdict.COUNTER)
        reasons.append(f"Payment to income is {_pct(result.pti)}, above max {_pct(policy.max_pti)}.")

    # 2. Loan to value
    if result.ltv is not None:
        if result.ltv > policy.max_ltv + LTV_DECLINE_MARGIN:
            verdict = verdict.escalate(Verdict.DECLINE)
            reasons.append(
                f"LTV is {_pct(result.ltv)}, more than fifteen points over max {_pct(policy.max_ltv)}."
            )
        elif result.ltv > policy.max_ltv:
            verdict = verdict.escalate(Verdict.COUNTER)
            reasons.append(
                f"LTV is {_pct(result.ltv)}, above max {_pct(policy.max_ltv)}. "
                "More down or lower sale price is needed."
            )

    # 3. Down payment
    if request.down_payment < policy.min_down_payment:
        verdict = verdict.escalate(Verdict.COUNTER)
        reasons.append(
            f"Down payment is {request.down_payment:.2f}, minimum required is {policy.min_down_payment:.2f}."
        )

    # 4. Profitability
    if result.total_profit < PROFIT_FLOOR:
        verdict = verdict.escalate(Verdict.COUNTER)
        reasons.append(f"Total profit is {result.total_profit:.2f}, below the floor of {PROFIT_FLOOR:.0f}.")

    # 5. Term
    if request.term_weeks > policy.max_term_weeks:
        verdict = verdict.escalate(Verdict.COUNTER)
        reasons.append(f"Term is {request.term_weeks} weeks, max term is {policy.max_term_weeks} weeks.")

    # 6. Job time
    if request.months_on_job < SHORT_TENURE_MONTHS:
        verdict = verdict.escalate(Verdict.COUNTER)
        reasons.append(
            f"Job time is {request.months_on_job:g} months, under the {SHORT_TENURE_MONTHS} month comfort window."
        )

    # 7. Repo history
    if request.repo_count >= MAX_REPOS:
        verdict = verdict.escalate(Verdict.DECLINE)
        reasons.append(f"Customer has {request.repo_count} prior repos which exceeds risk tolerance.")

    if verdict == Verdict.APPROVE:
        return UnderwritingResult(verdict=verdict, reasons=(APPROVAL_REASON,))

    return UnderwritingResult(
        verdict=verdict,
        reasons=tuple(reasons),
        adjustments=suggest_adjustments(request, result, policy, verdict),
    )


def pti_down_payment(request: DealRequest, result: DealResult, policy: DealerPolicy) -> Optional[float]:
    """
    Down payment that shrinks the financed amount until PTI meets the limit.

    The financed amount is scaled by max_pti / pti, then the down payment is
    lifted to at least the policy minimum and at least $50 over the current
    down, capped at the sale price and rounded to the nearest $50.
    Returns None when PTI is within policy or no larger down would result.
    """
    if result.pti is None or result.pti <= policy.max_pti or result.amount_financed <= 0:
        return None

    factor = policy.max_pti / result.pti
    if not 0 < factor < 1:
        return None

    target_financed = result.amount_financed * factor
    suggested = max(
        request.sale_price - target_financed,
        policy.min_down_payment,
        request.down_payment + DOWN_PAYMENT_STEP,
    )
    suggested = min(suggested, request.sale_price)

    rounded = round_to_increment(suggested, DOWN_PAYMENT_STEP)
    return rounded if rounded > request.down_payment else None


def suggest_adjustments(
    request: DealRequest,
    result: DealResult,
    policy: DealerPolicy,
    verdict: Verdict = Verdict.COUNTER,
) -> Adjustments:
    """
    Single-axis counter suggestions, each computed independently.

    The down payment axis takes the larger of the policy minimum and, short of
    a decline, the PTI-driven down payment. These are not a jointly re-solved
    structure: applying all of them at once is not guaranteed to pass a second
    evaluation.
    """
    new_down_payment = None
    new_term_weeks = None
    new_sale_price = None

    if request.down_payment < policy.min_down_payment:
        new_down_payment = policy.min_down_payment

    if verdict != Verdict.DECLINE:
        pti_down = pti_down_payment(request, result, policy)
        if pti_down is not None and (new_down_payment is None or pti_down > new_down_payment):
            new_down_payment = pti_down

    if request.term_weeks > policy.max_term_weeks:
        new_term_weeks = policy.max_term_weeks

    # Sale price at which LTV lands exactly on the limit with the current down
    if result.ltv is not None and result.ltv > policy.max_ltv:
        new_sale_price = floor_to_cents(request.down_payment + policy.max_ltv * result.total_cost)

    return Adjustments(
        new_down_payment=new_down_payment,
        new_term_weeks=new_term_weeks,
        new_sale_price=new_sale_price,
    )
