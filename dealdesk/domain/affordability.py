"""Affordability optimizer - grid search for the richest structure a borrower can carry"""

from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Iterator, Optional, Tuple
from dealdesk.domain.amortization import max_principal_for_payment, period_count, rate_per_period
from dealdesk.domain.deal_metrics import calculate_deal
from dealdesk.domain.models import (
    AffordabilityRequest,
    AffordabilityResult,
    BestStructure,
    DealerPolicy,
    DealRequest,
    PaymentFrequency,
    Verdict,
)
from dealdesk.domain.underwriting import evaluate_deal
from dealdesk.domain.validation import validate_deal_request, validate_policy, validate_search_space
from dealdesk.utils.money import round_up_to_increment

DEFAULT_MAX_CANDIDATES = 10_000
DOWN_PAYMENT_INCREMENT = 50.0


def effective_policy(request: AffordabilityRequest, policy: DealerPolicy) -> DealerPolicy:
    """Apply the optional PTI override, which may only tighten the dealer limit"""
    override = request.max_pti_override
    if override is not None and 0 < override < policy.max_pti:
        return replace(policy, max_pti=override)
    return policy


def iter_candidates(request: AffordabilityRequest, price_points: int) -> Iterator[Tuple[float, int]]:
    """Yield every (sale_price, term_weeks) pair of the grid, prices ascending"""
    for i in range(price_points):
        sale_price = round(request.sale_price_min + i * request.sale_price_step, 2)
        for term_weeks in request.term_weeks_options:
            yield sale_price, term_weeks


def candidate_deal(request: AffordabilityRequest, sale_price: float, term_weeks: int) -> DealRequest:
    """Deal request the optimizer prices for one grid point"""
    return DealRequest(
        vehicle_cost=request.vehicle_cost,
        recon_cost=request.recon_cost,
        sale_price=sale_price,
        down_payment=request.available_down,
        apr=request.apr,
        term_weeks=term_weeks,
        payment_frequency=request.payment_frequency,
        monthly_income=request.monthly_income,
        months_on_job=request.months_on_job,
        repo_count=request.repo_count,
    )


def evaluate_candidate(
    request: AffordabilityRequest,
    policy: DealerPolicy,
    sale_price: float,
    term_weeks: int,
) -> Tuple[Optional[BestStructure], Optional[str]]:
    """
    Price and underwrite one grid point.

    Returns (structure, None) for a feasible candidate or (None, rejection)
    where rejection is one of: term, payment, pti, decline.
    """
    if term_weeks > policy.max_term_weeks:
        return None, "term"

    deal = candidate_deal(request, sale_price, term_weeks)
    result = calculate_deal(deal)

    if result.weekly_payment <= 0:
        return None, "payment"

    if result.pti is None or result.pti <= 0 or result.pti > policy.max_pti:
        return None, "pti"

    underwriting = evaluate_deal(deal, result, policy)
    if underwriting.verdict == Verdict.DECLINE:
        return None, "decline"

    structure = BestStructure(
        sale_price=sale_price,
        term_weeks=term_weeks,
        weekly_payment=result.weekly_payment,
        pti=result.pti,
        ltv=result.ltv,
        total_profit=result.total_profit,
        underwriting=underwriting,
    )
    return structure, None


def _rank(structure: BestStructure) -> Tuple[float, int]:
    # Highest sale price wins, then the shortest term
    return structure.sale_price, -structure.term_weeks


def recommend_down_payment(
    sale_price: float,
    target_weekly_payment: Optional[float],
    apr: float,
    term_weeks: int,
    payment_frequency: PaymentFrequency,
    min_down_payment: float,
) -> Optional[float]:
    """
    Back-solve the down payment that brings the payment to a weekly target.

    Inverts the annuity formula for the largest financeable amount, floors the
    result at the policy minimum and rounds up to the next $50.
    Returns None for a non-positive target or recommendation.
    """
    if not target_weekly_payment or target_weekly_payment <= 0:
        return None

    frequency = PaymentFrequency(payment_frequency)
    periods = period_count(term_weeks, frequency)
    rate = rate_per_period(apr, frequency)
    periodic_target = target_weekly_payment * frequency.weeks_per_period

    max_financed = max_principal_for_payment(periodic_target, rate, periods)
    recommended = max(sale_price - max_financed, min_down_payment)

    if recommended <= 0:
        return None

    return round_up_to_increment(recommended, DOWN_PAYMENT_INCREMENT)


def find_best_structure(
    request: AffordabilityRequest,
    policy: DealerPolicy,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
) -> AffordabilityResult:
    """
    Main entry point: enumerate the sale price x term grid and keep the best
    feasible structure.

    A candidate is dropped when its term exceeds policy, its payment is not
    positive, its PTI is missing, non-positive or over the limit, or
    underwriting declines it. An empty search returns best_structure=None.

    Raises:
        SearchSpaceError: On a non-positive step or term, or a grid over max_candidates
    """
    validate_policy(policy)
    price_points = validate_search_space(
        request.sale_price_min,
        request.sale_price_max,
        request.sale_price_step,
        request.term_weeks_options,
        max_candidates,
    )
    rules = effective_policy(request, policy)

    # Borrower and vehicle figures are shared by every candidate
    for term_weeks in request.term_weeks_options[:1]:
        validate_deal_request(candidate_deal(request, request.sale_price_min, term_weeks))

    best: Optional[BestStructure] = None
    evaluated = 0
    rejected: Dict[str, int] = {}

    for sale_price, term_weeks in iter_candidates(request, price_points):
        evaluated += 1
        structure, rejection = evaluate_candidate(request, rules, sale_price, term_weeks)
        if structure is None:
            rejected[rejection] = rejected.get(rejection, 0) + 1
            continue
        if best is None or _rank(structure) > _rank(best):
            best = structure

    recommended_down = None
    if best is not None:
        recommended_down = recommend_down_payment(
            sale_price=best.sale_price,
            target_weekly_payment=request.target_weekly_payment,
            apr=request.apr,
            term_weeks=best.term_weeks,
            payment_frequency=request.payment_frequency,
            min_down_payment=policy.min_down_payment,
        )

    return AffordabilityResult(
        best_structure=best,
        recommended_down_payment=recommended_down,
        candidates_evaluated=evaluated,
        rejected=MappingProxyType(rejected),
    )
