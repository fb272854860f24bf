"""Unit tests for the affordability optimizer"""

import pytest
from dataclasses import replace
from dealdesk.domain.affordability import (
    effective_policy,
    find_best_structure,
    iter_candidates,
    recommend_down_payment,
)
from dealdesk.domain.deal_metrics import calculate_deal
from dealdesk.domain.exceptions import InvalidInputError, SearchSpaceError
from dealdesk.domain.models import AffordabilityRequest, DealRequest, PaymentFrequency, Verdict
from dealdesk.domain.underwriting import evaluate_deal


@pytest.fixture
def search() -> AffordabilityRequest:
    """$3,000/month borrower with $1,000 down shopping a $5,500 cost-basis car"""
    return AffordabilityRequest(
        monthly_income=3000,
        available_down=1000,
        vehicle_cost=5000,
        recon_cost=500,
        apr=24.99,
        term_weeks_options=(52, 78, 104),
        sale_price_min=6000,
        sale_price_max=12000,
        sale_price_step=500,
        payment_frequency=PaymentFrequency.WEEKLY,
    )


def test_iter_candidates_covers_full_grid(search):
    candidates = list(iter_candidates(search, 13))

    assert len(candidates) == 13 * 3
    assert candidates[0] == (6000, 52)
    assert candidates[-1] == (12000, 104)


def test_highest_price_then_shortest_term(search, policy):
    """
    11,500 and up are declined on LTV (> 190%); at 11,000 the 52-week
    payment breaks PTI, so 78 weeks beats 104 on the tie-break.
    """
    outcome = find_best_structure(search, policy)
    best = outcome.best_structure

    assert best.sale_price == 11000
    assert best.term_weeks == 78
    assert best.pti <= policy.max_pti
    assert best.underwriting.verdict == Verdict.COUNTER  # LTV ~182%
    assert outcome.candidates_evaluated == 39
    assert outcome.rejected["decline"] > 0
    assert outcome.rejected["pti"] > 0


def test_scenario_d_single_price_matches_direct_evaluation(search, policy):
    """min == max == step evaluates only the supplied terms at that one price"""
    single = replace(search, sale_price_min=9000, sale_price_max=9000, sale_price_step=9000)
    outcome = find_best_structure(single, policy)
    best = outcome.best_structure

    assert outcome.candidates_evaluated == len(search.term_weeks_options)

    deal = DealRequest(
        vehicle_cost=5000,
        recon_cost=500,
        sale_price=9000,
        down_payment=1000,
        apr=24.99,
        term_weeks=best.term_weeks,
        payment_frequency=PaymentFrequency.WEEKLY,
        monthly_income=3000,
        months_on_job=12,
        repo_count=0,
    )
    result = calculate_deal(deal)
    decision = evaluate_deal(deal, result, policy)

    assert best.sale_price == 9000
    assert best.weekly_payment == result.weekly_payment
    assert best.pti == result.pti
    assert best.ltv == result.ltv
    assert best.total_profit == result.total_profit
    assert best.underwriting == decision


def test_widening_price_range_never_lowers_best(search, policy):
    best_prices = []
    for price_max in (6000, 7500, 9000, 10500, 12000):
        outcome = find_best_structure(replace(search, sale_price_max=price_max), policy)
        best_prices.append(outcome.best_structure.sale_price if outcome.best_structure else 0)

    assert best_prices == sorted(best_prices)
    assert best_prices[-1] == 11000


def test_terms_over_policy_max_are_skipped(search, policy):
    tight = replace(policy, max_term_weeks=100)
    outcome = find_best_structure(replace(search, term_weeks_options=(78, 130)), tight)

    assert outcome.best_structure.term_weeks == 78
    assert outcome.rejected["term"] == 13


def test_no_feasible_structure_returns_empty_result(search, policy):
    outcome = find_best_structure(replace(search, monthly_income=500, target_weekly_payment=100), policy)

    assert outcome.best_structure is None
    assert outcome.recommended_down_payment is None
    assert outcome.candidates_evaluated == 39


def test_repo_declines_are_filtered(search, policy):
    outcome = find_best_structure(replace(search, repo_count=2), policy)

    assert outcome.best_structure is None
    assert outcome.rejected["decline"] > 0


def test_pti_override_only_tightens(search, policy):
    tighter = find_best_structure(replace(search, max_pti_override=0.20), policy)
    looser = find_best_structure(replace(search, max_pti_override=0.30), policy)

    assert tighter.best_structure.term_weeks == 104
    assert tighter.best_structure.pti <= 0.20
    assert looser.best_structure.term_weeks == 78
    assert effective_policy(replace(search, max_pti_override=0.30), policy) is policy


def test_empty_range_evaluates_nothing(search, policy):
    outcome = find_best_structure(replace(search, sale_price_min=9000, sale_price_max=8000), policy)

    assert outcome.best_structure is None
    assert outcome.candidates_evaluated == 0


@pytest.mark.parametrize("step", [0, -500])
def test_non_positive_step_is_rejected(search, policy, step):
    with pytest.raises(SearchSpaceError):
        find_best_structure(replace(search, sale_price_step=step), policy)


def test_oversized_grid_is_rejected(search, policy):
    with pytest.raises(SearchSpaceError):
        find_best_structure(replace(search, sale_price_step=1), policy)

    with pytest.raises(SearchSpaceError):
        find_best_structure(search, policy, max_candidates=38)


def test_search_space_error_is_invalid_input(search, policy):
    with pytest.raises(InvalidInputError):
        find_best_structure(replace(search, sale_price_max=float("inf")), policy)


def test_recommended_down_for_best_structure(search, policy):
    outcome = find_best_structure(replace(search, target_weekly_payment=120), policy)
    best = outcome.best_structure

    expected = recommend_down_payment(
        sale_price=best.sale_price,
        target_weekly_payment=120,
        apr=24.99,
        term_weeks=best.term_weeks,
        payment_frequency=PaymentFrequency.WEEKLY,
        min_down_payment=policy.min_down_payment,
    )
    assert outcome.recommended_down_payment == expected
    assert expected % 50 == 0
    assert expected > search.available_down


def test_recommend_down_payment_rounds_up_to_fifty():
    """0% APR: 52 x $99 = $5,148 financeable, so $4,852 down -> $4,900"""
    assert recommend_down_payment(10000, 99, 0, 52, PaymentFrequency.WEEKLY, 500) == 4900
    assert recommend_down_payment(10000, 100, 0, 52, PaymentFrequency.WEEKLY, 500) == 4800


def test_recommend_down_payment_monthly_target():
    """$100/week target is $434.50/month over 23 months = $9,993.50 financeable"""
    assert recommend_down_payment(12000, 100, 0, 100, PaymentFrequency.MONTHLY, 500) == 2050


def test_recommend_down_payment_floors_at_policy_minimum():
    assert recommend_down_payment(11000, 1000, 24.99, 78, PaymentFrequency.WEEKLY, 1000) == 1000


def test_recommend_down_payment_none_cases():
    assert recommend_down_payment(11000, 0, 24.99, 78, PaymentFrequency.WEEKLY, 1000) is None
    assert recommend_down_payment(11000, None, 24.99, 78, PaymentFrequency.WEEKLY, 1000) is None
    assert recommend_down_payment(11000, -5, 24.99, 78, PaymentFrequency.WEEKLY, 1000) is None
    # Target covers the whole price and there is no policy minimum
    assert recommend_down_payment(11000, 1000, 24.99, 78, PaymentFrequency.WEEKLY, 0) is None


def test_rejects_non_finite_borrower_figures(search, policy):
    with pytest.raises(InvalidInputError):
        find_best_structure(replace(search, monthly_income=float("nan")), policy)


@pytest.mark.parametrize("terms", [(52, 0), (0, 52)])
def test_zero_term_is_rejected_wherever_it_appears(policy, terms):
    """A financed candidate can never come back with a zero-week term"""
    wealthy = AffordabilityRequest(
        monthly_income=100_000,
        available_down=1000,
        vehicle_cost=1000,
        apr=24.99,
        term_weeks_options=terms,
        sale_price_min=1000,
        sale_price_max=1100,
        sale_price_step=100,
    )

    with pytest.raises(SearchSpaceError):
        find_best_structure(wealthy, policy)


def test_rejection_tally_is_read_only(search, policy):
    outcome = find_best_structure(search, policy)

    with pytest.raises(TypeError):
        outcome.rejected["pti"] = 0
