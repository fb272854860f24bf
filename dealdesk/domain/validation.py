"""Boundary checks for inputs entering the core.

The math modules trust their inputs. These validators are the one place where
non-finite or nonsensical values are rejected, and they are called by the
edge facades (analyze_deal, find_best_structure) and the HTTP layer.
"""

import math
from typing import Iterable
from dealdesk.domain.exceptions import InvalidInputError, SearchSpaceError
from dealdesk.domain.models import DealerPolicy, DealRequest, PaymentFrequency


def _require_finite(name: str, value: float) -> None:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")


def _require_non_negative(name: str, value: float) -> None:
    _require_finite(name, value)
    if value < 0:
        raise InvalidInputError(f"{name} must not be negative, got {value!r}")


def validate_policy(policy: DealerPolicy) -> None:
    """Raises InvalidInputError for a policy the engine cannot evaluate against"""
    _require_non_negative("max_pti", policy.max_pti)
    _require_non_negative("max_ltv", policy.max_ltv)
    _require_non_negative("min_down_payment", policy.min_down_payment)
    _require_non_negative("default_apr", policy.default_apr)
    _require_finite("max_term_weeks", policy.max_term_weeks)
    if policy.max_term_weeks <= 0:
        raise InvalidInputError(f"max_term_weeks must be positive, got {policy.max_term_weeks!r}")


def validate_deal_request(request: DealRequest) -> None:
    """Raises InvalidInputError for a deal the amortization engine cannot price"""
    _require_non_negative("vehicle_cost", request.vehicle_cost)
    _require_non_negative("recon_cost", request.recon_cost)
    _require_non_negative("sale_price", request.sale_price)
    _require_non_negative("down_payment", request.down_payment)
    _require_non_negative("apr", request.apr)
    _require_non_negative("monthly_income", request.monthly_income)
    _require_non_negative("months_on_job", request.months_on_job)
    _require_non_negative("repo_count", request.repo_count)
    _require_finite("term_weeks", request.term_weeks)

    try:
        PaymentFrequency(request.payment_frequency)
    except ValueError as e:
        raise InvalidInputError(f"Unknown payment frequency: {request.payment_frequency!r}") from e

    financed = request.sale_price - request.down_payment
    if financed > 0 and request.term_weeks <= 0:
        raise InvalidInputError("term_weeks must be positive when an amount is financed")


def validate_search_space(
    sale_price_min: float,
    sale_price_max: float,
    sale_price_step: float,
    term_weeks_options: Iterable[int],
    max_candidates: int,
) -> int:
    """
    Check the affordability grid and return the number of sale price points.

    Raises:
        SearchSpaceError: On a non-positive step or term, or a grid larger than max_candidates
    """
    _require_finite("sale_price_min", sale_price_min)
    _require_finite("sale_price_max", sale_price_max)
    _require_finite("sale_price_step", sale_price_step)

    if sale_price_step <= 0:
        raise SearchSpaceError(f"sale_price_step must be positive, got {sale_price_step!r}")

    terms = list(term_weeks_options)
    for term in terms:
        _require_finite("term_weeks_options", term)
        if term <= 0:
            raise SearchSpaceError(f"term_weeks_options must all be positive, got {term!r}")

    if sale_price_max < sale_price_min or not terms:
        return 0

    # Small epsilon so an exact float multiple of the step includes the max
    price_points = int(math.floor((sale_price_max - sale_price_min) / sale_price_step + 1e-9)) + 1

    if price_points * len(terms) > max_candidates:
        raise SearchSpaceError(
            f"Search grid of {price_points} prices x {len(terms)} terms exceeds the limit of {max_candidates} candidates"
        )
    return price_points
