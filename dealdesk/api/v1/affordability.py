"""POST /v1/affordability - search sale price x term for the best affordable structure"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from dealdesk.api.v1.schemas import (
    AffordabilityRequestSchema,
    AffordabilityResponse,
    BestStructureSchema,
    underwriting_schema,
)
from dealdesk.api.dependencies import get_default_policy, get_request_id, policy_schema, resolve_policy
from dealdesk.config import settings
from dealdesk.domain.affordability import find_best_structure
from dealdesk.domain.exceptions import InvalidInputError
from dealdesk.domain.models import AffordabilityRequest, DealerPolicy, PaymentFrequency
from dealdesk.infrastructure.observability.logging import log_affordability
from dealdesk.infrastructure.observability.metrics import invalid_input_counter, record_affordability

router = APIRouter()


@router.post("/affordability", response_model=AffordabilityResponse)
def affordability(
    request_body: AffordabilityRequestSchema,
    request: Request,
    default_policy: DealerPolicy = Depends(get_default_policy),
):
    """
    Find the highest sale price (then shortest term) the borrower can carry
    within policy, plus an optional recommended down payment.

    An empty search is a 200 with best_structure = null.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        policy = resolve_policy(request_body.policy, default_policy)
        apr = request_body.apr if request_body.apr is not None else policy.default_apr

        search = AffordabilityRequest(
            monthly_income=request_body.monthly_income,
            available_down=request_body.available_down,
            vehicle_cost=request_body.vehicle_cost,
            recon_cost=request_body.recon_cost,
            apr=apr,
            term_weeks_options=tuple(t for t in request_body.term_weeks_options if t > 0),
            sale_price_min=request_body.sale_price_min,
            sale_price_max=request_body.sale_price_max,
            sale_price_step=request_body.sale_price_step,
            payment_frequency=PaymentFrequency(request_body.payment_frequency),
            max_pti_override=request_body.max_pti_override,
            months_on_job=request_body.months_on_job,
            repo_count=request_body.repo_count,
            target_weekly_payment=request_body.target_weekly_payment,
        )
        outcome = find_best_structure(search, policy, max_candidates=settings.affordability_max_candidates)

    except InvalidInputError as e:
        invalid_input_counter.labels(source="core").inc()
        logging.warning(f"Invalid affordability input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    best = outcome.best_structure
    best_schema = None
    if best is not None:
        best_schema = BestStructureSchema(
            sale_price=best.sale_price,
            term_weeks=best.term_weeks,
            weekly_payment=best.weekly_payment,
            pti=best.pti,
            ltv=best.ltv,
            total_profit=best.total_profit,
            underwriting=underwriting_schema(best.underwriting),
        )

    duration_ms = (time.time() - start_time) * 1000
    record_affordability(best is not None, outcome.candidates_evaluated)
    log_affordability(
        request_id,
        best is not None,
        best.sale_price if best else None,
        best.term_weeks if best else None,
        outcome.candidates_evaluated,
        duration_ms,
    )

    return AffordabilityResponse(
        best_structure=best_schema,
        recommended_down_payment=outcome.recommended_down_payment,
        candidates_evaluated=outcome.candidates_evaluated,
        rejected=dict(outcome.rejected),
        apr=apr,
        policy=policy_schema(policy),
    )
