"""POST /v1/deals/analyze - price and underwrite a single deal"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from dealdesk.api.v1.schemas import (
    DealAnalyzeRequest,
    DealAnalyzeResponse,
    ScheduleRowSchema,
    underwriting_schema,
)
from dealdesk.api.dependencies import get_default_policy, get_request_id, policy_schema, resolve_policy
from dealdesk.domain.amortization import weeks_from_months
from dealdesk.domain.analysis import analyze_deal
from dealdesk.domain.exceptions import InvalidInputError
from dealdesk.domain.models import DealerPolicy, DealRequest, PaymentFrequency
from dealdesk.infrastructure.observability.logging import log_underwriting
from dealdesk.infrastructure.observability.metrics import invalid_input_counter, record_underwriting

router = APIRouter()

SCHEDULE_PREVIEW_ROWS = 12


@router.post("/deals/analyze", response_model=DealAnalyzeResponse)
def analyze(
    request_body: DealAnalyzeRequest,
    request: Request,
    default_policy: DealerPolicy = Depends(get_default_policy),
):
    """
    Price a deal and run it through dealer policy.

    Flow:
    1. Resolve dealer policy (request body, else service defaults)
    2. Substitute the dealer default APR when none is given
    3. Amortize, derive metrics, underwrite
    4. Return metrics, verdict and a schedule preview (or the full schedule)
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        policy = resolve_policy(request_body.policy, default_policy)
        apr = request_body.apr if request_body.apr and request_body.apr > 0 else policy.default_apr
        term_weeks = request_body.term_weeks or weeks_from_months(request_body.term_months)

        deal = DealRequest(
            vehicle_cost=request_body.vehicle_cost,
            recon_cost=request_body.recon_cost,
            sale_price=request_body.sale_price,
            down_payment=request_body.down_payment,
            apr=apr,
            term_weeks=term_weeks,
            payment_frequency=PaymentFrequency(request_body.payment_frequency),
            monthly_income=request_body.monthly_income,
            months_on_job=request_body.months_on_job,
            repo_count=request_body.repo_count,
        )
        analysis = analyze_deal(deal, policy)

    except InvalidInputError as e:
        invalid_input_counter.labels(source="core").inc()
        logging.warning(f"Invalid deal input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    result = analysis.result
    schedule = result.schedule if request_body.include_schedule else result.schedule[:SCHEDULE_PREVIEW_ROWS]

    duration_ms = (time.time() - start_time) * 1000
    record_underwriting(analysis.underwriting.verdict.value, result.ltv)
    log_underwriting(
        request_id,
        analysis.underwriting.verdict.value,
        result.pti,
        result.ltv,
        len(analysis.underwriting.reasons),
        duration_ms,
    )

    return DealAnalyzeResponse(
        apr=apr,
        term_weeks=term_weeks,
        total_cost=result.total_cost,
        amount_financed=result.amount_financed,
        periods=result.periods,
        payment=result.payment_per_period,
        weekly_payment=result.weekly_payment,
        total_interest=result.total_interest,
        total_profit=result.total_profit,
        break_even_period=result.break_even_period,
        payment_to_income=result.pti,
        ltv=result.ltv,
        risk_tier=analysis.risk_tier,
        underwriting=underwriting_schema(analysis.underwriting),
        schedule=[
            ScheduleRowSchema(period=row.period, interest=row.interest, principal=row.principal, balance=row.balance)
            for row in schedule
        ],
        policy=policy_schema(policy),
    )
