"""Deal analysis facade - validated metrics, underwriting and a coarse risk tier"""

from dealdesk.domain.deal_metrics import calculate_deal
from dealdesk.domain.models import DealAnalysis, DealerPolicy, DealRequest, DealResult
from dealdesk.domain.underwriting import evaluate_deal
from dealdesk.domain.validation import validate_deal_request, validate_policy

SHORT_JOB_MONTHS = 6


def risk_tier(request: DealRequest, result: DealResult, policy: DealerPolicy) -> str:
    """
    Informational Low / Medium / High label; never feeds the verdict.

    - PTI above policy max -> High; below 60% of max -> Low; otherwise Medium
    - Under 6 months on the job: Low becomes Medium, anything else High
    - Any prior repo -> High
    """
    tier = "Medium"

    if result.pti is not None:
        if result.pti > policy.max_pti:
            tier = "High"
        elif result.pti < policy.max_pti * 0.6:
            tier = "Low"

    if request.months_on_job < SHORT_JOB_MONTHS:
        tier = "Medium" if tier == "Low" else "High"

    if request.repo_count > 0:
        tier = "High"

    return tier


def analyze_deal(request: DealRequest, policy: DealerPolicy) -> DealAnalysis:
    """
    Main entry point: validate, price, underwrite and tier a single deal.

    Raises:
        InvalidInputError: On non-finite or nonsensical request/policy values
    """
    validate_policy(policy)
    validate_deal_request(request)

    result = calculate_deal(request)
    underwriting = evaluate_deal(request, result, policy)

    return DealAnalysis(
        request=request,
        result=result,
        underwriting=underwriting,
        risk_tier=risk_tier(request, result, policy),
    )
