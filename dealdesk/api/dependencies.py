"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Request
from dealdesk.api.v1.schemas import PolicySchema
from dealdesk.config import settings
from dealdesk.domain.models import DealerPolicy


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_default_policy() -> DealerPolicy:
    """Fallback dealer policy built from settings"""
    return DealerPolicy(
        max_pti=settings.default_max_pti,
        max_ltv=settings.default_max_ltv,
        min_down_payment=settings.default_min_down_payment,
        max_term_weeks=settings.default_max_term_weeks,
        default_apr=settings.default_apr,
    )


def resolve_policy(supplied: Optional[PolicySchema], fallback: DealerPolicy) -> DealerPolicy:
    """Use the caller's policy block when present, otherwise the fallback"""
    if supplied is None:
        return fallback
    return DealerPolicy(**supplied.model_dump())


def policy_schema(policy: DealerPolicy) -> PolicySchema:
    return PolicySchema(
        max_pti=policy.max_pti,
        max_ltv=policy.max_ltv,
        min_down_payment=policy.min_down_payment,
        max_term_weeks=policy.max_term_weeks,
        default_apr=policy.default_apr,
    )
