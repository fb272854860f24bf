"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Literal, Optional

Frequency = Literal["weekly", "biweekly", "monthly"]


class PolicySchema(BaseModel):
    """Dealer policy supplied by the caller; ratios as plain ratios"""

    max_pti: float = Field(..., gt=0, description="Max payment-to-income ratio, e.g. 0.25")
    max_ltv: float = Field(..., gt=0, description="Max loan-to-value ratio, e.g. 1.75")
    min_down_payment: float = Field(..., ge=0)
    max_term_weeks: int = Field(..., gt=0)
    default_apr: float = Field(24.99, ge=0, description="Annual percent")


class DealAnalyzeRequest(BaseModel):
    """Request body for POST /v1/deals/analyze"""

    vehicle_cost: float = Field(..., ge=0)
    recon_cost: float = Field(0.0, ge=0)
    sale_price: float = Field(..., ge=0)
    down_payment: float = Field(0.0, ge=0)
    apr: Optional[float] = Field(None, description="Annual percent; dealer default when missing or not positive")
    term_weeks: Optional[int] = Field(None, gt=0)
    term_months: Optional[float] = Field(None, gt=0, description="Alternative to term_weeks")
    payment_frequency: Frequency = "weekly"
    monthly_income: float = Field(0.0, ge=0)
    months_on_job: float = Field(12.0, ge=0)
    repo_count: int = Field(0, ge=0)
    include_schedule: bool = False
    policy: Optional[PolicySchema] = None

    @model_validator(mode="after")
    def require_term(self) -> "DealAnalyzeRequest":
        if self.term_weeks is None and self.term_months is None:
            raise ValueError("Either term_weeks or term_months is required")
        return self


class ScheduleRowSchema(BaseModel):
    period: int
    interest: float
    principal: float
    balance: float


class AdjustmentsSchema(BaseModel):
    new_down_payment: Optional[float] = None
    new_term_weeks: Optional[int] = None
    new_sale_price: Optional[float] = None
    new_apr: Optional[float] = None


class UnderwritingSchema(BaseModel):
    verdict: Literal["APPROVE", "COUNTER", "DECLINE"]
    reasons: List[str]
    adjustments: Optional[AdjustmentsSchema] = None


class DealAnalyzeResponse(BaseModel):
    """Response for POST /v1/deals/analyze"""

    apr: float
    term_weeks: int
    total_cost: float
    amount_financed: float
    periods: int
    payment: float
    weekly_payment: float
    total_interest: float
    total_profit: float
    break_even_period: int
    payment_to_income: Optional[float] = None
    ltv: Optional[float] = None
    risk_tier: str
    underwriting: UnderwritingSchema
    schedule: List[ScheduleRowSchema]
    policy: PolicySchema


class AffordabilityRequestSchema(BaseModel):
    """Request body for POST /v1/affordability"""

    monthly_income: float = Field(..., gt=0)
    available_down: float = Field(..., ge=0)
    vehicle_cost: float = Field(..., gt=0)
    recon_cost: float = Field(0.0, ge=0)
    apr: Optional[float] = Field(None, ge=0)
    payment_frequency: Frequency = "weekly"
    max_pti_override: Optional[float] = Field(None, gt=0)
    term_weeks_options: List[int] = Field(..., min_length=1)
    sale_price_min: float = Field(..., gt=0)
    sale_price_max: float = Field(..., gt=0)
    sale_price_step: float = Field(500.0, gt=0)
    months_on_job: float = Field(12.0, ge=0)
    repo_count: int = Field(0, ge=0)
    target_weekly_payment: Optional[float] = None
    policy: Optional[PolicySchema] = None


class BestStructureSchema(BaseModel):
    sale_price: float
    term_weeks: int
    weekly_payment: float
    pti: float
    ltv: Optional[float] = None
    total_profit: float
    underwriting: UnderwritingSchema


class AffordabilityResponse(BaseModel):
    """Response for POST /v1/affordability"""

    best_structure: Optional[BestStructureSchema] = None
    recommended_down_payment: Optional[float] = None
    candidates_evaluated: int
    rejected: Dict[str, int]
    apr: float
    policy: PolicySchema


def underwriting_schema(underwriting) -> UnderwritingSchema:
    """Serialize a domain UnderwritingResult"""
    adjustments = None
    if underwriting.adjustments is not None:
        adj = underwriting.adjustments
        adjustments = AdjustmentsSchema(
            new_down_payment=adj.new_down_payment,
            new_term_weeks=adj.new_term_weeks,
            new_sale_price=adj.new_sale_price,
            new_apr=adj.new_apr,
        )
    return UnderwritingSchema(
        verdict=underwriting.verdict.value,
        reasons=list(underwriting.reasons),
        adjustments=adjustments,
    )
