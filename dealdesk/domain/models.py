"""Domain models - immutable dataclasses representing deal structuring entities"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


# Canonical weeks-per-month constant for every weekly/monthly conversion
WEEKS_PER_MONTH = 4.345


class PaymentFrequency(str, Enum):
    """How often the customer pays"""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @property
    def periods_per_year(self) -> int:
        return {"weekly": 52, "biweekly": 26, "monthly": 12}[self.value]

    @property
    def weeks_per_period(self) -> float:
        return {"weekly": 1.0, "biweekly": 2.0, "monthly": WEEKS_PER_MONTH}[self.value]


class Verdict(str, Enum):
    """Underwriting outcome, ordered APPROVE < COUNTER < DECLINE"""

    APPROVE = "APPROVE"
    COUNTER = "COUNTER"
    DECLINE = "DECLINE"

    @property
    def severity(self) -> int:
        return {"APPROVE": 0, "COUNTER": 1, "DECLINE": 2}[self.value]

    def escalate(self, other: "Verdict") -> "Verdict":
        """Return the more severe of the two verdicts"""
        return other if other.severity > self.severity else self


@dataclass(frozen=True)
class DealerPolicy:
    """Dealer lending policy. Ratios are plain ratios (0.25 = 25%, 1.75 = 175%)."""

    max_pti: float
    max_ltv: float
    min_down_payment: float
    max_term_weeks: int
    default_apr: float = 24.99  # annual percent


@dataclass(frozen=True)
class DealRequest:
    """Proposed deal structure plus borrower facts"""

    vehicle_cost: float
    sale_price: float
    down_payment: float
    apr: float  # annual percent, e.g. 24.99
    term_weeks: int
    recon_cost: float = 0.0
    payment_frequency: PaymentFrequency = PaymentFrequency.WEEKLY
    monthly_income: float = 0.0
    months_on_job: float = 12.0
    repo_count: int = 0


@dataclass(frozen=True)
class ScheduleRow:
    """Single period of an amortization schedule"""

    period: int
    interest: float
    principal: float
    balance: float


@dataclass(frozen=True)
class Amortization:
    """Output of the amortization engine for one principal/rate/term"""

    principal: float
    periods: int
    rate_per_period: float
    payment: float
    total_interest: float
    schedule: Tuple[ScheduleRow, ...] = ()


@dataclass(frozen=True)
class DealResult:
    """Derived payment, profitability and risk ratios for a deal"""

    total_cost: float
    amount_financed: float
    payment_per_period: float
    weekly_payment: float
    total_interest: float
    total_profit: float
    break_even_period: int
    periods: int
    rate_per_period: float
    pti: Optional[float]
    ltv: Optional[float]
    schedule: Tuple[ScheduleRow, ...] = ()


@dataclass(frozen=True)
class Adjustments:
    """Independent single-axis counter-offer suggestions"""

    new_down_payment: Optional[float] = None
    new_term_weeks: Optional[int] = None
    new_sale_price: Optional[float] = None
    new_apr: Optional[float] = None

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.new_down_payment, self.new_term_weeks, self.new_sale_price, self.new_apr)
        )


@dataclass(frozen=True)
class UnderwritingResult:
    """Output of policy evaluation"""

    verdict: Verdict
    reasons: Tuple[str, ...]
    adjustments: Optional[Adjustments] = None


@dataclass(frozen=True)
class DealAnalysis:
    """Everything the analyze facade returns for one deal"""

    request: DealRequest
    result: DealResult
    underwriting: UnderwritingResult
    risk_tier: str


@dataclass(frozen=True)
class AffordabilityRequest:
    """Borrower budget and search grid for the affordability optimizer"""

    monthly_income: float
    available_down: float
    vehicle_cost: float
    apr: float
    term_weeks_options: Tuple[int, ...]
    sale_price_min: float
    sale_price_max: float
    sale_price_step: float = 500.0
    recon_cost: float = 0.0
    payment_frequency: PaymentFrequency = PaymentFrequency.WEEKLY
    max_pti_override: Optional[float] = None
    months_on_job: float = 12.0
    repo_count: int = 0
    target_weekly_payment: Optional[float] = None


@dataclass(frozen=True)
class BestStructure:
    """Winning (sale price, term) pair from the affordability search"""

    sale_price: float
    term_weeks: int
    weekly_payment: float
    pti: float
    ltv: Optional[float]
    total_profit: float
    underwriting: UnderwritingResult


@dataclass(frozen=True)
class AffordabilityResult:
    """Output of the affordability search"""

    best_structure: Optional[BestStructure] = None
    recommended_down_payment: Optional[float] = None
    candidates_evaluated: int = 0
    rejected: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
