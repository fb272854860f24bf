"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient
from dealdesk.api.main import create_app
from dealdesk.api.dependencies import get_default_policy
from dealdesk.domain.models import DealerPolicy, DealRequest, DealResult, PaymentFrequency


@pytest.fixture
def policy() -> DealerPolicy:
    """Dealer policy used across scenarios"""
    return DealerPolicy(
        max_pti=0.25,
        max_ltv=1.75,
        min_down_payment=1000,
        max_term_weeks=160,
        default_apr=24.99,
    )


@pytest.fixture
def scenario_a() -> DealRequest:
    """Typical monthly-pay deal: $11,800 car, $1,000 down, 23 months"""
    return DealRequest(
        vehicle_cost=6000,
        recon_cost=1000,
        sale_price=11800,
        down_payment=1000,
        apr=24.99,
        term_weeks=100,
        payment_frequency=PaymentFrequency.MONTHLY,
        monthly_income=2400,
        months_on_job=12,
        repo_count=0,
    )


@pytest.fixture
def make_result():
    """Build a DealResult with clean metrics, overriding only what a test cares about"""

    def _make(**overrides) -> DealResult:
        values = dict(
            total_cost=7000.0,
            amount_financed=10800.0,
            payment_per_period=120.0,
            weekly_payment=120.0,
            total_interest=3000.0,
            total_profit=7800.0,
            break_even_period=60,
            periods=104,
            rate_per_period=0.2499 / 52,
            pti=0.20,
            ltv=1.50,
            schedule=(),
        )
        values.update(overrides)
        return DealResult(**values)

    return _make


@pytest.fixture
def client(policy: DealerPolicy) -> TestClient:
    """Create FastAPI test client with the test dealer policy as fallback"""
    app = create_app()
    app.dependency_overrides[get_default_policy] = lambda: policy
    return TestClient(app)
