import pytest
from fastapi.testclient import TestClient

from estatehub.core.rate_limit import RateLimiter
from estatehub.main import create_app


class FakeClock:
    """Manually advanced clock for time-dependent tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> TestClient:
    # Generous budget so API tests never trip the limiter
    return TestClient(create_app(rate_limiter=RateLimiter(max_requests=10_000)))
