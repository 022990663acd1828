import pytest
from fastapi.testclient import TestClient

from main import app
from app.schemas.loan_schema import LoanRequest
from app.services.eligibility_service import EligibilityEvaluator, get_eligibility_evaluator


class FixedRandom:
    """Random source stub that always returns the same adjustment."""

    def __init__(self, value: int = 0):
        self.value = value
        self.calls = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        assert a <= self.value <= b
        return self.value


def make_evaluator(adjustment: int = 0) -> EligibilityEvaluator:
    return EligibilityEvaluator(random_factory=lambda: FixedRandom(adjustment))


def make_request(**overrides) -> LoanRequest:
    payload = {
        "name": "Rahul Sharma",
        "loanAmount": 500000,
        "mobileNumber": "9876543210",
        "panNumber": "ABCDE1234F",
        "monthlyIncome": 120000,
    }
    payload.update(overrides)
    return LoanRequest(**payload)


@pytest.fixture
def valid_payload():
    return {
        "name": "Rahul Sharma",
        "loanAmount": 500000,
        "mobileNumber": "9876543210",
        "panNumber": "ABCDE1234F",
        "monthlyIncome": 120000,
    }


@pytest.fixture
def client():
    app.dependency_overrides[get_eligibility_evaluator] = lambda: make_evaluator(0)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides = {}
