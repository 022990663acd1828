import httpx
import pytest

from main import app
from app.services.eligibility_service import get_eligibility_evaluator
from conftest import make_evaluator

URL = "/api/loan/checkEligibility"


def test_check_eligibility_success(client, valid_payload):
    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.json() == {
        "eligible": True,
        "cibilScore": 820,
        "maxEligibleAmount": 500000,
        "message": "Congratulations Rahul Sharma! You are eligible for a loan. "
                   "You qualify for the full requested amount!",
    }


def test_invalid_pan_is_a_business_rejection(client, valid_payload):
    valid_payload["panNumber"] = "invalid123"

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 200
    assert resp.json() == {
        "eligible": False,
        "cibilScore": 0,
        "maxEligibleAmount": 0,
        "message": "Invalid PAN number format. Please check and try again.",
    }


def test_low_income_is_rejected(client, valid_payload):
    valid_payload.update(monthlyIncome=15000, loanAmount=50000)

    data = client.post(URL, json=valid_payload).json()

    assert data["eligible"] is False
    assert data["cibilScore"] == 570
    assert data["maxEligibleAmount"] == 0


@pytest.mark.parametrize("field", ["name", "loanAmount", "mobileNumber", "panNumber", "monthlyIncome"])
def test_missing_field_returns_400(client, valid_payload, field):
    del valid_payload[field]

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 400
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.json() == {
        "error": "Missing required fields",
        "details": "All fields (name, loanAmount, mobileNumber, panNumber, monthlyIncome) are required",
    }


@pytest.mark.parametrize("value", [None, "", 0])
def test_falsy_field_counts_as_missing(client, valid_payload, value):
    valid_payload["loanAmount"] = value

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields"


def test_non_object_body_counts_as_missing(client):
    resp = client.post(URL, json=[1, 2, 3])

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields"


@pytest.mark.parametrize("field", ["loanAmount", "monthlyIncome"])
def test_negative_amount_returns_400(client, valid_payload, field):
    valid_payload[field] = -500

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Invalid input",
        "details": "Loan amount and monthly income must be positive numbers",
    }


def test_wrong_type_returns_400(client, valid_payload):
    valid_payload["loanAmount"] = "lots"

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid input"
    assert "loanAmount" in body["details"]


def test_malformed_json_returns_500(client):
    resp = client.post(URL, content="{not json", headers={"content-type": "application/json"})

    assert resp.status_code == 500
    assert resp.headers["access-control-allow-origin"] == "*"
    body = resp.json()
    assert body["error"] == "Internal server error"
    assert body["details"]


def test_unexpected_failure_returns_500(client, valid_payload):
    class BrokenEvaluator:
        def evaluate(self, request):
            raise RuntimeError("scoring backend exploded")

    app.dependency_overrides[get_eligibility_evaluator] = lambda: BrokenEvaluator()

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "details": "scoring backend exploded"}


def test_options_without_origin_returns_204(client):
    resp = client.options(URL)

    assert resp.status_code == 204
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "content-type" in resp.headers["access-control-allow-headers"]


def test_browser_preflight(client):
    resp = client.options(
        URL,
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/api/loan/nope")

    assert resp.status_code == 404
    assert resp.json() == {"error": "HTTP error", "details": "Not Found"}


def test_validate_endpoint(client):
    resp = client.post(
        "/api/loan/validate",
        json={
            "name": "Priya Nair",
            "loanAmount": "250000",
            "mobileNumber": "9123456789",
            "panNumber": "abcde1234f",
            "monthlyIncome": "4000",
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is False
    assert body["errors"] == {"monthlyIncome": "Minimum monthly income is ₹5,000"}
    assert body["request"] is None


def test_validate_rejects_non_object_body(client):
    resp = client.post("/api/loan/validate", json=["not", "a", "form"])

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid input"


def test_health_endpoints(client):
    assert client.get("/api/loan/health").json()["status"] == "healthy"
    assert client.get("/health").status_code == 200


@pytest.mark.asyncio
async def test_concurrent_requests_are_independent(valid_payload):
    app.dependency_overrides[get_eligibility_evaluator] = lambda: make_evaluator(-20)
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            first = await ac.post(URL, json=valid_payload)
            second = await ac.post(URL, json={**valid_payload, "panNumber": "bad"})
            third = await ac.post(URL, json=valid_payload)
    finally:
        app.dependency_overrides = {}

    assert first.json() == third.json()
    assert first.json()["cibilScore"] == 800
    assert second.json()["cibilScore"] == 0


@pytest.mark.parametrize("value", ["-5", "0", " "])
def test_non_positive_numeric_text_returns_400(client, valid_payload, value):
    valid_payload["loanAmount"] = value

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Invalid input",
        "details": "Loan amount and monthly income must be positive numbers",
    }


def test_infinite_amount_returns_400(client):
    body = (
        '{"name": "Rahul Sharma", "loanAmount": Infinity, "mobileNumber": "9876543210", '
        '"panNumber": "ABCDE1234F", "monthlyIncome": 120000}'
    )

    resp = client.post(URL, content=body, headers={"content-type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid input"
    assert "loanAmount" in resp.json()["details"]
