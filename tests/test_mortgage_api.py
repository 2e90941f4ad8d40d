"""
Integration tests for the mortgage endpoints.
Covers the JSON contract, validation envelope and error mapping.
"""
import pytest


def test_calculate_endpoint(client):
    response = client.post(
        "/api/mortgage/calculate",
        json={"principal": 200000, "interestRate": 6, "loanTerm": 30}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["results"]["monthlyPayment"] == pytest.approx(1199.10, abs=0.01)
    assert len(body["results"]["amortizationSchedule"]) == 41
    assert set(body["results"]["amortizationSchedule"][0]) == {
        "month", "payment", "principalPayment", "interestPayment", "remainingBalance"
    }


def test_calculate_accepts_numeric_strings(client):
    response = client.post(
        "/api/mortgage/calculate",
        json={"principal": "150000", "interestRate": "0", "loanTerm": "15", "ignored": True}
    )

    assert response.status_code == 200
    results = response.json()["results"]
    assert results["totalInterest"] == 0
    assert results["totalPayment"] == 150000


@pytest.mark.parametrize("payload, field, message", [
    ({"interestRate": 5, "loanTerm": 30}, "principal", "Principal is required"),
    ({"principal": 0, "interestRate": 5, "loanTerm": 30}, "principal", "Principal must be a positive number"),
    ({"principal": "abc", "interestRate": 5, "loanTerm": 30}, "principal", "Principal must be a number"),
    ({"principal": 1000, "interestRate": -1, "loanTerm": 30}, "interestRate", "Interest rate cannot be negative"),
    ({"principal": 1000, "interestRate": 5, "loanTerm": 30.5}, "loanTerm", "Loan term must be an integer"),
    ({"principal": 1000, "interestRate": 5, "loanTerm": 0}, "loanTerm", "Loan term must be a positive number"),
])
def test_calculate_validation_errors(client, payload, field, message):
    response = client.post("/api/mortgage/calculate", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"][field] == message


@pytest.mark.parametrize("payload, field, message", [
    ({"principal": "Infinity", "interestRate": 5, "loanTerm": 30}, "principal", "Principal must be a finite number"),
    ({"principal": 1000, "interestRate": "Infinity", "loanTerm": 30}, "interestRate", "Interest rate must be a finite number"),
    ({"principal": "NaN", "interestRate": 5, "loanTerm": 30}, "principal", "Principal must be a finite number"),
])
def test_non_finite_numbers_are_rejected(client, payload, field, message):
    response = client.post("/api/mortgage/calculate", json=payload)

    assert response.status_code == 400
    assert response.json()["errors"][field] == message


def test_non_finite_json_literal_is_rejected(client):
    response = client.post(
        "/api/mortgage/calculate",
        content=b'{"principal": Infinity, "interestRate": 5, "loanTerm": 30}',
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["errors"]["principal"] == "Principal must be a finite number"


@pytest.mark.parametrize("payload, field, message", [
    ({"principal": True, "interestRate": 5, "loanTerm": 30}, "principal", "Principal must be a number"),
    ({"principal": 1000, "interestRate": False, "loanTerm": 30}, "interestRate", "Interest rate must be a number"),
    ({"principal": 1000, "interestRate": 5, "loanTerm": True}, "loanTerm", "Loan term must be a number"),
])
def test_booleans_are_not_numbers(client, payload, field, message):
    response = client.post("/api/mortgage/calculate", json=payload)

    assert response.status_code == 400
    assert response.json()["errors"][field] == message


def test_boolean_loan_option_fields_are_rejected(client):
    response = client.post("/api/mortgage/compare", json={"loanOptions": [loan_option(points=True)]})

    assert response.status_code == 400
    assert response.json()["errors"]["loanOptions.0.points"] == "Points must be a number"


def test_validation_reports_every_invalid_field(client):
    response = client.post("/api/mortgage/calculate", json={"principal": -5})

    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"principal", "interestRate", "loanTerm"}


def test_affordability_endpoint(client):
    response = client.post("/api/mortgage/affordability", json={
        "annualIncome": 90000,
        "monthlyDebts": 300,
        "downPayment": 20000,
        "interestRate": 5,
        "loanTerm": 30,
        "propertyTaxRate": 1.2,
        "insuranceRate": 0.5
    })

    assert response.status_code == 200
    results = response.json()["results"]
    assert set(results) == {"maxHomePrice", "monthlyPayment", "paymentBreakdown", "debtToIncomeRatio"}
    assert set(results["paymentBreakdown"]) == {"principalAndInterest", "taxes", "insurance"}
    assert results["debtToIncomeRatio"] <= 36


def test_affordability_requires_all_fields(client):
    response = client.post("/api/mortgage/affordability", json={"annualIncome": 90000})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors["monthlyDebts"] == "Monthly debts are required"
    assert errors["propertyTaxRate"] == "Property tax rate is required"


def loan_option(**overrides):
    option = {"amount": 250000, "interestRate": 6, "term": 30, "type": "conventional", "points": 0, "fees": 1500}
    option.update(overrides)
    return option


def test_compare_endpoint_echoes_options(client):
    response = client.post("/api/mortgage/compare", json={
        "loanOptions": [loan_option(), loan_option(type="with points", points=2)]
    })

    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["type"] for r in results] == ["conventional", "with points"]
    assert results[1]["totalCost"] - results[0]["totalCost"] == pytest.approx(5000, abs=1e-6)
    assert {"monthlyPayment", "totalInterest", "totalCost", "interestRate", "fees"} <= set(results[0])


@pytest.mark.parametrize("options, message", [
    ([], "At least one loan option is required"),
    ([loan_option() for _ in range(4)], "Maximum of three loan options allowed"),
])
def test_compare_option_count(client, options, message):
    response = client.post("/api/mortgage/compare", json={"loanOptions": options})

    assert response.status_code == 400
    assert response.json()["errors"]["loanOptions"] == message


def test_compare_nested_field_errors(client):
    response = client.post("/api/mortgage/compare", json={
        "loanOptions": [loan_option(), loan_option(amount=0, fees=-1)]
    })

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors["loanOptions.1.amount"] == "Loan amount must be a positive number"
    assert errors["loanOptions.1.fees"] == "Fees cannot be negative"


def test_engine_failure_maps_to_500(client, monkeypatch):
    def boom(data):
        raise ZeroDivisionError("float division by zero")

    monkeypatch.setattr("estatehub.mortgage.router.calculate_payment", boom)

    response = client.post(
        "/api/mortgage/calculate",
        json={"principal": 1000, "interestRate": 5, "loanTerm": 1}
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["message"] == "Error calculating mortgage"


def test_correlation_id_is_propagated(client):
    response = client.post(
        "/api/mortgage/calculate",
        json={"principal": 1000, "interestRate": 5, "loanTerm": 1},
        headers={"X-Correlation-ID": "trace-123"}
    )

    assert response.headers["X-Correlation-ID"] == "trace-123"
    assert "X-Process-Time" in response.headers


def test_mortgage_info_endpoint(client):
    response = client.get("/mortgage")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Mortgage calculator API endpoint"}


def test_unknown_route(client):
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json()["message"] == "Route /api/unknown not found"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
