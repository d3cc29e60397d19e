"""Tests for the Flask JSON API."""

from datetime import date
from decimal import Decimal

import pytest

from pawn_calc.config import Settings
from pawn_calc_web.app import create_app
from pawn_calc_web.loan_store import LoanStore


@pytest.fixture
def store() -> LoanStore:
    return LoanStore("sqlite://")


@pytest.fixture
def client(store):
    app = create_app(store=store, settings=Settings())
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def loan_id(client) -> str:
    response = client.post(
        "/loans",
        json={"id": "L-100", "customerName": "Ravi", "totalLoanAmount": 100000, "interestRate": 2, "startDate": "2024-01-01"},
    )
    assert response.status_code == 201
    return response.get_json()["data"]["id"]


class TestLoans:
    def test_get_loan(self, client, loan_id) -> None:
        body = client.get(f"/loans/{loan_id}").get_json()

        assert body["success"] is True
        assert body["data"]["customerName"] == "Ravi"

    def test_list_loans(self, client, loan_id) -> None:
        body = client.get("/loans").get_json()
        assert [loan["id"] for loan in body["data"]] == [loan_id]

    def test_calculate(self, client, loan_id) -> None:
        data = client.get(f"/loans/{loan_id}/calculate?asOf=2024-04-01").get_json()["data"]

        assert data["monthsElapsed"] == 3
        assert data["interestAccrued"] == 6000.0
        assert data["totalDue"] == 106000.0
        assert data["quickPay"]["50"] == 53000.0

    def test_payment_then_recalculate(self, client, loan_id) -> None:
        response = client.post(f"/loans/{loan_id}/payments", json={"amount": 56000, "date": "2024-04-01"})
        assert response.status_code == 201
        assert len(response.get_json()["data"]["loan"]["payments"]) == 1

        data = client.get(f"/loans/{loan_id}/calculate?asOf=2024-04-01").get_json()["data"]
        assert data["remainingPrincipal"] == 50000.0
        assert data["interestAccrued"] == 0.0
        assert data["payments"][0]["appliedToInterest"] == 6000.0

    def test_partial_payment_records_percentage(self, client, loan_id) -> None:
        response = client.post(
            f"/loans/{loan_id}/payments",
            json={"amount": 53000, "date": "2024-04-01", "paymentType": "Partial", "notes": "50% partial payment"},
        )

        payment = response.get_json()["data"]["loan"]["payments"][0]
        assert payment["paymentPercentage"] == "50%"
        assert payment["paymentType"] == "Partial"

    def test_full_payment_closes_loan(self, client, loan_id) -> None:
        response = client.post(f"/loans/{loan_id}/payments", json={"amount": 110000, "date": "2024-04-01"})
        data = response.get_json()["data"]

        assert data["calculation"]["paidInFull"] is True
        assert data["calculation"]["excessPaid"] == 4000.0
        assert data["loan"]["status"] == "Closed"

    @pytest.mark.parametrize("payload", [{"amount": 0}, {"amount": -5}, {"amount": "abc"}, {"date": "2024-04-01"}])
    def test_invalid_payment(self, client, loan_id, payload) -> None:
        response = client.post(f"/loans/{loan_id}/payments", json=payload)

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_sub_cent_payment_is_kept_exactly(self, client, loan_id) -> None:
        response = client.post(f"/loans/{loan_id}/payments", json={"amount": "0.004", "date": "2024-01-01"})
        assert response.status_code == 201
        assert response.get_json()["data"]["loan"]["payments"][0]["amount"] == "0.004"

        data = client.get(f"/loans/{loan_id}/calculate?asOf=2024-01-01").get_json()["data"]
        assert data["remainingPrincipal"] == 99999.996

        follow_up = client.post(f"/loans/{loan_id}/payments", json={"amount": 100, "date": "2024-01-01"})
        assert follow_up.status_code == 201

    def test_high_precision_rate_is_kept(self, client) -> None:
        created = client.post(
            "/loans",
            json={"id": "L-101", "totalLoanAmount": "1000", "interestRate": "2.123456", "startDate": "2024-01-01"},
        ).get_json()["data"]
        assert created["interestRate"] == "2.123456"

        data = client.get("/loans/L-101/calculate?asOf=2024-02-01").get_json()["data"]
        assert data["interestAccrued"] == 21.23456

    def test_payment_not_written_when_loan_cannot_be_computed(self, client, store, loan_id) -> None:
        # a record already holding an invalid payment, written around the API
        store.add_payment(loan_id, Decimal("-1"), date(2024, 2, 1))

        response = client.post(f"/loans/{loan_id}/payments", json={"amount": 500, "date": "2024-03-01"})

        assert response.status_code == 400
        assert len(store.get_loan(loan_id)["payments"]) == 1

    def test_invalid_as_of(self, client, loan_id) -> None:
        assert client.get(f"/loans/{loan_id}/calculate?asOf=tomorrow").status_code == 400

    def test_unknown_loan(self, client) -> None:
        response = client.get("/loans/nope/calculate")

        assert response.status_code == 404
        assert response.get_json() == {"success": False, "error": "Loan nope not found"}

    def test_invalid_loan(self, client) -> None:
        response = client.post("/loans", json={"totalLoanAmount": -1, "interestRate": 2, "startDate": "2024-01-01"})
        assert response.status_code == 400

    def test_body_must_be_object(self, client) -> None:
        assert client.post("/loans", data="x", content_type="text/plain").status_code == 400


class TestSavings:
    def test_maturity(self, client) -> None:
        created = client.post(
            "/savings", json={"installmentAmount": 1000, "duration": 12, "bonusPercentage": 10, "startDate": "2024-01-15"}
        ).get_json()["data"]

        data = client.get(f"/savings/{created['id']}/maturity").get_json()["data"]
        assert data["totalContribution"] == 12000.0
        assert data["bonusAmount"] == 1200.0
        assert data["maturityAmount"] == 13200.0
        assert data["maturityDate"] == "2025-01-15"
        assert len(data["installments"]) == 12

    def test_get_scheme(self, client) -> None:
        created = client.post("/savings", json={"installmentAmount": 2500, "duration": 11}).get_json()["data"]
        body = client.get(f"/savings/{created['id']}").get_json()
        assert body["data"]["duration"] == 11

        data = client.get(f"/savings/{created['id']}/maturity").get_json()["data"]
        assert data["maturityAmount"] == 30000.0
        assert "installments" not in data

    def test_invalid_scheme(self, client) -> None:
        assert client.post("/savings", json={"installmentAmount": 100, "duration": 0}).status_code == 400

    def test_unknown_scheme(self, client) -> None:
        assert client.get("/savings/nope/maturity").status_code == 404
