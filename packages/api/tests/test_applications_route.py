"""Tests for loan application REST endpoints."""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fairlend_db import PersistenceError
from fairlend_db.enums import Prediction

from factories import CUSTOMER_ID, OTHER_CUSTOMER_ID, make_application
from fairlend.core.errors import (
    ConfigurationError,
    UpstreamGenericFailure,
    UpstreamPaymentRequired,
    UpstreamRateLimited,
)

BODY = {
    "name": "Priya Shah",
    "age": 34,
    "gender": "female",
    "income": 85000,
    "creditScore": 742,
    "loanAmount": 20000,
    "loanTerm": 48,
    "loanPurpose": "car",
    "employmentStatus": "employed",
    "existingLoans": 2000,
    "savingsBalance": 15000,
}


@pytest.fixture()
def _mock_decide():
    with patch("fairlend.services.loan_decision.decide", new_callable=AsyncMock) as mock:
        mock.return_value = make_application(
            id=42,
            prediction=Prediction.APPROVED,
            confidence=88,
            fairness_score=94,
            explanation="Income comfortably covers the installment.",
        )
        yield mock


class TestSubmitApplication:
    """POST /api/applications/"""

    def test_returns_decision(self, customer_client, _mock_decide):
        resp = customer_client.post("/api/applications/", json=BODY)
        assert resp.status_code == 201
        assert resp.json() == {
            "prediction": "Approved",
            "confidence": 88,
            "fairnessScore": 94,
            "explanation": "Income comfortably covers the installment.",
            "applicationId": 42,
        }

    def test_principal_comes_from_auth(self, customer_client, _mock_decide):
        customer_client.post("/api/applications/", json=BODY)
        assert _mock_decide.await_args.kwargs["user_id"] == CUSTOMER_ID
        application = _mock_decide.await_args.args[1]
        assert application.loan_term_months == 48
        assert application.income == Decimal("85000")

    @pytest.mark.parametrize(
        ("field", "value"),
        [("age", 12), ("creditScore", 1200), ("loanAmount", 0), ("income", -1), ("loanTerm", 0)],
    )
    def test_invalid_input_is_422(self, customer_client, _mock_decide, field, value):
        resp = customer_client.post("/api/applications/", json=BODY | {field: value})
        assert resp.status_code == 422
        assert resp.json()["kind"] == "ValidationError"
        _mock_decide.assert_not_awaited()

    def test_employee_cannot_submit(self, employee_client, _mock_decide):
        resp = employee_client.post("/api/applications/", json=BODY)
        assert resp.status_code == 403


class TestSubmitApplicationErrors:
    """Service failures map to distinct status codes and kinds."""

    @pytest.mark.parametrize(
        ("error", "status", "kind"),
        [
            (UpstreamRateLimited("Rate limit exceeded. Please try again later."), 429, "UpstreamRateLimited"),
            (UpstreamPaymentRequired("Payment required."), 402, "UpstreamPaymentRequired"),
            (UpstreamGenericFailure("AI gateway error (status 500)"), 502, "UpstreamGenericFailure"),
            (ConfigurationError("No API key configured"), 500, "ConfigurationError"),
            (PersistenceError("insert_loan_application"), 503, "PersistenceError"),
        ],
    )
    def test_error_mapping(self, customer_client, error, status, kind):
        with patch("fairlend.services.loan_decision.decide", new_callable=AsyncMock) as mock:
            mock.side_effect = error
            resp = customer_client.post("/api/applications/", json=BODY)
        assert resp.status_code == status
        body = resp.json()
        assert body["kind"] == kind
        assert body["status"] == status
        assert "prediction" not in body

    def test_rate_limit_sets_retry_after(self, customer_client):
        with patch("fairlend.services.loan_decision.decide", new_callable=AsyncMock) as mock:
            mock.side_effect = UpstreamRateLimited("Rate limit exceeded. Please try again later.")
            resp = customer_client.post("/api/applications/", json=BODY)
        assert resp.headers["Retry-After"] == "60"
        assert resp.json()["detail"] == "Rate limit exceeded. Please try again later."


class TestGetApplication:
    """GET /api/applications/{id}"""

    def test_owner_can_read(self, customer_client):
        with patch(
            "fairlend.routes.applications.get_loan_application",
            new_callable=AsyncMock,
            return_value=make_application(id=1),
        ):
            resp = customer_client.get("/api/applications/1")
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == 1
        assert body["prediction"] == "Rejected"
        assert body["creditScore"] == 610

    def test_other_customers_application_is_404(self, customer_client):
        with patch(
            "fairlend.routes.applications.get_loan_application",
            new_callable=AsyncMock,
            return_value=make_application(id=1, user_id=OTHER_CUSTOMER_ID),
        ):
            resp = customer_client.get("/api/applications/1")
        assert resp.status_code == 404

    def test_employee_can_read_any(self, employee_client):
        with patch(
            "fairlend.routes.applications.get_loan_application",
            new_callable=AsyncMock,
            return_value=make_application(id=1, user_id=OTHER_CUSTOMER_ID),
        ):
            resp = employee_client.get("/api/applications/1")
        assert resp.status_code == 200

    def test_missing_application_is_404(self, employee_client):
        with patch(
            "fairlend.routes.applications.get_loan_application",
            new_callable=AsyncMock,
            return_value=None,
        ):
            resp = employee_client.get("/api/applications/999")
        assert resp.status_code == 404


class TestListApproved:
    """GET /api/applications/approved"""

    def test_lists_with_pagination(self, employee_client):
        loan = SimpleNamespace(
            id=5,
            application_id=42,
            name="Priya Shah",
            loan_amount=Decimal("20000.00"),
            monthly_installment=437.5,
            next_notification_date=datetime(2026, 5, 1, tzinfo=UTC),
        )
        with patch(
            "fairlend.routes.applications.list_approved_loans",
            new_callable=AsyncMock,
            return_value=([loan], 1),
        ):
            resp = employee_client.get("/api/applications/approved")
        assert resp.status_code == 200
        body = resp.json()
        assert body["data"][0]["applicationId"] == 42
        assert body["data"][0]["monthlyInstallment"] == 437.5
        assert body["pagination"] == {"total": 1, "offset": 0, "limit": 20, "hasMore": False}

    def test_customer_cannot_list(self, customer_client):
        assert customer_client.get("/api/applications/approved").status_code == 403
