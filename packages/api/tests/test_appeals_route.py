"""Tests for appeal REST endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fairlend_db.enums import AppealStatus, FinalDecision

from factories import (
    CUSTOMER_ID,
    EMPLOYEE_ID,
    OTHER_CUSTOMER_ID,
    make_appeal,
    make_application,
    make_notification,
)
from fairlend.core.errors import NotFoundError, PreconditionViolation
from fairlend.services.appeal import ReviewOutcome

ROUTE = "fairlend.routes.appeals"
SVC = "fairlend.services.appeal"


@pytest.fixture()
def _own_loan():
    with patch(
        f"{ROUTE}.get_loan_application",
        new_callable=AsyncMock,
        return_value=make_application(id=1, user_id=CUSTOMER_ID),
    ) as mock:
        yield mock


class TestFileAppeal:
    """POST /api/appeals/"""

    @pytest.mark.usefixtures("_own_loan")
    def test_files_appeal_for_current_user(self, customer_client):
        with patch(f"{SVC}.file_appeal", new_callable=AsyncMock) as mock:
            mock.return_value = make_appeal(id=7, loan_id=1)
            resp = customer_client.post("/api/appeals/", json={"loanId": 1})
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["appealId"] == 7
        assert mock.await_args.args[1:] == (1, CUSTOMER_ID)

    @pytest.mark.usefixtures("_own_loan")
    def test_cannot_file_for_another_user(self, customer_client):
        with patch(f"{SVC}.file_appeal", new_callable=AsyncMock) as mock:
            resp = customer_client.post(
                "/api/appeals/", json={"loanId": 1, "userId": OTHER_CUSTOMER_ID}
            )
        assert resp.status_code == 403
        mock.assert_not_awaited()

    def test_cannot_appeal_someone_elses_loan(self, customer_client):
        with (
            patch(
                f"{ROUTE}.get_loan_application",
                new_callable=AsyncMock,
                return_value=make_application(id=1, user_id=OTHER_CUSTOMER_ID),
            ),
            patch(f"{SVC}.file_appeal", new_callable=AsyncMock) as mock,
        ):
            resp = customer_client.post("/api/appeals/", json={"loanId": 1})
        assert resp.status_code == 404
        assert resp.json()["kind"] == "NotFound"
        mock.assert_not_awaited()

    @pytest.mark.usefixtures("_own_loan")
    def test_duplicate_pending_appeal_is_409(self, customer_client):
        with patch(f"{SVC}.file_appeal", new_callable=AsyncMock) as mock:
            mock.side_effect = PreconditionViolation(
                "Loan application #1 already has a pending appeal."
            )
            resp = customer_client.post("/api/appeals/", json={"loanId": 1})
        assert resp.status_code == 409
        assert resp.json()["kind"] == "PreconditionViolation"

    def test_employee_cannot_file(self, employee_client):
        resp = employee_client.post("/api/appeals/", json={"loanId": 1})
        assert resp.status_code == 403


class TestListAppeals:
    def test_mine(self, customer_client):
        appeal = make_appeal(id=7, application=make_application(id=1, name="Priya Shah"))
        with patch(f"{SVC}.list_appeals", new_callable=AsyncMock, return_value=[appeal]) as mock:
            resp = customer_client.get("/api/appeals/mine")
        assert resp.status_code == 200
        item = resp.json()["data"][0]
        assert item["id"] == 7
        assert item["status"] == "pending"
        assert item["applicantName"] == "Priya Shah"
        assert item["reasonCodes"]["prediction"] == "Rejected"
        assert mock.await_args.kwargs == {"user_id": CUSTOMER_ID}

    def test_pending_queue_for_staff(self, employee_client):
        with patch(f"{SVC}.list_appeals", new_callable=AsyncMock, return_value=[]) as mock:
            resp = employee_client.get("/api/appeals/pending")
        assert resp.status_code == 200
        assert resp.json() == {"data": []}
        assert mock.await_args.kwargs == {"status": AppealStatus.PENDING}

    def test_customer_cannot_see_queue(self, customer_client):
        assert customer_client.get("/api/appeals/pending").status_code == 403


class TestReviewAppeal:
    """POST /api/appeals/{id}/review"""

    BODY = {"reviewComment": "Income verified.", "finalDecision": "approved_after_review"}

    def test_review_notifies(self, employee_client):
        outcome = ReviewOutcome(
            appeal_id=7,
            final_decision=FinalDecision.APPROVED_AFTER_REVIEW,
            notification=make_notification(id=11),
        )
        with patch(f"{SVC}.review_appeal", new_callable=AsyncMock, return_value=outcome) as mock:
            resp = employee_client.post("/api/appeals/7/review", json=self.BODY)
        assert resp.status_code == 200
        assert resp.json()["notified"] is True
        args = mock.await_args
        assert args.args[1:] == (7, "Income verified.", FinalDecision.APPROVED_AFTER_REVIEW)
        assert args.kwargs == {"reviewer_id": EMPLOYEE_ID}

    def test_review_without_notification_still_succeeds(self, employee_client):
        outcome = ReviewOutcome(
            appeal_id=7, final_decision=FinalDecision.REJECTED_AI_STANDS, notification=None
        )
        with patch(f"{SVC}.review_appeal", new_callable=AsyncMock, return_value=outcome):
            resp = employee_client.post(
                "/api/appeals/7/review",
                json={"reviewComment": "AI was right.", "finalDecision": "rejected_ai_stands"},
            )
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.json()["notified"] is False

    def test_already_reviewed_is_409(self, employee_client):
        with patch(f"{SVC}.review_appeal", new_callable=AsyncMock) as mock:
            mock.side_effect = PreconditionViolation("Appeal #7 has already been reviewed.")
            resp = employee_client.post("/api/appeals/7/review", json=self.BODY)
        assert resp.status_code == 409

    def test_unknown_appeal_is_404(self, employee_client):
        with patch(f"{SVC}.review_appeal", new_callable=AsyncMock) as mock:
            mock.side_effect = NotFoundError("Appeal #99 not found")
            resp = employee_client.post("/api/appeals/99/review", json=self.BODY)
        assert resp.status_code == 404

    @pytest.mark.parametrize(
        "body",
        [
            {"reviewComment": "", "finalDecision": "approved_after_review"},
            {"reviewComment": "ok", "finalDecision": "maybe"},
            {"finalDecision": "approved_after_review"},
        ],
    )
    def test_invalid_review_is_422(self, employee_client, body):
        with patch(f"{SVC}.review_appeal", new_callable=AsyncMock) as mock:
            resp = employee_client.post("/api/appeals/7/review", json=body)
        assert resp.status_code == 422
        mock.assert_not_awaited()

    def test_customer_cannot_review(self, customer_client):
        resp = customer_client.post("/api/appeals/7/review", json=self.BODY)
        assert resp.status_code == 403
