"""Shared test factory functions for personas and ORM-shaped objects."""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace

from fairlend_db.enums import AppealStatus, Prediction, UserRole

from fairlend.schemas.auth import UserContext

CUSTOMER_ID = "customer-priya-001"
OTHER_CUSTOMER_ID = "customer-omar-002"
EMPLOYEE_ID = "employee-lena-010"


def customer(user_id: str = CUSTOMER_ID) -> UserContext:
    return UserContext(
        user_id=user_id,
        role=UserRole.CUSTOMER,
        email=f"{user_id}@example.com",
        name="Priya Shah",
    )


def employee() -> UserContext:
    return UserContext(
        user_id=EMPLOYEE_ID,
        role=UserRole.EMPLOYEE,
        email="lena@fairlend.example",
        name="Lena Brooks",
    )


def make_application(
    id=1,
    user_id=CUSTOMER_ID,
    prediction=Prediction.REJECTED,
    confidence=80,
    fairness_score=90,
    explanation="Debt-to-income ratio is too high.",
    name="Priya Shah",
):
    """Build an object shaped like a stored LoanApplication."""
    return SimpleNamespace(
        id=id,
        user_id=user_id,
        bank_name=None,
        name=name,
        age=34,
        gender="female",
        income=Decimal("42000.00"),
        credit_score=610,
        loan_amount=Decimal("50000.00"),
        loan_term_months=60,
        loan_purpose="home renovation",
        employment_status="employed",
        existing_loans=Decimal("12000.00"),
        savings_balance=Decimal("3000.00"),
        prediction=prediction,
        confidence=confidence,
        fairness_score=fairness_score,
        explanation=explanation,
        created_at=datetime(2026, 3, 1, 9, 30, tzinfo=UTC),
    )


def make_appeal(id=7, loan_id=1, user_id=CUSTOMER_ID, status=AppealStatus.PENDING, application=None):
    return SimpleNamespace(
        id=id,
        loan_id=loan_id,
        user_id=user_id,
        reason_codes={
            "prediction": "Rejected",
            "confidence": 80,
            "fairness_score": 90,
            "explanation": "Debt-to-income ratio is too high.",
        },
        status=status,
        review_comment=None,
        final_decision=None,
        reviewed_by=None,
        created_at=datetime(2026, 3, 2, 10, 0, tzinfo=UTC),
        reviewed_at=None,
        application=application,
    )


def make_notification(id=3, user_id=CUSTOMER_ID, message="Hello", read=False):
    return SimpleNamespace(
        id=id,
        user_id=user_id,
        message=message,
        read=read,
        created_at=datetime(2026, 3, 3, 8, 0, tzinfo=UTC),
    )
