"""Schemas for loan application submission and retrieval."""

from datetime import datetime
from decimal import Decimal

from fairlend_db.enums import Prediction
from pydantic import AliasChoices, Field

from . import CamelModel, Pagination


class ApplicationInput(CamelModel):
    """Validated applicant data submitted for an AI decision."""

    name: str = Field(min_length=1, max_length=255)
    age: int = Field(ge=18, le=120)
    gender: str = Field(min_length=1, max_length=50)
    income: Decimal = Field(ge=0, description="Annual income.")
    credit_score: int = Field(ge=300, le=900)
    loan_amount: Decimal = Field(gt=0)
    loan_term_months: int = Field(
        gt=0,
        le=600,
        validation_alias=AliasChoices("loanTermMonths", "loanTerm", "loan_term_months"),
    )
    loan_purpose: str = Field(min_length=1, max_length=255)
    employment_status: str = Field(min_length=1, max_length=100)
    existing_loans: Decimal = Field(ge=0, description="Outstanding balance on existing loans.")
    savings_balance: Decimal = Field(ge=0)
    bank_name: str | None = Field(
        default=None,
        max_length=255,
        description="Lender the applicant selected, if any.",
    )


class DecisionResponse(CamelModel):
    """Response for POST /api/applications/."""

    prediction: Prediction
    confidence: int
    fairness_score: int
    explanation: str
    application_id: int


class ApplicationItem(CamelModel):
    """Stored application with its decision."""

    id: int
    user_id: str
    bank_name: str | None = None
    name: str
    age: int
    gender: str
    income: Decimal
    credit_score: int
    loan_amount: Decimal
    loan_term_months: int
    loan_purpose: str
    employment_status: str
    existing_loans: Decimal
    savings_balance: Decimal
    prediction: Prediction
    confidence: int
    fairness_score: int
    explanation: str
    created_at: datetime | None = None


class ApprovedLoanItem(CamelModel):
    id: int
    application_id: int
    name: str
    loan_amount: Decimal
    monthly_installment: float
    next_notification_date: datetime


class ApprovedLoanListResponse(CamelModel):
    """Response for GET /api/applications/approved."""

    data: list[ApprovedLoanItem]
    pagination: Pagination
