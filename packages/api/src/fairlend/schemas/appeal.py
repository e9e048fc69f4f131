"""Schemas for appeal endpoints."""

from datetime import datetime

from fairlend_db.enums import AppealStatus, FinalDecision, Prediction
from pydantic import Field

from . import CamelModel


class ReasonCodes(CamelModel):
    """Snapshot of the AI decision an appeal was filed against."""

    prediction: Prediction
    confidence: int
    fairness_score: int
    explanation: str


class FileAppealRequest(CamelModel):
    """Request body for POST /api/appeals/."""

    loan_id: int
    user_id: str | None = Field(
        default=None,
        description="Appellant principal. Defaults to the authenticated user.",
    )
    reason_codes: ReasonCodes | None = None


class FileAppealResponse(CamelModel):
    success: bool
    appeal_id: int
    message: str


class ReviewAppealRequest(CamelModel):
    """Request body for POST /api/appeals/{id}/review."""

    review_comment: str = Field(min_length=1)
    final_decision: FinalDecision


class ReviewAppealResponse(CamelModel):
    success: bool
    message: str
    notified: bool


class AppealItem(CamelModel):
    """Single appeal with a summary of the application it refers to."""

    id: int
    loan_id: int
    user_id: str
    reason_codes: ReasonCodes
    status: AppealStatus
    review_comment: str | None = None
    final_decision: FinalDecision | None = None
    reviewed_by: str | None = None
    created_at: datetime | None = None
    reviewed_at: datetime | None = None
    applicant_name: str | None = None


class AppealListResponse(CamelModel):
    data: list[AppealItem]
