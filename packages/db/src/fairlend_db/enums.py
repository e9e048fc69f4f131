"""
Domain enums for the loan decision and appeal lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class Prediction(str, enum.Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"


class AppealStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"


class FinalDecision(str, enum.Enum):
    APPROVED_AFTER_REVIEW = "approved_after_review"
    REJECTED_AI_STANDS = "rejected_ai_stands"

    @property
    def label(self) -> str:
        """Human-readable outcome used in customer messages."""
        if self is FinalDecision.APPROVED_AFTER_REVIEW:
            return "Approved"
        return "Rejected - AI Result Stands"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
    EMPLOYEE = "employee"
