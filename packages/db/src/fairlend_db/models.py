"""
FairLend -- domain models

Loan applications with their AI decision, the derived approved-loan
schedule, customer appeals, and customer notifications.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    Index,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    false,
    func,
    text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import AppealStatus, FinalDecision, Prediction


class LoanApplication(Base):
    """Submitted loan application and the AI decision made on it.

    Decision columns (prediction, confidence, fairness_score, explanation)
    are written once at insert time and never updated.
    """

    __tablename__ = "loan_applications"
    __table_args__ = (
        CheckConstraint("confidence BETWEEN 0 AND 100", name="ck_loan_applications_confidence"),
        CheckConstraint(
            "fairness_score BETWEEN 0 AND 100", name="ck_loan_applications_fairness_score"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    bank_name = Column(String(255), nullable=True)

    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(String(50), nullable=False)
    income = Column(Numeric(14, 2), nullable=False)
    credit_score = Column(Integer, nullable=False)
    loan_amount = Column(Numeric(14, 2), nullable=False)
    loan_term_months = Column(Integer, nullable=False)
    loan_purpose = Column(String(255), nullable=False)
    employment_status = Column(String(100), nullable=False)
    existing_loans = Column(Numeric(14, 2), nullable=False)
    savings_balance = Column(Numeric(14, 2), nullable=False)

    prediction = Column(
        Enum(Prediction, name="prediction", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    confidence = Column(Integer, nullable=False)
    fairness_score = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    approved_loan = relationship(
        "ApprovedLoan", back_populates="application", uselist=False,
    )
    appeals = relationship("Appeal", back_populates="application")

    def __repr__(self):
        return f"<LoanApplication(id={self.id}, prediction='{self.prediction}')>"


class ApprovedLoan(Base):
    """Repayment schedule derived from an approved application (1:1)."""

    __tablename__ = "approved_loans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer,
        ForeignKey("loan_applications.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    name = Column(String(255), nullable=False)
    loan_amount = Column(Numeric(14, 2), nullable=False)
    monthly_installment = Column(Float, nullable=False)
    next_notification_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("LoanApplication", back_populates="approved_loan")

    def __repr__(self):
        return (
            f"<ApprovedLoan(id={self.id}, application_id={self.application_id}, "
            f"installment={self.monthly_installment})>"
        )


class Appeal(Base):
    """Customer appeal against a rejected application.

    review_comment, final_decision and reviewed_at are NULL while
    status is pending and all set once it is reviewed.
    """

    __tablename__ = "appeals"
    __table_args__ = (
        # At most one open appeal per loan; reviewed appeals do not count.
        Index(
            "uq_appeals_pending_per_loan",
            "loan_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        CheckConstraint(
            "(status = 'pending' AND review_comment IS NULL AND final_decision IS NULL "
            "AND reviewed_at IS NULL) OR (status = 'reviewed' AND review_comment IS NOT NULL "
            "AND final_decision IS NOT NULL AND reviewed_at IS NOT NULL)",
            name="ck_appeals_review_fields",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(
        Integer,
        ForeignKey("loan_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(255), nullable=False, index=True)
    reason_codes = Column(JSON, nullable=False)
    status = Column(
        Enum(AppealStatus, name="appeal_status", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppealStatus.PENDING,
        index=True,
    )
    review_comment = Column(Text, nullable=True)
    final_decision = Column(
        Enum(FinalDecision, name="final_decision", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    reviewed_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    application = relationship("LoanApplication", back_populates="appeals")

    def __repr__(self):
        return f"<Appeal(id={self.id}, loan_id={self.loan_id}, status='{self.status}')>"


class Notification(Base):
    """Message delivered to a customer principal."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id='{self.user_id}', read={self.read})>"
