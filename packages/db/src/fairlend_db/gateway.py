"""Persistence gateway -- typed operations over the four FairLend tables.

Every function takes the caller's AsyncSession, commits its own unit of work,
and re-reads from the database instead of trusting objects cached on the
session. SQLAlchemy failures are rolled back and re-raised as
PersistenceError so the service layer never has to know about driver errors.

The only compare-and-swap write is ``review_appeal_if_pending``; everything
else has a single logical writer per lifecycle stage.
"""

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .enums import AppealStatus, FinalDecision, Prediction
from .models import Appeal, ApprovedLoan, LoanApplication, Notification

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A read or write against the database failed."""

    def __init__(self, operation: str, detail: str | None = None) -> None:
        self.operation = operation
        self.detail = detail or f"Database operation '{operation}' failed"
        super().__init__(self.detail)


class UniqueViolation(PersistenceError):
    """A write was rejected by a uniqueness constraint."""


@asynccontextmanager
async def _guard(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Roll back and translate SQLAlchemy errors raised inside the block."""
    try:
        yield
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("Constraint violation during %s: %s", operation, exc.orig)
        raise UniqueViolation(operation, f"Constraint violated during '{operation}'") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Database error during %s", operation, exc_info=True)
        raise PersistenceError(operation) from exc


# ---------------------------------------------------------------------------
# loan_applications
# ---------------------------------------------------------------------------


async def insert_loan_application(
    session: AsyncSession,
    *,
    user_id: str,
    name: str,
    age: int,
    gender: str,
    income: Decimal,
    credit_score: int,
    loan_amount: Decimal,
    loan_term_months: int,
    loan_purpose: str,
    employment_status: str,
    existing_loans: Decimal,
    savings_balance: Decimal,
    prediction: Prediction,
    confidence: int,
    fairness_score: int,
    explanation: str,
    bank_name: str | None = None,
) -> LoanApplication:
    """Insert an application together with its decision and commit."""
    application = LoanApplication(
        user_id=user_id,
        bank_name=bank_name,
        name=name,
        age=age,
        gender=gender,
        income=income,
        credit_score=credit_score,
        loan_amount=loan_amount,
        loan_term_months=loan_term_months,
        loan_purpose=loan_purpose,
        employment_status=employment_status,
        existing_loans=existing_loans,
        savings_balance=savings_balance,
        prediction=prediction,
        confidence=confidence,
        fairness_score=fairness_score,
        explanation=explanation,
    )
    async with _guard(session, "insert_loan_application"):
        session.add(application)
        await session.commit()
        await session.refresh(application)
    return application


async def get_loan_application(session: AsyncSession, application_id: int) -> LoanApplication | None:
    async with _guard(session, "get_loan_application"):
        result = await session.execute(
            select(LoanApplication).where(LoanApplication.id == application_id)
        )
        return result.scalar_one_or_none()


async def list_applicant_ids(session: AsyncSession) -> list[str]:
    """Return the distinct principals that have submitted at least one application."""
    async with _guard(session, "list_applicant_ids"):
        result = await session.execute(
            select(LoanApplication.user_id).distinct().order_by(LoanApplication.user_id)
        )
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# approved_loans
# ---------------------------------------------------------------------------


async def insert_approved_loan(
    session: AsyncSession,
    *,
    application_id: int,
    name: str,
    loan_amount: Decimal,
    monthly_installment: float,
    next_notification_date: datetime,
) -> ApprovedLoan:
    approved = ApprovedLoan(
        application_id=application_id,
        name=name,
        loan_amount=loan_amount,
        monthly_installment=monthly_installment,
        next_notification_date=next_notification_date,
    )
    async with _guard(session, "insert_approved_loan"):
        session.add(approved)
        await session.commit()
        await session.refresh(approved)
    return approved


async def get_approved_loan(session: AsyncSession, application_id: int) -> ApprovedLoan | None:
    async with _guard(session, "get_approved_loan"):
        result = await session.execute(
            select(ApprovedLoan).where(ApprovedLoan.application_id == application_id)
        )
        return result.scalar_one_or_none()


async def list_approved_loans(
    session: AsyncSession,
    *,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[ApprovedLoan], int]:
    """Return a page of approved loans ordered by next notification date."""
    async with _guard(session, "list_approved_loans"):
        total = (await session.execute(select(func.count(ApprovedLoan.id)))).scalar() or 0
        result = await session.execute(
            select(ApprovedLoan)
            .order_by(ApprovedLoan.next_notification_date.asc(), ApprovedLoan.id.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total


# ---------------------------------------------------------------------------
# appeals
# ---------------------------------------------------------------------------


async def insert_appeal(
    session: AsyncSession,
    *,
    loan_id: int,
    user_id: str,
    reason_codes: dict,
) -> Appeal:
    """Insert a pending appeal.

    Raises UniqueViolation when the loan already has a pending appeal.
    """
    appeal = Appeal(
        loan_id=loan_id,
        user_id=user_id,
        reason_codes=reason_codes,
        status=AppealStatus.PENDING,
    )
    async with _guard(session, "insert_appeal"):
        session.add(appeal)
        await session.commit()
        await session.refresh(appeal)
    return appeal


async def get_appeal(session: AsyncSession, appeal_id: int) -> Appeal | None:
    async with _guard(session, "get_appeal"):
        result = await session.execute(
            select(Appeal)
            .options(selectinload(Appeal.application))
            .where(Appeal.id == appeal_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


async def get_pending_appeal_for_loan(session: AsyncSession, loan_id: int) -> Appeal | None:
    async with _guard(session, "get_pending_appeal_for_loan"):
        result = await session.execute(
            select(Appeal).where(
                Appeal.loan_id == loan_id,
                Appeal.status == AppealStatus.PENDING,
            )
        )
        return result.scalar_one_or_none()


async def list_appeals(
    session: AsyncSession,
    *,
    user_id: str | None = None,
    status: AppealStatus | None = None,
) -> list[Appeal]:
    """Return appeals newest first, optionally filtered by principal and status."""
    stmt = select(Appeal).options(selectinload(Appeal.application))
    if user_id is not None:
        stmt = stmt.where(Appeal.user_id == user_id)
    if status is not None:
        stmt = stmt.where(Appeal.status == status)
    stmt = stmt.order_by(Appeal.created_at.desc(), Appeal.id.desc()).execution_options(
        populate_existing=True
    )
    async with _guard(session, "list_appeals"):
        result = await session.execute(stmt)
        return list(result.scalars().all())


async def review_appeal_if_pending(
    session: AsyncSession,
    appeal_id: int,
    *,
    review_comment: str,
    final_decision: FinalDecision,
    reviewed_at: datetime,
    reviewed_by: str | None = None,
) -> bool:
    """Move an appeal from pending to reviewed in a single conditional UPDATE.

    Returns True if this call performed the transition, False if the appeal
    does not exist or was no longer pending. The UPDATE is the first statement
    of its transaction so concurrent reviewers serialize on the row.
    """
    stmt = (
        update(Appeal)
        .where(Appeal.id == appeal_id, Appeal.status == AppealStatus.PENDING)
        .values(
            status=AppealStatus.REVIEWED,
            review_comment=review_comment,
            final_decision=final_decision,
            reviewed_at=reviewed_at,
            reviewed_by=reviewed_by,
        )
        .execution_options(synchronize_session=False)
    )
    async with _guard(session, "review_appeal"):
        result = await session.execute(stmt)
        won = result.rowcount == 1
        await session.commit()
    return won


# ---------------------------------------------------------------------------
# notifications
# ---------------------------------------------------------------------------


async def insert_notification(session: AsyncSession, *, user_id: str, message: str) -> Notification:
    notification = Notification(user_id=user_id, message=message, read=False)
    async with _guard(session, "insert_notification"):
        session.add(notification)
        await session.commit()
        await session.refresh(notification)
    return notification


async def insert_notifications(session: AsyncSession, *, user_ids: Iterable[str], message: str) -> int:
    """Insert one notification per principal in a single transaction."""
    rows = [Notification(user_id=user_id, message=message, read=False) for user_id in user_ids]
    if not rows:
        return 0
    async with _guard(session, "insert_notifications"):
        session.add_all(rows)
        await session.commit()
    return len(rows)


async def get_notification(session: AsyncSession, notification_id: int) -> Notification | None:
    async with _guard(session, "get_notification"):
        result = await session.execute(
            select(Notification)
            .where(Notification.id == notification_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


async def mark_notification_read(session: AsyncSession, notification_id: int) -> Notification | None:
    """Set read=true. Already-read rows are left untouched.

    Returns None if the notification does not exist.
    """
    notification = await get_notification(session, notification_id)
    if notification is None:
        return None
    if notification.read:
        return notification

    async with _guard(session, "mark_notification_read"):
        notification.read = True
        await session.commit()
        await session.refresh(notification)
    return notification


async def list_notifications(
    session: AsyncSession,
    *,
    user_id: str,
    unread_only: bool = False,
) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
    async with _guard(session, "list_notifications"):
        result = await session.execute(stmt)
        return list(result.scalars().all())
