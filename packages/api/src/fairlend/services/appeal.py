"""Appeal workflow service.

An appeal moves NONE -> PENDING -> REVIEWED and never leaves REVIEWED.
Filing is only valid against a rejected application with no other pending
appeal; the reason codes are snapshotted from the stored decision at filing
time. Review is a conditional write (only while still pending) so that of
two concurrent reviewers exactly one wins and only the winner notifies the
customer.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from fairlend_db import Appeal, LoanApplication, Notification, PersistenceError, UniqueViolation
from fairlend_db.enums import AppealStatus, FinalDecision, Prediction
from fairlend_db.gateway import (
    get_appeal,
    get_loan_application,
    get_pending_appeal_for_loan,
    insert_appeal,
    list_appeals,
    review_appeal_if_pending,
)
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError, PreconditionViolation, ValidationError
from ..schemas.appeal import ReasonCodes
from .notification import notify

logger = logging.getLogger(__name__)

APPEAL_FILED_MESSAGE = "Your appeal has been submitted. A bank officer will review it."


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of a committed review.

    ``notification`` is None when the review was recorded but the customer
    notification could not be written.
    """

    appeal_id: int
    final_decision: FinalDecision
    notification: Notification | None

    @property
    def notified(self) -> bool:
        return self.notification is not None


def snapshot_reason_codes(application: LoanApplication) -> ReasonCodes:
    """Freeze the decision an appeal is filed against."""
    return ReasonCodes(
        prediction=application.prediction,
        confidence=application.confidence,
        fairness_score=application.fairness_score,
        explanation=application.explanation,
    )


def build_review_message(final_decision: FinalDecision, review_comment: str) -> str:
    return (
        f"Your appeal has been reviewed. Decision: {final_decision.label}. {review_comment}"
    )


async def file_appeal(
    session: AsyncSession,
    loan_id: int,
    user_id: str,
    reason_codes: ReasonCodes | None = None,
) -> Appeal:
    """Open a pending appeal against a rejected application.

    Raises NotFoundError if the application does not exist and
    PreconditionViolation if it was approved or already has a pending appeal.
    """
    if not user_id or not user_id.strip():
        raise ValidationError("An appellant principal (user_id) is required")

    application = await get_loan_application(session, loan_id)
    if application is None:
        raise NotFoundError(f"Loan application #{loan_id} not found")

    if application.prediction != Prediction.REJECTED:
        raise PreconditionViolation(
            f"Loan application #{loan_id} was {application.prediction.value}; "
            "only rejected applications can be appealed."
        )

    snapshot = snapshot_reason_codes(application)
    if reason_codes is not None and reason_codes != snapshot:
        logger.warning(
            "Appeal for loan #%s supplied reason codes that differ from the stored decision; "
            "using the stored decision",
            loan_id,
        )

    if await get_pending_appeal_for_loan(session, loan_id) is not None:
        raise PreconditionViolation(f"Loan application #{loan_id} already has a pending appeal.")

    try:
        appeal = await insert_appeal(
            session,
            loan_id=loan_id,
            user_id=user_id,
            reason_codes=snapshot.model_dump(mode="json"),
        )
    except UniqueViolation as exc:
        # Lost a race with another filing for the same loan.
        raise PreconditionViolation(
            f"Loan application #{loan_id} already has a pending appeal."
        ) from exc

    logger.info("Appeal #%s filed for loan #%s by %s", appeal.id, loan_id, user_id)
    return appeal


async def review_appeal(
    session: AsyncSession,
    appeal_id: int,
    review_comment: str,
    final_decision: FinalDecision,
    *,
    reviewer_id: str | None = None,
) -> ReviewOutcome:
    """Resolve a pending appeal and notify the appellant.

    Raises NotFoundError for an unknown appeal and PreconditionViolation when
    the appeal is no longer pending (already reviewed, or another reviewer
    won the race). A notification failure after the review has committed is
    logged and reported through ``ReviewOutcome.notified``.
    """
    if not review_comment or not review_comment.strip():
        raise ValidationError("A review comment is required")

    won = await review_appeal_if_pending(
        session,
        appeal_id,
        review_comment=review_comment,
        final_decision=final_decision,
        reviewed_at=datetime.now(UTC),
        reviewed_by=reviewer_id,
    )

    if not won:
        existing = await get_appeal(session, appeal_id)
        if existing is None:
            raise NotFoundError(f"Appeal #{appeal_id} not found")
        raise PreconditionViolation(f"Appeal #{appeal_id} has already been reviewed.")

    logger.info(
        "Appeal #%s reviewed by %s: %s", appeal_id, reviewer_id or "unknown", final_decision.value
    )

    try:
        appeal = await get_appeal(session, appeal_id)
        notification = await notify(
            session, appeal.user_id, build_review_message(final_decision, review_comment)
        )
    except PersistenceError:
        logger.exception("Appeal #%s reviewed but the customer could not be notified", appeal_id)
        notification = None

    return ReviewOutcome(
        appeal_id=appeal_id,
        final_decision=final_decision,
        notification=notification,
    )


async def list_appeals_for_user(session: AsyncSession, user_id: str) -> list[Appeal]:
    """Return the principal's appeals, newest first."""
    return await list_appeals(session, user_id=user_id)


async def list_pending_appeals(session: AsyncSession) -> list[Appeal]:
    """Return the review queue, newest first."""
    return await list_appeals(session, status=AppealStatus.PENDING)
