"""Loan application routes: submit for an AI decision, read back, list approvals."""

from fairlend_db import LoanApplication, get_db
from fairlend_db.enums import UserRole
from fairlend_db.gateway import get_loan_application, list_approved_loans
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationInput,
    ApplicationItem,
    ApprovedLoanItem,
    ApprovedLoanListResponse,
    DecisionResponse,
)
from ..services import loan_decision

router = APIRouter()


def _build_decision_response(record: LoanApplication) -> DecisionResponse:
    return DecisionResponse(
        prediction=record.prediction,
        confidence=record.confidence,
        fairness_score=record.fairness_score,
        explanation=record.explanation,
        application_id=record.id,
    )


@router.post(
    "/",
    response_model=DecisionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.CUSTOMER))],
)
async def submit_application(
    body: ApplicationInput,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DecisionResponse:
    """Run the AI decision for an application and record it."""
    record = await loan_decision.decide(session, body, user_id=user.user_id)
    return _build_decision_response(record)


@router.get(
    "/approved",
    response_model=ApprovedLoanListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.EMPLOYEE))],
)
async def list_approved(
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> ApprovedLoanListResponse:
    """List approved loans ordered by next notification date."""
    loans, total = await list_approved_loans(session, offset=offset, limit=limit)
    return ApprovedLoanListResponse(
        data=[ApprovedLoanItem.model_validate(loan, from_attributes=True) for loan in loans],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationItem,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.CUSTOMER, UserRole.EMPLOYEE))],
)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationItem:
    """Get a single application. Returns 404 for out-of-scope resources."""
    record = await get_loan_application(session, application_id)
    if record is None or (not user.is_staff and record.user_id != user.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return ApplicationItem.model_validate(record, from_attributes=True)
