"""Appeal routes: customers file against rejections, staff review."""

from fairlend_db import Appeal, get_db
from fairlend_db.enums import UserRole
from fairlend_db.gateway import get_loan_application
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError
from ..middleware.auth import CurrentUser, require_roles
from ..schemas.appeal import (
    AppealItem,
    AppealListResponse,
    FileAppealRequest,
    FileAppealResponse,
    ReviewAppealRequest,
    ReviewAppealResponse,
)
from ..services import appeal as appeal_service

router = APIRouter()


def _build_appeal_item(appeal: Appeal) -> AppealItem:
    item = AppealItem.model_validate(appeal, from_attributes=True)
    if appeal.application is not None:
        item.applicant_name = appeal.application.name
    return item


@router.post(
    "/",
    response_model=FileAppealResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.CUSTOMER))],
)
async def file_appeal(
    body: FileAppealRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> FileAppealResponse:
    """File an appeal against a rejected application."""
    appellant = body.user_id or user.user_id
    if not user.is_staff:
        if appellant != user.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Cannot file an appeal on behalf of another user",
            )
        application = await get_loan_application(session, body.loan_id)
        if application is None or application.user_id != user.user_id:
            raise NotFoundError(f"Loan application #{body.loan_id} not found")

    appeal = await appeal_service.file_appeal(
        session, body.loan_id, appellant, reason_codes=body.reason_codes
    )
    return FileAppealResponse(
        success=True,
        appeal_id=appeal.id,
        message=appeal_service.APPEAL_FILED_MESSAGE,
    )


@router.get(
    "/mine",
    response_model=AppealListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.CUSTOMER))],
)
async def list_my_appeals(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AppealListResponse:
    """List the current user's appeals, newest first."""
    appeals = await appeal_service.list_appeals_for_user(session, user.user_id)
    return AppealListResponse(data=[_build_appeal_item(a) for a in appeals])


@router.get(
    "/pending",
    response_model=AppealListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.EMPLOYEE))],
)
async def list_pending_appeals(
    session: AsyncSession = Depends(get_db),
) -> AppealListResponse:
    """Review queue: all pending appeals, newest first."""
    appeals = await appeal_service.list_pending_appeals(session)
    return AppealListResponse(data=[_build_appeal_item(a) for a in appeals])


@router.post(
    "/{appeal_id}/review",
    response_model=ReviewAppealResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.EMPLOYEE))],
)
async def review_appeal(
    appeal_id: int,
    body: ReviewAppealRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReviewAppealResponse:
    """Record the reviewer's decision and notify the appellant."""
    outcome = await appeal_service.review_appeal(
        session,
        appeal_id,
        body.review_comment,
        body.final_decision,
        reviewer_id=user.user_id,
    )
    if outcome.notified:
        message = "Appeal reviewed and customer notified."
    else:
        message = "Appeal reviewed; customer notification could not be delivered."
    return ReviewAppealResponse(success=True, message=message, notified=outcome.notified)
