"""Loan decision service.

Turns a validated application into an AI prompt, makes a single completion
call, parses the reply into a Decision and records it. The LoanApplication
write is mandatory: if it fails the whole call fails and nothing is returned.
For approved applications an ApprovedLoan repayment schedule is written
afterwards on a best-effort basis; its failure is logged and swallowed.
"""

import logging
from datetime import timedelta
from decimal import Decimal

from fairlend_db import LoanApplication, PersistenceError
from fairlend_db.enums import Prediction
from fairlend_db.gateway import insert_approved_loan, insert_loan_application
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import ValidationError
from ..inference.client import get_completion
from ..schemas.application import ApplicationInput
from .decision_parser import Decision, parse

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a fair and ethical loan officer AI. "
    "Provide objective financial assessments without bias."
)

PROMPT_TEMPLATE = """\
You are an expert loan officer with deep knowledge of financial risk assessment. \
Analyze this loan application and provide a fair, unbiased decision.

Application Details:
- Name: {name}
- Age: {age}
- Gender: {gender}
- Annual Income: ${income}
- Credit Score: {credit_score}
- Loan Amount Requested: ${loan_amount}
- Loan Term: {loan_term_months} months
- Loan Purpose: {loan_purpose}
- Employment Status: {employment_status}
- Existing Loans: ${existing_loans}
- Savings Balance: ${savings_balance}
{bank_line}
Provide your analysis in the following format:
1. Decision: APPROVED or REJECTED
2. Confidence Level: (percentage from 0-100)
3. Fairness Score: (percentage from 0-100, indicating how unbiased this decision is)
4. Explanation: (2-3 sentences explaining the key factors in your decision)

Important: Base your decision only on financial factors. Do not discriminate based on \
age or gender. Focus on debt-to-income ratio, creditworthiness, savings, and loan terms."""


def build_prompt(application: ApplicationInput) -> str:
    """Render the user prompt for an application. Deterministic for equal input."""
    bank_line = f"- Selected Bank: {application.bank_name}\n" if application.bank_name else ""
    return PROMPT_TEMPLATE.format(
        name=application.name,
        age=application.age,
        gender=application.gender,
        income=application.income,
        credit_score=application.credit_score,
        loan_amount=application.loan_amount,
        loan_term_months=application.loan_term_months,
        loan_purpose=application.loan_purpose,
        employment_status=application.employment_status,
        existing_loans=application.existing_loans,
        savings_balance=application.savings_balance,
        bank_line=bank_line,
    )


def build_messages(application: ApplicationInput) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(application)},
    ]


def compute_monthly_installment(
    loan_amount: Decimal | float,
    loan_term_months: int,
    rate: float | None = None,
) -> float:
    """Flat-rate installment: loan_amount * (1 + rate) / loan_term_months."""
    if loan_term_months <= 0:
        raise ValidationError("loan_term_months must be positive")
    rate = settings.APPROVED_LOAN_RATE if rate is None else rate
    return float(loan_amount) * (1 + rate) / loan_term_months


async def _record_approved_loan(session: AsyncSession, application: LoanApplication) -> None:
    """Write the derived repayment schedule. Failures are logged, not raised."""
    try:
        approved = await insert_approved_loan(
            session,
            application_id=application.id,
            name=application.name,
            loan_amount=application.loan_amount,
            monthly_installment=compute_monthly_installment(
                application.loan_amount, application.loan_term_months
            ),
            next_notification_date=application.created_at
            + timedelta(days=settings.NOTIFICATION_INTERVAL_DAYS),
        )
    except PersistenceError:
        logger.exception(
            "Failed to record approved loan for application #%s; decision stands",
            application.id,
        )
        return
    logger.info(
        "Approved loan #%s scheduled for application #%s (installment=%.2f)",
        approved.id,
        application.id,
        approved.monthly_installment,
    )


async def decide(
    session: AsyncSession,
    application: ApplicationInput,
    *,
    user_id: str,
) -> LoanApplication:
    """Run one AI decision for an application and persist it.

    Returns the stored LoanApplication. Raises ConfigurationError or one of
    the Upstream* errors when the AI call cannot be made or fails, and
    PersistenceError when the decision cannot be recorded; in every error
    case no decision is reported to the caller.
    """
    if not user_id or not user_id.strip():
        raise ValidationError("An applicant principal (user_id) is required")

    raw_text = await get_completion(build_messages(application))
    decision: Decision = parse(raw_text)
    logger.info(
        "AI decision for applicant %s: %s (confidence=%s, fairness=%s)",
        user_id,
        decision.prediction.value,
        decision.confidence,
        decision.fairness_score,
    )

    record = await insert_loan_application(
        session,
        user_id=user_id,
        bank_name=application.bank_name,
        name=application.name,
        age=application.age,
        gender=application.gender,
        income=application.income,
        credit_score=application.credit_score,
        loan_amount=application.loan_amount,
        loan_term_months=application.loan_term_months,
        loan_purpose=application.loan_purpose,
        employment_status=application.employment_status,
        existing_loans=application.existing_loans,
        savings_balance=application.savings_balance,
        prediction=decision.prediction,
        confidence=decision.confidence,
        fairness_score=decision.fairness_score,
        explanation=decision.explanation,
    )
    # Detach the committed row so a rollback in the advisory write below
    # cannot expire the attributes the caller is about to read.
    session.expunge(record)

    if record.prediction == Prediction.APPROVED:
        await _record_approved_loan(session, record)

    return record
