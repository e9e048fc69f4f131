"""create decision and appeal tables

Revision ID: 3f1c2a9d7e10
Revises:
Create Date: 2026-10-19 09:12:44.310215

"""

import sqlalchemy as sa
from alembic import op

revision = "3f1c2a9d7e10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "loan_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("bank_name", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("gender", sa.String(50), nullable=False),
        sa.Column("income", sa.Numeric(14, 2), nullable=False),
        sa.Column("credit_score", sa.Integer(), nullable=False),
        sa.Column("loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("loan_term_months", sa.Integer(), nullable=False),
        sa.Column("loan_purpose", sa.String(255), nullable=False),
        sa.Column("employment_status", sa.String(100), nullable=False),
        sa.Column("existing_loans", sa.Numeric(14, 2), nullable=False),
        sa.Column("savings_balance", sa.Numeric(14, 2), nullable=False),
        sa.Column("prediction", sa.String(8), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("fairness_score", sa.Integer(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("confidence BETWEEN 0 AND 100", name="ck_loan_applications_confidence"),
        sa.CheckConstraint(
            "fairness_score BETWEEN 0 AND 100", name="ck_loan_applications_fairness_score"
        ),
    )
    op.create_index("ix_loan_applications_user_id", "loan_applications", ["user_id"])

    op.create_table(
        "approved_loans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("monthly_installment", sa.Float(), nullable=False),
        sa.Column("next_notification_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["application_id"], ["loan_applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_approved_loans_application_id", "approved_loans", ["application_id"], unique=True
    )

    op.create_table(
        "appeals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("loan_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("reason_codes", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(8), nullable=False, server_default="pending"),
        sa.Column("review_comment", sa.Text(), nullable=True),
        sa.Column("final_decision", sa.String(21), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["loan_id"], ["loan_applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(status = 'pending' AND review_comment IS NULL AND final_decision IS NULL "
            "AND reviewed_at IS NULL) OR (status = 'reviewed' AND review_comment IS NOT NULL "
            "AND final_decision IS NOT NULL AND reviewed_at IS NOT NULL)",
            name="ck_appeals_review_fields",
        ),
    )
    op.create_index("ix_appeals_loan_id", "appeals", ["loan_id"])
    op.create_index("ix_appeals_user_id", "appeals", ["user_id"])
    op.create_index("ix_appeals_status", "appeals", ["status"])
    op.create_index(
        "uq_appeals_pending_per_loan",
        "appeals",
        ["loan_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_index("uq_appeals_pending_per_loan", table_name="appeals")
    op.drop_table("appeals")
    op.drop_table("approved_loans")
    op.drop_table("loan_applications")
