"""Initial schema with roles, users, daily logs, activity logs and reports.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role_id", "users", ["role_id"])

    op.create_table(
        "daily_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("is_present", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("binning_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("picking_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_items", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "log_date", name="uq_daily_logs_user_date"),
    )
    op.create_index("ix_daily_logs_user_id", "daily_logs", ["user_id"])
    op.create_index("ix_daily_logs_log_date", "daily_logs", ["log_date"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "activity_time",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "data_type",
            sa.Enum(
                "binning",
                "picking",
                "attendance",
                "daily_log",
                name="activity_data_type",
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("success", "failure", name="activity_status", create_constraint=True),
            nullable=False,
        ),
        sa.Column("change_history", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])
    op.create_index("ix_activity_logs_data_type", "activity_logs", ["data_type"])
    op.create_index("ix_activity_logs_user_time", "activity_logs", ["user_id", "activity_time"])
    op.create_index(
        "ix_activity_logs_type_time", "activity_logs", ["data_type", "activity_time"]
    )

    op.create_table(
        "targets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("daily_target", sa.Integer(), nullable=False),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_to", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_targets_effective_from", "targets", ["effective_from"])

    op.create_table(
        "report_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column(
            "report_type",
            sa.Enum("daily", "weekly", "monthly", name="report_type", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "export_format",
            sa.Enum("excel", "pdf", name="export_format", create_constraint=True),
            nullable=False,
        ),
        sa.Column("email_to", sa.String(length=255), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "processing",
                "completed",
                "failed",
                name="report_status",
                create_constraint=True,
            ),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
    )
    op.create_index("ix_report_requests_user_id", "report_requests", ["user_id"])

    op.create_table(
        "token_blacklist",
        sa.Column("token_hash", sa.String(64), primary_key=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_token_blacklist_expires_at", "token_blacklist", ["expires_at"])


def downgrade() -> None:
    op.drop_table("token_blacklist")
    op.drop_table("report_requests")
    op.drop_table("targets")
    op.drop_table("activity_logs")
    op.drop_table("daily_logs")
    op.drop_table("users")
    op.drop_table("roles")

    for enum_name in (
        "report_status",
        "export_format",
        "report_type",
        "activity_status",
        "activity_data_type",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
