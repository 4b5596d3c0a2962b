"""initial schema: users and savings_goals

Revision ID: 0001
Revises:
Create Date: 2026-01-15
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column(
            "tax_percentage", sa.Numeric(5, 2), server_default=sa.text("0"), nullable=False
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "tax_percentage >= 0 AND tax_percentage <= 100",
            name=op.f("ck_users_tax_percentage_range"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("external_id", name=op.f("uq_users_external_id")),
    )

    op.create_table(
        "savings_goals",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("target_amount", sa.Numeric(20, 2), nullable=False),
        sa.Column(
            "current_amount", sa.Numeric(20, 6), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("savings_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("is_tax_vault", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column(
            "status", sa.String(length=20), server_default="in_progress", nullable=False
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "current_amount >= 0", name=op.f("ck_savings_goals_current_amount_non_negative")
        ),
        sa.CheckConstraint(
            "target_amount >= 0", name=op.f("ck_savings_goals_target_amount_non_negative")
        ),
        sa.CheckConstraint(
            "savings_percentage >= 0 AND savings_percentage <= 100",
            name=op.f("ck_savings_goals_savings_percentage_range"),
        ),
        sa.CheckConstraint(
            "status IN ('in_progress', 'completed')",
            name=op.f("ck_savings_goals_status_valid"),
        ),
        sa.CheckConstraint(
            "NOT (is_tax_vault AND status = 'completed')",
            name=op.f("ck_savings_goals_tax_vault_never_completed"),
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_savings_goals_user_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_savings_goals")),
    )
    op.create_index(
        "uq_savings_goals_user_tax_vault",
        "savings_goals",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_tax_vault"),
    )
    op.create_index(
        "ix_savings_goals_user_id_is_active",
        "savings_goals",
        ["user_id", "is_active"],
    )


def downgrade() -> None:
    op.drop_index("ix_savings_goals_user_id_is_active", table_name="savings_goals")
    op.drop_index("uq_savings_goals_user_tax_vault", table_name="savings_goals")
    op.drop_table("savings_goals")
    op.drop_table("users")
