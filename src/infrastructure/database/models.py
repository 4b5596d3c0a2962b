"""ORM models for users and their savings goals."""

from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Numeric,
    String,
    false,
    text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.domain.savings.types import GoalStatus
from src.infrastructure.constants import TAX_VAULT_UNIQUE_INDEX
from src.infrastructure.database.base import BaseModel


class User(BaseModel):
    """A freelancer account, as far as savings are concerned.

    ``tax_percentage`` mirrors the tax vault's ``savings_percentage`` and is
    written in the same transaction.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "tax_percentage >= 0 AND tax_percentage <= 100", name="tax_percentage_range"
        ),
    )

    external_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        doc="Subject the identity provider puts in bearer tokens",
    )
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    tax_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal(0), server_default=text("0")
    )

    savings_goals: Mapped[list["SavingsGoal"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class SavingsGoal(BaseModel):
    """A goal receiving a fixed percentage of every completed payment.

    The tax vault is a savings goal with ``is_tax_vault`` set. It has an
    unreachable target and never completes.
    """

    __tablename__ = "savings_goals"
    __table_args__ = (
        CheckConstraint("current_amount >= 0", name="current_amount_non_negative"),
        CheckConstraint("target_amount >= 0", name="target_amount_non_negative"),
        CheckConstraint(
            "savings_percentage >= 0 AND savings_percentage <= 100",
            name="savings_percentage_range",
        ),
        CheckConstraint("status IN ('in_progress', 'completed')", name="status_valid"),
        CheckConstraint(
            "NOT (is_tax_vault AND status = 'completed')", name="tax_vault_never_completed"
        ),
        Index(
            TAX_VAULT_UNIQUE_INDEX,
            "user_id",
            unique=True,
            postgresql_where=text("is_tax_vault"),
        ),
        Index("ix_savings_goals_user_id_is_active", "user_id", "is_active"),
    )

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(
        Numeric(20, 6), nullable=False, default=Decimal(0), server_default=text("0")
    )
    savings_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    is_tax_vault: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=GoalStatus.IN_PROGRESS.value,
        server_default=GoalStatus.IN_PROGRESS.value,
    )

    user: Mapped[User] = relationship(back_populates="savings_goals")
