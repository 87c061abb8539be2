"""User Credit Account Domain Entity

Tracks the prepaid credit balance of a single user. Each user has exactly one
account, created lazily with a zero balance on first access.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, BigInteger, Integer
from src.domain.base import BaseModel, IdType


class UserCreditAccount(BaseModel, table=True):
    """
    User Credit Account - One balance row per user

    Domain Rules:
    - One account per user (user_id is unique)
    - Balance must be non-negative
    - Balance equals the sum of the user's CreditTransaction amounts
    - lifetime_purchased grows only on purchase credits
    - lifetime_used grows only on usage debits
    - Mutated exclusively through the credit use cases, never deleted
    """

    __tablename__ = "user_credit_accounts"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='balance_non_negative'),
        CheckConstraint('lifetime_purchased >= 0', name='lifetime_purchased_non_negative'),
        CheckConstraint('lifetime_used >= 0', name='lifetime_used_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique account identifier (auto-increment)"
    )

    user_id: int = Field(
        sa_column=Column(BigInteger, unique=True, index=True, nullable=False),
        description="Owning user ID (unique - one account per user)"
    )

    balance: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Current credit balance (must be >= 0)"
    )

    lifetime_purchased: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Total credits ever purchased"
    )

    lifetime_used: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Total credits ever consumed"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )
