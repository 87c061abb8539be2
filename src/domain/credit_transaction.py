"""Credit Transaction Domain Entity

Immutable append-only audit trail of all credit mutations.
Summing amount over a user's transactions reproduces the account balance.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, BigInteger, Integer, String
from src.domain.base import BaseModel, IdType


class TransactionKind(str, Enum):
    """Credit transaction kinds"""
    TRIAL = "trial"          # Welcome bonus at sign-up
    PURCHASE = "purchase"    # Paid order confirmed by the payment provider
    USAGE = "usage"          # One metered AI exchange
    REFUND = "refund"        # Paid order refunded by the payment provider
    REWARD = "reward"        # Referral or other non-payment grant


class CreditTransaction(BaseModel, table=True):
    """
    Credit Transaction - Immutable audit trail of credit mutations

    Domain Rules:
    - Transactions are immutable (append-only, never updated or deleted)
    - amount is signed: positive = credit, negative = debit
    - balance_after snapshots the account balance right after this mutation
    - related_entity_type/related_entity_id point at the cause
      (e.g., "chat_session", "payment_order", "referral")
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index('ix_credit_transactions_created_at', 'created_at'),
        Index('ix_credit_transactions_related_entity', 'related_entity_type', 'related_entity_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique transaction identifier (auto-increment)"
    )

    user_id: int = Field(
        sa_column=Column(
            BigInteger,
            ForeignKey("user_credit_accounts.user_id"),
            nullable=False,
            index=True,
        ),
        description="Owning user ID (foreign key to the credit account)"
    )

    amount: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Signed credit amount (positive = credit, negative = debit)"
    )

    kind: TransactionKind = Field(
        description="Kind of transaction (trial, purchase, usage, refund, reward)"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Human-readable description"
    )

    balance_after: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Account balance right after this transaction"
    )

    related_entity_type: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Type of the causing entity (e.g., 'chat_session', 'payment_order')"
    )

    related_entity_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="ID of the causing entity"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Transaction timestamp (immutable)"
    )
