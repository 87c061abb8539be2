"""Payment Order Domain Entity

One row per external payment-provider order. The external order id is the
natural idempotency key for webhook deliveries.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Integer, Numeric, String, Text
from src.domain.base import BaseModel, IdType


class PaymentOrderStatus(str, Enum):
    """Payment order status (paid -> refunded is the only transition)"""
    PAID = "paid"
    REFUNDED = "refunded"


class PaymentOrder(BaseModel, table=True):
    """
    Payment Order - Record of a confirmed external purchase

    Domain Rules:
    - external_order_id is unique (duplicate deliveries are no-ops)
    - Created as PAID together with its purchase credit, in one transaction
    - Moves to REFUNDED at most once; never back to PAID
    - webhook_payload keeps the raw body for forensic replay
    """

    __tablename__ = "payment_orders"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order identifier (auto-increment)"
    )

    external_order_id: str = Field(
        sa_column=Column(String(100), unique=True, index=True, nullable=False),
        description="Payment provider order ID (unique idempotency key)"
    )

    user_id: int = Field(
        sa_column=Column(BigInteger, index=True, nullable=False),
        description="Buyer's internal user ID"
    )

    product_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="Provider product ID"
    )

    variant_id: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Provider variant ID that was purchased"
    )

    package_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="Name of the credit package"
    )

    credits_amount: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Credits granted by this order"
    )

    amount_paid: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Amount paid in major currency units"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False, default="USD"),
        description="ISO currency code"
    )

    status: PaymentOrderStatus = Field(
        default=PaymentOrderStatus.PAID,
        description="Order status (paid, refunded)"
    )

    webhook_payload: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Raw webhook body as received"
    )

    received_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the paid event was received"
    )

    refunded_at: Optional[datetime] = Field(
        default=None,
        description="When the refund event was applied"
    )
