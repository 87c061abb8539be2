"""Unmatched Payment Event Domain Entity

Audit row for provider events that reference an order we never recorded
(e.g., a refund for an unknown order). These are acknowledged and skipped.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String, Text
from src.domain.base import BaseModel, IdType


class UnmatchedPaymentEvent(BaseModel, table=True):
    __tablename__ = "unmatched_payment_events"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    event_name: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Provider event name (e.g., 'order_refunded')"
    )

    external_order_id: str = Field(
        sa_column=Column(String(100), index=True, nullable=False),
        description="Order ID the event referenced"
    )

    reason: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Why the event could not be applied"
    )

    webhook_payload: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Raw webhook body as received"
    )

    received_at: datetime = Field(
        default_factory=datetime.utcnow,
    )
