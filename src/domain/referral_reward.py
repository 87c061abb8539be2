"""Referral Reward Domain Entity

Records that a referral produced a grant. referral_id is the idempotency key.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Integer, String
from src.domain.base import BaseModel, IdType


class RewardType(str, Enum):
    """Referral reward types"""
    AI_ACCESS_EXTENSION = "ai_access_extension"  # Time-boxed unlimited AI access
    CREDITS = "credits"                          # Fixed credit grant


class ReferralReward(BaseModel, table=True):
    """
    Referral Reward - One grant per referral record

    Domain Rules:
    - referral_id is unique (a referral cannot be rewarded twice)
    - Written in the same transaction as the grant it records
    """

    __tablename__ = "referral_rewards"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique reward identifier (auto-increment)"
    )

    referral_id: str = Field(
        sa_column=Column(String(100), unique=True, index=True, nullable=False),
        description="Referral record ID (unique idempotency key)"
    )

    referrer_user_id: int = Field(
        sa_column=Column(BigInteger, index=True, nullable=False),
        description="User who earned the reward"
    )

    referred_user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="User who signed up through the referral"
    )

    reward_type: RewardType = Field(
        description="Type of reward granted"
    )

    credits_amount: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Credits granted (0 for access extensions)"
    )

    access_until: Optional[datetime] = Field(
        default=None,
        description="New AI access expiry (access extensions only)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Grant timestamp"
    )
