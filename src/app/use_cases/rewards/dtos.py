"""Data Transfer Objects for Reward Use Cases"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.referral_reward import RewardType


class GrantReferralRewardCommandDTO(BaseModel):
    """Command DTO for granting a referral reward"""

    referral_id: str = Field(..., min_length=1, max_length=100, description="Referral record ID")
    referrer_user_id: int = Field(..., description="User who earned the reward")
    referred_user_id: Optional[int] = Field(default=None, description="User who signed up")
    reward_type: Optional[RewardType] = Field(
        default=None, description="Reward type (defaults to the configured type)"
    )


class ReferralRewardResponseDTO(BaseModel):
    referral_id: str
    referrer_user_id: int
    reward_type: RewardType
    duplicate: bool = False
    credits_granted: int = 0
    balance_after: Optional[int] = None
    access_until: Optional[datetime] = None
