"""Request schemas for Payment and Referral APIs"""

from typing import Optional
from pydantic import BaseModel, Field
from src.domain.referral_reward import RewardType


class CheckoutRequestSchema(BaseModel):
    """
    Request schema for creating a checkout

    Used for POST /billing/checkout endpoint.
    """

    user_id: int = Field(..., gt=0, description="Buyer user ID")
    email: str = Field(..., min_length=3, description="Buyer email")
    package: str = Field(..., min_length=1, description="Package key (starter, growth, pro)")

    class Config:
        json_schema_extra = {
            "example": {"user_id": 42, "email": "coach@example.com", "package": "growth"}
        }


class ReferralRewardRequestSchema(BaseModel):
    """
    Request schema for granting a referral reward

    Used for POST /referrals/{referral_id}/reward endpoint.
    """

    referrer_user_id: int = Field(..., gt=0, description="User who shared the referral link")
    referred_user_id: Optional[int] = Field(default=None, description="User who signed up")
    reward_type: Optional[RewardType] = Field(
        default=None, description="Override the configured reward type"
    )

    class Config:
        json_schema_extra = {
            "example": {"referrer_user_id": 42, "referred_user_id": 77}
        }
