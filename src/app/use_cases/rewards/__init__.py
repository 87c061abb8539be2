"""Referral reward use cases"""
from .grant_referral_reward import (
    GrantReferralReward,
    DEFAULT_ACCESS_EXTENSION_DAYS,
    DEFAULT_REWARD_CREDITS,
)
from .dtos import GrantReferralRewardCommandDTO, ReferralRewardResponseDTO

__all__ = [
    "GrantReferralReward",
    "DEFAULT_ACCESS_EXTENSION_DAYS",
    "DEFAULT_REWARD_CREDITS",
    "GrantReferralRewardCommandDTO",
    "ReferralRewardResponseDTO",
]
