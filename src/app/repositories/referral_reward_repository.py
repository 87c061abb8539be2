"""Referral Reward Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.referral_reward import ReferralReward


class ReferralRewardRepository(ABC):

    @abstractmethod
    async def get_by_referral_id(self, referral_id: str) -> Optional[ReferralReward]:
        pass

    @abstractmethod
    async def create(self, reward: ReferralReward) -> ReferralReward:
        """
        Insert a reward and flush it

        Raises:
            IntegrityError: If referral_id was already rewarded
        """
        pass
