"""SQLAlchemy implementation of ReferralRewardRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.referral_reward_repository import ReferralRewardRepository
from src.domain.referral_reward import ReferralReward


class SqlAlchemyReferralRewardRepository(ReferralRewardRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_referral_id(self, referral_id: str) -> Optional[ReferralReward]:
        stmt = select(ReferralReward).where(ReferralReward.referral_id == referral_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, reward: ReferralReward) -> ReferralReward:
        self.session.add(reward)
        await self.session.flush()
        await self.session.refresh(reward)
        return reward
