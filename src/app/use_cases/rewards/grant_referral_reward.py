"""GrantReferralReward Use Case

Applies the reward earned when a referred user completes sign-up.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService, UserNotification
from src.app.repositories.referral_reward_repository import ReferralRewardRepository
from src.app.repositories.user_repository import UserRepository
from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.credits.dtos import AddCreditsCommandDTO, RelatedEntity
from src.domain.credit_transaction import TransactionKind
from src.domain.referral_reward import ReferralReward, RewardType
from .dtos import GrantReferralRewardCommandDTO, ReferralRewardResponseDTO

logger = logging.getLogger(__name__)

DEFAULT_ACCESS_EXTENSION_DAYS = 365
DEFAULT_REWARD_CREDITS = 50


class GrantReferralReward:
    """
    Use Case: Grant a referral reward

    Business Rules:
    1. One reward per referral_id (lookup first, unique constraint second)
    2. ai_access_extension: ai_access_until = max(now, current) + N days
    3. credits: reward-kind ledger entry through AddCredits
    4. Reward row and grant commit together; notification follows the commit

    Flow:
    1. Check for existing reward
    2. Load referrer (locked)
    3. Insert reward row
    4. Apply grant
    5. Commit
    6. Notify referrer
    """

    def __init__(
        self,
        uow: UnitOfWork,
        reward_repo: ReferralRewardRepository,
        user_repo: UserRepository,
        add_credits: AddCredits,
        notification_service: NotificationService,
        default_reward_type: RewardType = RewardType.AI_ACCESS_EXTENSION,
        access_extension_days: int = DEFAULT_ACCESS_EXTENSION_DAYS,
        reward_credits: int = DEFAULT_REWARD_CREDITS,
    ):
        self.uow = uow
        self.reward_repo = reward_repo
        self.user_repo = user_repo
        self.add_credits = add_credits
        self.notification_service = notification_service
        self.default_reward_type = default_reward_type
        self.access_extension_days = access_extension_days
        self.reward_credits = reward_credits

    async def execute(
        self, command: GrantReferralRewardCommandDTO
    ) -> Result[ReferralRewardResponseDTO]:
        reward_type = command.reward_type or self.default_reward_type

        try:
            # Step 1: Idempotency
            existing = await self.reward_repo.get_by_referral_id(command.referral_id)
            if existing:
                logger.info(f"Referral {command.referral_id} already rewarded, skipping")
                return Return.ok(self._duplicate(existing))

            # Step 2: Load referrer
            user = await self.user_repo.get_by_id(command.referrer_user_id, for_update=True)
            if not user:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code=ErrorCode.UNKNOWN_USER,
                        message="User not found",
                        reason=f"user_id={command.referrer_user_id}",
                    )
                )

            # Step 3: Insert reward row
            now = datetime.utcnow()
            reward = ReferralReward(
                referral_id=command.referral_id,
                referrer_user_id=command.referrer_user_id,
                referred_user_id=command.referred_user_id,
                reward_type=reward_type,
            )
            try:
                reward = await self.reward_repo.create(reward)
            except IntegrityError:
                await self.uow.rollback()
                existing = await self.reward_repo.get_by_referral_id(command.referral_id)
                if existing:
                    logger.info(
                        f"Concurrent grant for referral {command.referral_id} won, skipping"
                    )
                    return Return.ok(self._duplicate(existing))
                raise

            # Step 4: Apply grant
            balance_after: Optional[int] = None
            if reward_type == RewardType.AI_ACCESS_EXTENSION:
                base = max(now, user.ai_access_until or now)
                user.ai_access_until = base + timedelta(days=self.access_extension_days)
                await self.user_repo.update(user)
                reward.access_until = user.ai_access_until
            else:
                posting = await self.add_credits.post(
                    AddCreditsCommandDTO(
                        user_id=command.referrer_user_id,
                        amount=self.reward_credits,
                        kind=TransactionKind.REWARD,
                        description=f"Referral reward ({self.reward_credits} credits)",
                        related_entity=RelatedEntity(
                            type="referral", id=command.referral_id
                        ),
                    )
                )
                reward.credits_amount = self.reward_credits
                balance_after = posting.balance_after

            # Step 5: Commit
            await self.uow.commit()

        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to grant referral reward {command.referral_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to grant referral reward",
                    reason=str(e),
                )
            )

        logger.info(
            f"Referral {command.referral_id}: granted {reward_type.value} "
            f"to user {command.referrer_user_id}"
        )

        # Step 6: Notify (best-effort)
        if reward_type == RewardType.AI_ACCESS_EXTENSION:
            message = (
                "Someone signed up with your referral link! You've earned "
                f"{self.access_extension_days} days of unlimited AI coaching."
            )
        else:
            message = (
                "Someone signed up with your referral link! "
                f"{self.reward_credits} AI credits have been added to your account."
            )
        await self.notification_service.send(
            UserNotification(
                user_id=command.referrer_user_id,
                type="referral_reward",
                title="Referral Reward Earned!",
                message=message,
                link="/referrals",
            )
        )

        return Return.ok(
            ReferralRewardResponseDTO(
                referral_id=command.referral_id,
                referrer_user_id=command.referrer_user_id,
                reward_type=reward_type,
                credits_granted=reward.credits_amount,
                balance_after=balance_after,
                access_until=reward.access_until,
            )
        )

    def _duplicate(self, reward: ReferralReward) -> ReferralRewardResponseDTO:
        return ReferralRewardResponseDTO(
            referral_id=reward.referral_id,
            referrer_user_id=reward.referrer_user_id,
            reward_type=reward.reward_type,
            duplicate=True,
            access_until=reward.access_until,
        )
