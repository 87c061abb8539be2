"""Referrals API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.payments_request import ReferralRewardRequestSchema
from src.app.services.notification_service import NotificationService
from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.rewards.dtos import GrantReferralRewardCommandDTO, ReferralRewardResponseDTO
from src.app.use_cases.rewards.grant_referral_reward import GrantReferralReward
from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.referral_reward_repository import SqlAlchemyReferralRewardRepository
from src.adapter.repositories.user_repository import SqlAlchemyUserRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.referral_reward import RewardType
from src.depends import get_session, get_config, get_notification_service
from src.api.error import ClientError

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.post(
    "/{referral_id}/reward",
    response_model=ReferralRewardResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def grant_referral_reward(
    referral_id: str,
    request: ReferralRewardRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Grant the reward for a completed referral.

    Idempotent per referral_id: repeated calls return `duplicate: true`.
    """
    uow = SqlAlchemyUnitOfWork(session)
    account_repo = SqlAlchemyCreditAccountRepository(session)
    transaction_repo = SqlAlchemyCreditTransactionRepository(session)

    use_case = GrantReferralReward(
        uow,
        SqlAlchemyReferralRewardRepository(session),
        SqlAlchemyUserRepository(session),
        AddCredits(uow, account_repo, transaction_repo),
        notification_service,
        default_reward_type=RewardType(config.REFERRAL_REWARD_TYPE),
        access_extension_days=config.REFERRAL_ACCESS_EXTENSION_DAYS,
        reward_credits=config.REFERRAL_REWARD_CREDITS,
    )
    result = await use_case.execute(
        GrantReferralRewardCommandDTO(
            referral_id=referral_id,
            referrer_user_id=request.referrer_user_id,
            referred_user_id=request.referred_user_id,
            reward_type=request.reward_type,
        )
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value
