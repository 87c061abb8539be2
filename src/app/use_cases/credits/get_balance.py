"""Get Balance Use Case

Retrieves a user's current credit balance, creating a zero-balance account
on first access.
"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.credit_account_repository import CreditAccountRepository
from .dtos import BalanceResponseDTO

logger = logging.getLogger(__name__)


class GetBalance:
    """
    Get Balance Use Case

    Unlocked read of the account. Never fails with "not found": unknown
    users get a zero-balance account.
    """

    def __init__(self, uow: UnitOfWork, account_repo: CreditAccountRepository):
        self.uow = uow
        self.account_repo = account_repo

    async def execute(self, user_id: int) -> Result[BalanceResponseDTO]:
        """
        Execute get balance operation

        Args:
            user_id: The user identifier

        Returns:
            Result[BalanceResponseDTO]: Balance and lifetime counters
        """
        try:
            account = await self.account_repo.get_or_create(user_id)
            # Persists the lazily created account, no-op otherwise
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to read balance for user {user_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to read credit balance",
                    reason=str(e),
                )
            )

        return Return.ok(
            BalanceResponseDTO(
                user_id=account.user_id,
                balance=account.balance,
                lifetime_purchased=account.lifetime_purchased,
                lifetime_used=account.lifetime_used,
                last_updated=account.updated_at,
            )
        )
