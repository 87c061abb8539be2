"""DeductCredit Use Case

Consumes exactly one credit for a metered action, with pessimistic locking to
prevent the balance from going negative under concurrent requests.
"""

import logging
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.credit_transaction import CreditTransaction, TransactionKind
from .dtos import DeductCreditCommandDTO, CreditMutationResponseDTO

logger = logging.getLogger(__name__)

# One AI exchange has a flat cost
USAGE_COST = 1


class DeductCredit:
    """
    Use Case: Consume one credit from a user's balance

    Business Rules:
    1. Sufficient balance: locked balance >= 1, else INSUFFICIENT_CREDITS
    2. Atomic updates: balance, lifetime_used and transaction in one transaction
    3. Pessimistic locking: SELECT FOR UPDATE prevents race conditions

    Flow:
    1. Lock account (create if absent)
    2. Validate sufficient balance
    3. Append usage transaction
    4. Update account
    5. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: CreditAccountRepository,
        transaction_repo: CreditTransactionRepository,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(self, command: DeductCreditCommandDTO) -> Result[CreditMutationResponseDTO]:
        """
        Execute one-credit deduction

        Args:
            command: DeductCreditCommandDTO with user_id and description

        Returns:
            Result[CreditMutationResponseDTO]: Success with new balance,
            INSUFFICIENT_CREDITS, or STORAGE_ERROR
        """
        try:
            # Step 1: Lock account row
            account = await self.account_repo.lock_for_update(command.user_id)

            # Step 2: Validate sufficient balance
            if account.balance < USAGE_COST:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code=ErrorCode.INSUFFICIENT_CREDITS,
                        message="No AI credits remaining. Purchase more credits to continue.",
                        reason=f"balance={account.balance}, required={USAGE_COST}",
                        details={"balance": account.balance},
                    )
                )

            # Step 3: Append usage transaction
            balance_before = account.balance
            balance_after = balance_before - USAGE_COST

            transaction = CreditTransaction(
                user_id=command.user_id,
                amount=-USAGE_COST,
                kind=TransactionKind.USAGE,
                description=command.description,
                balance_after=balance_after,
                related_entity_type=command.related_entity.type if command.related_entity else None,
                related_entity_id=command.related_entity.id if command.related_entity else None,
            )
            created_transaction = await self.transaction_repo.create(transaction)

            # Step 4: Update account
            account.balance = balance_after
            account.lifetime_used += USAGE_COST
            account.updated_at = datetime.utcnow()
            await self.account_repo.update(account)

            # Step 5: Commit
            await self.uow.commit()

            return Return.ok(
                CreditMutationResponseDTO(
                    transaction_id=created_transaction.id,
                    user_id=command.user_id,
                    kind=TransactionKind.USAGE.value,
                    amount=-USAGE_COST,
                    balance_before=balance_before,
                    balance_after=balance_after,
                    created_at=created_transaction.created_at,
                )
            )

        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to deduct credit for user {command.user_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to deduct credit",
                    reason=str(e),
                )
            )
