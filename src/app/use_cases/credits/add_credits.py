"""AddCredits Use Case

Applies a signed credit delta to a user's balance under a pessimistic row lock
and appends the matching ledger entry.
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
from .dtos import AddCreditsCommandDTO, CreditMutationResponseDTO

logger = logging.getLogger(__name__)


class AddCredits:
    """
    Use Case: Add a signed amount of credits to a user's balance

    Business Rules:
    1. Lazy account: a zero-balance account is created on first access
    2. Pessimistic locking: SELECT FOR UPDATE serializes mutations per user
    3. Atomic updates: balance and transaction written in one transaction
    4. lifetime_purchased grows only on positive purchase credits
    5. No floor check: callers clamp negative amounts (see refunds)

    Flow:
    1. Lock account (create if absent)
    2. Compute new balance from the locked read
    3. Append transaction with balance_after snapshot
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

    async def execute(self, command: AddCreditsCommandDTO) -> Result[CreditMutationResponseDTO]:
        """
        Execute credit addition in its own transaction

        Args:
            command: AddCreditsCommandDTO with user_id, signed amount, kind

        Returns:
            Result[CreditMutationResponseDTO]: Success with new balance or STORAGE_ERROR
        """
        try:
            response = await self.post(command)
            await self.uow.commit()
            return Return.ok(response)

        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(
                f"Failed to add {command.amount} credits ({command.kind.value}) "
                f"for user {command.user_id}: {e}"
            )
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to add credits",
                    reason=str(e),
                )
            )

    async def post(self, command: AddCreditsCommandDTO) -> CreditMutationResponseDTO:
        """
        Stage the mutation inside the caller's transaction without committing

        Used when the credit must commit atomically with other rows
        (payment orders, referral rewards).

        Raises:
            SQLAlchemyError: On lock or write failure; the caller rolls back
        """
        # Step 1: Lock account row (created with zero balance if absent)
        account = await self.account_repo.lock_for_update(command.user_id)

        # Step 2: Compute from the locked read
        balance_before = account.balance
        balance_after = balance_before + command.amount

        # Step 3: Append ledger entry
        transaction = CreditTransaction(
            user_id=command.user_id,
            amount=command.amount,
            kind=command.kind,
            description=command.description,
            balance_after=balance_after,
            related_entity_type=command.related_entity.type if command.related_entity else None,
            related_entity_id=command.related_entity.id if command.related_entity else None,
        )
        created_transaction = await self.transaction_repo.create(transaction)

        # Step 4: Update account
        account.balance = balance_after
        if command.amount > 0 and command.kind == TransactionKind.PURCHASE:
            account.lifetime_purchased += command.amount
        account.updated_at = datetime.utcnow()
        await self.account_repo.update(account)

        return CreditMutationResponseDTO(
            transaction_id=created_transaction.id,
            user_id=command.user_id,
            kind=command.kind.value,
            amount=command.amount,
            balance_before=balance_before,
            balance_after=balance_after,
            created_at=created_transaction.created_at,
        )
