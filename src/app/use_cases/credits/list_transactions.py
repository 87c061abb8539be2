"""
List Transactions Use Case

Retrieves credit transaction history for a user with page-based pagination.
"""
import logging
import math
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from .dtos import ListTransactionsResponseDTO, TransactionDTO

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class ListTransactions:
    """
    Use case: View credit transaction history

    Transactions are ordered most recent first. page is 1-based; page_size
    is clamped to [1, max_page_size].
    """

    def __init__(self, transaction_repo: CreditTransactionRepository, max_page_size: int = MAX_PAGE_SIZE):
        self.transaction_repo = transaction_repo
        self.max_page_size = max_page_size

    async def execute(
        self, user_id: int, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Result[ListTransactionsResponseDTO]:
        page = max(page, 1)
        page_size = min(max(page_size, 1), self.max_page_size)

        try:
            transactions, total = await self.transaction_repo.list_by_user_id(
                user_id=user_id,
                limit=page_size,
                offset=(page - 1) * page_size,
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list transactions for user {user_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to load transaction history",
                    reason=str(e),
                )
            )

        transaction_dtos = [
            TransactionDTO(
                id=txn.id,
                amount=txn.amount,
                kind=txn.kind.value if hasattr(txn.kind, "value") else txn.kind,
                description=txn.description,
                balance_after=txn.balance_after,
                related_entity_type=txn.related_entity_type,
                related_entity_id=txn.related_entity_id,
                created_at=txn.created_at,
            )
            for txn in transactions
        ]

        return Return.ok(
            ListTransactionsResponseDTO(
                transactions=transaction_dtos,
                total=total,
                page=page,
                page_size=page_size,
                total_pages=math.ceil(total / page_size) if total else 0,
            )
        )
