"""Credit Transaction Repository Interface

Defines the contract for credit transaction persistence operations.
"""

from abc import ABC, abstractmethod
from src.domain.credit_transaction import CreditTransaction


class CreditTransactionRepository(ABC):
    """
    Repository interface for CreditTransaction persistence

    Transactions are immutable and append-only for audit trail.
    There is no update or delete.
    """

    @abstractmethod
    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Append a new credit transaction

        Args:
            transaction: CreditTransaction entity to persist

        Returns:
            Created CreditTransaction with generated ID
        """
        pass

    @abstractmethod
    async def list_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> tuple[list[CreditTransaction], int]:
        """
        Retrieve a page of a user's transactions, most recent first

        Args:
            user_id: Owning user ID
            limit: Maximum number of rows
            offset: Number of rows to skip

        Returns:
            Tuple of (transactions, total count)
        """
        pass

    @abstractmethod
    async def sum_amounts_by_user_id(self, user_id: int) -> int:
        """
        Sum of all transaction amounts for a user (0 if none)

        Args:
            user_id: Owning user ID

        Returns:
            The balance implied by the transaction history
        """
        pass
