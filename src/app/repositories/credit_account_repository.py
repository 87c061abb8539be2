"""Credit Account Repository Interface

Defines the contract for credit account persistence operations.
"""

from abc import ABC, abstractmethod
from src.domain.credit_account import UserCreditAccount


class CreditAccountRepository(ABC):
    """
    Repository interface for UserCreditAccount persistence

    Accounts are created lazily with a zero balance. lock_for_update uses
    pessimistic row locking (SELECT FOR UPDATE) so concurrent mutations of
    the same user serialize, while different users never block each other.
    """

    @abstractmethod
    async def get_or_create(self, user_id: int) -> UserCreditAccount:
        """
        Read an account without locking, creating a zero-balance one if absent

        Args:
            user_id: Owning user ID

        Returns:
            The user's UserCreditAccount
        """
        pass

    @abstractmethod
    async def lock_for_update(self, user_id: int) -> UserCreditAccount:
        """
        Lock the account row for the rest of the current transaction

        Creates a zero-balance account first if absent. The returned values
        are read under the lock.

        Args:
            user_id: Owning user ID

        Returns:
            The locked UserCreditAccount
        """
        pass

    @abstractmethod
    async def update(self, account: UserCreditAccount) -> None:
        """
        Persist balance and lifetime counters of a locked account

        Args:
            account: Account previously returned by lock_for_update
        """
        pass

    @abstractmethod
    async def get_all(self) -> list[UserCreditAccount]:
        """
        Retrieve all accounts (used by the ledger audit)

        Returns:
            List of all UserCreditAccount rows
        """
        pass
