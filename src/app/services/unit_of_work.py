"""Unit of Work Interface

Groups repository writes into a single database transaction.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Transaction boundary shared by the repositories of one request

    Use cases call commit() once all writes of an operation are staged, and
    rollback() on any storage failure. Leaving the context without a commit
    rolls back.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
