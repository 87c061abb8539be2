"""SQLAlchemy implementation of CreditAccountRepository

Provides persistence for UserCreditAccount entities with pessimistic locking
support to prevent race conditions during concurrent credit operations.
"""

from datetime import datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.domain.credit_account import UserCreditAccount


class SqlAlchemyCreditAccountRepository(CreditAccountRepository):
    """
    SQLAlchemy implementation of CreditAccountRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Race-safe lazy creation via INSERT ... ON CONFLICT DO NOTHING
    - Per-user locking, users never block each other
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_or_create(self, user_id: int) -> UserCreditAccount:
        account = await self._get(user_id)
        if account:
            return account

        await self._insert_if_absent(user_id)
        return await self._get(user_id)

    async def lock_for_update(self, user_id: int) -> UserCreditAccount:
        """
        Lock the account row with SELECT FOR UPDATE, creating it if absent

        populate_existing refreshes an instance already in the identity map,
        so the returned balance is the one read under the lock.
        """
        account = await self._get(user_id, for_update=True)
        if account:
            return account

        await self._insert_if_absent(user_id)
        return await self._get(user_id, for_update=True)

    async def update(self, account: UserCreditAccount) -> None:
        """
        Persist a locked account

        Note:
            Should be called within a transaction with the account already locked
        """
        self.session.add(account)
        await self.session.flush()

    async def get_all(self) -> list[UserCreditAccount]:
        stmt = select(UserCreditAccount).order_by(UserCreditAccount.user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _get(self, user_id: int, for_update: bool = False):
        stmt = select(UserCreditAccount).where(UserCreditAccount.user_id == user_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _insert_if_absent(self, user_id: int) -> None:
        # Two first-time requests for the same user must not both insert
        now = datetime.utcnow()
        values = dict(
            user_id=user_id,
            balance=0,
            lifetime_purchased=0,
            lifetime_used=0,
            created_at=now,
            updated_at=now,
        )

        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(UserCreditAccount).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite_insert(UserCreditAccount).values(**values)
        else:
            self.session.add(UserCreditAccount(**values))
            await self.session.flush()
            return

        stmt = stmt.on_conflict_do_nothing(index_elements=["user_id"])
        await self.session.execute(stmt)
