"""Unit tests for DeductCredit use case

Tests cover:
- Successful one-credit deduction
- Insufficient credits at zero balance
- Concurrent deductions never overspend (in-memory store)
"""

import asyncio
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.credits.deduct_credit import DeductCredit
from src.app.use_cases.credits.dtos import DeductCreditCommandDTO, RelatedEntity
from src.domain.credit_account import UserCreditAccount
from src.domain.credit_transaction import TransactionKind
from tests.fakes import InMemoryLedgerStore, LedgerSession, seed_account


@pytest.fixture
def mock_account_repo():
    return MagicMock()


@pytest.fixture
def mock_transaction_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda txn: txn)
    return repo


@pytest.fixture
def deduct_use_case(mock_uow, mock_account_repo, mock_transaction_repo):
    return DeductCredit(
        uow=mock_uow,
        account_repo=mock_account_repo,
        transaction_repo=mock_transaction_repo,
    )


def make_account(balance: int) -> UserCreditAccount:
    return UserCreditAccount(
        id=1,
        user_id=42,
        balance=balance,
        lifetime_purchased=0,
        lifetime_used=0,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )


@pytest.mark.asyncio
class TestDeductCreditSuccess:

    async def test_deducts_one_credit(
        self, deduct_use_case, mock_account_repo, mock_transaction_repo, mock_uow
    ):
        """
        Given: Account with 25 credits
        When: One AI message is charged
        Then: Balance is 24, lifetime_used is 1, usage transaction of -1 recorded
        """
        # Arrange
        account = make_account(25)
        mock_account_repo.lock_for_update = AsyncMock(return_value=account)
        mock_account_repo.update = AsyncMock()

        # Act
        result = await deduct_use_case.execute(
            DeductCreditCommandDTO(
                user_id=42,
                related_entity=RelatedEntity(type="chat_session", id="17"),
            )
        )

        # Assert
        assert result.is_ok()
        assert result.value.balance_before == 25
        assert result.value.balance_after == 24
        assert result.value.amount == -1
        assert account.lifetime_used == 1

        created = mock_transaction_repo.create.call_args[0][0]
        assert created.kind == TransactionKind.USAGE
        assert created.amount == -1
        assert created.balance_after == 24
        assert created.description == "AI chat message"
        assert created.related_entity_id == "17"
        mock_uow.commit.assert_called_once()

    async def test_last_credit_reaches_zero(
        self, deduct_use_case, mock_account_repo
    ):
        account = make_account(1)
        mock_account_repo.lock_for_update = AsyncMock(return_value=account)
        mock_account_repo.update = AsyncMock()

        result = await deduct_use_case.execute(DeductCreditCommandDTO(user_id=42))

        assert result.is_ok()
        assert result.value.balance_after == 0


@pytest.mark.asyncio
class TestDeductCreditInsufficient:

    async def test_zero_balance_rejected(
        self, deduct_use_case, mock_account_repo, mock_transaction_repo, mock_uow
    ):
        """
        Given: Account with 0 credits
        When: A deduction is attempted
        Then: INSUFFICIENT_CREDITS with the balance; nothing written
        """
        mock_account_repo.lock_for_update = AsyncMock(return_value=make_account(0))
        mock_account_repo.update = AsyncMock()

        result = await deduct_use_case.execute(DeductCreditCommandDTO(user_id=42))

        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_CREDITS"
        assert result.error.details == {"balance": 0}
        mock_transaction_repo.create.assert_not_called()
        mock_account_repo.update.assert_not_called()
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestDeductCreditConcurrency:

    async def _deduct(self, store: InMemoryLedgerStore, user_id: int):
        session = LedgerSession(store)
        use_case = DeductCredit(session.uow, session.account_repo, session.transaction_repo)
        return await use_case.execute(DeductCreditCommandDTO(user_id=user_id))

    @pytest.mark.parametrize("balance,requests", [(3, 10), (5, 5), (0, 4), (10, 3)])
    async def test_concurrent_deductions_never_overspend(self, balance, requests):
        """
        Given: Account with K credits
        When: N deductions run concurrently
        Then: Exactly min(K, N) succeed and the balance never goes negative
        """
        store = InMemoryLedgerStore()
        seed_account(store, 42, balance)

        results = await asyncio.gather(*[self._deduct(store, 42) for _ in range(requests)])

        succeeded = [r for r in results if r.is_ok()]
        rejected = [r for r in results if r.is_err()]
        expected = min(balance, requests)

        assert len(succeeded) == expected
        assert all(r.error.code == "INSUFFICIENT_CREDITS" for r in rejected)
        assert store.balance_of(42) == balance - expected
        assert store.balance_of(42) >= 0
        assert sum(t.amount for t in store.transactions_for(42)) == store.balance_of(42)

    async def test_users_do_not_block_each_other(self):
        store = InMemoryLedgerStore()
        seed_account(store, 1, 2)
        seed_account(store, 2, 2)

        results = await asyncio.gather(
            self._deduct(store, 1), self._deduct(store, 2),
            self._deduct(store, 1), self._deduct(store, 2),
        )

        assert all(r.is_ok() for r in results)
        assert store.balance_of(1) == 0
        assert store.balance_of(2) == 0
