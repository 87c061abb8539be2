"""Unit tests for GetBalance and ListTransactions use cases"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from src.app.use_cases.credits.get_balance import GetBalance
from src.app.use_cases.credits.list_transactions import ListTransactions
from src.domain.credit_account import UserCreditAccount
from src.domain.credit_transaction import CreditTransaction, TransactionKind


@pytest.fixture
def mock_account_repo():
    return MagicMock()


@pytest.mark.asyncio
class TestGetBalance:

    async def test_returns_balance_and_counters(self, mock_uow, mock_account_repo):
        updated_at = datetime(2025, 1, 2, 3, 4, 5)
        mock_account_repo.get_or_create = AsyncMock(
            return_value=UserCreditAccount(
                id=1, user_id=42, balance=24, lifetime_purchased=50,
                lifetime_used=26, updated_at=updated_at,
            )
        )

        result = await GetBalance(mock_uow, mock_account_repo).execute(42)

        assert result.is_ok()
        assert result.value.user_id == 42
        assert result.value.balance == 24
        assert result.value.lifetime_purchased == 50
        assert result.value.lifetime_used == 26
        assert result.value.last_updated == updated_at

    async def test_unknown_user_reads_zero(self, mock_uow, mock_account_repo):
        mock_account_repo.get_or_create = AsyncMock(return_value=UserCreditAccount(id=9, user_id=7))

        result = await GetBalance(mock_uow, mock_account_repo).execute(7)

        assert result.value.balance == 0
        mock_account_repo.get_or_create.assert_called_once_with(7)

    async def test_storage_error(self, mock_uow, mock_account_repo):
        mock_account_repo.get_or_create = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("db down"))
        )

        result = await GetBalance(mock_uow, mock_account_repo).execute(42)

        assert result.is_err()
        assert result.error.code == "STORAGE_ERROR"


def make_transactions(count: int) -> list[CreditTransaction]:
    return [
        CreditTransaction(
            id=i,
            user_id=42,
            amount=-1,
            kind=TransactionKind.USAGE,
            description="AI chat message",
            balance_after=100 - i,
            created_at=datetime.utcnow(),
        )
        for i in range(count)
    ]


@pytest.mark.asyncio
class TestListTransactions:

    async def test_first_page(self):
        repo = MagicMock()
        repo.list_by_user_id = AsyncMock(return_value=(make_transactions(20), 45))

        result = await ListTransactions(repo).execute(42)

        assert result.is_ok()
        page = result.value
        assert len(page.transactions) == 20
        assert page.total == 45
        assert page.page == 1
        assert page.page_size == 20
        assert page.total_pages == 3
        assert page.transactions[0].kind == "usage"
        repo.list_by_user_id.assert_called_once_with(user_id=42, limit=20, offset=0)

    async def test_page_offset(self):
        repo = MagicMock()
        repo.list_by_user_id = AsyncMock(return_value=(make_transactions(5), 45))

        result = await ListTransactions(repo).execute(42, page=3, page_size=20)

        repo.list_by_user_id.assert_called_once_with(user_id=42, limit=20, offset=40)
        assert result.value.page == 3

    async def test_page_size_is_capped(self):
        repo = MagicMock()
        repo.list_by_user_id = AsyncMock(return_value=([], 0))

        result = await ListTransactions(repo, max_page_size=100).execute(42, page_size=1000)

        assert result.value.page_size == 100
        assert result.value.total_pages == 0
        repo.list_by_user_id.assert_called_once_with(user_id=42, limit=100, offset=0)

    async def test_invalid_page_clamped_to_first(self):
        repo = MagicMock()
        repo.list_by_user_id = AsyncMock(return_value=([], 0))

        result = await ListTransactions(repo).execute(42, page=0, page_size=0)

        assert result.value.page == 1
        assert result.value.page_size == 1
