"""Unit tests for AuditLedger use case

Tests cover:
- Balanced ledger reports no discrepancies
- Balance/transaction-sum mismatch is reported
- Negative balance is flagged
- Audit is read-only
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from src.app.use_cases.credits.audit_ledger import AuditLedger
from tests.fakes import InMemoryLedgerStore, LedgerSession, seed_account


@pytest.fixture
def store():
    return InMemoryLedgerStore()


def audit_for(store: InMemoryLedgerStore) -> AuditLedger:
    session = LedgerSession(store)
    return AuditLedger(session.account_repo, session.transaction_repo)


@pytest.mark.asyncio
class TestAuditLedger:

    async def test_balanced_ledger(self, store):
        seed_account(store, 1, 25)
        seed_account(store, 2, 0)

        result = await audit_for(store).execute()

        assert result.is_ok()
        assert result.value.total_accounts_checked == 2
        assert result.value.discrepancies_found == 0

    async def test_mismatch_reported(self, store):
        """
        Given: An account whose balance was changed without a transaction
        When: The audit runs
        Then: The discrepancy is reported and the balance left untouched
        """
        seed_account(store, 1, 25)
        store.accounts[1].balance = 30

        result = await audit_for(store).execute()

        assert result.value.discrepancies_found == 1
        discrepancy = result.value.discrepancies[0]
        assert discrepancy.user_id == 1
        assert discrepancy.account_balance == 30
        assert discrepancy.calculated_balance == 25
        assert discrepancy.discrepancy == 5
        assert discrepancy.negative_balance is False
        assert store.accounts[1].balance == 30

    async def test_negative_balance_flagged(self, store):
        seed_account(store, 1, 0)
        store.accounts[1].balance = -1

        result = await audit_for(store).execute()

        assert result.value.discrepancies_found == 1
        assert result.value.discrepancies[0].negative_balance is True

    async def test_storage_failure(self):
        account_repo = MagicMock()
        account_repo.get_all = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("db down"))
        )

        result = await AuditLedger(account_repo, MagicMock()).execute()

        assert result.is_err()
        assert result.error.code == "AUDIT_FAILED"
