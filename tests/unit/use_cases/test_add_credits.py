"""Unit tests for AddCredits and InitTrialCredits use cases

Tests cover:
- Positive credit with transaction snapshot
- lifetime_purchased only grows on purchases
- post() stages without committing
- Storage failure is reported, not swallowed
- Trial grant amount and description
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.credits.init_trial_credits import InitTrialCredits
from src.app.use_cases.credits.dtos import AddCreditsCommandDTO, RelatedEntity
from src.domain.credit_account import UserCreditAccount
from src.domain.credit_transaction import CreditTransaction, TransactionKind


@pytest.fixture
def mock_account_repo():
    return MagicMock()


@pytest.fixture
def mock_transaction_repo():
    repo = MagicMock()

    async def create(transaction: CreditTransaction):
        transaction.id = 101
        return transaction

    repo.create = AsyncMock(side_effect=create)
    return repo


@pytest.fixture
def add_credits(mock_uow, mock_account_repo, mock_transaction_repo):
    return AddCredits(
        uow=mock_uow,
        account_repo=mock_account_repo,
        transaction_repo=mock_transaction_repo,
    )


@pytest.fixture
def sample_account():
    return UserCreditAccount(
        id=1,
        user_id=42,
        balance=10,
        lifetime_purchased=0,
        lifetime_used=5,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )


@pytest.mark.asyncio
class TestAddCreditsSuccess:

    async def test_purchase_increases_balance_and_lifetime_purchased(
        self, add_credits, mock_account_repo, mock_transaction_repo, mock_uow, sample_account
    ):
        """
        Given: Account with balance 10
        When: 50 purchase credits are added
        Then: Balance is 60, lifetime_purchased is 50, transaction snapshot matches
        """
        # Arrange
        mock_account_repo.lock_for_update = AsyncMock(return_value=sample_account)
        mock_account_repo.update = AsyncMock()

        # Act
        result = await add_credits.execute(
            AddCreditsCommandDTO(
                user_id=42,
                amount=50,
                kind=TransactionKind.PURCHASE,
                description="Purchased Starter package (50 credits)",
                related_entity=RelatedEntity(type="payment_order", id="7"),
            )
        )

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.transaction_id == 101
        assert response.kind == "purchase"
        assert response.balance_before == 10
        assert response.balance_after == 60
        assert sample_account.balance == 60
        assert sample_account.lifetime_purchased == 50

        created = mock_transaction_repo.create.call_args[0][0]
        assert created.amount == 50
        assert created.balance_after == 60
        assert created.related_entity_type == "payment_order"
        assert created.related_entity_id == "7"

        mock_account_repo.lock_for_update.assert_called_once_with(42)
        mock_account_repo.update.assert_called_once_with(sample_account)
        mock_uow.commit.assert_called_once()

    async def test_reward_does_not_count_as_purchase(
        self, add_credits, mock_account_repo, sample_account
    ):
        mock_account_repo.lock_for_update = AsyncMock(return_value=sample_account)
        mock_account_repo.update = AsyncMock()

        result = await add_credits.execute(
            AddCreditsCommandDTO(
                user_id=42, amount=50, kind=TransactionKind.REWARD, description="Referral reward"
            )
        )

        assert result.is_ok()
        assert sample_account.balance == 60
        assert sample_account.lifetime_purchased == 0

    async def test_negative_refund_amount(
        self, add_credits, mock_account_repo, sample_account
    ):
        mock_account_repo.lock_for_update = AsyncMock(return_value=sample_account)
        mock_account_repo.update = AsyncMock()

        result = await add_credits.execute(
            AddCreditsCommandDTO(
                user_id=42, amount=-10, kind=TransactionKind.REFUND, description="Refund"
            )
        )

        assert result.is_ok()
        assert result.value.balance_after == 0
        assert sample_account.lifetime_purchased == 0

    async def test_post_does_not_commit(
        self, add_credits, mock_account_repo, mock_uow, sample_account
    ):
        mock_account_repo.lock_for_update = AsyncMock(return_value=sample_account)
        mock_account_repo.update = AsyncMock()

        response = await add_credits.post(
            AddCreditsCommandDTO(
                user_id=42, amount=5, kind=TransactionKind.PURCHASE, description="x"
            )
        )

        assert response.balance_after == 15
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestAddCreditsValidation:

    async def test_zero_amount_rejected(self):
        with pytest.raises(ValueError):
            AddCreditsCommandDTO(user_id=42, amount=0, kind=TransactionKind.TRIAL, description="x")


@pytest.mark.asyncio
class TestAddCreditsStorageError:

    async def test_lock_failure_returns_storage_error(
        self, add_credits, mock_account_repo, mock_uow
    ):
        """
        Given: The account lock cannot be acquired
        When: execute is called
        Then: STORAGE_ERROR is returned and the transaction rolled back
        """
        mock_account_repo.lock_for_update = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("lock timeout"))
        )

        result = await add_credits.execute(
            AddCreditsCommandDTO(
                user_id=42, amount=5, kind=TransactionKind.TRIAL, description="x"
            )
        )

        assert result.is_err()
        assert result.error.code == "STORAGE_ERROR"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestInitTrialCredits:

    async def test_grants_default_trial(self):
        add_credits = MagicMock()
        add_credits.execute = AsyncMock(return_value="ok")

        use_case = InitTrialCredits(add_credits)
        await use_case.execute(42)

        command = add_credits.execute.call_args[0][0]
        assert command.user_id == 42
        assert command.amount == 25
        assert command.kind == TransactionKind.TRIAL
        assert command.description == "Welcome bonus: 25 free AI coaching credits"

    async def test_grants_configured_trial(self):
        add_credits = MagicMock()
        add_credits.execute = AsyncMock(return_value="ok")

        await InitTrialCredits(add_credits, trial_amount=10).execute(7)

        assert add_credits.execute.call_args[0][0].amount == 10
