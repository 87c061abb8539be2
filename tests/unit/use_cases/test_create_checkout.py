"""Unit tests for ListCreditPackages and CreateCheckout use cases"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.payment_provider import CreditPackage
from src.app.use_cases.payments.create_checkout import CreateCheckout, ListCreditPackages
from src.app.use_cases.payments.dtos import CheckoutCommandDTO


PACKAGES = [
    CreditPackage(key="starter", name="Starter", credits=50, price=Decimal("4.99"), variant_id="111"),
    CreditPackage(
        key="growth", name="Growth", credits=200, price=Decimal("14.99"),
        variant_id="222", badge="Best Value",
    ),
]


@pytest.fixture
def mock_payment_provider():
    provider = MagicMock()
    provider.list_packages = MagicMock(return_value=PACKAGES)
    provider.get_package = MagicMock(
        side_effect=lambda key: next((p for p in PACKAGES if p.key == key), None)
    )
    return provider


class TestListCreditPackages:

    def test_lists_packages_with_price_per_credit(self, mock_payment_provider):
        packages = ListCreditPackages(mock_payment_provider).execute()

        assert [p.key for p in packages] == ["starter", "growth"]
        assert packages[1].badge == "Best Value"
        assert packages[1].price_per_credit == Decimal("0.075")


@pytest.mark.asyncio
class TestCreateCheckout:

    async def test_returns_checkout_url(self, mock_payment_provider):
        mock_payment_provider.create_checkout_url = AsyncMock(
            return_value="https://store.lemonsqueezy.com/checkout/abc"
        )

        result = await CreateCheckout(mock_payment_provider).execute(
            CheckoutCommandDTO(user_id=42, email="coach@example.com", package_key="growth")
        )

        assert result.is_ok()
        assert result.value.checkout_url == "https://store.lemonsqueezy.com/checkout/abc"
        package, user_id, email = mock_payment_provider.create_checkout_url.call_args[0]
        assert package.key == "growth"
        assert user_id == 42
        assert email == "coach@example.com"

    async def test_unknown_package(self, mock_payment_provider):
        mock_payment_provider.create_checkout_url = AsyncMock()

        result = await CreateCheckout(mock_payment_provider).execute(
            CheckoutCommandDTO(user_id=42, email="coach@example.com", package_key="enterprise")
        )

        assert result.is_err()
        assert result.error.code == "UNKNOWN_PACKAGE"
        mock_payment_provider.create_checkout_url.assert_not_called()

    async def test_provider_failure(self, mock_payment_provider):
        mock_payment_provider.create_checkout_url = AsyncMock(return_value=None)

        result = await CreateCheckout(mock_payment_provider).execute(
            CheckoutCommandDTO(user_id=42, email="coach@example.com", package_key="starter")
        )

        assert result.is_err()
        assert result.error.code == "CHECKOUT_FAILED"
