"""Unit tests for User and UserCreditAccount domain entities"""

from datetime import datetime, timedelta
from decimal import Decimal

from src.app.services.payment_provider import CreditPackage
from src.domain.credit_account import UserCreditAccount
from src.domain.user import User


class TestUserAIAccess:

    def test_no_entitlement(self):
        user = User(id=1, email="a@example.com")
        assert user.has_ai_access() is False

    def test_active_entitlement(self):
        user = User(id=1, email="a@example.com", ai_access_until=datetime.utcnow() + timedelta(days=1))
        assert user.has_ai_access() is True

    def test_expired_entitlement(self):
        now = datetime(2025, 6, 1)
        user = User(id=1, email="a@example.com", ai_access_until=datetime(2025, 5, 31))
        assert user.has_ai_access(now=now) is False

    def test_default_role_is_member(self):
        assert User(id=1, email="a@example.com").role == "member"


class TestUserCreditAccountDefaults:

    def test_new_account_has_zero_balance(self):
        account = UserCreditAccount(user_id=42)
        assert account.balance == 0
        assert account.lifetime_purchased == 0
        assert account.lifetime_used == 0


class TestCreditPackage:

    def test_price_per_credit_rounded_to_three_places(self):
        package = CreditPackage(
            key="growth", name="Growth", credits=200, price=Decimal("14.99"), variant_id="v2"
        )
        assert package.price_per_credit == Decimal("0.075")

    def test_starter_price_per_credit(self):
        package = CreditPackage(
            key="starter", name="Starter", credits=50, price=Decimal("4.99"), variant_id="v1"
        )
        assert package.price_per_credit == Decimal("0.100")
