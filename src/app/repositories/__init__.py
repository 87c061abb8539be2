from .credit_account_repository import CreditAccountRepository
from .credit_transaction_repository import CreditTransactionRepository
from .payment_order_repository import PaymentOrderRepository
from .referral_reward_repository import ReferralRewardRepository
from .user_repository import UserRepository
from .unmatched_payment_event_repository import UnmatchedPaymentEventRepository

__all__ = [
    "CreditAccountRepository",
    "CreditTransactionRepository",
    "PaymentOrderRepository",
    "ReferralRewardRepository",
    "UserRepository",
    "UnmatchedPaymentEventRepository",
]
