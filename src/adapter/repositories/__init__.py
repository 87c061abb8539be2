from .credit_account_repository import SqlAlchemyCreditAccountRepository
from .credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from .payment_order_repository import SqlAlchemyPaymentOrderRepository
from .referral_reward_repository import SqlAlchemyReferralRewardRepository
from .user_repository import SqlAlchemyUserRepository
from .unmatched_payment_event_repository import SqlAlchemyUnmatchedPaymentEventRepository

__all__ = [
    "SqlAlchemyCreditAccountRepository",
    "SqlAlchemyCreditTransactionRepository",
    "SqlAlchemyPaymentOrderRepository",
    "SqlAlchemyReferralRewardRepository",
    "SqlAlchemyUserRepository",
    "SqlAlchemyUnmatchedPaymentEventRepository",
]
