from .base import BaseModel, IdType, generate_uuid
from .credit_account import UserCreditAccount
from .credit_transaction import CreditTransaction, TransactionKind
from .payment_order import PaymentOrder, PaymentOrderStatus
from .referral_reward import ReferralReward, RewardType
from .unmatched_payment_event import UnmatchedPaymentEvent
from .user import User

__all__ = [
    "BaseModel",
    "IdType",
    "generate_uuid",
    "UserCreditAccount",
    "CreditTransaction",
    "TransactionKind",
    "PaymentOrder",
    "PaymentOrderStatus",
    "ReferralReward",
    "RewardType",
    "UnmatchedPaymentEvent",
    "User",
]
