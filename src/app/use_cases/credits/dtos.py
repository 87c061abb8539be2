"""Data Transfer Objects for Credit Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.credit_transaction import TransactionKind


class RelatedEntity(BaseModel):
    """Pointer to the object that caused a credit mutation"""

    type: str = Field(..., description="Entity type (e.g., 'chat_session', 'payment_order')")
    id: str = Field(..., description="Entity ID")


class AddCreditsCommandDTO(BaseModel):
    """
    Command DTO for adding (or, with a negative amount, removing) credits

    Used as input to AddCredits use case.
    """

    user_id: int = Field(
        ...,
        description="Owning user ID"
    )

    amount: int = Field(
        ...,
        description="Signed credit amount (non-zero)"
    )

    kind: TransactionKind = Field(
        ...,
        description="Transaction kind (trial, purchase, refund, reward)"
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Human-readable description for the audit trail"
    )

    related_entity: Optional[RelatedEntity] = Field(
        default=None,
        description="Entity that caused the mutation"
    )

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v == 0:
            raise ValueError("Amount must be non-zero")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "amount": 50,
                "kind": "purchase",
                "description": "Purchased Starter package (50 credits)",
                "related_entity": {"type": "payment_order", "id": "17"}
            }
        }


class DeductCreditCommandDTO(BaseModel):
    """
    Command DTO for consuming one credit

    Used as input to DeductCredit use case.
    """

    user_id: int = Field(
        ...,
        description="Owning user ID"
    )

    description: str = Field(
        default="AI chat message",
        min_length=1,
        max_length=255,
        description="Human-readable description for the audit trail"
    )

    related_entity: Optional[RelatedEntity] = Field(
        default=None,
        description="Entity that consumed the credit (e.g., chat session)"
    )


class CreditMutationResponseDTO(BaseModel):
    """
    Response DTO for credit mutations

    Returned by AddCredits, DeductCredit and InitTrialCredits.
    """

    transaction_id: Optional[int] = Field(
        default=None,
        description="Transaction ID"
    )

    user_id: int = Field(
        ...,
        description="Owning user ID"
    )

    kind: str = Field(
        ...,
        description="Transaction kind"
    )

    amount: int = Field(
        ...,
        description="Signed credit amount"
    )

    balance_before: int = Field(
        ...,
        description="Balance before the mutation"
    )

    balance_after: int = Field(
        ...,
        description="Balance after the mutation"
    )

    created_at: Optional[datetime] = Field(
        default=None,
        description="Transaction timestamp"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": 123,
                "user_id": 42,
                "kind": "usage",
                "amount": -1,
                "balance_before": 25,
                "balance_after": 24,
                "created_at": "2024-01-01T00:00:00Z"
            }
        }


class BalanceResponseDTO(BaseModel):
    """
    Response DTO for get balance operation

    Returned by GetBalance use case.
    """

    user_id: int = Field(..., description="Owning user ID")
    balance: int = Field(..., description="Current credit balance")
    lifetime_purchased: int = Field(..., description="Total credits ever purchased")
    lifetime_used: int = Field(..., description="Total credits ever consumed")
    last_updated: datetime = Field(..., description="Timestamp of last balance update")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "balance": 24,
                "lifetime_purchased": 0,
                "lifetime_used": 1,
                "last_updated": "2024-01-01T00:00:00Z"
            }
        }


class TransactionDTO(BaseModel):
    """Single transaction entry in a transaction history page"""

    id: int
    amount: int
    kind: str
    description: str
    balance_after: int
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    created_at: datetime


class ListTransactionsResponseDTO(BaseModel):
    """Paginated transaction history, most recent first"""

    transactions: list[TransactionDTO]
    total: int = Field(..., description="Total number of transactions for the user")
    page: int = Field(..., description="1-based page number")
    page_size: int = Field(..., description="Page size")
    total_pages: int = Field(..., description="Number of pages")


class PrincipalDTO(BaseModel):
    """Already-authenticated caller of a metered action"""

    user_id: int = Field(..., description="Caller user ID")
    role: str = Field(default="member", description="Platform role")

    @property
    def is_owner(self) -> bool:
        return self.role == "owner"


class AdmissionDTO(BaseModel):
    """Result of the quota admission check"""

    allowed: bool = Field(..., description="Whether the metered action may run")
    balance: Optional[int] = Field(default=None, description="Balance at check time (None if unlimited)")
    unlimited: bool = Field(default=False, description="Caller bypasses metering")


class SettleOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class SettlementDTO(BaseModel):
    """Result of settling a metered action"""

    charged: bool = Field(..., description="Whether a credit was debited")
    balance: Optional[int] = Field(default=None, description="Balance after settlement, if known")
    warning: Optional[str] = Field(default=None, description="Set when a debit failed after delivery")


class LedgerDiscrepancyDTO(BaseModel):
    """An account whose balance breaks a ledger invariant"""

    user_id: int
    account_balance: int
    calculated_balance: int
    discrepancy: int = Field(..., description="account_balance - calculated_balance")
    negative_balance: bool = Field(default=False)


class LedgerAuditResultDTO(BaseModel):
    """Result of a ledger audit run"""

    total_accounts_checked: int
    discrepancies_found: int
    discrepancies: list[LedgerDiscrepancyDTO]
    audit_time: datetime
    execution_time_ms: int
