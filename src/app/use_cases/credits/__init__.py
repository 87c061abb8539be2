"""Credit ledger use cases"""
from .add_credits import AddCredits
from .deduct_credit import DeductCredit, USAGE_COST
from .init_trial_credits import InitTrialCredits
from .get_balance import GetBalance
from .list_transactions import ListTransactions
from .quota_gate import QuotaGate
from .audit_ledger import AuditLedger
from .dtos import (
    RelatedEntity,
    AddCreditsCommandDTO,
    DeductCreditCommandDTO,
    CreditMutationResponseDTO,
    BalanceResponseDTO,
    TransactionDTO,
    ListTransactionsResponseDTO,
    PrincipalDTO,
    AdmissionDTO,
    SettleOutcome,
    SettlementDTO,
    LedgerDiscrepancyDTO,
    LedgerAuditResultDTO,
)

__all__ = [
    "AddCredits",
    "DeductCredit",
    "USAGE_COST",
    "InitTrialCredits",
    "GetBalance",
    "ListTransactions",
    "QuotaGate",
    "AuditLedger",
    "RelatedEntity",
    "AddCreditsCommandDTO",
    "DeductCreditCommandDTO",
    "CreditMutationResponseDTO",
    "BalanceResponseDTO",
    "TransactionDTO",
    "ListTransactionsResponseDTO",
    "PrincipalDTO",
    "AdmissionDTO",
    "SettleOutcome",
    "SettlementDTO",
    "LedgerDiscrepancyDTO",
    "LedgerAuditResultDTO",
]
