"""Background workers for the credit ledger service"""
from .ledger_auditor import LedgerAuditor

__all__ = ["LedgerAuditor"]
