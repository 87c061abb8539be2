"""AuditLedger Use Case

Checks every credit account against its transaction history.
"""

import logging
import time
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from .dtos import LedgerDiscrepancyDTO, LedgerAuditResultDTO

logger = logging.getLogger(__name__)


class AuditLedger:
    """
    Use Case: Audit credit accounts against the ledger

    Business Rules:
    1. balance must equal the sum of the account's transaction amounts
    2. balance must be >= 0
    3. Read-only: discrepancies are reported, never corrected

    Flow:
    1. Get all accounts
    2. For each account, sum its transaction amounts
    3. Record accounts that break either rule
    4. Return audit result
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        transaction_repo: CreditTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(self) -> Result[LedgerAuditResultDTO]:
        start_time = time.time()
        audit_time = datetime.utcnow()

        try:
            logger.info("Starting credit ledger audit")

            accounts = await self.account_repo.get_all()
            total_accounts = len(accounts)

            discrepancies: list[LedgerDiscrepancyDTO] = []

            for account in accounts:
                transaction_sum = await self.transaction_repo.sum_amounts_by_user_id(
                    account.user_id
                )

                if account.balance != transaction_sum or account.balance < 0:
                    discrepancy = LedgerDiscrepancyDTO(
                        user_id=account.user_id,
                        account_balance=account.balance,
                        calculated_balance=transaction_sum,
                        discrepancy=account.balance - transaction_sum,
                        negative_balance=account.balance < 0,
                    )
                    discrepancies.append(discrepancy)

                    logger.warning(
                        f"Discrepancy found for user {account.user_id}: "
                        f"balance={account.balance}, "
                        f"transaction_sum={transaction_sum}, "
                        f"discrepancy={discrepancy.discrepancy}"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Ledger audit complete. Found {len(discrepancies)} discrepancies "
                    f"out of {total_accounts} accounts in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Ledger audit complete. All {total_accounts} accounts balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(
                LedgerAuditResultDTO(
                    total_accounts_checked=total_accounts,
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    audit_time=audit_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except SQLAlchemyError as e:
            logger.error(f"Ledger audit failed: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.AUDIT_FAILED,
                    message="Failed to audit credit ledger",
                    reason=str(e),
                )
            )
