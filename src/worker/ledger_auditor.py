"""Ledger audit worker

Runs AuditLedger against the configured database, once (for cron) or on
LEDGER_AUDIT_INTERVAL_SECONDS. Discrepancies are logged at ERROR and, when
LEDGER_AUDIT_ALERT_USER_ID is set, sent to that operator through the
NotificationService.

    python -m src.worker.ledger_auditor --once   # exit code reflects the audit
    python -m src.worker.ledger_auditor          # loop until SIGINT/SIGTERM
"""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from libs.result import Result, Return
from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.services.notification_service import create_notification_service
from src.app.services.notification_service import NotificationService, UserNotification
from src.app.use_cases.credits import AuditLedger, LedgerAuditResultDTO
from src.depends import build_engine, build_session_factory

logger = logging.getLogger(__name__)

EXIT_BALANCED = 0
EXIT_DISCREPANCIES = 1
EXIT_AUDIT_FAILED = 2

# Keep alert bodies short; the full list is in the logs
MAX_ALERTED_USERS = 10


class LedgerAuditor:
    """
    Scheduled ledger audit

    Read-only: discrepancies are reported, never corrected. A failed audit
    (storage unavailable) is reported as a failed Result, and the loop keeps
    running so the next interval can retry.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        notification_service: NotificationService,
        alert_user_id: Optional[int] = None,
        enabled: bool = True,
        interval_seconds: float = 86400,
    ):
        self.session_factory = session_factory
        self.notification_service = notification_service
        self.alert_user_id = alert_user_id
        self.enabled = enabled
        self.interval_seconds = interval_seconds

    @classmethod
    def from_config(cls, config, session_factory: sessionmaker) -> "LedgerAuditor":
        return cls(
            session_factory,
            create_notification_service(config.NOTIFICATION_WEBHOOK_URL),
            alert_user_id=config.LEDGER_AUDIT_ALERT_USER_ID,
            enabled=config.LEDGER_AUDIT_ENABLED,
            interval_seconds=config.LEDGER_AUDIT_INTERVAL_SECONDS,
        )

    async def audit(self) -> Result[LedgerAuditResultDTO]:
        if not self.enabled:
            logger.info("Ledger audit is disabled, skipping")
            return Return.ok(
                LedgerAuditResultDTO(
                    total_accounts_checked=0,
                    discrepancies_found=0,
                    discrepancies=[],
                    audit_time=datetime.utcnow(),
                    execution_time_ms=0,
                )
            )

        async with self.session_factory() as session:
            result = await AuditLedger(
                SqlAlchemyCreditAccountRepository(session),
                SqlAlchemyCreditTransactionRepository(session),
            ).execute()

        if result.is_ok() and result.value.discrepancies_found:
            await self._alert(result.value)

        return result

    async def run(self, stop: asyncio.Event) -> None:
        """Audit every interval until stop is set"""
        logger.info(f"Ledger audit loop started, interval {self.interval_seconds}s")

        while not stop.is_set():
            await self.audit()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Ledger audit loop stopped")

    async def _alert(self, audit: LedgerAuditResultDTO) -> None:
        logger.error(
            f"ALERT: {audit.discrepancies_found} of {audit.total_accounts_checked} "
            f"credit accounts do not match their ledger"
        )

        if self.alert_user_id is None:
            return

        users = ", ".join(str(d.user_id) for d in audit.discrepancies[:MAX_ALERTED_USERS])
        if audit.discrepancies_found > MAX_ALERTED_USERS:
            users += ", ..."

        await self.notification_service.send(
            UserNotification(
                user_id=self.alert_user_id,
                type="ledger_discrepancy",
                title="Credit ledger discrepancies",
                message=(
                    f"{audit.discrepancies_found} accounts out of balance "
                    f"(users: {users}). Audit ran at {audit.audit_time.isoformat()}."
                ),
            )
        )


def exit_code(result: Result[LedgerAuditResultDTO]) -> int:
    if result.is_err():
        return EXIT_AUDIT_FAILED
    return EXIT_DISCREPANCIES if result.value.discrepancies_found else EXIT_BALANCED


async def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Credit ledger audit")
    parser.add_argument("--once", action="store_true", help="Audit once and exit with its status")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = build_engine(ApplicationConfig.DB_URI)
    auditor = LedgerAuditor.from_config(ApplicationConfig, build_session_factory(engine))

    try:
        if args.once:
            return exit_code(await auditor.audit())

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)

        await auditor.run(stop)
        return EXIT_BALANCED
    finally:
        await engine.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
