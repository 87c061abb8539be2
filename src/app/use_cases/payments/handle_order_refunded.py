"""HandleOrderRefunded Use Case

Reverses the credits of a refunded order without driving the balance negative.
"""

import logging
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.payment_provider import PaymentEvent
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.repositories.unmatched_payment_event_repository import UnmatchedPaymentEventRepository
from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.credits.dtos import AddCreditsCommandDTO, RelatedEntity
from src.domain.credit_transaction import TransactionKind
from src.domain.payment_order import PaymentOrderStatus
from src.domain.unmatched_payment_event import UnmatchedPaymentEvent
from .dtos import WebhookResultDTO

logger = logging.getLogger(__name__)


class HandleOrderRefunded:
    """
    Use Case: Apply a refunded order

    Business Rules:
    1. Only PAID orders can be refunded (paid -> refunded, once)
    2. Unknown order: audited and skipped; already refunded: skipped
    3. Deducted amount = min(order credits, current balance)
    4. Order status and refund debit commit as one unit

    Flow:
    1. Lock order row
    2. Lock account and clamp deduction to the locked balance
    3. Mark order refunded
    4. Stage refund debit (if anything is left to take)
    5. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PaymentOrderRepository,
        account_repo: CreditAccountRepository,
        unmatched_event_repo: UnmatchedPaymentEventRepository,
        add_credits: AddCredits,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.account_repo = account_repo
        self.unmatched_event_repo = unmatched_event_repo
        self.add_credits = add_credits

    async def execute(self, event: PaymentEvent) -> Result[WebhookResultDTO]:
        try:
            # Step 1: Lock the order so concurrent refund deliveries serialize
            order = await self.order_repo.get_by_external_order_id(
                event.external_order_id, for_update=True
            )

            if not order:
                logger.warning(
                    f"Refund event for unknown order {event.external_order_id}, skipping"
                )
                await self.unmatched_event_repo.create(
                    UnmatchedPaymentEvent(
                        event_name=event.event_name,
                        external_order_id=event.external_order_id,
                        reason="no paid order recorded",
                        webhook_payload=event.raw_payload,
                    )
                )
                await self.uow.commit()
                return Return.ok(self._skipped(event))

            if order.status != PaymentOrderStatus.PAID:
                await self.uow.rollback()
                logger.info(
                    f"Order {event.external_order_id} already refunded, skipping"
                )
                return Return.ok(self._skipped(event, duplicate=True))

            # Step 2: Clamp to the locked balance; the user may have spent some
            account = await self.account_repo.lock_for_update(order.user_id)
            deduct_amount = min(order.credits_amount, account.balance)

            # Step 3: Mark refunded
            order.status = PaymentOrderStatus.REFUNDED
            order.refunded_at = datetime.utcnow()
            await self.order_repo.update(order)

            # Step 4: Stage refund debit
            balance_after = account.balance
            if deduct_amount > 0:
                posting = await self.add_credits.post(
                    AddCreditsCommandDTO(
                        user_id=order.user_id,
                        amount=-deduct_amount,
                        kind=TransactionKind.REFUND,
                        description=f"Refund: {order.package_name or order.variant_id} package",
                        related_entity=RelatedEntity(type="payment_order", id=str(order.id)),
                    )
                )
                balance_after = posting.balance_after

            # Step 5: Commit
            await self.uow.commit()

        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to apply refund for order {event.external_order_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to record refund",
                    reason=str(e),
                )
            )

        logger.info(
            f"Order {event.external_order_id} refunded: deducted {deduct_amount} of "
            f"{order.credits_amount} credits from user {order.user_id}"
        )

        return Return.ok(
            WebhookResultDTO(
                event_name=event.event_name,
                external_order_id=event.external_order_id,
                refunded=True,
                credits_deducted=deduct_amount,
                balance_after=balance_after,
            )
        )

    def _skipped(self, event: PaymentEvent, duplicate: bool = False) -> WebhookResultDTO:
        return WebhookResultDTO(
            event_name=event.event_name,
            external_order_id=event.external_order_id,
            skipped=True,
            duplicate=duplicate,
        )
