"""HandleOrderPaid Use Case

Turns a verified "order paid" provider event into a PaymentOrder row and a
purchase credit, exactly once per external order ID.
"""

import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService, UserNotification
from src.app.services.payment_provider import PaymentProvider, PaymentEvent
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.repositories.user_repository import UserRepository
from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.credits.dtos import AddCreditsCommandDTO, RelatedEntity
from src.domain.credit_transaction import TransactionKind
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus
from .dtos import WebhookResultDTO

logger = logging.getLogger(__name__)


class HandleOrderPaid:
    """
    Use Case: Apply a paid order

    Business Rules:
    1. Idempotency: an existing order for the external ID is a no-op success
    2. Unknown variant fails loudly (UNKNOWN_PRODUCT), never grants zero
    3. Buyer comes from checkout metadata; missing or unknown -> UNKNOWN_USER
    4. Order insert and purchase credit commit as one unit
    5. A concurrent delivery that loses the unique insert is a no-op

    Flow:
    1. Check for existing order
    2. Resolve package and buyer
    3. Insert order (flush surfaces unique violations)
    4. Stage purchase credit
    5. Commit
    6. Notify buyer
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PaymentOrderRepository,
        user_repo: UserRepository,
        add_credits: AddCredits,
        payment_provider: PaymentProvider,
        notification_service: NotificationService,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.user_repo = user_repo
        self.add_credits = add_credits
        self.payment_provider = payment_provider
        self.notification_service = notification_service

    async def execute(self, event: PaymentEvent) -> Result[WebhookResultDTO]:
        """
        Execute paid order handling

        Args:
            event: Verified and parsed PaymentEvent

        Returns:
            Result[WebhookResultDTO]: Success (possibly duplicate) or
            UNKNOWN_PRODUCT, UNKNOWN_USER, STORAGE_ERROR
        """
        try:
            # Step 1: Idempotency - webhook channels redeliver
            existing_order = await self.order_repo.get_by_external_order_id(
                event.external_order_id
            )
            if existing_order:
                logger.info(f"Duplicate paid event for order {event.external_order_id}, skipping")
                return Return.ok(self._duplicate(event))

            # Step 2: Resolve package
            package = self.payment_provider.get_package_by_variant_id(event.variant_id)
            if not package:
                logger.error(
                    f"Unknown variant_id {event.variant_id!r} on order {event.external_order_id}"
                )
                return Return.err(
                    Error(
                        code=ErrorCode.UNKNOWN_PRODUCT,
                        message="Unknown product variant",
                        reason=f"variant_id={event.variant_id}",
                    )
                )

            # Step 3: Resolve buyer from checkout metadata
            if not event.user_id:
                logger.error(f"No user_id in custom_data for order {event.external_order_id}")
                return Return.err(
                    Error(
                        code=ErrorCode.UNKNOWN_USER,
                        message="Missing user_id",
                        reason="custom_data.user_id is absent",
                    )
                )

            user = await self.user_repo.get_by_id(event.user_id)
            if not user:
                logger.error(f"User {event.user_id} not found for order {event.external_order_id}")
                return Return.err(
                    Error(
                        code=ErrorCode.UNKNOWN_USER,
                        message="User not found",
                        reason=f"user_id={event.user_id}",
                    )
                )

            # Step 4: Insert order first so a concurrent duplicate loses here
            order = PaymentOrder(
                external_order_id=event.external_order_id,
                user_id=event.user_id,
                product_id=event.product_id,
                variant_id=event.variant_id,
                package_name=package.name,
                credits_amount=package.credits,
                amount_paid=event.amount_paid,
                currency=event.currency,
                status=PaymentOrderStatus.PAID,
                webhook_payload=event.raw_payload,
            )
            try:
                order = await self.order_repo.create(order)
            except IntegrityError:
                await self.uow.rollback()
                if await self.order_repo.get_by_external_order_id(event.external_order_id):
                    logger.info(
                        f"Concurrent paid event for order {event.external_order_id} "
                        f"already applied, skipping"
                    )
                    return Return.ok(self._duplicate(event))
                raise

            # Step 5: Stage purchase credit in the same transaction
            posting = await self.add_credits.post(
                AddCreditsCommandDTO(
                    user_id=event.user_id,
                    amount=package.credits,
                    kind=TransactionKind.PURCHASE,
                    description=f"Purchased {package.name} package ({package.credits} credits)",
                    related_entity=RelatedEntity(type="payment_order", id=str(order.id)),
                )
            )

            # Step 6: Commit order + credit together
            await self.uow.commit()

        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to apply paid order {event.external_order_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to record payment",
                    reason=str(e),
                )
            )

        logger.info(
            f"Order {event.external_order_id}: added {package.credits} credits "
            f"for user {event.user_id} (balance {posting.balance_after})"
        )

        # Step 7: Notify buyer (best-effort, after commit)
        await self.notification_service.send(
            UserNotification(
                user_id=event.user_id,
                type="credits_purchased",
                title="Credits Added!",
                message=f"{package.credits} AI coaching credits have been added to your account.",
                link="/billing",
            )
        )

        return Return.ok(
            WebhookResultDTO(
                event_name=event.event_name,
                external_order_id=event.external_order_id,
                credits_added=package.credits,
                balance_after=posting.balance_after,
            )
        )

    def _duplicate(self, event: PaymentEvent) -> WebhookResultDTO:
        return WebhookResultDTO(
            event_name=event.event_name,
            external_order_id=event.external_order_id,
            duplicate=True,
        )
