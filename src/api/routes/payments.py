"""Payments API Routes

Credit packages, checkout creation and the payment provider webhook.
"""

from fastapi import APIRouter, Depends, Header, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.payments_request import CheckoutRequestSchema
from src.app.services.notification_service import NotificationService
from src.app.services.payment_provider import PaymentProvider
from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.payments.dtos import (
    CheckoutCommandDTO,
    CheckoutResponseDTO,
    CreditPackageDTO,
    WebhookResultDTO,
)
from src.app.use_cases.payments.create_checkout import CreateCheckout, ListCreditPackages
from src.app.use_cases.payments.handle_order_paid import HandleOrderPaid
from src.app.use_cases.payments.handle_order_refunded import HandleOrderRefunded
from src.app.use_cases.payments.process_webhook_event import ProcessWebhookEvent
from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.payment_order_repository import SqlAlchemyPaymentOrderRepository
from src.adapter.repositories.unmatched_payment_event_repository import (
    SqlAlchemyUnmatchedPaymentEventRepository,
)
from src.adapter.repositories.user_repository import SqlAlchemyUserRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_payment_provider, get_notification_service
from src.api.error import ClientError

router = APIRouter(prefix="/billing", tags=["Payments"])
webhook_router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.get(
    "/packages",
    response_model=list[CreditPackageDTO],
    status_code=status.HTTP_200_OK,
)
async def list_packages(
    payment_provider: PaymentProvider = Depends(get_payment_provider),
):
    """List purchasable credit packages with their price per credit."""
    return ListCreditPackages(payment_provider).execute()


@router.post(
    "/checkout",
    response_model=CheckoutResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def create_checkout(
    request: CheckoutRequestSchema,
    payment_provider: PaymentProvider = Depends(get_payment_provider),
):
    """
    Create a hosted checkout URL for a credit package.

    **Example request:**
    ```json
    {"user_id": 42, "email": "coach@example.com", "package": "growth"}
    ```

    **Returns:**
    - 200: `{"checkout_url": "..."}`
    - 404: Unknown package
    - 502: Payment provider unavailable or not configured
    """
    use_case = CreateCheckout(payment_provider)
    result = await use_case.execute(
        CheckoutCommandDTO(
            user_id=request.user_id,
            email=request.email,
            package_key=request.package,
        )
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@webhook_router.post(
    "/lemonsqueezy",
    response_model=WebhookResultDTO,
    status_code=status.HTTP_200_OK,
)
async def lemonsqueezy_webhook(
    request: Request,
    x_signature: str = Header(default="", alias="X-Signature"),
    session: AsyncSession = Depends(get_session),
    payment_provider: PaymentProvider = Depends(get_payment_provider),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Lemon Squeezy webhook receiver.

    The signature is verified over the raw body. Duplicate deliveries return
    200 so the provider stops retrying; any other error status makes it retry.

    **Returns:**
    - 200: Applied, duplicate, skipped or ignored
    - 400: Malformed payload or unknown product
    - 403: Invalid signature
    - 404: Buyer not found
    - 503: Storage unavailable (provider will retry)
    """
    raw_body = await request.body()

    uow = SqlAlchemyUnitOfWork(session)
    account_repo = SqlAlchemyCreditAccountRepository(session)
    transaction_repo = SqlAlchemyCreditTransactionRepository(session)
    order_repo = SqlAlchemyPaymentOrderRepository(session)
    user_repo = SqlAlchemyUserRepository(session)
    unmatched_event_repo = SqlAlchemyUnmatchedPaymentEventRepository(session)

    add_credits = AddCredits(uow, account_repo, transaction_repo)
    use_case = ProcessWebhookEvent(
        payment_provider,
        HandleOrderPaid(
            uow, order_repo, user_repo, add_credits, payment_provider, notification_service
        ),
        HandleOrderRefunded(uow, order_repo, account_repo, unmatched_event_repo, add_credits),
    )
    result = await use_case.execute(raw_body, x_signature)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
