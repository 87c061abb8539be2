"""CreateCheckout Use Case

Creates a hosted checkout for a credit package.
"""

import logging
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.payment_provider import PaymentProvider
from .dtos import CheckoutCommandDTO, CheckoutResponseDTO, CreditPackageDTO

logger = logging.getLogger(__name__)


class ListCreditPackages:
    """Use Case: List purchasable credit packages"""

    def __init__(self, payment_provider: PaymentProvider):
        self.payment_provider = payment_provider

    def execute(self) -> list[CreditPackageDTO]:
        return [
            CreditPackageDTO(
                key=package.key,
                name=package.name,
                credits=package.credits,
                price=package.price,
                price_per_credit=package.price_per_credit,
                badge=package.badge,
            )
            for package in self.payment_provider.list_packages()
        ]


class CreateCheckout:
    """
    Use Case: Create a checkout URL for a package

    The buyer's user ID travels in the checkout metadata and comes back on
    the paid webhook.
    """

    def __init__(self, payment_provider: PaymentProvider):
        self.payment_provider = payment_provider

    async def execute(self, command: CheckoutCommandDTO) -> Result[CheckoutResponseDTO]:
        package = self.payment_provider.get_package(command.package_key)
        if not package:
            return Return.err(
                Error(
                    code=ErrorCode.UNKNOWN_PACKAGE,
                    message="Invalid package",
                    reason=f"package={command.package_key}",
                )
            )

        checkout_url = await self.payment_provider.create_checkout_url(
            package, command.user_id, command.email
        )
        if not checkout_url:
            return Return.err(
                Error(
                    code=ErrorCode.CHECKOUT_FAILED,
                    message="Failed to create checkout session. Payment provider may not be configured yet.",
                )
            )

        return Return.ok(CheckoutResponseDTO(checkout_url=checkout_url))
