"""Payment Provider Interface

Abstracts the external payment provider: webhook authenticity, event parsing,
the credit package catalogue and checkout creation.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class CreditPackage(BaseModel):
    """A purchasable bundle of credits"""

    key: str = Field(..., description="Package key (e.g., 'starter')")
    name: str = Field(..., description="Display name")
    credits: int = Field(..., gt=0, description="Credits granted")
    price: Decimal = Field(..., description="Price in major currency units")
    variant_id: str = Field(..., description="Provider variant ID")
    badge: Optional[str] = Field(default=None, description="Optional marketing badge")

    @property
    def price_per_credit(self) -> Decimal:
        return (self.price / self.credits).quantize(Decimal("0.001"))


class PaymentEvent(BaseModel):
    """Provider-independent view of a webhook event"""

    event_name: str = Field(..., description="Provider event name (e.g., 'order_created')")
    external_order_id: str = Field(..., description="Provider order ID")
    user_id: Optional[int] = Field(default=None, description="Internal user ID from checkout metadata")
    variant_id: Optional[str] = Field(default=None, description="Purchased variant ID")
    product_id: Optional[str] = Field(default=None, description="Purchased product ID")
    amount_paid: Decimal = Field(default=Decimal("0"), description="Amount paid in major units")
    currency: str = Field(default="USD", description="ISO currency code")
    raw_payload: str = Field(..., description="Raw request body as received")


class PaymentProvider(ABC):

    @abstractmethod
    def verify_signature(self, raw_body: bytes, signature: str) -> bool:
        """
        Check the webhook signature against the raw, unparsed body

        Must use a constant-time comparison. Returns False when no webhook
        secret is configured.
        """
        pass

    @abstractmethod
    def parse_event(self, raw_body: bytes) -> PaymentEvent:
        """
        Parse a verified webhook body

        Raises:
            ValueError: If the body is not a well-formed provider event
        """
        pass

    @abstractmethod
    def get_package_by_variant_id(self, variant_id: Optional[str]) -> Optional[CreditPackage]:
        pass

    @abstractmethod
    def get_package(self, package_key: str) -> Optional[CreditPackage]:
        pass

    @abstractmethod
    def list_packages(self) -> list[CreditPackage]:
        pass

    @abstractmethod
    async def create_checkout_url(
        self, package: CreditPackage, user_id: int, email: str
    ) -> Optional[str]:
        """
        Create a hosted checkout for a package

        The user ID is embedded in the checkout metadata so paid webhooks can
        be attributed without guessing from the email.

        Returns:
            Checkout URL, or None if the provider call failed
        """
        pass
