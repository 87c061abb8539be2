"""Data Transfer Objects for Payment Use Cases"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class WebhookResultDTO(BaseModel):
    """
    Response DTO for a processed webhook delivery

    Duplicates and skipped events are successes: the provider must stop
    retrying them.
    """

    received: bool = Field(default=True, description="Event was authenticated and accepted")
    event_name: Optional[str] = Field(default=None, description="Provider event name")
    external_order_id: Optional[str] = Field(default=None, description="Provider order ID")
    duplicate: bool = Field(default=False, description="Event was already applied")
    skipped: bool = Field(default=False, description="Event had nothing to apply")
    ignored: bool = Field(default=False, description="Event type is not handled")
    credits_added: Optional[int] = Field(default=None, description="Credits granted by a paid order")
    credits_deducted: Optional[int] = Field(default=None, description="Credits removed by a refund")
    refunded: bool = Field(default=False, description="Order was marked refunded")
    balance_after: Optional[int] = Field(default=None, description="User balance after the mutation")

    class Config:
        json_schema_extra = {
            "example": {
                "received": True,
                "event_name": "order_created",
                "external_order_id": "ord_1",
                "duplicate": False,
                "credits_added": 50,
                "balance_after": 50
            }
        }


class CreditPackageDTO(BaseModel):
    """Credit package as shown on the billing page"""

    key: str
    name: str
    credits: int
    price: Decimal
    price_per_credit: Decimal
    badge: Optional[str] = None


class CheckoutCommandDTO(BaseModel):
    """Command DTO for creating a checkout session"""

    user_id: int = Field(..., description="Buyer user ID (embedded in checkout metadata)")
    email: str = Field(..., min_length=3, description="Buyer email, prefilled on the checkout")
    package_key: str = Field(..., min_length=1, description="Credit package key")


class CheckoutResponseDTO(BaseModel):
    checkout_url: str = Field(..., description="Hosted checkout URL")
