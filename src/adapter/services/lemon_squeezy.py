"""Lemon Squeezy Payment Provider

Implements PaymentProvider against the Lemon Squeezy API and webhook format.

Webhook shape (relevant fields):
    meta.event_name                              "order_created" | "order_refunded" | ...
    meta.custom_data.user_id                     user ID embedded at checkout
    data.id                                      order ID
    data.attributes.first_order_item.variant_id  purchased variant
    data.attributes.first_order_item.product_id  purchased product
    data.attributes.total                        amount in cents
    data.attributes.currency                     ISO currency code
"""

import hashlib
import hmac
import json
import logging
from decimal import Decimal
from typing import Any, Optional
import httpx
from src.app.services.payment_provider import CreditPackage, PaymentEvent, PaymentProvider

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.lemonsqueezy.com"
UNCONFIGURED = "PENDING"

DEFAULT_CREDIT_PACKAGES = {
    "starter": {"name": "Starter", "credits": 50, "price": "4.99", "variant_id": UNCONFIGURED, "badge": None},
    "growth": {"name": "Growth", "credits": 200, "price": "14.99", "variant_id": UNCONFIGURED, "badge": "Best Value"},
    "pro": {"name": "Pro", "credits": 500, "price": "29.99", "variant_id": UNCONFIGURED, "badge": None},
}


def _is_configured(value: Optional[str]) -> bool:
    return bool(value) and value != UNCONFIGURED


class LemonSqueezyPaymentProvider(PaymentProvider):
    """
    Lemon Squeezy implementation of PaymentProvider

    Features:
    - HMAC-SHA256 webhook signature over the raw body (constant-time compare)
    - Variant -> package mapping from configuration
    - Checkout creation through the JSON:API /v1/checkouts endpoint
    """

    def __init__(
        self,
        api_key: Optional[str],
        store_id: Optional[str],
        webhook_secret: Optional[str],
        packages: Optional[dict[str, dict[str, Any]]] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider

        Args:
            api_key: API key used for checkout creation
            store_id: Store the checkouts belong to
            webhook_secret: Signing secret shared with the webhook endpoint
            packages: Mapping of package key -> {name, credits, price, variant_id, badge}
            api_url: API base URL
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_key = api_key
        self.store_id = store_id
        self.webhook_secret = webhook_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.packages = [
            CreditPackage(
                key=key,
                name=entry["name"],
                credits=int(entry["credits"]),
                price=Decimal(str(entry["price"])),
                variant_id=str(entry.get("variant_id") or UNCONFIGURED),
                badge=entry.get("badge"),
            )
            for key, entry in (packages or DEFAULT_CREDIT_PACKAGES).items()
        ]

    @classmethod
    def from_config(cls, config) -> "LemonSqueezyPaymentProvider":
        return cls(
            api_key=config.LEMON_SQUEEZY_API_KEY,
            store_id=config.LEMON_SQUEEZY_STORE_ID,
            webhook_secret=config.LEMON_SQUEEZY_WEBHOOK_SECRET,
            packages=config.CREDIT_PACKAGES,
            api_url=config.LEMON_SQUEEZY_API_URL,
        )

    def verify_signature(self, raw_body: bytes, signature: str) -> bool:
        if not _is_configured(self.webhook_secret):
            logger.error("Lemon Squeezy webhook secret not configured")
            return False

        computed = hmac.new(
            self.webhook_secret.encode("utf-8"), raw_body, hashlib.sha256
        ).hexdigest()
        # Headers arrive latin-1 decoded and may hold non-ASCII; compare as bytes
        return hmac.compare_digest(
            computed.encode("ascii"), (signature or "").encode("utf-8", "surrogateescape")
        )

    def parse_event(self, raw_body: bytes) -> PaymentEvent:
        try:
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(f"body is not valid JSON: {e}")

        if not isinstance(payload, dict):
            raise ValueError("body is not a JSON object")

        meta = payload.get("meta") or {}
        data = payload.get("data") or {}
        if not isinstance(meta, dict) or not isinstance(data, dict):
            raise ValueError("meta and data must be objects")

        event_name = meta.get("event_name")
        if not event_name:
            raise ValueError("meta.event_name is missing")

        order_id = data.get("id")
        if order_id is None or order_id == "":
            raise ValueError("data.id is missing")

        attributes = data.get("attributes") or {}
        if not isinstance(attributes, dict):
            raise ValueError("data.attributes must be an object")

        first_item = attributes.get("first_order_item") or {}
        custom_data = meta.get("custom_data") or {}
        if not isinstance(first_item, dict) or not isinstance(custom_data, dict):
            raise ValueError("first_order_item and custom_data must be objects")

        try:
            total_cents = int(attributes.get("total") or 0)
        except (TypeError, ValueError):
            raise ValueError("data.attributes.total is not an integer")

        return PaymentEvent(
            event_name=str(event_name),
            external_order_id=str(order_id),
            user_id=self._parse_user_id(custom_data.get("user_id")),
            variant_id=self._as_str(first_item.get("variant_id")),
            product_id=self._as_str(first_item.get("product_id")),
            amount_paid=Decimal(total_cents) / 100,
            currency=str(attributes.get("currency") or "USD").upper(),
            raw_payload=raw_body.decode("utf-8", errors="replace"),
        )

    def get_package_by_variant_id(self, variant_id: Optional[str]) -> Optional[CreditPackage]:
        if not _is_configured(variant_id):
            return None
        for package in self.packages:
            if package.variant_id == str(variant_id):
                return package
        return None

    def get_package(self, package_key: str) -> Optional[CreditPackage]:
        for package in self.packages:
            if package.key == package_key:
                return package
        return None

    def list_packages(self) -> list[CreditPackage]:
        return list(self.packages)

    async def create_checkout_url(
        self, package: CreditPackage, user_id: int, email: str
    ) -> Optional[str]:
        if not _is_configured(self.api_key) or not _is_configured(package.variant_id):
            logger.warning(
                f"Checkout unavailable: provider or variant not configured for package {package.key}"
            )
            return None

        payload = {
            "data": {
                "type": "checkouts",
                "attributes": {
                    "checkout_data": {
                        "email": email,
                        "custom": {"user_id": str(user_id)},
                    },
                },
                "relationships": {
                    "store": {"data": {"type": "stores", "id": str(self.store_id)}},
                    "variant": {"data": {"type": "variants", "id": package.variant_id}},
                },
            }
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.api_url}/v1/checkouts",
                    content=json.dumps(payload),
                    headers={
                        "Content-Type": "application/vnd.api+json",
                        "Accept": "application/vnd.api+json",
                        "Authorization": f"Bearer {self.api_key}",
                    },
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Lemon Squeezy checkout creation failed for package {package.key}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Lemon Squeezy checkout returned invalid JSON: {e}")
            return None

        return ((body.get("data") or {}).get("attributes") or {}).get("url")

    @staticmethod
    def _parse_user_id(value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric custom_data.user_id {value!r}")
            return None

    @staticmethod
    def _as_str(value: Any) -> Optional[str]:
        return None if value is None else str(value)
