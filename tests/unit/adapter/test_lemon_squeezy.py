"""Unit tests for LemonSqueezyPaymentProvider

Tests cover:
- HMAC-SHA256 signature over the raw body, tampering, missing secret
- Event parsing (user_id, variant, cents -> major units, currency)
- Package lookup by variant, unconfigured variants never match
- Checkout creation via httpx.MockTransport
"""

import hashlib
import hmac
import json
import pytest
import httpx
from decimal import Decimal

from src.adapter.services.lemon_squeezy import LemonSqueezyPaymentProvider

SECRET = "whsec_test"

PACKAGES = {
    "starter": {"name": "Starter", "credits": 50, "price": "4.99", "variant_id": "111", "badge": None},
    "growth": {"name": "Growth", "credits": 200, "price": "14.99", "variant_id": "222", "badge": "Best Value"},
    "pro": {"name": "Pro", "credits": 500, "price": "29.99", "variant_id": "PENDING", "badge": None},
}


def sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def order_payload(event_name="order_created", order_id=1001, user_id="42", variant_id=111, total=499):
    return {
        "meta": {"event_name": event_name, "custom_data": {"user_id": user_id}},
        "data": {
            "type": "orders",
            "id": order_id,
            "attributes": {
                "total": total,
                "currency": "usd",
                "first_order_item": {"variant_id": variant_id, "product_id": 9},
            },
        },
    }


def make_provider(transport=None, webhook_secret=SECRET, api_key="key_test") -> LemonSqueezyPaymentProvider:
    return LemonSqueezyPaymentProvider(
        api_key=api_key,
        store_id="7",
        webhook_secret=webhook_secret,
        packages=PACKAGES,
        transport=transport,
    )


class TestVerifySignature:

    def test_valid_signature(self):
        body = json.dumps(order_payload()).encode()
        assert make_provider().verify_signature(body, sign(body)) is True

    def test_tampered_body_rejected(self):
        body = json.dumps(order_payload(total=499)).encode()
        signature = sign(body)
        tampered = json.dumps(order_payload(total=49900)).encode()

        assert make_provider().verify_signature(tampered, signature) is False

    def test_wrong_secret_rejected(self):
        body = b'{"meta": {}}'
        assert make_provider().verify_signature(body, sign(body, "other")) is False

    def test_empty_signature_rejected(self):
        assert make_provider().verify_signature(b"{}", "") is False

    @pytest.mark.parametrize("signature", ["\xe9abc", "caf\xe9" * 16, "\u00ff" * 64])
    def test_non_ascii_signature_rejected(self, signature):
        body = json.dumps(order_payload()).encode()
        assert make_provider().verify_signature(body, signature) is False

    @pytest.mark.parametrize("secret", [None, "", "PENDING"])
    def test_unconfigured_secret_always_fails(self, secret):
        body = b"{}"
        provider = make_provider(webhook_secret=secret)
        assert provider.verify_signature(body, sign(body, secret or "x")) is False


class TestParseEvent:

    def test_parses_order_created(self):
        body = json.dumps(order_payload()).encode()

        event = make_provider().parse_event(body)

        assert event.event_name == "order_created"
        assert event.external_order_id == "1001"
        assert event.user_id == 42
        assert event.variant_id == "111"
        assert event.product_id == "9"
        assert event.amount_paid == Decimal("4.99")
        assert event.currency == "USD"
        assert event.raw_payload == body.decode()

    def test_missing_custom_user_id(self):
        payload = order_payload()
        del payload["meta"]["custom_data"]

        event = make_provider().parse_event(json.dumps(payload).encode())

        assert event.user_id is None

    def test_non_numeric_user_id(self):
        event = make_provider().parse_event(json.dumps(order_payload(user_id="abc")).encode())
        assert event.user_id is None

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[1, 2]",
            json.dumps({"meta": {}, "data": {"id": 1}}).encode(),
            json.dumps({"meta": {"event_name": "order_created"}, "data": {}}).encode(),
            json.dumps({"meta": {"event_name": "order_created"}, "data": {"id": 1, "attributes": "x"}}).encode(),
            json.dumps(
                {
                    "meta": {"event_name": "order_created"},
                    "data": {"id": 1, "attributes": {"first_order_item": [111]}},
                }
            ).encode(),
            json.dumps(
                {"meta": {"event_name": "order_created", "custom_data": "42"}, "data": {"id": 1}}
            ).encode(),
        ],
    )
    def test_malformed_body_raises(self, body):
        with pytest.raises(ValueError):
            make_provider().parse_event(body)


class TestPackages:

    def test_lookup_by_variant(self):
        provider = make_provider()
        assert provider.get_package_by_variant_id("222").key == "growth"
        assert provider.get_package_by_variant_id("999") is None

    def test_pending_variant_never_matches(self):
        provider = make_provider()
        assert provider.get_package_by_variant_id("PENDING") is None
        assert provider.get_package_by_variant_id(None) is None

    def test_default_catalogue(self):
        provider = LemonSqueezyPaymentProvider(api_key=None, store_id=None, webhook_secret=None)
        packages = {p.key: p for p in provider.list_packages()}

        assert packages["starter"].credits == 50
        assert packages["growth"].price == Decimal("14.99")
        assert packages["growth"].badge == "Best Value"
        assert packages["pro"].credits == 500


@pytest.mark.asyncio
class TestCreateCheckout:

    async def test_posts_checkout_with_user_metadata(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                201, json={"data": {"attributes": {"url": "https://pay.example/checkout/abc"}}}
            )

        provider = make_provider(transport=httpx.MockTransport(handler))
        package = provider.get_package("starter")

        url = await provider.create_checkout_url(package, 42, "coach@example.com")

        assert url == "https://pay.example/checkout/abc"
        assert captured["url"] == "https://api.lemonsqueezy.com/v1/checkouts"
        assert captured["headers"]["authorization"] == "Bearer key_test"
        assert captured["headers"]["content-type"] == "application/vnd.api+json"
        data = captured["body"]["data"]
        assert data["attributes"]["checkout_data"]["email"] == "coach@example.com"
        assert data["attributes"]["checkout_data"]["custom"] == {"user_id": "42"}
        assert data["relationships"]["store"]["data"]["id"] == "7"
        assert data["relationships"]["variant"]["data"]["id"] == "111"

    async def test_api_error_returns_none(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(422, json={"errors": []}))
        provider = make_provider(transport=transport)

        url = await provider.create_checkout_url(provider.get_package("starter"), 42, "a@example.com")

        assert url is None

    async def test_unconfigured_variant_returns_none_without_calling_api(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json={})

        provider = make_provider(transport=httpx.MockTransport(handler))

        url = await provider.create_checkout_url(provider.get_package("pro"), 42, "a@example.com")

        assert url is None
        assert calls == []
