"""Shared test fixtures and configuration."""

import os
import pytest
from typing import Any, Callable, Dict, List

import httpx

# Set up test environment variables before importing modules
os.environ.setdefault("PAYMONGO_API_KEY", "sk_test_dummy_key_for_testing")
os.environ.setdefault("ADAPTER_API_KEY", "test_api_key_12345")

from commerce_plugins.config import PaymongoConfig, SupabaseStorageConfig
from commerce_plugins.processors.base import Address, Cart, Region


def payment_intent_payload(
    status: str = "succeeded",
    amount: int = 5000,
    currency: str = "PHP",
    intent_id: str = "pi_test_123",
) -> Dict[str, Any]:
    """Return a PayMongo payment_intents/{id} response body."""
    return {
        "data": {
            "id": intent_id,
            "type": "payment_intent",
            "attributes": {
                "amount": amount,
                "currency": currency,
                "status": status,
                "description": None,
            },
        }
    }


class RecordingTransport:
    """Route requests to a handler and keep every request for assertions."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


class FakeCartService:
    """In-memory stand-in for the platform's cart store."""

    def __init__(self, *carts: Cart):
        self.carts = {cart.id: cart for cart in carts}
        self.calls: List[str] = []

    def retrieve_with_totals(self, cart_id: str) -> Cart:
        self.calls.append(cart_id)
        return self.carts[cart_id]


@pytest.fixture
def paymongo_config() -> PaymongoConfig:
    return PaymongoConfig(api_key="sk_test_abc", store_url="https://shop.example.com")


@pytest.fixture
def storage_config() -> SupabaseStorageConfig:
    return SupabaseStorageConfig(
        bucket_name="media",
        project_url="https://proj.supabase.co",
        api_key="service_key",
        reference_id="proj",
    )


@pytest.fixture
def cart() -> Cart:
    return Cart(
        id="cart_01",
        email="buyer@example.com",
        total=5000,
        region=Region(currency_code="php"),
        shipping_address=Address(
            first_name="Juan",
            last_name="Dela Cruz",
            address_1="1 Rizal St",
            city="Makati",
            province="Metro Manila",
            postal_code="1200",
            country_code="ph",
            phone="+639170000000",
        ),
    )


@pytest.fixture
def cart_service(cart) -> FakeCartService:
    return FakeCartService(cart)


@pytest.fixture
def checkout_session_payload() -> Dict[str, Any]:
    return {
        "data": {
            "id": "cs_test_123",
            "type": "checkout_session",
            "attributes": {
                "checkout_url": "https://checkout.paymongo.com/cs_test_123",
                "payment_intent": {
                    "id": "pi_test_123",
                    "type": "payment_intent",
                    "attributes": {"amount": 5000, "currency": "PHP", "status": "awaiting_payment_method"},
                },
            },
        }
    }
