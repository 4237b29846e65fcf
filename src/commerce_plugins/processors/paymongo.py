import base64
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import PaymongoConfig
from ..reconciliation import (
    OrderExpectation,
    PaymentIntentSnapshot,
    PaymentSessionStatus,
    classify,
    find_discrepancies,
    to_session_status,
)
from .base import (
    AuthorizationResult,
    Cart,
    CartService,
    PaymentProcessorBase,
    PaymentProcessorContext,
    PaymentProcessorError,
)

logger = logging.getLogger(__name__)


class PaymongoProcessor(PaymentProcessorBase):
    """
    PayMongo processor built on hosted checkout sessions. The customer pays on
    PayMongo's checkout page; this class creates that page and later reads the
    embedded payment intent back to decide the session status.
    """

    identifier = "paymongo"
    UNSUPPORTED_OPERATIONS = frozenset({"refund_payment"})

    def __init__(
        self,
        config: PaymongoConfig,
        cart_service: Optional[CartService] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.cart_service = cart_service
        self._auth_header = "Basic " + base64.b64encode(config.api_key.encode()).decode()
        self._client = client or httpx.Client(timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def _request(self, path: str, method: str = "POST", body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {
            "accept": "application/json",
            "Content-Type": "application/json",
            "authorization": self._auth_header,
        }
        url = f"{self.config.api_url.rstrip('/')}/{path}"
        try:
            response = self._client.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error(f"PayMongo {method} {path} failed: {type(e).__name__}")
            raise self.build_error("Unable to reach paymongo", "connection_error", str(e)) from e

        if not response.is_success:
            logger.error(f"PayMongo {method} {path} returned {response.status_code}")
            raise self.build_error(
                "Unable to fetch from paymongo", str(response.status_code), response.reason_phrase
            )
        logger.info(f"PayMongo {method} {path} -> {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"PayMongo {method} {path} returned a non-JSON body")
            raise self.build_error(
                "Invalid response from paymongo", str(response.status_code), str(e)
            ) from e

    def fetch_payment_intent(self, payment_intent_id: str) -> Optional[PaymentIntentSnapshot]:
        payload = self._request(f"payment_intents/{payment_intent_id}", method="GET")
        return PaymentIntentSnapshot.from_api(payload)

    def _retrieve_cart(self, cart_id: str) -> Cart:
        if self.cart_service is None:
            raise self.build_error("No cart service configured", "configuration_error", cart_id)
        return self.cart_service.retrieve_with_totals(cart_id)

    def _checkout_body(self, cart: Cart) -> Dict[str, Any]:
        address = cart.shipping_address
        store_url = self.config.store_url.rstrip("/")
        return {
            "data": {
                "attributes": {
                    "billing": {
                        "address": {
                            "line1": address.address_1,
                            "city": address.city,
                            "state": address.province,
                            "postal_code": address.postal_code,
                            "country": address.country_code.upper(),
                        },
                        "name": f"{address.first_name} {address.last_name}".strip(),
                        "email": cart.email,
                        "phone": address.phone,
                    },
                    "send_email_receipt": False,
                    "show_description": False,
                    "show_line_items": True,
                    "cancel_url": f"{store_url}/checkout?step=payment_information",
                    "line_items": [
                        {
                            # PayMongo expects upper-case codes in requests
                            "currency": cart.region.currency_code.upper(),
                            "amount": cart.total,
                            "name": "Order Total",
                            "quantity": 1,
                        }
                    ],
                    "payment_method_types": list(self.config.payment_method_types),
                    "success_url": f"{store_url}/checkout?step=review_order&success=true",
                }
            }
        }

    def initiate_payment(self, context: PaymentProcessorContext) -> Dict[str, Any]:
        cart = self._retrieve_cart(context.resource_id)
        data = self._request("checkout_sessions", body=self._checkout_body(cart))

        attributes = data["data"]["attributes"]
        payment_intent = attributes["payment_intent"]
        logger.info(f"Created PayMongo checkout for cart {cart.id}: intent {payment_intent['id']}")
        return {
            "session_data": {
                "checkout_url": attributes["checkout_url"],
                "payment_intent_id": payment_intent["id"],
                "payment_status": payment_intent["attributes"]["status"],
            }
        }

    def reconcile_payment(
        self, payment_intent_id: str, expectation: OrderExpectation
    ) -> AuthorizationResult:
        """Fetch a payment intent and classify it against the expected charge.

        Raises:
            PaymentProcessorError: If PayMongo cannot be reached or the intent is missing.
        """
        snapshot = self.fetch_payment_intent(payment_intent_id)
        if snapshot is None:
            raise self.build_error("Payment intent not found", "not_found", payment_intent_id)

        status = classify(snapshot, expectation)
        data: Dict[str, Any] = {
            "payment_intent_id": snapshot.id,
            "payment_status": snapshot.status,
        }
        discrepancies = find_discrepancies(snapshot, expectation)
        if discrepancies and status == PaymentSessionStatus.ERROR:
            logger.warning(
                f"Payment intent {snapshot.id} does not match the order: "
                f"{', '.join(d.value for d in discrepancies)}"
            )
            data["discrepancies"] = [d.value for d in discrepancies]
        return AuthorizationResult(status=status, data=data)

    def authorize_payment(
        self, session_data: Dict[str, Any], context: Dict[str, Any]
    ) -> AuthorizationResult:
        cart = self._retrieve_cart(context["cart_id"])
        expectation = OrderExpectation(total=cart.total, currency_code=cart.region.currency_code)
        result = self.reconcile_payment(session_data["payment_intent_id"], expectation)
        logger.info(f"Authorization for cart {cart.id}: {result.status.value}")
        return result

    def get_payment_status(self, session_data: Dict[str, Any]) -> PaymentSessionStatus:
        payment_intent_id = session_data.get("payment_intent_id")
        if not payment_intent_id:
            return PaymentSessionStatus.ERROR
        try:
            snapshot = self.fetch_payment_intent(payment_intent_id)
        except PaymentProcessorError as e:
            logger.error(f"Could not fetch payment intent {payment_intent_id}: {e.message} ({e.code})")
            return PaymentSessionStatus.ERROR
        return to_session_status(snapshot)

    def retrieve_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._request(f"payment_intents/{session_data['payment_intent_id']}", method="GET")
        return {**session_data, "paymongo_data": payload.get("data")}

    def update_payment(self, context: PaymentProcessorContext) -> Optional[Dict[str, Any]]:
        payment_intent_id = context.payment_session_data.get("payment_intent_id")
        snapshot = self.fetch_payment_intent(payment_intent_id) if payment_intent_id else None
        if snapshot is not None and snapshot.status == "succeeded":
            return None
        # The cart changed before payment finished; start over with a fresh checkout
        return self.initiate_payment(context)

    def capture_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        return session_data

    def refund_payment(self, session_data: Dict[str, Any], refund_amount: int) -> Dict[str, Any]:
        raise self.not_supported("refund_payment")

    def cancel_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        return session_data

    def delete_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        return session_data

    @staticmethod
    def build_error(message: str, code: str = "", detail: str = "") -> PaymentProcessorError:
        return PaymentProcessorError(f"Paymongo error: {message}", code=code, detail=detail)
