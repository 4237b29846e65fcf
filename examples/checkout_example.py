"""
Simple checkout example (server-side). Creates a PayMongo hosted checkout for a
cart, then checks the payment intent once the customer comes back from the
checkout page.
"""
import os
from commerce_plugins.config import PaymongoConfig
from commerce_plugins.processors import Address, Cart, PaymentProcessorContext, PaymongoProcessor, Region


class SingleCartService:
    def __init__(self, cart):
        self.cart = cart

    def retrieve_with_totals(self, cart_id):
        return self.cart


def run():
    if not os.getenv("PAYMONGO_API_KEY"):
        print("Set PAYMONGO_API_KEY to a PayMongo test secret key (sk_test_...) and run again.")
        return
    cart = Cart(
        id="cart_demo",
        email="buyer@example.com",
        total=5000,
        region=Region(currency_code="php"),
        shipping_address=Address(
            first_name="Juan", last_name="Dela Cruz", address_1="1 Rizal St",
            city="Makati", province="Metro Manila", postal_code="1200", country_code="ph",
        ),
    )
    processor = PaymongoProcessor(PaymongoConfig.from_options(), cart_service=SingleCartService(cart))
    session = processor.initiate_payment(PaymentProcessorContext(resource_id=cart.id))
    print("Checkout URL:", session["session_data"]["checkout_url"])

    input("Pay on the checkout page, then press Enter...")
    result = processor.authorize_payment(session["session_data"], {"cart_id": cart.id})
    print("Status:", result.status.value, result.data)

if __name__ == "__main__":
    run()
