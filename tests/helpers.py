from decimal import Decimal

from payment_gateway import PaymentProvider, ProviderOrder, compute_signature
from schemas import Product

SECRET = "rzp_test_secret"


class FakeProvider(PaymentProvider):
    """Records create_order calls instead of talking to Razorpay."""

    def __init__(self, key_secret: str = SECRET) -> None:
        self.key_secret = key_secret
        self.should_fail = False
        self.calls: list[dict] = []

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> ProviderOrder:
        self.calls.append({"amount": amount_minor, "currency": currency, "receipt": receipt})
        if self.should_fail:
            raise RuntimeError("provider down")
        return ProviderOrder(id=f"order_fake{len(self.calls):04d}", amount=amount_minor, currency=currency)


def sign(provider_order_id: str, provider_payment_id: str, secret: str = SECRET) -> str:
    return compute_signature(secret, provider_order_id, provider_payment_id)


def make_product(**overrides) -> Product:
    defaults = {
        "name": "Linen Shirt",
        "description": "Relaxed fit linen shirt",
        "price": Decimal("10.00"),
        "category": "Fashion",
        "image": "https://cdn.example.com/linen.png",
        "stock": 10,
    }
    defaults.update(overrides)
    return Product(**defaults)
