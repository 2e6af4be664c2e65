"""
Payment confirmation.

PaymentProvider is the port to the external provider (Razorpay in
production). PaymentGateway owns the confirmation rules: it checks provider
callbacks against a locally computed HMAC-SHA256 signature and moves orders
from pending to confirmed through OrderStore.apply_payment_result().

A gateway built without a provider still serves the demo flow and status
lookups; the provider-backed operations raise ServiceUnavailable.
"""

import hashlib
import hmac
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import razorpay
import structlog

from config import Settings
from errors import Internal, InvalidRequest, NotFound, ServiceUnavailable, SignatureMismatch
from order_store import OrderStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderOrder:
    id: str
    amount: int
    currency: str


class PaymentProvider(ABC):
    """Abstract payment provider interface."""

    key_secret: str

    @abstractmethod
    def create_order(self, amount_minor: int, currency: str, receipt: str) -> ProviderOrder:
        """Open an order with the provider; amount is in minor units (paise, cents)."""
        ...


class RazorpayProvider(PaymentProvider):
    def __init__(self, key_id: str, key_secret: str) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> ProviderOrder:
        order = self.client.order.create(data={
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
        })
        return ProviderOrder(id=order["id"], amount=order["amount"], currency=order["currency"])


def build_provider(settings: Settings) -> Optional[PaymentProvider]:
    if not settings.payments_configured:
        logger.info("Razorpay keys not provided, card payments disabled")
        return None
    provider = RazorpayProvider(settings.razorpay_key_id, settings.razorpay_key_secret)
    logger.info("Razorpay initialized", key_id=settings.razorpay_key_id)
    return provider


def compute_signature(secret: str, provider_order_id: str, provider_payment_id: str) -> str:
    message = f"{provider_order_id}|{provider_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class PaymentGateway:
    def __init__(self, orders: OrderStore, provider: Optional[PaymentProvider]):
        self.orders = orders
        self.provider = provider

    def _require_provider(self, message: str) -> PaymentProvider:
        if self.provider is None:
            raise ServiceUnavailable(message)
        return self.provider

    def create_provider_order(
        self,
        amount: Optional[Decimal],
        currency: str,
        receipt: Optional[str] = None,
    ) -> ProviderOrder:
        provider = self._require_provider(
            "Payment service is currently unavailable. Please try cash on delivery."
        )
        if amount is None or amount <= 0:
            raise InvalidRequest(
                "Valid amount is required",
                details=[{"field": "amount", "message": "Amount must be greater than 0"}],
            )
        receipt = receipt or f"receipt_{_epoch_millis()}"
        try:
            return provider.create_order(to_minor_units(amount), currency, receipt)
        except Exception as exc:
            logger.exception("Provider order creation failed", receipt=receipt)
            raise Internal("Failed to create payment order") from exc

    def verify_payment(
        self,
        provider_order_id: str,
        provider_payment_id: str,
        provider_signature: str,
        order_id: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Confirm an order from a provider callback.

        The signature is checked before the store is touched. A callback for an
        unknown order is accepted and ignored since providers retry callbacks;
        a repeated callback for an already confirmed order leaves it as is.
        """
        provider = self._require_provider("Payment verification service unavailable")

        expected = compute_signature(provider.key_secret, provider_order_id, provider_payment_id)
        if not hmac.compare_digest(expected.encode(), provider_signature.encode()):
            logger.warning(
                "Payment signature mismatch",
                order_id=order_id,
                provider_order_id=provider_order_id,
            )
            raise SignatureMismatch()

        order, applied = self.orders.apply_payment_result(order_id, provider_payment_id)
        if order is None:
            logger.warning("Verified payment for unknown order", order_id=order_id)
        elif applied:
            logger.info("Payment verified", order_id=order["order_id"], transaction_id=provider_payment_id)
        else:
            logger.info(
                "Payment already applied",
                order_id=order["order_id"],
                transaction_id=order["payment"].get("transaction_id"),
            )
        return order

    def demo_payment(self, order_id: str, amount: Optional[Decimal] = None) -> Dict[str, Any]:
        transaction_id = f"DEMO_{_epoch_millis()}"
        order, applied = self.orders.apply_payment_result(order_id, transaction_id, method="demo")
        if order is None:
            raise NotFound("Order not found")
        if applied:
            logger.info(
                "Demo payment applied",
                order_id=order["order_id"],
                transaction_id=transaction_id,
                amount=str(amount) if amount is not None else None,
            )
        else:
            logger.info("Demo payment on already paid order", order_id=order["order_id"])
        return order

    def payment_status(self, tracking_code: str) -> Dict[str, Any]:
        order = self.orders.find_by_tracking_code(tracking_code)
        if order is None:
            raise NotFound("Order not found")
        return order["payment"]
