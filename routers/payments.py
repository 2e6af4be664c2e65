from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from config import Settings
from database import serialize
from deps import get_gateway, get_settings
from payment_gateway import PaymentGateway

router = APIRouter(prefix="/payments", tags=["payments"])


class CreatePaymentOrderRequest(BaseModel):
    amount: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    receipt: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1, description="Local order id")


class DemoPaymentRequest(BaseModel):
    order_id: str = Field(..., min_length=1)
    amount: Optional[Decimal] = None


@router.post("/create-order")
def create_payment_order(
    payload: CreatePaymentOrderRequest,
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    order = gateway.create_provider_order(
        payload.amount,
        (payload.currency or settings.default_currency).upper(),
        payload.receipt,
    )
    return {
        "success": True,
        "order": {"id": order.id, "amount": order.amount, "currency": order.currency},
    }


@router.post("/verify-payment")
def verify_payment(payload: VerifyPaymentRequest, gateway: PaymentGateway = Depends(get_gateway)):
    gateway.verify_payment(
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
        payload.order_id,
    )
    return {"success": True, "message": "Payment verified successfully"}


@router.post("/demo-payment")
def demo_payment(payload: DemoPaymentRequest, gateway: PaymentGateway = Depends(get_gateway)):
    order = gateway.demo_payment(payload.order_id, payload.amount)
    return {
        "success": True,
        "message": "Demo payment completed successfully!",
        "transactionId": order["payment"]["transaction_id"],
    }


@router.get("/status/{order_id}")
def payment_status(order_id: str, gateway: PaymentGateway = Depends(get_gateway)):
    return {"success": True, "payment": serialize(gateway.payment_status(order_id))}
