from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from catalog import CatalogStore
from config import Settings
from database import serialize
from deps import current_user, get_catalog, get_orders, get_settings
from errors import NotFound
from order_store import OrderStore
from pricing import ItemRequest, price_items
from schemas import Customer, ShippingAddress

router = APIRouter(prefix="/orders", tags=["orders"])


class CustomerRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None


class UserOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[ItemRequest] = Field(..., min_length=1)
    shipping_address: Optional[ShippingAddress] = Field(None, alias="shippingAddress")
    payment_method: str = Field("card", alias="paymentMethod", pattern="^(card|cod)$")


class GuestOrderRequest(UserOrderRequest):
    customer: CustomerRequest


def _created(order: Dict[str, Any]):
    return {"success": True, "message": "Order created successfully", "order": serialize(order)}


def _place_order(
    payload: UserOrderRequest,
    customer: Customer,
    catalog: CatalogStore,
    orders: OrderStore,
    settings: Settings,
) -> Dict[str, Any]:
    priced = price_items(payload.items, catalog.get, settings.shipping_amount)
    return orders.create(
        customer,
        priced,
        shipping_address=payload.shipping_address,
        payment_method=payload.payment_method,
    )


@router.post("", status_code=201)
def create_guest_order(
    payload: GuestOrderRequest,
    catalog: CatalogStore = Depends(get_catalog),
    orders: OrderStore = Depends(get_orders),
    settings: Settings = Depends(get_settings),
):
    customer = Customer(name=payload.customer.name, email=payload.customer.email, phone=payload.customer.phone)
    return _created(_place_order(payload, customer, catalog, orders, settings))


@router.post("/user", status_code=201)
def create_user_order(
    payload: UserOrderRequest,
    user: Dict[str, Any] = Depends(current_user),
    catalog: CatalogStore = Depends(get_catalog),
    orders: OrderStore = Depends(get_orders),
    settings: Settings = Depends(get_settings),
):
    customer = Customer(
        name=user["name"],
        email=user["email"],
        phone=user.get("phone"),
        user_id=str(user["_id"]),
    )
    return _created(_place_order(payload, customer, catalog, orders, settings))


@router.get("/user/my-orders")
def my_orders(user: Dict[str, Any] = Depends(current_user), orders: OrderStore = Depends(get_orders)):
    return {"success": True, "orders": [serialize(o) for o in orders.find_by_user(user["_id"])]}


@router.get("/track/{order_id}")
def track_order(order_id: str, orders: OrderStore = Depends(get_orders)):
    order = orders.find_by_tracking_code(order_id)
    if not order:
        raise NotFound("Order not found. Please check your order ID.")
    return {"success": True, "order": serialize(order)}


@router.get("/customer/{email}")
def customer_orders(email: str, orders: OrderStore = Depends(get_orders)):
    return {"success": True, "orders": [serialize(o) for o in orders.find_by_customer_email(email)]}
