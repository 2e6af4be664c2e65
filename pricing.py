"""
Pricing/validation of a requested item list.

price_items() resolves every requested product, snapshots it into an order
line and totals the order in Decimal arithmetic. It never writes anything.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from database import to_decimal
from errors import InvalidRequest, ProductNotFound
from schemas import OrderItem

ProductLookup = Callable[[str], Optional[Dict[str, Any]]]


class ItemRequest(BaseModel):
    product: str = Field(..., min_length=1, description="Product id")
    quantity: int = Field(..., ge=1)


@dataclass(frozen=True)
class PricedOrder:
    items: List[OrderItem]
    total_amount: Decimal
    shipping_amount: Decimal

    @property
    def final_amount(self) -> Decimal:
        return self.total_amount + self.shipping_amount


def price_items(
    requests: Sequence[ItemRequest],
    lookup: ProductLookup,
    shipping_amount: Decimal,
) -> PricedOrder:
    if not requests:
        raise InvalidRequest(
            "At least one item is required",
            details=[{"field": "items", "message": "At least one item is required"}],
        )

    for index, request in enumerate(requests):
        if request.quantity < 1:
            raise InvalidRequest(
                "Quantity must be at least 1",
                details=[{"field": f"items.{index}.quantity", "message": "Quantity must be at least 1"}],
            )

    items: List[OrderItem] = []
    total = Decimal("0")
    for request in requests:
        product = lookup(request.product)
        if product is None:
            raise ProductNotFound(request.product)

        price = to_decimal(product["price"])
        total += price * request.quantity
        items.append(OrderItem(
            product=str(product["_id"]),
            name=product["name"],
            price=price,
            quantity=request.quantity,
            image=product.get("image"),
        ))

    return PricedOrder(items=items, total_amount=total, shipping_amount=Decimal(shipping_amount))
