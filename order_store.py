"""
Order Aggregate persistence.

Orders are written once at creation and changed afterwards only by
apply_payment_result(); both are single-document atomic operations.
"""

import secrets
import string
from typing import Any, Dict, List, Optional, Tuple

import structlog
from bson.objectid import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import oid, to_document
from errors import Internal
from pricing import PricedOrder
from schemas import Customer, Order, Payment, ShippingAddress, utcnow

logger = structlog.get_logger(__name__)

COLLECTION = "order"
TRACKING_PREFIX = "NJ"
TRACKING_ALPHABET = string.ascii_uppercase + string.digits
TRACKING_LENGTH = 8
MAX_CODE_ATTEMPTS = 5
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


def generate_tracking_code() -> str:
    return TRACKING_PREFIX + "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(TRACKING_LENGTH))


class OrderStore:
    def __init__(self, db: Database):
        self.db = db

    def ensure_indexes(self) -> None:
        self.collection.create_index([("order_id", ASCENDING)], unique=True)
        self.collection.create_index([("customer.email", ASCENDING)])
        self.collection.create_index([("customer.user_id", ASCENDING)])

    @property
    def collection(self):
        return self.db[COLLECTION]

    def create(
        self,
        customer: Customer,
        priced: PricedOrder,
        shipping_address: Optional[ShippingAddress] = None,
        payment_method: str = "card",
    ) -> Dict[str, Any]:
        for _ in range(MAX_CODE_ATTEMPTS):
            order = Order(
                order_id=generate_tracking_code(),
                customer=customer,
                items=priced.items,
                total_amount=priced.total_amount,
                shipping_amount=priced.shipping_amount,
                final_amount=priced.final_amount,
                payment=Payment(method=payment_method),
                shipping_address=shipping_address,
            )
            document = to_document(order)
            document["_id"] = ObjectId()
            now = utcnow()
            document["created_at"] = now
            document["updated_at"] = now
            try:
                self.collection.insert_one(document)
            except DuplicateKeyError:
                logger.warning("Tracking code collision, retrying", order_id=order.order_id)
                continue
            logger.info(
                "Order created",
                id=str(document["_id"]),
                order_id=order.order_id,
                final_amount=str(order.final_amount),
                guest=customer.user_id is None,
            )
            return document
        raise Internal("Could not allocate a tracking code")

    def get(self, order_id: Any) -> Optional[Dict[str, Any]]:
        order_oid = oid(order_id)
        if order_oid is None:
            return None
        return self.collection.find_one({"_id": order_oid})

    def find_by_tracking_code(self, code: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"order_id": code.strip().upper()})

    def find_by_customer_email(self, email: str) -> List[Dict[str, Any]]:
        return list(self.collection.find({"customer.email": email.strip().lower()}).sort(NEWEST_FIRST))

    def find_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        return list(self.collection.find({"customer.user_id": str(user_id)}).sort(NEWEST_FIRST))

    def apply_payment_result(
        self,
        order_id: Any,
        transaction_id: str,
        method: Optional[str] = None,
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """
        Mark the order paid and confirmed in one update.

        Returns (order, applied). An order whose payment is already completed
        comes back unchanged with applied=False; an unknown id gives (None, False).
        """
        order_oid = oid(order_id)
        if order_oid is None:
            return None, False

        changes = {
            "payment.status": "completed",
            "payment.transaction_id": transaction_id,
            "status": "confirmed",
            "updated_at": utcnow(),
        }
        if method:
            changes["payment.method"] = method

        updated = self.collection.find_one_and_update(
            {"_id": order_oid, "payment.status": {"$ne": "completed"}},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if updated is not None:
            return updated, True
        return self.collection.find_one({"_id": order_oid}), False
