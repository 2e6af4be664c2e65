"""Catalog Store: read access to product records."""

from typing import Any, Dict, List, Optional, Tuple

from pymongo import DESCENDING
from pymongo.database import Database

from database import create_document, get_documents, oid
from schemas import Product

COLLECTION = "product"
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class CatalogStore:
    def __init__(self, db: Database):
        self.db = db

    @property
    def collection(self):
        return self.db[COLLECTION]

    def create(self, product: Product) -> str:
        return create_document(self.db, COLLECTION, product)

    def get(self, product_id: Any) -> Optional[Dict[str, Any]]:
        """Resolve a product by id. Inactive products still resolve."""
        product_oid = oid(product_id)
        if product_oid is None:
            return None
        return self.collection.find_one({"_id": product_oid})

    def list(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query: Dict[str, Any] = {"is_active": True}
        if category:
            query["category"] = category
        if featured is not None:
            query["featured"] = featured

        products = get_documents(
            self.db, COLLECTION, query, sort=NEWEST_FIRST, skip=(page - 1) * limit, limit=limit
        )
        total = self.collection.count_documents(query)
        return products, total

    def featured(self, limit: int = 8) -> List[Dict[str, Any]]:
        return get_documents(
            self.db, COLLECTION, {"featured": True, "is_active": True}, sort=NEWEST_FIRST, limit=limit
        )
