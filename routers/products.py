import math
from typing import Optional

from fastapi import APIRouter, Depends, Query

from catalog import CatalogStore
from database import serialize
from deps import get_catalog
from errors import NotFound
from schemas import Category

router = APIRouter(prefix="/products", tags=["products"])


def _page(products, total: int, page: int, limit: int):
    return {
        "success": True,
        "products": [serialize(p) for p in products],
        "totalPages": math.ceil(total / limit),
        "currentPage": page,
        "total": total,
    }


@router.get("")
def list_products(
    category: Optional[Category] = None,
    featured: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    catalog: CatalogStore = Depends(get_catalog),
):
    products, total = catalog.list(category=category, featured=featured, page=page, limit=limit)
    return _page(products, total, page, limit)


@router.get("/featured")
def featured_products(catalog: CatalogStore = Depends(get_catalog)):
    return {"success": True, "products": [serialize(p) for p in catalog.featured()]}


@router.get("/category/{category}")
def products_by_category(
    category: Category,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    catalog: CatalogStore = Depends(get_catalog),
):
    products, total = catalog.list(category=category, page=page, limit=limit)
    return _page(products, total, page, limit)


@router.get("/{product_id}")
def get_product(product_id: str, catalog: CatalogStore = Depends(get_catalog)):
    product = catalog.get(product_id)
    if not product:
        raise NotFound("Product not found")
    return {"success": True, "product": serialize(product)}
