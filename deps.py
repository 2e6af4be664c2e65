"""FastAPI dependencies resolving the collaborators stored on app.state."""

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from catalog import CatalogStore
from config import Settings
from errors import ServiceUnavailable, Unauthorized
from order_store import OrderStore
from payment_gateway import PaymentGateway

bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    db = request.app.state.db
    if db is None:
        raise ServiceUnavailable("Database is not configured")
    return db


def get_catalog(request: Request, db: Database = Depends(get_db)) -> CatalogStore:
    return request.app.state.catalog


def get_orders(request: Request, db: Database = Depends(get_db)) -> OrderStore:
    return request.app.state.orders


def get_gateway(request: Request, db: Database = Depends(get_db)) -> PaymentGateway:
    return request.app.state.gateway


def current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    if credentials is None:
        raise Unauthorized("Not authorized, no token")
    user = db["user"].find_one({"token": credentials.credentials, "is_active": True})
    if not user:
        raise Unauthorized("Not authorized, invalid token")
    return user
