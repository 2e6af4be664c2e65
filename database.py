"""
MongoDB access helpers.

The database handle is created once at startup by connect() and handed to the
stores; it is None when DATABASE_URL / DATABASE_NAME are not set.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from bson.decimal128 import Decimal128
from bson.errors import InvalidId
from bson.objectid import ObjectId
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

from config import Settings
from schemas import utcnow


def connect(settings: Settings) -> Optional[Database]:
    if not settings.database_configured:
        return None
    client = MongoClient(settings.database_url)
    return client[settings.database_name]


def oid(id_str: Any) -> Optional[ObjectId]:
    """Parse an ObjectId, returning None for anything malformed."""
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, float):
        # Legacy documents may hold binary floats; go through str to keep 10.1 as 10.1.
        return Decimal(str(value))
    return Decimal(value)


def encode(value: Any) -> Any:
    """Convert Python values into BSON-friendly ones (Decimal -> Decimal128)."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [encode(v) for v in value]
    return value


def to_document(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    return encode(dict(data))


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    document = to_document(data)
    now = utcnow()
    document.setdefault("created_at", now)
    document["updated_at"] = now
    result = db[collection_name].insert_one(document)
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def _plain(value: Any) -> Any:
    # Money leaves as a JSON number; values stay Decimal128 in storage and Decimal in arithmetic.
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Turn a stored document into a JSON-ready dict with a string "id"."""
    if not doc:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return _plain(doc)
