from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document
from deps import get_db
from errors import InvalidRequest, NotFound
from schemas import Newsletter as NewsletterSchema, utcnow

router = APIRouter(prefix="/newsletter", tags=["newsletter"])


class SubscribeRequest(BaseModel):
    email: EmailStr
    name: Optional[str] = None


class UnsubscribeRequest(BaseModel):
    email: EmailStr


@router.post("/subscribe")
def subscribe(payload: SubscribeRequest, db: Database = Depends(get_db)):
    email = payload.email.lower()
    existing = db["newsletter"].find_one({"email": email})
    if existing and existing.get("is_active"):
        raise InvalidRequest("Email is already subscribed")
    if existing:
        db["newsletter"].update_one(
            {"_id": existing["_id"]},
            {"$set": {"is_active": True, "subscription_date": utcnow(), "updated_at": utcnow()}},
        )
        return {"success": True, "message": "Welcome back! Your subscription has been reactivated"}

    try:
        create_document(db, "newsletter", NewsletterSchema(email=email, name=payload.name))
    except DuplicateKeyError:
        raise InvalidRequest("Email is already subscribed")
    return JSONResponse(
        status_code=201,
        content={"success": True, "message": "Successfully subscribed to newsletter"},
    )


@router.post("/unsubscribe")
def unsubscribe(payload: UnsubscribeRequest, db: Database = Depends(get_db)):
    result = db["newsletter"].update_one(
        {"email": payload.email.lower()},
        {"$set": {"is_active": False, "updated_at": utcnow()}},
    )
    if result.matched_count == 0:
        raise NotFound("Email not found in subscribers")
    return {"success": True, "message": "Successfully unsubscribed"}
