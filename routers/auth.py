from hashlib import sha256
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database

from config import Settings
from database import create_document, serialize
from deps import current_user, get_db, get_settings
from errors import InvalidRequest, Unauthorized
from schemas import User as UserSchema

router = APIRouter(prefix="/auth", tags=["auth"])


# Auth models (simplified email+password)
class SignUpRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    success: bool = True
    user_id: str
    name: str
    email: EmailStr
    token: str


def hash_password(pw: str, salt: str) -> str:
    return sha256((pw + salt).encode()).hexdigest()


def issue_token(email: str, password: str, salt: str) -> str:
    return hash_password(email + ":" + password, salt)


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(payload: SignUpRequest, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise InvalidRequest("Email already registered")
    token = issue_token(email, payload.password, settings.auth_salt)
    user = UserSchema(
        name=payload.name,
        email=email,
        phone=payload.phone,
        password_hash=hash_password(payload.password, settings.auth_salt),
        token=token,
        is_active=True,
        role="user",
    )
    user_id = create_document(db, "user", user)
    return AuthResponse(user_id=user_id, name=payload.name, email=email, token=token)


@router.post("/signin", response_model=AuthResponse)
def signin(payload: SignInRequest, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    email = payload.email.lower()
    user = db["user"].find_one({"email": email})
    if not user or user.get("password_hash") != hash_password(payload.password, settings.auth_salt):
        raise Unauthorized("Invalid credentials")
    return AuthResponse(user_id=str(user["_id"]), name=user["name"], email=user["email"], token=user["token"])


@router.get("/me")
def me(user: Dict[str, Any] = Depends(current_user)):
    profile = serialize(user)
    profile.pop("password_hash", None)
    profile.pop("token", None)
    return {"success": True, "user": profile}
