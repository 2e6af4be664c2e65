"""
Database Schemas for the storefront

Each Pydantic model corresponds to a MongoDB collection.
Collection name is the lowercase of the class name.

- Product -> "product"
- Order -> "order"
- Newsletter -> "newsletter"
- User -> "user"

Money fields are Decimal in Python and Decimal128 in MongoDB.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

Category = Literal["Fashion", "Digital Products"]
Badge = Literal["Bestseller", "New", "Popular", "Sale", "None"]
PaymentStatus = Literal["pending", "completed", "failed"]
PaymentMethod = Literal["card", "cod", "demo"]
OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """Users collection schema"""
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Email address")
    phone: Optional[str] = Field(None, description="Contact phone")
    password_hash: str = Field(..., description="Salted sha256 password hash")
    token: str = Field(..., description="Bearer token issued at sign-up")
    is_active: bool = Field(True, description="Whether user is active")
    role: str = Field("user", description="Role: user or admin")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class Product(BaseModel):
    """Products collection schema"""
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field(..., description="Product description")
    price: Decimal = Field(..., ge=0, description="Current price")
    original_price: Optional[Decimal] = Field(None, ge=0, description="Price before discount")
    category: Category
    subcategory: Optional[str] = None
    image: str = Field(..., description="Primary image URL")
    images: List[str] = Field(default_factory=list)
    stock: int = Field(0, ge=0)
    featured: bool = False
    badge: Badge = "None"
    tags: List[str] = Field(default_factory=list)
    is_active: bool = Field(True, description="Inactive products are hidden from the catalog")


class Customer(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    user_id: Optional[str] = Field(None, description="Account id, absent for guest orders")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class OrderItem(BaseModel):
    """Snapshot of a product at order time"""
    product: str
    name: str
    price: Decimal
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None


class ShippingAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Payment(BaseModel):
    status: PaymentStatus = "pending"
    method: PaymentMethod = "card"
    transaction_id: Optional[str] = Field(None, description="Reference from payment provider")


class Order(BaseModel):
    """Orders collection schema"""
    order_id: str = Field(..., description="Public tracking code")
    customer: Customer
    items: List[OrderItem] = Field(..., min_length=1)
    total_amount: Decimal
    shipping_amount: Decimal
    final_amount: Decimal
    payment: Payment = Field(default_factory=Payment)
    status: OrderStatus = "pending"
    shipping_address: Optional[ShippingAddress] = None


class Newsletter(BaseModel):
    """Newsletter subscribers collection schema"""
    email: EmailStr
    name: Optional[str] = None
    is_active: bool = True
    subscription_date: datetime = Field(default_factory=utcnow)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()
