"""
Database Schemas for the Foodie API

Define MongoDB document shapes and request/response bodies using Pydantic
models. Fields are snake_case in Python and camelCase in storage and on the
wire, so documents stay readable by the mobile app.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class AddressType(str, Enum):
    HOME = "Home"
    WORK = "Work"


class OrderStatus(str, Enum):
    PLACED = "placed"
    PREPARING = "preparing"
    EN_ROUTE = "en route"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    COD = "COD"
    CREDIT_CARD = "Credit Card"
    UPI = "UPI"
    PAYPAL = "PayPal"


# Users

class Coordinates(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class Address(CamelModel):
    address_line1: str = Field(..., description="First address line")
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    coordinates: Optional[Coordinates] = None
    landmark: Optional[str] = None
    address_type: AddressType


class OrderItem(CamelModel):
    item_name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)
    description: Optional[str] = None


class NewOrder(CamelModel):
    restaurant_name: str
    order_date_time: datetime
    order_status: OrderStatus
    total_amount_paid: float = Field(..., ge=0)
    items_ordered: List[OrderItem] = Field(default_factory=list)
    payment_method_used: PaymentMethod


class OrderHistoryEntry(NewOrder):
    order_id: str = Field(..., description="Generated when the order is appended")


class CartItem(CamelModel):
    item_name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class Cart(CamelModel):
    cart_items: List[CartItem] = Field(default_factory=list)
    restaurant: str
    special_instructions: Optional[str] = None
    cart_last_updated: Optional[datetime] = Field(None, description="Set by the server on write")
    delivery_fee: Optional[float] = Field(None, ge=0)
    taxes_and_charges: Optional[float] = Field(None, ge=0)


class User(CamelModel):
    full_name: str = Field(..., description="Full name")
    phone_number: str = Field(..., description="Phone number, unique")
    email: EmailStr = Field(..., description="Email address, unique")
    password: str = Field(..., description="bcrypt hash")
    profile_picture: Optional[str] = None
    order_history: List[OrderHistoryEntry] = Field(default_factory=list)


# Restaurants

class MenuItem(CamelModel):
    item_name: str = Field(..., description="Dish name")
    price: float = Field(..., ge=0)
    category: str = Field(..., description="Category like Pizza, Drinks")
    sub_category: Optional[str] = None
    image: str = Field(..., description="Image URL")
    rating: float = Field(..., ge=0, le=5)


class NewProduct(MenuItem):
    restaurant: str = Field(..., description="Name of the restaurant to add the item to")


# Auth bodies

class RegisterBody(CamelModel):
    full_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginBody(BaseModel):
    email: EmailStr
    password: str


class ChangePasswordBody(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=1)


class UserSummary(CamelModel):
    id: str
    email: str
    full_name: str


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


# Search

class SearchHit(CamelModel):
    restaurant_name: str
    item_name: str
    price: float
    category: str
    sub_category: Optional[str] = None
    image: Optional[str] = None
    rating: float


class CategoryNode(CamelModel):
    category: str
    sub_categories: List[str] = Field(default_factory=list)


class RestaurantCategories(CamelModel):
    restaurant_name: str
    categories: List[CategoryNode] = Field(default_factory=list)
