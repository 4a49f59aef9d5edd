# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# exact in the database, a plain number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- requests ----------

class CartProductIn(CamelModel):
    product_id: int = Field(..., gt=0)


class UpdateQuantityIn(CamelModel):
    product_id: int = Field(..., gt=0)
    type: Literal["increase", "decrease"]


class RegisterIn(CamelModel):
    # presence is checked by the service so the message matches the other account errors
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class LoginIn(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class ForgotPasswordIn(CamelModel):
    email: Optional[EmailStr] = None


class VerifyOtpIn(CamelModel):
    otp: Optional[str] = None


class ChangePasswordIn(CamelModel):
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


# ---------- responses ----------

class ProductImage(CamelModel):
    url: str
    public_id: str


class ProductOut(CamelModel):
    id: int
    product_name: str
    product_desc: str
    product_price: Money
    category: str
    brand: str
    product_img: List[ProductImage] = []
    created_at: Optional[datetime] = None


class CartItemOut(CamelModel):
    product_id: int
    quantity: int
    price: Money
    product: Optional[ProductOut] = None


class CartOut(CamelModel):
    id: Optional[int] = None
    user_id: int
    items: List[CartItemOut] = []
    total_price: Money = Decimal("0.00")


class UserOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    is_verified: bool
    is_logged_in: bool
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    phone_number: Optional[str] = None
    profile_pic: Optional[str] = None
    created_at: Optional[datetime] = None


class MessageOut(CamelModel):
    success: bool = True
    message: str


class CartEnvelope(CamelModel):
    success: bool = True
    cart: CartOut


class CartMessageEnvelope(CartEnvelope):
    message: str


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserOut


class UserMessageEnvelope(UserEnvelope):
    message: str


class LoginOut(UserMessageEnvelope):
    access_token: str
    refresh_token: str


class ProductEnvelope(CamelModel):
    success: bool = True
    message: str
    product: ProductOut


class ProductListOut(CamelModel):
    success: bool = True
    products: List[ProductOut]
