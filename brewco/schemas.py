from pydantic import AliasChoices, BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

# --- auth ---
class RegisterPayload(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

class LoginPayload(BaseModel):
    # the storefront form sends the username-or-email as "username"
    identifier: str = Field(min_length=1, validation_alias=AliasChoices('identifier', 'username', 'email'))
    password: str = Field(min_length=1)

class AdminLoginPayload(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)

class ProfileUpdate(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

class UserRead(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    class Config: from_attributes = True

class AdminRead(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    role: str
    class Config: from_attributes = True

# --- catalog ---
class ProductRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = ''
    price: float
    category: str
    image: Optional[str] = ''
    popular: bool = False
    rating: float = 0.0
    stock: int = 0
    is_available: bool = True
    created_at: Optional[datetime] = None
    class Config: from_attributes = True

class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = ''
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=64)
    image: Optional[str] = ''
    popular: bool = False
    rating: float = Field(default=0.0, ge=0, le=5)
    stock: int = Field(default=0, ge=0)
    is_available: bool = True

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    image: Optional[str] = None
    popular: Optional[bool] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    stock: Optional[int] = Field(default=None, ge=0)
    is_available: Optional[bool] = None

# --- orders ---
MAX_LINE_QUANTITY = 999

class OrderLine(BaseModel):
    id: int
    name: str = Field(min_length=1, max_length=120)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    quantity: int = Field(gt=0, le=MAX_LINE_QUANTITY)

class OrderCreate(BaseModel):
    items: List[OrderLine] = []
    notes: Optional[str] = ''

class OrderItemRead(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    price: float
    class Config: from_attributes = True

class OrderRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    customer_name: str
    customer_phone: Optional[str] = ''
    customer_email: Optional[str] = ''
    total_amount: float
    status: str
    notes: Optional[str] = ''
    created_at: Optional[datetime] = None
    class Config: from_attributes = True

class OrderDetail(OrderRead):
    items: List[OrderItemRead] = []

class AdminOrderRead(OrderRead):
    customer_username: Optional[str] = None

class AdminOrderDetail(OrderDetail):
    customer_username: Optional[str] = None

class StatusUpdate(BaseModel):
    status: str = Field(min_length=1)

# --- admin ---
class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
