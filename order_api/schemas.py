from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from pydantic.alias_generators import to_camel

# Upper bound of a line quantity, the range of the original int column
MAX_QUANTITY = 2_147_483_647


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _default_user(value):
    """Missing or non-positive user ids fall back to the default user 1"""
    if value is None or value <= 0:
        return 1
    return value


# ---------------------------------------------------------------------------
# Persons
# ---------------------------------------------------------------------------

class PersonBase(ApiModel):
    """Base schema for persons"""
    first_name: str = Field(..., min_length=1, max_length=50, examples=["Ana"])
    last_name: str = Field(..., min_length=1, max_length=50, examples=["Gomez"])
    email: EmailStr = Field(..., examples=["a@x.com"])

    @field_validator("first_name", "last_name")
    @classmethod
    def names_must_not_be_blank(cls, v):
        return _not_blank(v)

    @field_validator("email")
    @classmethod
    def email_length(cls, v):
        if len(v) > 100:
            raise ValueError("email must be at most 100 characters")
        return v


class PersonCreate(PersonBase):
    """Schema for creating a person"""
    pass


class PersonUpdate(PersonBase):
    """Schema for replacing a person's mutable fields"""
    pass


class Person(PersonBase):
    """Schema for reading a person"""
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class ItemBase(ApiModel):
    """Base schema for catalog items"""
    name: str = Field(..., min_length=1, max_length=100, examples=["Keyboard"])
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2, examples=["10.00"])

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v):
        return _not_blank(v)


class ItemCreate(ItemBase):
    """Schema for creating an item"""
    created_by: Optional[int] = 1

    @field_validator("created_by")
    @classmethod
    def creator_defaults_to_one(cls, v):
        return _default_user(v)


class ItemUpdate(ItemBase):
    """Schema for updating an item"""
    updated_by: Optional[int] = 1

    @field_validator("updated_by")
    @classmethod
    def updater_defaults_to_one(cls, v):
        return _default_user(v)


class Item(ItemBase):
    """Schema for reading an item"""
    id: int
    created_by: int
    created_at: datetime
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class OrderDetailCreate(ApiModel):
    """One (item, quantity) line of an order request.

    ``price`` is accepted for compatibility with existing clients but ignored:
    the line always takes the item's current catalog price.
    """
    item_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=18, decimal_places=2)


class OrderCreate(ApiModel):
    """Schema for creating or fully replacing an order"""
    person_id: int = Field(..., gt=0)
    created_by: Optional[int] = 1
    order_details: List[OrderDetailCreate] = Field(..., min_length=1)

    @field_validator("created_by")
    @classmethod
    def creator_defaults_to_one(cls, v):
        return _default_user(v)


class OrderDetail(ApiModel):
    """Schema for reading an order line"""
    id: int
    item_id: int
    item_name: str
    quantity: int
    price: Decimal
    total: Decimal
    created_by: int
    created_at: datetime
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None


class Order(ApiModel):
    """Schema for reading an order"""
    id: int
    person_id: int
    person_name: str
    number: int
    created_by: int
    created_at: datetime
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None
    order_details: List[OrderDetail]
    total: Decimal


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

class ProductCreate(ApiModel):
    """Schema for creating a product"""
    name: str = Field(..., min_length=1, max_length=100, examples=["Laptop"])
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=18, decimal_places=2)
    stock: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v):
        return _not_blank(v)


class ProductUpdate(ApiModel):
    """Schema for updating a product"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    stock: int = Field(..., ge=0)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v):
        return _not_blank(v)


class Product(ApiModel):
    """Schema for reading a product"""
    id: int
    name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    stock: int
    created_at: datetime
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class ClientBase(ApiModel):
    """Base schema for clients"""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    nit: str = Field(..., min_length=1, max_length=20, examples=["900123456-7"])

    @field_validator("first_name", "last_name", "nit")
    @classmethod
    def fields_must_not_be_blank(cls, v):
        return _not_blank(v)

    @field_validator("email")
    @classmethod
    def email_length(cls, v):
        if v is not None and len(v) > 100:
            raise ValueError("email must be at most 100 characters")
        return v


class ClientCreate(ClientBase):
    """Schema for creating a client"""
    pass


class ClientUpdate(ClientBase):
    """Schema for updating a client"""
    pass


class Client(ClientBase):
    """Schema for reading a client"""
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

class DetailCreate(ApiModel):
    """One invoice line; without a price the product's current price is used"""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=18, decimal_places=2)
    status_id: int = Field(1, ge=1)


class InvoiceCreate(ApiModel):
    """Schema for creating or fully replacing an invoice"""
    client_id: int = Field(..., gt=0)
    serial: str = Field(..., min_length=1, max_length=10, examples=["A"])
    details: List[DetailCreate] = Field(..., min_length=1)

    @field_validator("serial")
    @classmethod
    def serial_must_not_be_blank(cls, v):
        return _not_blank(v)


class Detail(ApiModel):
    """Schema for reading an invoice line"""
    id: int
    product_id: int
    product_name: str
    status_id: int
    quantity: int
    price: Decimal
    total: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None


class Invoice(ApiModel):
    """Schema for reading an invoice"""
    id: int
    serial: str
    number: int
    client_id: int
    client_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    details: List[Detail]
    total: Decimal


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

class MessageCreate(ApiModel):
    """Schema for creating a message"""
    message: str = Field(..., min_length=1, max_length=1000)


class MessageUpdate(ApiModel):
    """Schema for updating a message"""
    message: str = Field(..., min_length=1, max_length=1000)


class Message(ApiModel):
    """Schema for reading a message"""
    id: int
    message: str
    created_at: datetime
    updated_at: Optional[datetime] = None
