"""Explicit conversions between persistence entities and transfer objects.

Each function copies every field by hand and touches nothing else: no
session access, no clock reads, no defaults beyond what the caller passes.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from . import models, schemas
from .errors import InvalidArgumentError

TWO_PLACES = Decimal("0.01")
# Largest amount a Numeric(18, 2) column holds
MAX_MONEY = Decimal("9999999999999999.99")


def _fit_money(amount: Decimal, what: str) -> Decimal:
    if abs(amount) >= MAX_MONEY + Decimal("0.005"):
        raise InvalidArgumentError(f"{what} {amount:f} exceeds the maximum amount {MAX_MONEY}")
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_total(quantity: int, price: Decimal) -> Decimal:
    """Quantity x unit price, rounded to the money column's scale.

    Raises InvalidArgumentError when the result does not fit the column.
    """
    return _fit_money(Decimal(quantity) * Decimal(price), "Line total")


def grand_total(totals: Iterable[Decimal]) -> Decimal:
    return _fit_money(sum((Decimal(t) for t in totals), Decimal("0.00")), "Total")


def full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"


# Persons

def person_from_create(dto: schemas.PersonCreate, now) -> models.Person:
    return models.Person(
        first_name=dto.first_name,
        last_name=dto.last_name,
        email=dto.email,
        created_at=now,
        updated_at=None,
    )


def apply_person_update(entity: models.Person, dto: schemas.PersonUpdate, now) -> models.Person:
    entity.first_name = dto.first_name
    entity.last_name = dto.last_name
    entity.email = dto.email
    entity.updated_at = now
    return entity


def person_to_read(entity: models.Person) -> schemas.Person:
    return schemas.Person(
        id=entity.id,
        first_name=entity.first_name,
        last_name=entity.last_name,
        email=entity.email,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


# Items

def item_from_create(dto: schemas.ItemCreate, now) -> models.Item:
    return models.Item(
        name=dto.name,
        price=dto.price,
        created_by=dto.created_by,
        created_at=now,
        updated_by=None,
        updated_at=None,
    )


def apply_item_update(entity: models.Item, dto: schemas.ItemUpdate, now) -> models.Item:
    entity.name = dto.name
    entity.price = dto.price
    entity.updated_by = dto.updated_by
    entity.updated_at = now
    return entity


def item_to_read(entity: models.Item) -> schemas.Item:
    return schemas.Item(
        id=entity.id,
        name=entity.name,
        price=entity.price,
        created_by=entity.created_by,
        created_at=entity.created_at,
        updated_by=entity.updated_by,
        updated_at=entity.updated_at,
    )


# Orders

def order_line(item: models.Item, dto: schemas.OrderDetailCreate, created_by: int, created_at,
               updated_by=None, updated_at=None) -> models.OrderDetail:
    """Build an order line priced from the item's current catalog price"""
    return models.OrderDetail(
        item_id=item.id,
        quantity=dto.quantity,
        price=item.price,
        total=line_total(dto.quantity, item.price),
        created_by=created_by,
        created_at=created_at,
        updated_by=updated_by,
        updated_at=updated_at,
    )


def order_detail_to_read(entity: models.OrderDetail, item_name: str) -> schemas.OrderDetail:
    return schemas.OrderDetail(
        id=entity.id,
        item_id=entity.item_id,
        item_name=item_name,
        quantity=entity.quantity,
        price=entity.price,
        total=entity.total,
        created_by=entity.created_by,
        created_at=entity.created_at,
        updated_by=entity.updated_by,
        updated_at=entity.updated_at,
    )


def order_to_read(entity: models.Order, person_name: str, lines: Iterable[models.OrderDetail],
                  item_names: Mapping[int, str]) -> schemas.Order:
    details = [order_detail_to_read(line, item_names.get(line.item_id, "")) for line in lines]
    return schemas.Order(
        id=entity.id,
        person_id=entity.person_id,
        person_name=person_name,
        number=entity.number,
        created_by=entity.created_by,
        created_at=entity.created_at,
        updated_by=entity.updated_by,
        updated_at=entity.updated_at,
        order_details=details,
        total=grand_total(d.total for d in details),
    )


# Products

def product_from_create(dto: schemas.ProductCreate, now) -> models.Product:
    return models.Product(
        name=dto.name,
        description=dto.description,
        price=dto.price,
        stock=dto.stock,
        created_at=now,
        updated_at=None,
    )


def apply_product_update(entity: models.Product, dto: schemas.ProductUpdate, now) -> models.Product:
    entity.name = dto.name
    entity.description = dto.description
    entity.price = dto.price
    entity.stock = dto.stock
    entity.updated_at = now
    return entity


def product_to_read(entity: models.Product) -> schemas.Product:
    return schemas.Product(
        id=entity.id,
        name=entity.name,
        description=entity.description,
        price=entity.price,
        stock=entity.stock,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


# Clients

def client_from_create(dto: schemas.ClientCreate, now) -> models.Client:
    return models.Client(
        first_name=dto.first_name,
        last_name=dto.last_name,
        email=dto.email,
        nit=dto.nit,
        created_at=now,
        updated_at=None,
    )


def apply_client_update(entity: models.Client, dto: schemas.ClientUpdate, now) -> models.Client:
    entity.first_name = dto.first_name
    entity.last_name = dto.last_name
    entity.email = dto.email
    entity.nit = dto.nit
    entity.updated_at = now
    return entity


def client_to_read(entity: models.Client) -> schemas.Client:
    return schemas.Client(
        id=entity.id,
        first_name=entity.first_name,
        last_name=entity.last_name,
        email=entity.email,
        nit=entity.nit,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


# Invoices

def invoice_line(product: models.Product, dto: schemas.DetailCreate, price: Decimal,
                 created_at, updated_at=None) -> models.Detail:
    return models.Detail(
        product_id=product.id,
        status_id=dto.status_id,
        quantity=dto.quantity,
        price=price,
        total=line_total(dto.quantity, price),
        created_at=created_at,
        updated_at=updated_at,
    )


def detail_to_read(entity: models.Detail, product_name: str) -> schemas.Detail:
    return schemas.Detail(
        id=entity.id,
        product_id=entity.product_id,
        product_name=product_name,
        status_id=entity.status_id,
        quantity=entity.quantity,
        price=entity.price,
        total=entity.total,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


def invoice_to_read(entity: models.Invoice, client_name: str, lines: Iterable[models.Detail],
                    product_names: Mapping[int, str]) -> schemas.Invoice:
    details = [detail_to_read(line, product_names.get(line.product_id, "")) for line in lines]
    return schemas.Invoice(
        id=entity.id,
        serial=entity.serial,
        number=entity.number,
        client_id=entity.client_id,
        client_name=client_name,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        details=details,
        total=grand_total(d.total for d in details),
    )


# Messages

def message_from_create(text: str, now) -> models.Message:
    return models.Message(message_text=text, created_at=now, updated_at=None)


def message_to_read(entity: models.Message) -> schemas.Message:
    return schemas.Message(
        id=entity.id,
        message=entity.message_text,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
