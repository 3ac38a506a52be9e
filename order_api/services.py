"""Business rules per entity.

Services validate arguments, check that referenced rows exist, convert
between transfer objects and entities through ``mappers`` and delegate
persistence to the repositories. A service is built per request around the
request's ``Session``.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from . import mappers, models, schemas
from .errors import InvalidArgumentError, MissingReferenceError, require_id
from .models import utcnow
from .repositories import (
    ClientRepository,
    InvoiceRepository,
    ItemRepository,
    MessageRepository,
    OrderRepository,
    PersonRepository,
    ProductRepository,
)

logger = logging.getLogger(__name__)


def _require_payload(payload, name: str):
    if payload is None:
        raise InvalidArgumentError(f"{name} is required")
    return payload


class PersonService:
    def __init__(self, db: Session):
        self.persons = PersonRepository(db)

    def create(self, dto: schemas.PersonCreate) -> schemas.Person:
        _require_payload(dto, "person")
        if self.persons.get_by_email(dto.email) is not None:
            raise InvalidArgumentError(f"A person with email {dto.email} already exists")
        entity = self.persons.add(mappers.person_from_create(dto, utcnow()))
        logger.info(f"Created person {entity.id}")
        return mappers.person_to_read(entity)

    def get(self, person_id: int) -> Optional[schemas.Person]:
        require_id(person_id)
        entity = self.persons.get(person_id)
        return mappers.person_to_read(entity) if entity else None

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Person]:
        return [mappers.person_to_read(p) for p in self.persons.list(skip, limit)]

    def update(self, person_id: int, dto: schemas.PersonUpdate) -> bool:
        _require_payload(dto, "person")
        require_id(person_id)
        entity = self.persons.get(person_id)
        if entity is None:
            return False
        other = self.persons.get_by_email(dto.email)
        if other is not None and other.id != person_id:
            raise InvalidArgumentError(f"A person with email {dto.email} already exists")
        self.persons.save(mappers.apply_person_update(entity, dto, utcnow()))
        return True

    def delete(self, person_id: int) -> bool:
        require_id(person_id)
        if self.persons.get(person_id) is None:
            return False
        if self.persons.has_orders(person_id):
            raise InvalidArgumentError(f"Person {person_id} has orders and cannot be deleted")
        return self.persons.delete(person_id)


class ItemService:
    def __init__(self, db: Session):
        self.items = ItemRepository(db)

    def create(self, dto: schemas.ItemCreate) -> schemas.Item:
        _require_payload(dto, "item")
        entity = self.items.add(mappers.item_from_create(dto, utcnow()))
        logger.info(f"Created item {entity.id}")
        return mappers.item_to_read(entity)

    def get(self, item_id: int) -> Optional[schemas.Item]:
        require_id(item_id)
        entity = self.items.get(item_id)
        return mappers.item_to_read(entity) if entity else None

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Item]:
        return [mappers.item_to_read(i) for i in self.items.list(skip, limit)]

    def update(self, item_id: int, dto: schemas.ItemUpdate) -> bool:
        _require_payload(dto, "item")
        require_id(item_id)
        entity = self.items.get(item_id)
        if entity is None:
            return False
        self.items.save(mappers.apply_item_update(entity, dto, utcnow()))
        return True

    def delete(self, item_id: int) -> bool:
        require_id(item_id)
        if self.items.get(item_id) is None:
            return False
        if self.items.is_referenced(item_id):
            raise InvalidArgumentError(f"Item {item_id} is used by existing orders and cannot be deleted")
        return self.items.delete(item_id)


class OrderService:
    """Orders and their lines.

    Reference checks run before any write, so a request naming an absent
    person or item never opens a transaction. Line prices are copied from
    the item at write time; later catalog changes do not touch stored lines.
    """

    def __init__(self, db: Session):
        self.orders = OrderRepository(db)
        self.items = ItemRepository(db)
        self.persons = PersonRepository(db)

    def _check_references(self, dto: schemas.OrderCreate):
        if not dto.order_details:
            raise InvalidArgumentError("An order must contain at least one detail")
        person = self.persons.get(dto.person_id)
        if person is None:
            raise MissingReferenceError(f"Person {dto.person_id} does not exist")
        items = self.items.get_many(line.item_id for line in dto.order_details)
        for line in dto.order_details:
            if line.item_id not in items:
                raise MissingReferenceError(f"Item {line.item_id} does not exist")
        return person, items

    def _to_read(self, order: models.Order, lines) -> schemas.Order:
        person = self.persons.get(order.person_id)
        person_name = mappers.full_name(person.first_name, person.last_name) if person else ""
        names = {i.id: i.name for i in self.items.get_many(line.item_id for line in lines).values()}
        return mappers.order_to_read(order, person_name, lines, names)

    def create(self, dto: schemas.OrderCreate) -> schemas.Order:
        _require_payload(dto, "order")
        person, items = self._check_references(dto)
        now = utcnow()
        lines = [
            mappers.order_line(items[line.item_id], line, created_by=dto.created_by, created_at=now)
            for line in dto.order_details
        ]
        mappers.grand_total(line.total for line in lines)
        header = models.Order(
            person_id=person.id,
            created_by=dto.created_by,
            created_at=now,
            updated_by=None,
            updated_at=None,
        )
        order = self.orders.create(header, lines)
        logger.info(f"Created order {order.id} (number {order.number}) for person {person.id}")
        return self._to_read(order, self.orders.lines_for(order.id))

    def get(self, order_id: int) -> Optional[schemas.Order]:
        require_id(order_id)
        order = self.orders.get(order_id)
        if order is None:
            return None
        return self._to_read(order, self.orders.lines_for(order.id))

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Order]:
        orders = self.orders.list(skip, limit)
        lines_by_order = self.orders.lines_for_many(o.id for o in orders)
        persons: Dict[int, str] = {}
        item_ids = {line.item_id for lines in lines_by_order.values() for line in lines}
        names = {i.id: i.name for i in self.items.get_many(item_ids).values()}
        result = []
        for order in orders:
            if order.person_id not in persons:
                person = self.persons.get(order.person_id)
                persons[order.person_id] = mappers.full_name(person.first_name, person.last_name) if person else ""
            result.append(mappers.order_to_read(order, persons[order.person_id], lines_by_order[order.id], names))
        return result

    def update(self, order_id: int, dto: schemas.OrderCreate) -> bool:
        """Replace the order's person and its entire set of lines.

        Lines are not diffed: every existing line is deleted and the payload's
        lines are inserted fresh, stamped with the update time.
        """
        _require_payload(dto, "order")
        require_id(order_id)
        order = self.orders.get(order_id)
        if order is None:
            return False
        person, items = self._check_references(dto)
        now = utcnow()
        lines = [
            mappers.order_line(
                items[line.item_id], line,
                created_by=order.created_by, created_at=now,
                updated_by=dto.created_by, updated_at=now,
            )
            for line in dto.order_details
        ]
        mappers.grand_total(line.total for line in lines)
        order.person_id = person.id
        order.updated_by = dto.created_by
        order.updated_at = now
        self.orders.replace(order, lines)
        logger.info(f"Replaced order {order_id} with {len(lines)} lines")
        return True

    def delete(self, order_id: int) -> bool:
        require_id(order_id)
        return self.orders.delete(order_id)


class ProductService:
    def __init__(self, db: Session):
        self.products = ProductRepository(db)

    def create(self, dto: schemas.ProductCreate) -> schemas.Product:
        _require_payload(dto, "product")
        entity = self.products.add(mappers.product_from_create(dto, utcnow()))
        logger.info(f"Created product {entity.id}")
        return mappers.product_to_read(entity)

    def get(self, product_id: int) -> Optional[schemas.Product]:
        require_id(product_id)
        entity = self.products.get(product_id)
        return mappers.product_to_read(entity) if entity else None

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Product]:
        return [mappers.product_to_read(p) for p in self.products.list(skip, limit)]

    def update(self, product_id: int, dto: schemas.ProductUpdate) -> bool:
        _require_payload(dto, "product")
        require_id(product_id)
        entity = self.products.get(product_id)
        if entity is None:
            return False
        self.products.save(mappers.apply_product_update(entity, dto, utcnow()))
        return True

    def delete(self, product_id: int) -> bool:
        require_id(product_id)
        if self.products.get(product_id) is None:
            return False
        if self.products.is_referenced(product_id):
            raise InvalidArgumentError(f"Product {product_id} is used by existing invoices and cannot be deleted")
        return self.products.delete(product_id)


class ClientService:
    def __init__(self, db: Session):
        self.clients = ClientRepository(db)

    def create(self, dto: schemas.ClientCreate) -> schemas.Client:
        _require_payload(dto, "client")
        if self.clients.get_by_nit(dto.nit) is not None:
            raise InvalidArgumentError(f"A client with NIT {dto.nit} already exists")
        entity = self.clients.add(mappers.client_from_create(dto, utcnow()))
        logger.info(f"Created client {entity.id}")
        return mappers.client_to_read(entity)

    def get(self, client_id: int) -> Optional[schemas.Client]:
        require_id(client_id)
        entity = self.clients.get(client_id)
        return mappers.client_to_read(entity) if entity else None

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Client]:
        return [mappers.client_to_read(c) for c in self.clients.list(skip, limit)]

    def update(self, client_id: int, dto: schemas.ClientUpdate) -> bool:
        _require_payload(dto, "client")
        require_id(client_id)
        entity = self.clients.get(client_id)
        if entity is None:
            return False
        other = self.clients.get_by_nit(dto.nit)
        if other is not None and other.id != client_id:
            raise InvalidArgumentError(f"A client with NIT {dto.nit} already exists")
        self.clients.save(mappers.apply_client_update(entity, dto, utcnow()))
        return True

    def delete(self, client_id: int) -> bool:
        require_id(client_id)
        if self.clients.get(client_id) is None:
            return False
        if self.clients.has_invoices(client_id):
            raise InvalidArgumentError(f"Client {client_id} has invoices and cannot be deleted")
        return self.clients.delete(client_id)


class InvoiceService:
    """Invoices follow the order flow over clients and products"""

    def __init__(self, db: Session):
        self.invoices = InvoiceRepository(db)
        self.clients = ClientRepository(db)
        self.products = ProductRepository(db)

    def _check_references(self, dto: schemas.InvoiceCreate):
        if not dto.details:
            raise InvalidArgumentError("An invoice must contain at least one detail")
        client = self.clients.get(dto.client_id)
        if client is None:
            raise MissingReferenceError(f"Client {dto.client_id} does not exist")
        products = self.products.get_many(line.product_id for line in dto.details)
        for line in dto.details:
            if line.product_id not in products:
                raise MissingReferenceError(f"Product {line.product_id} does not exist")
        return client, products

    @staticmethod
    def _line_price(line: schemas.DetailCreate, product: models.Product) -> Decimal:
        price = line.price if line.price is not None else product.price
        if price is None:
            raise InvalidArgumentError(f"Product {product.id} has no price; a line price is required")
        return price

    def _build_lines(self, dto: schemas.InvoiceCreate, products, now, updated_at=None):
        lines = [
            mappers.invoice_line(
                products[line.product_id], line, self._line_price(line, products[line.product_id]),
                created_at=now, updated_at=updated_at,
            )
            for line in dto.details
        ]
        mappers.grand_total(line.total for line in lines)
        return lines

    def _to_read(self, invoice: models.Invoice, lines) -> schemas.Invoice:
        client = self.clients.get(invoice.client_id)
        client_name = mappers.full_name(client.first_name, client.last_name) if client else ""
        names = {p.id: p.name for p in self.products.get_many(line.product_id for line in lines).values()}
        return mappers.invoice_to_read(invoice, client_name, lines, names)

    def create(self, dto: schemas.InvoiceCreate) -> schemas.Invoice:
        _require_payload(dto, "invoice")
        client, products = self._check_references(dto)
        now = utcnow()
        lines = self._build_lines(dto, products, now)
        header = models.Invoice(serial=dto.serial, client_id=client.id, created_at=now, updated_at=None)
        invoice = self.invoices.create(header, lines)
        logger.info(f"Created invoice {invoice.serial}-{invoice.number} for client {client.id}")
        return self._to_read(invoice, self.invoices.lines_for(invoice.id))

    def get(self, invoice_id: int) -> Optional[schemas.Invoice]:
        require_id(invoice_id)
        invoice = self.invoices.get(invoice_id)
        if invoice is None:
            return None
        return self._to_read(invoice, self.invoices.lines_for(invoice.id))

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Invoice]:
        invoices = self.invoices.list(skip, limit)
        lines_by_invoice = self.invoices.lines_for_many(i.id for i in invoices)
        return [self._to_read(invoice, lines_by_invoice[invoice.id]) for invoice in invoices]

    def update(self, invoice_id: int, dto: schemas.InvoiceCreate) -> bool:
        """Replace client and the full detail set; the invoice keeps its serial and number"""
        _require_payload(dto, "invoice")
        require_id(invoice_id)
        invoice = self.invoices.get(invoice_id)
        if invoice is None:
            return False
        if dto.serial != invoice.serial:
            raise InvalidArgumentError("The serial of an existing invoice cannot be changed")
        client, products = self._check_references(dto)
        now = utcnow()
        lines = self._build_lines(dto, products, now, updated_at=now)
        invoice.client_id = client.id
        invoice.updated_at = now
        self.invoices.replace(invoice, lines)
        return True

    def delete(self, invoice_id: int) -> bool:
        require_id(invoice_id)
        return self.invoices.delete(invoice_id)


class MessageService:
    def __init__(self, db: Session):
        self.messages = MessageRepository(db)

    @staticmethod
    def _require_text(text: Optional[str]) -> str:
        if text is None or not text.strip():
            raise InvalidArgumentError("The message must not be empty")
        return text

    def create(self, text: str) -> schemas.Message:
        entity = self.messages.add(mappers.message_from_create(self._require_text(text), utcnow()))
        return mappers.message_to_read(entity)

    def get(self, message_id: int) -> Optional[schemas.Message]:
        require_id(message_id)
        entity = self.messages.get(message_id)
        return mappers.message_to_read(entity) if entity else None

    def list(self, skip: int = 0, limit: int = 100) -> List[schemas.Message]:
        return [mappers.message_to_read(m) for m in self.messages.list(skip, limit)]

    def update(self, message_id: int, text: str) -> Optional[schemas.Message]:
        require_id(message_id)
        text = self._require_text(text)
        entity = self.messages.get(message_id)
        if entity is None:
            return None
        entity.message_text = text
        entity.updated_at = utcnow()
        return mappers.message_to_read(self.messages.save(entity))

    def delete(self, message_id: int) -> bool:
        require_id(message_id)
        return self.messages.delete(message_id)
