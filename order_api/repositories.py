"""Data access, one repository per entity.

Every repository wraps the request-scoped ``Session`` handed out by
``database.get_db``. Writes commit immediately; a failed write is rolled back
and re-raised as ``PersistenceError``.
"""

import os
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import PersistenceError

logger = logging.getLogger(__name__)

# How many times a header number is re-allocated after losing a race
NUMBER_RETRIES = int(os.getenv("ORDER_NUMBER_RETRIES", "3"))


def _column_values(entity, exclude=("id",)) -> dict:
    return {
        column.key: getattr(entity, column.key)
        for column in entity.__table__.columns
        if column.key not in exclude
    }


class Repository:
    """Generic CRUD over a single mapped model"""

    model = None

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: int):
        return self.db.get(self.model, entity_id)

    def list(self, skip: int = 0, limit: int = 100):
        return (
            self.db.query(self.model)
            .order_by(self.model.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def add(self, entity):
        self.db.add(entity)
        self._commit(f"creating {self.model.__tablename__} row")
        self.db.refresh(entity)
        return entity

    def save(self, entity):
        """Commit pending changes to an already persistent entity"""
        self._commit(f"updating {self.model.__tablename__} row {entity.id}")
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: int) -> bool:
        entity = self.get(entity_id)
        if entity is None:
            return False
        self.db.delete(entity)
        self._commit(f"deleting {self.model.__tablename__} row {entity_id}")
        return True

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while {action}: {e}")
            raise PersistenceError(f"Database error while {action}") from e


class PersonRepository(Repository):
    model = models.Person

    def get_by_email(self, email: str) -> Optional[models.Person]:
        return self.db.query(models.Person).filter(models.Person.email == email).first()

    def has_orders(self, person_id: int) -> bool:
        return self.db.query(models.Order.id).filter(models.Order.person_id == person_id).first() is not None


class ItemRepository(Repository):
    model = models.Item

    def get_many(self, item_ids: Iterable[int]) -> Dict[int, models.Item]:
        ids = set(item_ids)
        if not ids:
            return {}
        items = self.db.query(models.Item).filter(models.Item.id.in_(ids)).all()
        return {item.id: item for item in items}

    def is_referenced(self, item_id: int) -> bool:
        return (
            self.db.query(models.OrderDetail.id)
            .filter(models.OrderDetail.item_id == item_id)
            .first()
            is not None
        )


class ProductRepository(Repository):
    model = models.Product

    def get_many(self, product_ids: Iterable[int]) -> Dict[int, models.Product]:
        ids = set(product_ids)
        if not ids:
            return {}
        products = self.db.query(models.Product).filter(models.Product.id.in_(ids)).all()
        return {product.id: product for product in products}

    def is_referenced(self, product_id: int) -> bool:
        return (
            self.db.query(models.Detail.id)
            .filter(models.Detail.product_id == product_id)
            .first()
            is not None
        )


class ClientRepository(Repository):
    model = models.Client

    def get_by_nit(self, nit: str) -> Optional[models.Client]:
        return self.db.query(models.Client).filter(models.Client.nit == nit).first()

    def has_invoices(self, client_id: int) -> bool:
        return self.db.query(models.Invoice.id).filter(models.Invoice.client_id == client_id).first() is not None


class MessageRepository(Repository):
    model = models.Message


class DocumentRepository(Repository):
    """A numbered header with owned line rows, written atomically.

    Subclasses name the line model, the line's foreign key to the header and
    the columns that scope the number sequence.
    """

    line_model = None
    parent_key = None
    number_scope = ()

    def _scope_filters(self, values: dict):
        return [getattr(self.model, key) == values[key] for key in self.number_scope]

    def next_number(self, **scope) -> int:
        """Highest existing number in the scope plus one (1 when there is none)"""
        current = (
            self.db.query(func.max(self.model.number))
            .filter(*self._scope_filters(scope))
            .scalar()
        )
        return (current or 0) + 1

    def number_taken(self, number: int, **scope) -> bool:
        return (
            self.db.query(self.model.id)
            .filter(self.model.number == number, *self._scope_filters(scope))
            .first()
            is not None
        )

    def lines_for(self, header_id: int) -> List:
        return (
            self.db.query(self.line_model)
            .filter(getattr(self.line_model, self.parent_key) == header_id)
            .order_by(self.line_model.id.asc())
            .all()
        )

    def lines_for_many(self, header_ids: Iterable[int]) -> Dict[int, List]:
        ids = list(header_ids)
        grouped = {header_id: [] for header_id in ids}
        if not ids:
            return grouped
        key = getattr(self.line_model, self.parent_key)
        rows = self.db.query(self.line_model).filter(key.in_(ids)).order_by(self.line_model.id.asc()).all()
        for row in rows:
            grouped[getattr(row, self.parent_key)].append(row)
        return grouped

    def create(self, header, lines: List):
        """Insert the header with the next free number and all of its lines.

        The number is read inside the write transaction. When a concurrent
        writer commits the same number first, the unique constraint rejects
        this insert; the transaction is rolled back and a fresh number is
        allocated, up to ``NUMBER_RETRIES`` extra attempts.
        """
        table = self.model.__tablename__
        header_values = _column_values(header, exclude=("id", "number"))
        line_values = [_column_values(line, exclude=("id", self.parent_key)) for line in lines]
        scope = {key: header_values[key] for key in self.number_scope}

        for attempt in range(NUMBER_RETRIES + 1):
            number = None
            try:
                number = self.next_number(**scope)
                created = self.model(number=number, **header_values)
                self.db.add(created)
                self.db.flush()
                for values in line_values:
                    self.db.add(self.line_model(**{self.parent_key: created.id}, **values))
                self.db.flush()
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if number is not None and attempt < NUMBER_RETRIES and self.number_taken(number, **scope):
                    logger.warning(f"{table} number {number} was taken concurrently, retrying")
                    continue
                logger.error(f"Integrity error while creating {table} row: {e}")
                raise PersistenceError(f"Database error while creating {table} row") from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Database error while creating {table} row: {e}")
                raise PersistenceError(f"Database error while creating {table} row") from e
            self.db.refresh(created)
            logger.info(f"Created {table} row {created.id} with number {created.number}")
            return created

        raise PersistenceError(f"Could not allocate a {table} number after {NUMBER_RETRIES + 1} attempts")

    def replace(self, header, lines: List):
        """Commit header changes and swap the whole line set for ``lines``"""
        table = self.model.__tablename__
        key = getattr(self.line_model, self.parent_key)
        try:
            self.db.query(self.line_model).filter(key == header.id).delete(synchronize_session=False)
            for line in lines:
                setattr(line, self.parent_key, header.id)
                self.db.add(line)
            self.db.flush()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while updating {table} row {header.id}: {e}")
            raise PersistenceError(f"Database error while updating {table} row {header.id}") from e
        self.db.refresh(header)
        return header

    def delete(self, header_id: int) -> bool:
        table = self.model.__tablename__
        header = self.get(header_id)
        if header is None:
            return False
        key = getattr(self.line_model, self.parent_key)
        try:
            self.db.query(self.line_model).filter(key == header_id).delete(synchronize_session=False)
            self.db.delete(header)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while deleting {table} row {header_id}: {e}")
            raise PersistenceError(f"Database error while deleting {table} row {header_id}") from e
        return True


class OrderRepository(DocumentRepository):
    model = models.Order
    line_model = models.OrderDetail
    parent_key = "order_id"


class InvoiceRepository(DocumentRepository):
    model = models.Invoice
    line_model = models.Detail
    parent_key = "invoice_id"
    number_scope = ("serial",)
