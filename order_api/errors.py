"""Service-level error kinds.

Routers translate these into HTTP responses:

- ``InvalidArgumentError`` -> 400
- ``MissingReferenceError`` -> 400 (a referenced person/item/client/product is absent)
- ``PersistenceError`` -> 500 (the open transaction has already been rolled back)

Lookups of an absent id are not errors; services return ``None``/``False``.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service and repository layers"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(ServiceError):
    """A null, zero or negative id, or an invalid required field"""


class MissingReferenceError(ServiceError):
    """A row referenced through a foreign key does not exist"""


class PersistenceError(ServiceError):
    """An unexpected database failure during a write"""


def require_id(value, name: str = "id") -> int:
    """Reject null, zero and negative identifiers"""
    if value is None or value <= 0:
        raise InvalidArgumentError(f"{name} must be greater than zero")
    return value
