from fastapi import APIRouter

from . import clients, invoices, items, messages, orders, persons, products

router = APIRouter(prefix="/api")
router.include_router(persons.router)
router.include_router(items.router)
router.include_router(orders.router)
router.include_router(products.router)
router.include_router(clients.router)
router.include_router(invoices.router)
router.include_router(messages.router)
