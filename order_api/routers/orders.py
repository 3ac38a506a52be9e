import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=List[schemas.Order])
def read_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all orders with their lines and totals"""
    logger.info(f"Fetching orders with skip={skip}, limit={limit}")
    return OrderService(db).list(skip, limit)


@router.get("/{order_id}", response_model=schemas.Order)
def read_order(order_id: int, db: Session = Depends(get_db)):
    """Get order by ID"""
    logger.info(f"Fetching order with ID: {order_id}")
    order = OrderService(db).get(order_id)
    if order is None:
        logger.warning(f"Order with ID {order_id} not found")
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("", response_model=schemas.Order, status_code=status.HTTP_201_CREATED)
def create_order(order: schemas.OrderCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create an order and its lines in one transaction.

    Each line is priced from the item's current catalog price. A missing
    person or item answers 400 and nothing is written.
    """
    logger.info(f"Creating order for person {order.person_id} with {len(order.order_details)} lines")
    created = OrderService(db).create(order)
    response.headers["Location"] = str(request.url_for("read_order", order_id=created.id))
    return created


@router.put("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_order(order_id: int, order: schemas.OrderCreate, db: Session = Depends(get_db)):
    """Replace an order's person and its whole set of lines"""
    logger.info(f"Updating order with ID: {order_id}")
    if not OrderService(db).update(order_id, order):
        logger.warning(f"Order with ID {order_id} not found")
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    """Delete an order together with its lines"""
    logger.info(f"Deleting order with ID: {order_id}")
    if not OrderService(db).delete(order_id):
        logger.warning(f"Order with ID {order_id} not found")
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
