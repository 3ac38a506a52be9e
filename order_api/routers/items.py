import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ItemService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/item", tags=["Items"])


@router.get("", response_model=List[schemas.Item])
def read_items(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all items ordered by id"""
    logger.info(f"Fetching items with skip={skip}, limit={limit}")
    return ItemService(db).list(skip, limit)


@router.get("/{item_id}", response_model=schemas.Item)
def read_item(item_id: int, db: Session = Depends(get_db)):
    """Get item by ID"""
    logger.info(f"Fetching item with ID: {item_id}")
    item = ItemService(db).get(item_id)
    if item is None:
        logger.warning(f"Item with ID {item_id} not found")
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.post("", response_model=schemas.Item, status_code=status.HTTP_201_CREATED)
def create_item(item: schemas.ItemCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create a new item"""
    logger.info(f"Creating item: {item.name}")
    created = ItemService(db).create(item)
    response.headers["Location"] = str(request.url_for("read_item", item_id=created.id))
    return created


@router.put("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_item(item_id: int, item: schemas.ItemUpdate, db: Session = Depends(get_db)):
    """Update an item's name and price"""
    logger.info(f"Updating item with ID: {item_id}")
    if not ItemService(db).update(item_id, item):
        logger.warning(f"Item with ID {item_id} not found")
        raise HTTPException(status_code=404, detail="Item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: int, db: Session = Depends(get_db)):
    """Delete an item"""
    logger.info(f"Deleting item with ID: {item_id}")
    if not ItemService(db).delete(item_id):
        logger.warning(f"Item with ID {item_id} not found")
        raise HTTPException(status_code=404, detail="Item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
