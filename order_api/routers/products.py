import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/product", tags=["Products"])


@router.get("", response_model=List[schemas.Product])
def read_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all products ordered by id"""
    logger.info(f"Fetching products with skip={skip}, limit={limit}")
    return ProductService(db).list(skip, limit)


@router.get("/{product_id}", response_model=schemas.Product)
def read_product(product_id: int, db: Session = Depends(get_db)):
    """Get product by ID"""
    logger.info(f"Fetching product with ID: {product_id}")
    product = ProductService(db).get(product_id)
    if product is None:
        logger.warning(f"Product with ID {product_id} not found")
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=schemas.Product, status_code=status.HTTP_201_CREATED)
def create_product(product: schemas.ProductCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create a new product"""
    logger.info(f"Creating product: {product.name}")
    created = ProductService(db).create(product)
    response.headers["Location"] = str(request.url_for("read_product", product_id=created.id))
    return created


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_product(product_id: int, product: schemas.ProductUpdate, db: Session = Depends(get_db)):
    """Update a product"""
    logger.info(f"Updating product with ID: {product_id}")
    if not ProductService(db).update(product_id, product):
        logger.warning(f"Product with ID {product_id} not found")
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    """Delete a product"""
    logger.info(f"Deleting product with ID: {product_id}")
    if not ProductService(db).delete(product_id):
        logger.warning(f"Product with ID {product_id} not found")
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
