import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("", response_model=List[schemas.Invoice])
def read_invoices(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all invoices with their lines and totals"""
    logger.info(f"Fetching invoices with skip={skip}, limit={limit}")
    return InvoiceService(db).list(skip, limit)


@router.get("/{invoice_id}", response_model=schemas.Invoice)
def read_invoice(invoice_id: int, db: Session = Depends(get_db)):
    """Get invoice by ID"""
    logger.info(f"Fetching invoice with ID: {invoice_id}")
    invoice = InvoiceService(db).get(invoice_id)
    if invoice is None:
        logger.warning(f"Invoice with ID {invoice_id} not found")
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.post("", response_model=schemas.Invoice, status_code=status.HTTP_201_CREATED)
def create_invoice(invoice: schemas.InvoiceCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create an invoice with the next number of its serial"""
    logger.info(f"Creating invoice {invoice.serial} for client {invoice.client_id}")
    created = InvoiceService(db).create(invoice)
    response.headers["Location"] = str(request.url_for("read_invoice", invoice_id=created.id))
    return created


@router.put("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_invoice(invoice_id: int, invoice: schemas.InvoiceCreate, db: Session = Depends(get_db)):
    """Replace an invoice's client and its whole set of lines"""
    logger.info(f"Updating invoice with ID: {invoice_id}")
    if not InvoiceService(db).update(invoice_id, invoice):
        logger.warning(f"Invoice with ID {invoice_id} not found")
        raise HTTPException(status_code=404, detail="Invoice not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    """Delete an invoice together with its lines"""
    logger.info(f"Deleting invoice with ID: {invoice_id}")
    if not InvoiceService(db).delete(invoice_id):
        logger.warning(f"Invoice with ID {invoice_id} not found")
        raise HTTPException(status_code=404, detail="Invoice not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
