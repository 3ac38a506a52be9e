import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=List[schemas.Client])
def read_clients(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all clients ordered by id"""
    logger.info(f"Fetching clients with skip={skip}, limit={limit}")
    return ClientService(db).list(skip, limit)


@router.get("/{client_id}", response_model=schemas.Client)
def read_client(client_id: int, db: Session = Depends(get_db)):
    """Get client by ID"""
    logger.info(f"Fetching client with ID: {client_id}")
    client = ClientService(db).get(client_id)
    if client is None:
        logger.warning(f"Client with ID {client_id} not found")
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.post("", response_model=schemas.Client, status_code=status.HTTP_201_CREATED)
def create_client(client: schemas.ClientCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create a new client"""
    logger.info(f"Creating client: {client.nit}")
    created = ClientService(db).create(client)
    response.headers["Location"] = str(request.url_for("read_client", client_id=created.id))
    return created


@router.put("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_client(client_id: int, client: schemas.ClientUpdate, db: Session = Depends(get_db)):
    """Replace a client's names, email and NIT"""
    logger.info(f"Updating client with ID: {client_id}")
    if not ClientService(db).update(client_id, client):
        logger.warning(f"Client with ID {client_id} not found")
        raise HTTPException(status_code=404, detail="Client not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: int, db: Session = Depends(get_db)):
    """Delete a client"""
    logger.info(f"Deleting client with ID: {client_id}")
    if not ClientService(db).delete(client_id):
        logger.warning(f"Client with ID {client_id} not found")
        raise HTTPException(status_code=404, detail="Client not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
