import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/message", tags=["Messages"])


@router.get("", response_model=List[schemas.Message])
def read_messages(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all messages ordered by id"""
    logger.info(f"Fetching messages with skip={skip}, limit={limit}")
    return MessageService(db).list(skip, limit)


@router.get("/{message_id}", response_model=schemas.Message)
def read_message(message_id: int, db: Session = Depends(get_db)):
    """Get message by ID"""
    logger.info(f"Fetching message with ID: {message_id}")
    message = MessageService(db).get(message_id)
    if message is None:
        logger.warning(f"Message with ID {message_id} not found")
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.post("", response_model=schemas.Message, status_code=status.HTTP_201_CREATED)
def create_message(payload: schemas.MessageCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Store a new message"""
    logger.info(f"Creating message of {len(payload.message)} characters")
    created = MessageService(db).create(payload.message)
    response.headers["Location"] = str(request.url_for("read_message", message_id=created.id))
    return created


@router.put("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_message(message_id: int, payload: schemas.MessageUpdate, db: Session = Depends(get_db)):
    """Replace a message's text"""
    logger.info(f"Updating message with ID: {message_id}")
    if MessageService(db).update(message_id, payload.message) is None:
        logger.warning(f"Message with ID {message_id} not found")
        raise HTTPException(status_code=404, detail="Message not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(message_id: int, db: Session = Depends(get_db)):
    """Delete a message"""
    logger.info(f"Deleting message with ID: {message_id}")
    if not MessageService(db).delete(message_id):
        logger.warning(f"Message with ID {message_id} not found")
        raise HTTPException(status_code=404, detail="Message not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
